"""Shared utilities for workflows."""

from .async_utils import map_with_concurrency

__all__ = ["map_with_concurrency"]
