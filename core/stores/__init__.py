"""Persistence for processed documents."""

from .result_store import DEFAULT_STORE_DIR, ResultStore

__all__ = ["ResultStore", "DEFAULT_STORE_DIR"]
