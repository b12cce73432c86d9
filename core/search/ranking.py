"""Deduplication and ordering of search candidates."""

from core.documents import Candidate


def dedupe_candidates(candidates: list[Candidate]) -> list[Candidate]:
    """Drop repeated URLs (case-insensitive); the first occurrence wins."""
    seen: set[str] = set()
    unique = []
    for candidate in candidates:
        key = candidate.url.lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(candidate)
    return unique


def rank_candidates(candidates: list[Candidate]) -> list[Candidate]:
    """Stable sort by relevance, highest first."""
    return sorted(candidates, key=lambda c: c.relevance_score, reverse=True)
