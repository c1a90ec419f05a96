from __future__ import annotations

from typing import Iterator, List, Sequence, TypeVar

T = TypeVar("T")


def chunked(items: Sequence[T], size: int) -> Iterator[List[T]]:
    if size <= 0:
        raise ValueError("chunk size must be positive")
    for start in range(0, len(items), size):
        yield list(items[start : start + size])


def dedupe(items: Sequence[str]) -> List[str]:
    """Drop repeated values, keeping the first occurrence in order."""
    return list(dict.fromkeys(items))


def has_prefix(name: str, prefix: str) -> bool:
    return name.startswith(f"{prefix}-")


__all__ = ["chunked", "dedupe", "has_prefix"]
