from __future__ import annotations

import math
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from pkb.core.schemas.search import SearchResult

T = TypeVar("T")

DEFAULT_LIMIT = 10


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between two vectors.

    Vectors of different length, or where either has zero norm, score 0.0.
    """
    if len(a) != len(b):
        return 0.0

    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a += x * x
        norm_b += y * y

    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (math.sqrt(norm_a) * math.sqrt(norm_b))


def has_all_tags(content_tags: Iterable[str], required: Iterable[str]) -> bool:
    """True when every required tag is present; extra tags are allowed."""
    return set(required).issubset(content_tags)


def sort_by_score(results: Iterable[SearchResult]) -> list[SearchResult]:
    """Highest score first. Equal scores keep their retrieval order."""
    return sorted(results, key=lambda r: r.score, reverse=True)


def normalize_limit(limit: int | None, default: int = DEFAULT_LIMIT) -> int:
    return limit if limit is not None and limit > 0 else default


def paginate(items: Sequence[T], offset: int, limit: int | None, default: int = DEFAULT_LIMIT) -> list[T]:
    """Window `items` to [offset, offset + limit), clipped to what is available."""
    start = max(0, offset)
    if start >= len(items):
        return []
    return list(items[start:start + normalize_limit(limit, default)])
