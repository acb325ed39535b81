from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


def normalize_tags(tags: Iterable[str] | None) -> list[str]:
    """Strip tag names, drop empty ones and duplicates, keeping first-seen order.

    Case is preserved: tag names are case-sensitive as stored.
    """
    if not tags:
        return []
    normalized: list[str] = []
    for tag in tags:
        if not isinstance(tag, str):
            continue
        name = tag.strip()
        if name and name not in normalized:
            normalized.append(name)
    return normalized
