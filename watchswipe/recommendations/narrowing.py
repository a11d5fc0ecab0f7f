"""
Style-based narrowing of the candidate pool.

Every tag on every liked watch gets one vote, the two most voted tags win,
and the pool is cut down to watches carrying at least one winning tag.
Nothing here mutates its inputs.
"""
from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

TOP_STYLE_COUNT = 2


def _styles(record: Any) -> list[str]:
    """Distinct tags of *record* in their listed order; [] when absent."""
    if isinstance(record, Mapping):
        tags = record.get("style")
    else:
        tags = getattr(record, "style", None)
    if not tags:
        return []
    if isinstance(tags, str):
        # same parsing as WatchRecord: "Diver, Dress" -> ["diver", "dress"]
        tags = [s.strip().lower() for s in tags.split(",") if s.strip()]
    return list(dict.fromkeys(tags))


def count_styles(liked: Iterable[Any]) -> Counter[str]:
    counts: Counter[str] = Counter()
    for record in liked:
        counts.update(_styles(record))
    return counts


def top_styles(liked: Iterable[Any], count: int = TOP_STYLE_COUNT) -> list[str]:
    """Return up to *count* tags ordered by votes, ties in first-seen order."""
    if count <= 0:
        return []
    # most_common is a stable sort over insertion order
    return [tag for tag, _ in count_styles(liked).most_common(count)]


def narrow(
    liked: Sequence[Any],
    pool: Sequence[Any],
    count: int = TOP_STYLE_COUNT,
) -> list[Any]:
    tags = top_styles(liked, count)
    if not tags:
        return list(pool)
    wanted = set(tags)
    return [record for record in pool if wanted.intersection(_styles(record))]
