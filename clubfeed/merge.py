from __future__ import annotations

from typing import List, Sequence

from .config import (
    Banner,
    CarouselItem,
    HIGH_PRIORITY_THRESHOLD,
    MemberSuggestionItem,
    PromoItem,
)
from .pipeline_types import ScoredSuggestion


def split_by_priority(banners: Sequence[Banner], threshold: int = HIGH_PRIORITY_THRESHOLD):
    """(pinned, normal) keeping the supplied order inside each group."""
    pinned = [b for b in banners if b.priority >= threshold]
    normal = [b for b in banners if b.priority < threshold]
    return pinned, normal


def merge_carousel_items(
    banners: Sequence[Banner],
    suggestions: Sequence[ScoredSuggestion],
) -> List[CarouselItem]:
    """
    Merge banners and member suggestions into one carousel.

    High-priority banners go first in the order given. The rest alternate
    banner, suggestion, banner, suggestion... and whichever list is longer
    simply continues alone. Banners are expected pre-sorted; nothing is
    re-sorted here.
    """
    pinned, normal = split_by_priority(banners)

    result: List[CarouselItem] = [PromoItem(data=b) for b in pinned]

    for i in range(max(len(normal), len(suggestions))):
        if i < len(normal):
            result.append(PromoItem(data=normal[i]))
        if i < len(suggestions):
            s = suggestions[i]
            result.append(MemberSuggestionItem(data=s.to_card(), reason=s.reason))

    return result
