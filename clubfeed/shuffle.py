from __future__ import annotations

import random
from typing import List, MutableSequence, Optional, Protocol, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    """Anything with ``randint(a, b)`` inclusive on both ends, e.g. ``random.Random``."""

    def randint(self, a: int, b: int) -> int: ...


def shuffle_in_place(items: MutableSequence[T], rng: Optional[RandomSource] = None) -> MutableSequence[T]:
    """
    Fisher-Yates shuffle of ``items`` in place.

    Walks from the last index down to 1, swapping each slot with a uniformly
    chosen index in ``[0, i]``. Empty and single-element sequences are left
    untouched. Pass a seeded ``random.Random`` as ``rng`` for reproducible
    orderings; the module-level generator is used otherwise.

    Returns the same sequence object for convenience.
    """
    source = rng if rng is not None else random
    for i in range(len(items) - 1, 0, -1):
        j = source.randint(0, i)
        items[i], items[j] = items[j], items[i]
    return items


def shuffled(items: List[T], rng: Optional[RandomSource] = None) -> List[T]:
    """Shuffled copy; the input list is not modified."""
    out = list(items)
    shuffle_in_place(out, rng)
    return out
