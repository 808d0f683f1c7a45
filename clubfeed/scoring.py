from __future__ import annotations

"""
Member suggestion scoring for the home carousel.

Every candidate other than the viewer gets a reason and a score, so the
carousel always has some passive "discovery" cards even when nobody shares
a tag with the viewer:

    score = 1
          + 10                        if the member is recently created
          + 5 + len(matching_tags)    if any tag matches (case-insensitive)

The ranked list is cut to a pool of the top ``SUGGESTION_POOL_SIZE``, the
pool is shuffled for variety, and the first ``SUGGESTION_LIMIT`` survive.
The phase order (sort, take pool, shuffle, take limit) is observable: a
pool member can be cut even when it outscores a survivor.
"""

from typing import Iterable, List, Optional, Sequence

from loguru import logger

from .config import (
    BASE_SCORE,
    MATCH_BONUS,
    MemberCandidate,
    NEW_MEMBER_BONUS,
    REASON_MATCH,
    REASON_NEW,
    SUGGESTION_LIMIT,
    SUGGESTION_POOL_SIZE,
)
from .pipeline_types import ScoredSuggestion
from .shuffle import RandomSource, shuffled


def matching_tags(candidate_tags: Iterable[str], viewer_tags: Iterable[str]) -> List[str]:
    """
    Candidate tags equal to some viewer tag, ignoring case.
    Candidate casing and order are preserved.
    """
    wanted = {t.lower() for t in viewer_tags}
    return [t for t in candidate_tags if t.lower() in wanted]


def score_member(member: MemberCandidate, viewer_tags: Sequence[str]) -> ScoredSuggestion:
    matches = matching_tags(member.tags, viewer_tags)

    score = BASE_SCORE
    if member.is_new:
        score += NEW_MEMBER_BONUS
    if matches:
        score += MATCH_BONUS + len(matches)

    return ScoredSuggestion(
        member=member,
        reason=REASON_NEW if member.is_new else REASON_MATCH,
        matching_tags=matches,
        score=score,
    )


def rank_members(
    members: Sequence[MemberCandidate],
    viewer_tags: Sequence[str],
    viewer_id: str,
) -> List[ScoredSuggestion]:
    """All non-viewer candidates scored and sorted by score desc (stable on ties)."""
    if not isinstance(viewer_id, str):
        raise TypeError(f"viewer_id must be str, got {type(viewer_id).__name__}")

    scored = [score_member(m, viewer_tags) for m in members if m.id != viewer_id]
    scored.sort(key=lambda s: s.score, reverse=True)
    return scored


def score_member_suggestions(
    members: Sequence[MemberCandidate],
    viewer_tags: Sequence[str],
    viewer_id: str,
    rng: Optional[RandomSource] = None,
    pool_size: int = SUGGESTION_POOL_SIZE,
    limit: int = SUGGESTION_LIMIT,
) -> List[ScoredSuggestion]:
    """
    Pick at most ``limit`` member suggestions for the viewer.

    Parameters
    ----------
    members :
        Candidate snapshots; may include the viewer, who is always excluded.
    viewer_tags :
        The viewer's own profile tags (may be empty).
    viewer_id :
        The viewer's identifier; must be a ``str`` like ``MemberCandidate.id``.
    rng :
        Random source for the variety shuffle, injectable for tests.

    Returns
    -------
    List[ScoredSuggestion]
        Up to ``limit`` suggestions; empty when there are no candidates.
    """
    ranked = rank_members(members, viewer_tags, viewer_id)

    pool = shuffled(ranked[:pool_size], rng)
    picked = pool[:limit]

    logger.info(
        "Scored {} member candidates; kept {} of a pool of {}",
        len(ranked), len(picked), len(pool),
    )
    return picked
