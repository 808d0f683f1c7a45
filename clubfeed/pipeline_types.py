"""Typed containers shared across pipeline modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from .config import MemberCandidate, MemberSuggestionData


@dataclass
class ScoredSuggestion:
    """A member candidate with its suggestion reason and relevance score."""

    member: MemberCandidate
    reason: str
    matching_tags: List[str] = field(default_factory=list)
    score: int = 0

    def to_card(self) -> MemberSuggestionData:
        m = self.member
        return MemberSuggestionData(
            id=m.id,
            name=m.name,
            company=m.company,
            job_title=m.job_title,
            image_url=m.image_url,
            tags=list(m.tags),
            matching_tags=list(self.matching_tags),
        )
