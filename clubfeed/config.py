from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field


# ---------------------------
# Paths
# ---------------------------

PROJECT_ROOT = Path(__file__).resolve().parents[1]

DATA_DIR = PROJECT_ROOT / "data"
BANNERS_SNAPSHOT_PATH = Path(os.getenv("CLUBFEED_BANNERS_PATH", str(DATA_DIR / "banners.json")))
MEMBERS_SNAPSHOT_PATH = Path(os.getenv("CLUBFEED_MEMBERS_PATH", str(DATA_DIR / "members.json")))


# ---------------------------
# Carousel policy (fixed)
# ---------------------------

HIGH_PRIORITY_THRESHOLD = 10   # priority >= 10 is pinned ahead of the interleave

SUGGESTION_POOL_SIZE = 8       # top-N kept before the shuffle
SUGGESTION_LIMIT = 5           # final suggestions after the shuffle

BASE_SCORE = 1
NEW_MEMBER_BONUS = 10
MATCH_BONUS = 5                # plus one point per matching tag

REASON_NEW = "NEW"
REASON_MATCH = "MATCH"


# ---------------------------
# Upstream source settings & env toggles
# ---------------------------

DEFAULT_NEW_MEMBER_WINDOW_DAYS = 15
NEW_MEMBER_WINDOW_DAYS = int(
    os.getenv("CLUBFEED_NEW_MEMBER_DAYS", str(DEFAULT_NEW_MEMBER_WINDOW_DAYS))
)

DEFAULT_RECENT_MEMBER_LIMIT = 30
RECENT_MEMBER_LIMIT = int(
    os.getenv("CLUBFEED_RECENT_MEMBER_LIMIT", str(DEFAULT_RECENT_MEMBER_LIMIT))
)

DEFAULT_AVATAR_URL = os.getenv("CLUBFEED_DEFAULT_AVATAR", "/default-avatar.svg")

DEFAULT_PLACEMENT = "HOME"
ADMIN_ROLE = "ADMIN"


# ---------------------------
# Pydantic models shared around the app
# ---------------------------

Placement = Literal["HOME", "EVENTS", "VIDEOS", "ARTICLES"]
Reason = Literal["NEW", "MATCH"]


class Banner(BaseModel):
    """
    Promotional banner as stored upstream.
    Only eligible (active, in-window) banners reach the carousel merger.
    """

    id: str
    title: str = ""
    subtitle: Optional[str] = None
    image_url: str = ""
    link_url: Optional[str] = None
    link_type: Literal["INTERNAL", "EXTERNAL"] = "INTERNAL"
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_active: bool = True
    placement: Placement = DEFAULT_PLACEMENT
    priority: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MemberCandidate(BaseModel):
    """
    Read-only profile snapshot considered for a suggestion card.
    ``is_new`` is derived upstream from ``created_at``.
    """

    id: str
    name: str
    company: str = ""
    job_title: str = ""
    image_url: str = DEFAULT_AVATAR_URL
    tags: List[str] = Field(default_factory=list)
    email: Optional[str] = None
    created_at: Optional[datetime] = None
    is_new: bool = False

    model_config = {"frozen": True}


class MemberSuggestionData(BaseModel):
    """Public projection of a scored member, as rendered on a card."""

    id: str
    name: str
    company: str
    job_title: str
    image_url: str
    tags: List[str]
    matching_tags: List[str]


class PromoItem(BaseModel):
    type: Literal["PROMO"] = "PROMO"
    data: Banner


class MemberSuggestionItem(BaseModel):
    type: Literal["MEMBER_SUGGESTION"] = "MEMBER_SUGGESTION"
    data: MemberSuggestionData
    reason: Reason


CarouselItem = Annotated[Union[PromoItem, MemberSuggestionItem], Field(discriminator="type")]


class CarouselResponse(BaseModel):
    """
    Response body for POST /carousel.
    """

    items: List[CarouselItem]
    banner_count: int = Field(ge=0)
    suggestion_count: int = Field(ge=0)


class BannerStats(BaseModel):
    """
    Response body for GET /banners/stats.
    """

    total: int = 0
    active: int = 0
    scheduled: int = 0
    expired: int = 0


class HealthResponse(BaseModel):
    """
    Response body for GET /health.
    """

    status: str
