from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd
from loguru import logger

from .banners import is_missing, normalize_id, parse_timestamp, standardize_columns
from .config import (
    ADMIN_ROLE,
    DEFAULT_AVATAR_URL,
    MEMBERS_SNAPSHOT_PATH,
    NEW_MEMBER_WINDOW_DAYS,
    RECENT_MEMBER_LIMIT,
    MemberCandidate,
)


# ---------------------------
# Column detection / standardization
# ---------------------------

COLUMN_CANDIDATES: Dict[str, List[str]] = {
    "id": ["id", "member_id", "user_id"],
    "name": ["name", "full_name", "Name"],
    "email": ["email", "Email"],
    "company": ["company", "organization", "Company"],
    "job_title": ["job_title", "jobTitle", "title", "role_title"],
    "image_url": ["image_url", "imageUrl", "avatar_url"],
    "tags": ["tags", "Tags", "interests"],
    "created_at": ["created_at", "createdAt"],
    "role": ["role", "Role"],
}

MEMBER_COLUMNS = list(COLUMN_CANDIDATES.keys())
CANDIDATE_COLUMNS = [c for c in MEMBER_COLUMNS if c != "role"] + ["is_new"]


# ---------------------------
# Field parsing helpers
# ---------------------------

def parse_tags_field(value: Any) -> List[str]:
    """
    Parse a tags field into a list of strings.

    Handles:
      - None / NaN -> []
      - "a, b, c" -> ["a", "b", "c"]
      - list/tuple/np.ndarray -> list[str]
    Casing is kept as entered; blank entries are dropped.
    """
    if isinstance(value, (list, tuple, np.ndarray)):
        items = [str(v) for v in value if not is_missing(v)]
    elif is_missing(value):
        return []
    else:
        items = str(value).split(",")
    return [t.strip() for t in items if t.strip()]


def is_recently_created(
    created_at: Optional[datetime],
    now: Optional[datetime] = None,
    window_days: int = NEW_MEMBER_WINDOW_DAYS,
) -> bool:
    """True when the account was created within the last ``window_days``."""
    if created_at is None:
        return False
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return created_at >= now - timedelta(days=window_days)


def _text_or(default: str):
    def conv(v: Any) -> str:
        if is_missing(v):
            return default
        s = str(v).strip()
        return s or default
    return conv


# ---------------------------
# Normalization
# ---------------------------

def normalize_member_df(
    raw: pd.DataFrame,
    viewer_id: Optional[str] = None,
    now: Optional[datetime] = None,
    limit: int = RECENT_MEMBER_LIMIT,
    window_days: int = NEW_MEMBER_WINDOW_DAYS,
) -> pd.DataFrame:
    """
    Turn raw profile rows into the candidate window for suggestions.

    - drops administrators and the viewer
    - keeps the ``limit`` most recently created profiles
    - fills empty company / job title and the default avatar
    - derives ``is_new`` from ``created_at``
    """
    now = now or datetime.now(timezone.utc)
    df = standardize_columns(raw.copy(), COLUMN_CANDIDATES)

    for col in MEMBER_COLUMNS:
        if col not in df.columns:
            df[col] = None

    keep = df["id"].map(lambda v: not is_missing(v) and str(v).strip() != "").astype(bool)
    if not keep.all():
        logger.warning("Dropped {} member rows without an id", int((~keep).sum()))
    df = df[keep].copy()

    df["id"] = df["id"].map(normalize_id)
    df["role"] = df["role"].map(lambda v: "" if is_missing(v) else str(v).upper())
    df = df[df["role"] != ADMIN_ROLE]
    if viewer_id is not None:
        df = df[df["id"] != viewer_id]

    df = df.copy()
    df["created_at"] = df["created_at"].map(parse_timestamp)
    df["_created_sort"] = df["created_at"].map(
        lambda v: float("-inf") if is_missing(v) else v.timestamp()
    )
    df = df.sort_values("_created_sort", ascending=False, kind="stable").head(max(0, limit))

    df["name"] = df["name"].map(_text_or(""))
    df["email"] = df["email"].map(lambda v: None if is_missing(v) else str(v))
    df["company"] = df["company"].map(_text_or(""))
    df["job_title"] = df["job_title"].map(_text_or(""))
    df["image_url"] = df["image_url"].map(_text_or(DEFAULT_AVATAR_URL))
    df["tags"] = df["tags"].map(parse_tags_field)
    df["is_new"] = df["created_at"].map(
        lambda v: is_recently_created(None if is_missing(v) else v, now, window_days)
    ).astype(bool)

    return df[CANDIDATE_COLUMNS].reset_index(drop=True)


def members_from_df(df: pd.DataFrame) -> List[MemberCandidate]:
    """Convert normalized candidate rows into MemberCandidate models."""
    if df.empty:
        return []
    out: List[MemberCandidate] = []
    for rec in df.to_dict(orient="records"):
        kwargs = {k: v for k, v in rec.items() if k == "tags" or not is_missing(v)}
        out.append(MemberCandidate(**kwargs))
    return out


def viewer_tags_from_df(raw: pd.DataFrame, viewer_id: str) -> List[str]:
    """The viewer's own tags from raw profile rows; [] if the viewer is absent."""
    df = standardize_columns(raw, COLUMN_CANDIDATES)
    if df.empty or "id" not in df.columns:
        logger.warning("No profile rows available to look up viewer {}", viewer_id)
        return []
    rows = df[df["id"].map(lambda v: not is_missing(v) and normalize_id(v) == viewer_id).astype(bool)]
    if rows.empty:
        logger.warning("Viewer {} not found in profile rows; using no tags", viewer_id)
        return []
    if "tags" not in rows.columns:
        return []
    return parse_tags_field(rows.iloc[0]["tags"])


def load_member_snapshot(path: Path = MEMBERS_SNAPSHOT_PATH) -> pd.DataFrame:
    """
    Load raw profile rows from a .json (list of records) or .csv file.
    A missing file yields an empty frame.
    """
    path = Path(path)
    if not path.exists():
        logger.warning("Member snapshot not found at {}; using no members.", path)
        return pd.DataFrame(columns=MEMBER_COLUMNS)

    if path.suffix.lower() == ".csv":
        df = pd.read_csv(path, encoding="utf-8")
    else:
        df = pd.read_json(path, orient="records", dtype=False, convert_dates=False)
    logger.info("Loaded {} member rows from {}", len(df), path)
    return df
