from __future__ import annotations

import math
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd
from loguru import logger

from .config import BANNERS_SNAPSHOT_PATH, DEFAULT_PLACEMENT, Banner, BannerStats


# ---------------------------
# Column detection / standardization
# ---------------------------

# Rows arrive either straight from the database (snake_case) or from the
# admin front-end (camelCase); both map onto the Banner schema.
COLUMN_CANDIDATES: Dict[str, List[str]] = {
    "id": ["id", "banner_id", "bannerId"],
    "title": ["title", "Title"],
    "subtitle": ["subtitle", "Subtitle"],
    "image_url": ["image_url", "imageUrl", "image"],
    "link_url": ["link_url", "linkUrl", "link"],
    "link_type": ["link_type", "linkType"],
    "start_date": ["start_date", "startDate", "starts_at"],
    "end_date": ["end_date", "endDate", "ends_at"],
    "is_active": ["is_active", "isActive", "active"],
    "placement": ["placement", "Placement"],
    "priority": ["priority", "Priority"],
    "created_at": ["created_at", "createdAt"],
    "updated_at": ["updated_at", "updatedAt"],
}

BANNER_COLUMNS = list(COLUMN_CANDIDATES.keys())
DATE_COLUMNS = ["start_date", "end_date", "created_at", "updated_at"]

_FALSE_STRINGS = {"false", "0", "no", "n", "off", ""}


def standardize_columns(df: pd.DataFrame, candidates: Dict[str, List[str]]) -> pd.DataFrame:
    """Rename the first matching raw column of each candidate list to its canonical name."""
    col_map: Dict[str, str] = {}
    for canon, names in candidates.items():
        for name in names:
            if name in df.columns:
                col_map[name] = canon
                break
    return df.rename(columns=col_map)


# ---------------------------
# Field parsing helpers
# ---------------------------

def is_missing(value: Any) -> bool:
    """True for None, NaN and NaT scalars (lists are never missing)."""
    if value is None or value is pd.NaT:
        return True
    return isinstance(value, float) and math.isnan(value)


def normalize_id(value: Any) -> str:
    """
    Identifier as a string. Integral floats, which pandas produces for
    numeric id columns with blanks, lose their ".0" so 1.0 -> "1".
    """
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a timestamp into a timezone-aware UTC datetime.

    - None / NaN / "" -> None
    - naive values are taken to be UTC
    - unparseable strings -> None
    """
    if is_missing(value) or (isinstance(value, str) and not value.strip()):
        return None
    ts = pd.to_datetime(value, utc=True, errors="coerce")
    if ts is pd.NaT or pd.isna(ts):
        return None
    return ts.to_pydatetime()


def _as_utc(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def _parse_bool(value: Any) -> bool:
    if is_missing(value):
        return True
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_STRINGS
    return bool(value)


# ---------------------------
# Normalization
# ---------------------------

def normalize_banner_df(raw: pd.DataFrame) -> pd.DataFrame:
    """
    Bring raw banner rows onto the canonical column set.

    Missing optional columns are added, dates become UTC timestamps,
    priority becomes int (defaults to 0) and rows without an id are dropped.
    """
    df = standardize_columns(raw.copy(), COLUMN_CANDIDATES)

    for col in BANNER_COLUMNS:
        if col not in df.columns:
            df[col] = None

    before = len(df)
    keep = df["id"].map(lambda v: not is_missing(v) and str(v).strip() != "").astype(bool)
    df = df[keep]
    if len(df) < before:
        logger.warning("Dropped {} banner rows without an id", before - len(df))

    df = df.copy()
    df["id"] = df["id"].map(normalize_id)
    df["title"] = df["title"].map(lambda v: "" if is_missing(v) else str(v))
    for col in ("subtitle", "link_url"):
        df[col] = df[col].map(lambda v: None if is_missing(v) else str(v))
    df["image_url"] = df["image_url"].map(lambda v: "" if is_missing(v) else str(v))
    df["link_type"] = df["link_type"].map(lambda v: "INTERNAL" if is_missing(v) else str(v).upper())
    df["placement"] = df["placement"].map(
        lambda v: DEFAULT_PLACEMENT if is_missing(v) else str(v).upper()
    )
    df["priority"] = pd.to_numeric(df["priority"], errors="coerce").fillna(0).astype(int)
    df["is_active"] = df["is_active"].map(_parse_bool)
    for col in DATE_COLUMNS:
        df[col] = df[col].map(parse_timestamp)

    return df[BANNER_COLUMNS].reset_index(drop=True)


def _record_to_kwargs(rec: Dict[str, Any]) -> Dict[str, Any]:
    return {k: (None if is_missing(v) else v) for k, v in rec.items()}


def banners_from_df(df: pd.DataFrame) -> List[Banner]:
    """Convert normalized banner rows into Banner models."""
    if df.empty:
        return []
    return [Banner(**_record_to_kwargs(rec)) for rec in df.to_dict(orient="records")]


def load_banner_snapshot(path: Path = BANNERS_SNAPSHOT_PATH) -> pd.DataFrame:
    """
    Load raw banner rows from a .json (list of records) or .csv file.
    A missing file yields an empty frame.
    """
    path = Path(path)
    if not path.exists():
        logger.warning("Banner snapshot not found at {}; using no banners.", path)
        return pd.DataFrame(columns=BANNER_COLUMNS)

    if path.suffix.lower() == ".csv":
        df = pd.read_csv(path, encoding="utf-8")
    else:
        df = pd.read_json(path, orient="records", dtype=False, convert_dates=False)
    logger.info("Loaded {} banner rows from {}", len(df), path)
    return df


# ---------------------------
# Scheduling & eligibility
# ---------------------------

def schedule_status(banner: Banner, now: Optional[datetime] = None) -> str:
    """
    One of "inactive", "expired", "scheduled" or "active".
    Missing window bounds are open; both bounds are inclusive.
    """
    if not banner.is_active:
        return "inactive"
    now = _as_utc(now) or datetime.now(timezone.utc)
    start = _as_utc(banner.start_date)
    end = _as_utc(banner.end_date)
    if end is not None and end < now:
        return "expired"
    if start is not None and start > now:
        return "scheduled"
    return "active"


def is_banner_eligible(banner: Banner, now: Optional[datetime] = None) -> bool:
    return schedule_status(banner, now) == "active"


def _created_sort_key(banner: Banner) -> float:
    created = _as_utc(banner.created_at)
    # newest first; unknown creation time last
    return -created.timestamp() if created is not None else math.inf


def select_active_banners(
    banners: Sequence[Banner],
    placement: str = DEFAULT_PLACEMENT,
    now: Optional[datetime] = None,
) -> List[Banner]:
    """
    Eligible banners for one placement, ordered by priority desc then
    creation time desc. This is the ordering the carousel merger expects.
    """
    now = _as_utc(now) or datetime.now(timezone.utc)
    eligible = [
        b for b in banners
        if b.placement == placement and is_banner_eligible(b, now)
    ]
    eligible.sort(key=lambda b: (-b.priority, _created_sort_key(b)))
    logger.info("Found {} active banners for {}", len(eligible), placement)
    return eligible


def banner_stats(banners: Sequence[Banner], now: Optional[datetime] = None) -> BannerStats:
    """Counts by schedule status; inactive banners only count toward the total."""
    now = _as_utc(now) or datetime.now(timezone.utc)
    stats = BannerStats(total=len(banners))
    for b in banners:
        status = schedule_status(b, now)
        if status == "expired":
            stats.expired += 1
        elif status == "scheduled":
            stats.scheduled += 1
        elif status == "active":
            stats.active += 1
    return stats
