from __future__ import annotations

"""
FastAPI application for the club home feed.

- GET  /health         liveness
- POST /carousel       carousel for one viewer (inline rows override snapshots)
- GET  /banners/stats  schedule status counts over the banner snapshot
"""

from typing import Any, Dict, List, Optional

import pandas as pd
from fastapi import FastAPI, HTTPException
from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from .banners import banner_stats, banners_from_df, load_banner_snapshot, normalize_banner_df
from .carousel import build_home_carousel
from .config import DEFAULT_PLACEMENT, BannerStats, CarouselResponse, HealthResponse, Placement
from .members import load_member_snapshot

app = FastAPI(title="Club Home Feed", version="1.0.0")

_banner_rows: Optional[pd.DataFrame] = None
_member_rows: Optional[pd.DataFrame] = None


@app.on_event("startup")
def startup_event() -> None:
    global _banner_rows, _member_rows
    logger.info("Loading feed snapshots...")
    _banner_rows = load_banner_snapshot()
    _member_rows = load_member_snapshot()
    logger.info(
        "Snapshots ready: {} banner rows, {} member rows",
        len(_banner_rows), len(_member_rows),
    )


def _snapshot(frame: Optional[pd.DataFrame]) -> pd.DataFrame:
    return frame if frame is not None else pd.DataFrame()


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="healthy")


class CarouselRequest(BaseModel):
    viewer_id: str = Field(..., min_length=1)
    viewer_tags: Optional[List[str]] = None
    placement: Placement = DEFAULT_PLACEMENT
    banners: Optional[List[Dict[str, Any]]] = None
    members: Optional[List[Dict[str, Any]]] = None


@app.post("/carousel", response_model=CarouselResponse)
def carousel(req: CarouselRequest) -> CarouselResponse:
    viewer_id = req.viewer_id.strip()
    if not viewer_id:
        raise HTTPException(status_code=422, detail="viewer_id must be non-empty")

    banner_rows = pd.DataFrame(req.banners) if req.banners is not None else _snapshot(_banner_rows)
    member_rows = pd.DataFrame(req.members) if req.members is not None else _snapshot(_member_rows)

    try:
        return build_home_carousel(
            banner_rows,
            member_rows,
            viewer_id=viewer_id,
            viewer_tags=req.viewer_tags,
            placement=req.placement,
        )
    except ValidationError as e:
        logger.warning("Rejected banner rows for {}: {}", viewer_id, e)
        raise HTTPException(status_code=422, detail="Invalid banner rows") from e


@app.get("/banners/stats", response_model=BannerStats)
def stats() -> BannerStats:
    banners = banners_from_df(normalize_banner_df(_snapshot(_banner_rows)))
    return banner_stats(banners)
