from __future__ import annotations

"""
Home carousel composition.

``compose_carousel`` is the pure core: score members, then merge them with
already-eligible banners. ``build_home_carousel`` is what request handlers
call: it applies the upstream banner/member source rules to raw rows and
falls back to a banners-only carousel when suggestion data is unusable.
"""

import argparse
import json
import random
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

import pandas as pd
from loguru import logger

from .banners import banners_from_df, load_banner_snapshot, normalize_banner_df, select_active_banners
from .config import (
    BANNERS_SNAPSHOT_PATH,
    DEFAULT_PLACEMENT,
    MEMBERS_SNAPSHOT_PATH,
    Banner,
    CarouselItem,
    CarouselResponse,
    MemberCandidate,
    PromoItem,
)
from .members import load_member_snapshot, members_from_df, normalize_member_df, viewer_tags_from_df
from .merge import merge_carousel_items
from .scoring import score_member_suggestions
from .shuffle import RandomSource


def compose_carousel(
    banners: Sequence[Banner],
    candidates: Sequence[MemberCandidate],
    viewer_tags: Sequence[str],
    viewer_id: str,
    rng: Optional[RandomSource] = None,
) -> List[CarouselItem]:
    """Scorer then merger; no I/O, no fallback."""
    suggestions = score_member_suggestions(candidates, viewer_tags, viewer_id, rng=rng)
    return merge_carousel_items(banners, suggestions)


def _response(items: List[CarouselItem]) -> CarouselResponse:
    n_promo = sum(1 for it in items if it.type == "PROMO")
    return CarouselResponse(
        items=items,
        banner_count=n_promo,
        suggestion_count=len(items) - n_promo,
    )


def build_home_carousel(
    banner_rows: pd.DataFrame,
    member_rows: pd.DataFrame,
    viewer_id: str,
    viewer_tags: Optional[Sequence[str]] = None,
    placement: str = DEFAULT_PLACEMENT,
    now: Optional[datetime] = None,
    rng: Optional[RandomSource] = None,
) -> CarouselResponse:
    """
    Build the carousel for one viewer from raw banner and profile rows.

    Banners are filtered to the placement and the current schedule window
    and ordered by priority. Candidates are the most recent non-admin
    profiles other than the viewer. When ``viewer_tags`` is None the
    viewer's tags are looked up in ``member_rows``.

    If the member rows cannot be turned into suggestions the error is
    logged and only the banners are returned.
    """
    logger.info("Building home carousel for viewer {}", viewer_id)
    banners = select_active_banners(
        banners_from_df(normalize_banner_df(banner_rows)), placement=placement, now=now
    )

    try:
        if viewer_tags is None:
            viewer_tags = viewer_tags_from_df(member_rows, viewer_id)
        candidates = members_from_df(normalize_member_df(member_rows, viewer_id=viewer_id, now=now))
        items = compose_carousel(banners, candidates, list(viewer_tags), viewer_id, rng=rng)
    except (KeyError, ValueError) as e:
        logger.exception("Failed to build member suggestions for {}: {}", viewer_id, e)
        items = [PromoItem(data=b) for b in banners]

    resp = _response(items)
    logger.info(
        "Carousel built: {} items ({} banners, {} suggestions)",
        len(resp.items), resp.banner_count, resp.suggestion_count,
    )
    return resp


# ---------- CLI ----------

def main(argv: Optional[List[str]] = None) -> None:
    ap = argparse.ArgumentParser(description="Compose the home carousel for one member.")
    ap.add_argument("--banners", type=Path, default=BANNERS_SNAPSHOT_PATH,
                    help="Banner rows (.json list of records or .csv)")
    ap.add_argument("--members", type=Path, default=MEMBERS_SNAPSHOT_PATH,
                    help="Profile rows (.json list of records or .csv)")
    ap.add_argument("--viewer-id", required=True)
    ap.add_argument("--viewer-tags", nargs="*", default=None,
                    help="Override the viewer's tags instead of reading them from --members")
    ap.add_argument("--placement", default=DEFAULT_PLACEMENT)
    ap.add_argument("--seed", type=int, default=None,
                    help="Seed for the suggestion shuffle (reproducible output)")
    args = ap.parse_args(argv)

    rng = random.Random(args.seed) if args.seed is not None else None
    resp = build_home_carousel(
        load_banner_snapshot(args.banners),
        load_member_snapshot(args.members),
        viewer_id=args.viewer_id,
        viewer_tags=args.viewer_tags,
        placement=args.placement.upper(),
        rng=rng,
    )
    print(json.dumps(resp.model_dump(mode="json"), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
