from datetime import datetime, timedelta, timezone

import numpy as np
import pandas as pd

from clubfeed.config import DEFAULT_AVATAR_URL
from clubfeed.members import (
    is_recently_created,
    load_member_snapshot,
    members_from_df,
    normalize_member_df,
    parse_tags_field,
    viewer_tags_from_df,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def iso(days_ago):
    return (NOW - timedelta(days=days_ago)).isoformat()


def test_parse_tags_field():
    assert parse_tags_field(None) == []
    assert parse_tags_field(float("nan")) == []
    assert parse_tags_field("React, Go ,, ") == ["React", "Go"]
    assert parse_tags_field(["Fintech", " ", "SaaS"]) == ["Fintech", "SaaS"]
    assert parse_tags_field(np.array(["a", "b"])) == ["a", "b"]


def test_is_recently_created_window():
    assert is_recently_created(NOW - timedelta(days=14), NOW)
    assert is_recently_created(NOW - timedelta(days=15), NOW)
    assert not is_recently_created(NOW - timedelta(days=15, seconds=1), NOW)
    assert not is_recently_created(None, NOW)
    assert is_recently_created(datetime(2026, 2, 28), NOW)


def test_normalize_member_df_filters_and_fills():
    raw = pd.DataFrame(
        [
            {"id": "viewer", "name": "Me", "tags": ["x"], "created_at": iso(1), "role": "MEMBER"},
            {"id": "admin", "name": "Boss", "tags": [], "created_at": iso(0), "role": "admin"},
            {"id": "old", "name": "Old", "company": None, "tags": "fintech", "created_at": iso(40)},
            {"id": "new", "name": "New", "jobTitle": "CTO", "tags": ["AI"], "created_at": iso(3)},
            {"id": "undated", "name": "Undated", "tags": None, "created_at": None},
        ]
    )
    df = normalize_member_df(raw, viewer_id="viewer", now=NOW)
    assert list(df["id"]) == ["new", "old", "undated"]

    members = members_from_df(df)
    by_id = {m.id: m for m in members}
    assert by_id["new"].is_new
    assert by_id["new"].job_title == "CTO"
    assert not by_id["old"].is_new
    assert by_id["old"].company == ""
    assert by_id["old"].tags == ["fintech"]
    assert by_id["undated"].tags == []
    assert by_id["undated"].created_at is None
    assert not by_id["undated"].is_new
    assert all(m.image_url == DEFAULT_AVATAR_URL for m in members)


def test_normalize_member_df_keeps_most_recent_window():
    raw = pd.DataFrame(
        [{"id": f"m{i}", "name": f"M{i}", "created_at": iso(i)} for i in range(10)]
    )
    df = normalize_member_df(raw, now=NOW, limit=4)
    assert list(df["id"]) == ["m0", "m1", "m2", "m3"]


def test_normalize_member_df_empty():
    df = normalize_member_df(pd.DataFrame(), now=NOW)
    assert df.empty
    assert members_from_df(df) == []


def test_viewer_tags_from_df():
    raw = pd.DataFrame([{"id": 1, "name": "V", "tags": "React,Node"}, {"id": 2, "name": "W"}])
    assert viewer_tags_from_df(raw, "1") == ["React", "Node"]
    assert viewer_tags_from_df(raw, "99") == []
    assert viewer_tags_from_df(pd.DataFrame(), "1") == []


def test_load_member_snapshot_csv(tmp_path):
    path = tmp_path / "members.csv"
    path.write_text(
        "id,name,tags,created_at,role\n"
        "a,Ana,\"fintech,saas\",2026-02-27T00:00:00Z,MEMBER\n"
        "b,Bo,,2025-01-01T00:00:00Z,ADMIN\n",
        encoding="utf-8",
    )
    raw = load_member_snapshot(path)
    members = members_from_df(normalize_member_df(raw, now=NOW))
    assert [m.id for m in members] == ["a"]
    assert members[0].tags == ["fintech", "saas"]
    assert members[0].is_new


def test_numeric_csv_ids_with_blank_row_keep_integer_form(tmp_path):
    # a blank id makes pandas read the column as float (1.0, 2.0, NaN)
    path = tmp_path / "members.csv"
    path.write_text("id,name,tags\n1,Me,go\n2,Two,Go\n,Orphan,go\n", encoding="utf-8")
    raw = load_member_snapshot(path)

    df = normalize_member_df(raw, viewer_id="1", now=NOW)
    assert list(df["id"]) == ["2"]
    assert viewer_tags_from_df(raw, "1") == ["go"]
