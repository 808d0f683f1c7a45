import pytest
from pydantic import TypeAdapter, ValidationError

from clubfeed.config import (
    DEFAULT_AVATAR_URL,
    Banner,
    CarouselItem,
    CarouselResponse,
    HealthResponse,
    MemberCandidate,
    MemberSuggestionItem,
    PromoItem,
)


def test_banner_defaults():
    b = Banner(id="b1")
    assert b.priority == 0
    assert b.is_active
    assert b.placement == "HOME"
    assert b.link_type == "INTERNAL"


def test_member_candidate_defaults_and_read_only():
    m = MemberCandidate(id="m1", name="Ana")
    assert m.image_url == DEFAULT_AVATAR_URL
    assert m.tags == []
    assert not m.is_new
    with pytest.raises(ValidationError):
        m.name = "Other"


def test_carousel_item_is_discriminated_on_type():
    adapter = TypeAdapter(CarouselItem)
    promo = adapter.validate_python({"type": "PROMO", "data": {"id": "b1"}})
    assert isinstance(promo, PromoItem)

    card = {
        "id": "m1",
        "name": "Ana",
        "company": "",
        "job_title": "",
        "image_url": "/a.png",
        "tags": [],
        "matching_tags": [],
    }
    member = adapter.validate_python({"type": "MEMBER_SUGGESTION", "data": card, "reason": "NEW"})
    assert isinstance(member, MemberSuggestionItem)

    with pytest.raises(ValidationError):
        adapter.validate_python({"type": "MEMBER_SUGGESTION", "data": card, "reason": "OTHER"})


def test_carousel_response_round_trips_through_json():
    resp = CarouselResponse(items=[PromoItem(data=Banner(id="b1"))], banner_count=1, suggestion_count=0)
    again = CarouselResponse.model_validate_json(resp.model_dump_json())
    assert isinstance(again.items[0], PromoItem)


def test_health_response():
    assert HealthResponse(status="healthy").status == "healthy"
