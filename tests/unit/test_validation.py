"""Unit tests for generation request validation."""

from __future__ import annotations

import base64

import pytest

from snaptweet.core.errors import ValidationError
from snaptweet.core.models import Satisfaction
from snaptweet.core.validation import (
    MSG_BAD_MENUS,
    MSG_BAD_SATISFACTION,
    MSG_NO_IMAGES,
    MSG_NO_MENUS,
    MSG_TOO_MANY_IMAGES,
    field_message,
    parse_menus,
    parse_satisfaction,
    validate_generation_request,
)


def _fields(images, **overrides):
    fields = {"images": images, "menus": ["김치찌개"], "satisfaction": "맛있음"}
    fields.update(overrides)
    return fields


class TestParseMenus:
    """Tests for parse_menus."""

    def test_list_passes_through(self):
        assert parse_menus(["a", "b"]) == ["a", "b"]

    def test_json_string_is_decoded(self):
        """Multipart forms send menus as a JSON array string."""
        assert parse_menus('["김치찌개", "된장찌개"]') == ["김치찌개", "된장찌개"]

    def test_order_preserved(self):
        assert parse_menus(["c", "a", "b"]) == ["c", "a", "b"]

    def test_empty_list(self):
        with pytest.raises(ValidationError, match=MSG_NO_MENUS):
            parse_menus([])

    def test_missing(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_menus(None)
        assert exc_info.value.field == "menus"

    def test_invalid_json(self):
        with pytest.raises(ValidationError, match=MSG_BAD_MENUS):
            parse_menus("김치찌개")

    def test_non_list_json(self):
        with pytest.raises(ValidationError, match=MSG_BAD_MENUS):
            parse_menus('{"a": 1}')

    def test_blank_item_accepted(self):
        """Menu strings pass through as sent, like the share payload."""
        assert parse_menus(["a", "  "]) == ["a", "  "]

    def test_non_string_item(self):
        with pytest.raises(ValidationError, match=MSG_BAD_MENUS):
            parse_menus(["a", 3])


class TestParseSatisfaction:
    def test_known_value(self):
        assert parse_satisfaction("개쩜") is Satisfaction.AMAZING

    def test_enum_member(self):
        assert parse_satisfaction(Satisfaction.MEH) is Satisfaction.MEH

    def test_unknown_value(self):
        with pytest.raises(ValidationError, match=MSG_BAD_SATISFACTION):
            parse_satisfaction("최고")


class TestValidateGenerationRequest:
    """Tests for validate_generation_request."""

    def test_valid_request(self, jpeg_bytes):
        """Valid input is returned unchanged in value."""
        req = validate_generation_request(
            _fields([jpeg_bytes], menus=["a", "b"], restaurantName="가게")
        )
        assert req.images == [jpeg_bytes]
        assert req.menus == ["a", "b"]
        assert req.restaurant_name == "가게"
        assert req.satisfaction is Satisfaction.TASTY

    def test_no_images(self):
        with pytest.raises(ValidationError, match=MSG_NO_IMAGES) as exc_info:
            validate_generation_request(_fields([]))
        assert exc_info.value.field == "images"

    def test_images_missing_entirely(self):
        with pytest.raises(ValidationError, match=MSG_NO_IMAGES):
            validate_generation_request({"menus": ["a"], "satisfaction": "맛있음"})

    def test_five_images(self, jpeg_bytes):
        with pytest.raises(ValidationError, match=MSG_TOO_MANY_IMAGES):
            validate_generation_request(_fields([jpeg_bytes] * 5))

    def test_four_images_allowed(self, jpeg_bytes):
        req = validate_generation_request(_fields([jpeg_bytes] * 4))
        assert len(req.images) == 4

    def test_empty_restaurant_is_none(self, jpeg_bytes):
        req = validate_generation_request(_fields([jpeg_bytes], restaurantName=""))
        assert req.restaurant_name is None

    def test_snake_case_restaurant(self, jpeg_bytes):
        req = validate_generation_request(_fields([jpeg_bytes], restaurant_name="가게"))
        assert req.restaurant_name == "가게"

    def test_non_string_restaurant(self, jpeg_bytes):
        with pytest.raises(ValidationError) as exc_info:
            validate_generation_request(_fields([jpeg_bytes], restaurantName=3))
        assert exc_info.value.field == "restaurantName"

    def test_base64_images(self, jpeg_bytes):
        encoded = base64.b64encode(jpeg_bytes).decode()
        req = validate_generation_request(_fields([encoded]))
        assert req.images == [jpeg_bytes]

    def test_bad_image_payload(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_generation_request(_fields(["%%%"]))
        assert exc_info.value.field == "images"

    def test_single_image_not_in_list(self, jpeg_bytes):
        """A lone image value is treated as a one-element list."""
        req = validate_generation_request(_fields(jpeg_bytes))
        assert len(req.images) == 1


def test_field_message_fallback():
    assert field_message("menus") == MSG_BAD_MENUS
    assert field_message("nonsense")
