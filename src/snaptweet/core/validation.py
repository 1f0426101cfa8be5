"""Generation request validation.

Form submissions arrive loosely typed: menus may be a real list or a
JSON-encoded string, images may be raw bytes from multipart parts or base64
text from a JSON body, and an empty restaurant field means "not given".
:func:`validate_generation_request` normalises that field bag into a
:class:`~snaptweet.core.models.GenerationRequest` or raises a
:class:`~snaptweet.core.errors.ValidationError` naming the offending field.

Validation runs before any model or store call, so a rejected request never
reaches an external collaborator.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from snaptweet.core.errors import ValidationError
from snaptweet.core.models import MAX_IMAGES, GenerationRequest, Satisfaction

logger = logging.getLogger(__name__)

MSG_NO_IMAGES = "이미지를 하나 이상 업로드해주세요."
MSG_TOO_MANY_IMAGES = f"이미지는 최대 {MAX_IMAGES}장까지 업로드할 수 있습니다."
MSG_NO_MENUS = "메뉴를 하나 이상 입력해주세요."
MSG_BAD_MENUS = "메뉴 형식이 올바르지 않습니다."
MSG_BAD_SATISFACTION = "만족도 값이 올바르지 않습니다."
MSG_BAD_RESTAURANT = "가게 이름 형식이 올바르지 않습니다."
MSG_BAD_IMAGE = "이미지 데이터가 올바르지 않습니다."
MSG_BAD_VARIATIONS = "트윗 데이터 형식이 올바르지 않습니다."
MSG_BAD_REQUEST = "요청 형식이 올바르지 않습니다."

_FIELD_MESSAGES = {
    "images": MSG_BAD_IMAGE,
    "menus": MSG_BAD_MENUS,
    "satisfaction": MSG_BAD_SATISFACTION,
    "restaurantName": MSG_BAD_RESTAURANT,
    "variations": MSG_BAD_VARIATIONS,
}


def field_message(field: str) -> str:
    """Return the localized message for a malformed *field*."""
    return _FIELD_MESSAGES.get(field, MSG_BAD_REQUEST)


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def parse_menus(value: Any) -> list[str]:
    """Normalise the ``menus`` field into a list of strings.

    Args:
        value: A list of strings, or a JSON-encoded array string as sent by
            multipart form submissions.

    Returns:
        The menu items, unchanged.

    Raises:
        ValidationError: If the value is not a non-empty list of strings.
    """
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise ValidationError("menus", MSG_BAD_MENUS) from e

    if value is None:
        raise ValidationError("menus", MSG_NO_MENUS)
    if not isinstance(value, (list, tuple)):
        raise ValidationError("menus", MSG_BAD_MENUS)
    if not value:
        raise ValidationError("menus", MSG_NO_MENUS)
    if not all(isinstance(item, str) for item in value):
        raise ValidationError("menus", MSG_BAD_MENUS)

    return list(value)


def parse_satisfaction(value: Any) -> Satisfaction:
    """Resolve the satisfaction text into a :class:`Satisfaction` member.

    Raises:
        ValidationError: If the value is not one of the four levels.
    """
    if isinstance(value, Satisfaction):
        return value
    try:
        return Satisfaction(value)
    except ValueError as e:
        raise ValidationError("satisfaction", MSG_BAD_SATISFACTION) from e


def validate_generation_request(fields: Mapping[str, Any]) -> GenerationRequest:
    """Build a :class:`GenerationRequest` from a loosely typed field bag.

    Accepted keys are the wire names ``images``, ``restaurantName``,
    ``menus`` and ``satisfaction`` (``restaurant_name`` is accepted too).
    Valid input is returned unchanged in value.

    Args:
        fields: Mapping of raw field values.

    Returns:
        The validated request.

    Raises:
        ValidationError: If the image count is not 1–4, menus are missing or
            malformed, satisfaction is unknown, or an image payload cannot be
            read.
    """
    images = _as_list(fields.get("images"))
    if not images:
        raise ValidationError("images", MSG_NO_IMAGES)
    if len(images) > MAX_IMAGES:
        raise ValidationError("images", MSG_TOO_MANY_IMAGES)

    menus = parse_menus(fields.get("menus"))
    satisfaction = parse_satisfaction(fields.get("satisfaction"))

    restaurant_name = fields.get("restaurantName", fields.get("restaurant_name"))
    if restaurant_name is not None and not isinstance(restaurant_name, str):
        raise ValidationError("restaurantName", MSG_BAD_RESTAURANT)
    if not restaurant_name:
        restaurant_name = None

    try:
        return GenerationRequest(
            images=images,
            restaurant_name=restaurant_name,
            menus=menus,
            satisfaction=satisfaction,
        )
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = str(first["loc"][0]) if first.get("loc") else "images"
        if field == "restaurant_name":
            field = "restaurantName"
        logger.debug("Rejected generation request: %s", first.get("msg"))
        raise ValidationError(field, field_message(field)) from e
