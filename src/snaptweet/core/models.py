"""Domain models for SnapTweet.

These Pydantic models are shared by the validator, the generation client,
the share store, the HTTP layer, and the client orchestration.  On the wire
every field uses camelCase (``restaurantName``, ``createdAt``) and images
travel as base64 text; in Python they are snake_case attributes holding raw
``bytes``.

Models
------
GenerationRequest
    One user submission: 1–4 photos, menus, satisfaction, optional
    restaurant name.
TweetVariation
    One generated draft and its tone.
GenerationResponse
    Up to three variations returned by the generation client.
ShareRequest
    A generation request plus the variations produced for it.
SharedTweetRecord
    A persisted, immutable share snapshot.
"""

from __future__ import annotations

import base64
import binascii
from datetime import datetime
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

MAX_IMAGES = 4
MAX_VARIATIONS = 3


class Satisfaction(str, Enum):
    """How much the user enjoyed the meal."""

    MEH = "애매함"
    NOT_BAD = "나쁘지 않음"
    TASTY = "맛있음"
    AMAZING = "개쩜"


class Tone(str, Enum):
    """Register of a generated tweet."""

    HONEST = "솔직톤"  # blunt, plain
    MEME = "드립톤"  # meme-inflected, self-deprecating
    EXTREME = "극단톤"  # hyperbolic praise or roast


def strip_data_url(value: str) -> str:
    """Return the base64 payload of a ``data:`` URL, or *value* unchanged."""
    if value.startswith("data:") and "," in value:
        return value.split(",", 1)[1]
    return value


def _coerce_image(value: object) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        data = bytes(value)
    elif isinstance(value, str):
        try:
            data = base64.b64decode(strip_data_url(value.strip()), validate=True)
        except binascii.Error as e:
            raise ValueError(f"image is not valid base64: {e}") from e
    else:
        raise ValueError(f"image must be bytes or base64 text, got {type(value).__name__}")
    if not data:
        raise ValueError("image payload is empty")
    return data


def _encode_image(value: bytes) -> str:
    return base64.b64encode(value).decode("ascii")


# Raw bytes in Python, base64 text in JSON.
ImageBytes = Annotated[
    bytes,
    BeforeValidator(_coerce_image),
    PlainSerializer(_encode_image, return_type=str, when_used="json"),
]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TweetVariation(_CamelModel):
    """A single generated draft.

    Attributes:
        content: Tweet text.
        tone: One of the three :class:`Tone` registers.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    content: str
    tone: Tone


class GenerationRequest(_CamelModel):
    """A validated user submission.

    Attributes:
        images: 1–4 encoded photos, in upload order.
        restaurant_name: Optional restaurant name.
        menus: At least one menu item, in entry order.
        satisfaction: The user's rating.
    """

    images: list[ImageBytes] = Field(..., min_length=1, max_length=MAX_IMAGES)
    restaurant_name: str | None = None
    menus: list[str] = Field(..., min_length=1)
    satisfaction: Satisfaction


class GenerationResponse(_CamelModel):
    """Result of one generation call.  Zero variations is a valid outcome."""

    variations: list[TweetVariation] = Field(default_factory=list, max_length=MAX_VARIATIONS)


class ShareRequest(GenerationRequest):
    """Payload for creating a share record."""

    variations: list[TweetVariation]


class SharedTweetRecord(_CamelModel):
    """An immutable persisted snapshot of a generation and its inputs.

    Only ``images[0]`` is ever interpreted, and only as opaque bytes for the
    preview image endpoint.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    images: list[ImageBytes]
    restaurant_name: str | None = None
    menus: list[str]
    satisfaction: Satisfaction
    variations: list[TweetVariation]
    created_at: datetime
