"""Client-side orchestration of the generate → display → share flow.

:class:`SnaptweetSession` is what a front end drives.  It shrinks photos
through the image reducer, talks to the SnapTweet HTTP API with ``httpx``,
keeps the latest result per session token in a :class:`ResultCache`, and
turns every failure into a localized :class:`Notice`.

No action raises for server or transport failures: each one resolves to an
:class:`Outcome` carrying either a value or a notice (a storage notice may
accompany a value).
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

import httpx
from pydantic import ValidationError as PydanticValidationError

from snaptweet.client.cache import ResultCache
from snaptweet.client.notices import (
    DECODE_NOTICE,
    EMPTY_RESULT_NOTICE,
    GENERIC_NOTICE,
    NETWORK_NOTICE,
    NO_IMAGES_NOTICE,
    NO_MENUS_NOTICE,
    NO_RESULT_NOTICE,
    SHARE_FAILED_NOTICE,
    SHARE_LOAD_FAILED_NOTICE,
    SHARE_NOT_FOUND_NOTICE,
    STORAGE_NOTICE,
    TOO_MANY_IMAGES_NOTICE,
    Notice,
    notice_for,
)
from snaptweet.core.config import config
from snaptweet.core.errors import DecodeError, EncodeError, ErrorKind
from snaptweet.core.image_reducer import ReduceOptions, reduce_image
from snaptweet.core.models import (
    MAX_IMAGES,
    GenerationRequest,
    GenerationResponse,
    Satisfaction,
    SharedTweetRecord,
    ShareRequest,
    TweetVariation,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Result of one client action."""

    value: T | None = None
    notice: Notice | None = None

    @property
    def ok(self) -> bool:
        return self.value is not None


@dataclass(frozen=True)
class ShareLink:
    share_id: str
    url: str


def _error_kind(response: httpx.Response) -> ErrorKind:
    try:
        kind = response.json().get("kind")
        return ErrorKind(kind)
    except (json.JSONDecodeError, AttributeError, ValueError):
        return ErrorKind.GENERIC


class SnaptweetSession:
    """Drives generation and sharing against a SnapTweet server.

    Args:
        http: Client whose ``base_url`` points at the server.
        cache: Result cache; defaults to one sized from configuration.
        reducer_options: Image reduction constraints; defaults to the
            configured ``image_*`` settings.
        base_url: Public origin used to build share links.  Defaults to the
            client's ``base_url``.
    """

    def __init__(
        self,
        http: httpx.Client,
        cache: ResultCache | None = None,
        reducer_options: ReduceOptions | None = None,
        base_url: str | None = None,
    ) -> None:
        self.http = http
        self.cache = cache if cache is not None else ResultCache(
            ttl_seconds=config.result_cache_ttl,
            max_entry_bytes=config.result_cache_max_entry_bytes,
        )
        self.reducer_options = reducer_options if reducer_options is not None else ReduceOptions(
            max_width=config.image_max_width,
            max_height=config.image_max_height,
            quality=config.image_quality,
            max_file_size=config.image_max_file_size,
        )
        self.base_url = (base_url or config.public_base_url or str(http.base_url)).rstrip("/")

    def prepare_images(self, raw_images: Sequence[bytes]) -> list[bytes]:
        """Reduce each photo in turn, keeping upload order.

        Raises:
            DecodeError: If a photo cannot be decoded.
            EncodeError: If the target encoder is unavailable.
        """
        prepared = []
        for data in raw_images:
            reduced = reduce_image(data, self.reducer_options)
            logger.debug("Reduced photo from %d to %d bytes", len(data), reduced.size)
            prepared.append(reduced.data)
        return prepared

    def generate(
        self,
        token: str,
        raw_images: Sequence[bytes],
        menus: Sequence[str],
        satisfaction: Satisfaction,
        restaurant_name: str | None = None,
    ) -> Outcome[list[TweetVariation]]:
        """Shrink the photos, request tweets, and cache the result.

        Missing photos or menus are refused before anything is compressed
        or sent.
        """
        if not raw_images:
            return Outcome(notice=NO_IMAGES_NOTICE)
        if len(raw_images) > MAX_IMAGES:
            return Outcome(notice=TOO_MANY_IMAGES_NOTICE)
        menus = [menu.strip() for menu in menus if menu and menu.strip()]
        if not menus:
            return Outcome(notice=NO_MENUS_NOTICE)

        try:
            images = self.prepare_images(raw_images)
        except (DecodeError, EncodeError) as e:
            logger.warning("Photo preparation failed: %s", e)
            return Outcome(notice=DECODE_NOTICE)

        request = GenerationRequest(
            images=images,
            restaurant_name=restaurant_name or None,
            menus=menus,
            satisfaction=satisfaction,
        )
        return self._submit(token, request)

    def regenerate(self, token: str) -> Outcome[list[TweetVariation]]:
        """Request a fresh set of tweets for the cached inputs."""
        cached = self.cache.get(token)
        if cached is None:
            return Outcome(notice=NO_RESULT_NOTICE)
        return self._submit(token, cached.request)

    def share(self, token: str) -> Outcome[ShareLink]:
        """Persist the cached result and return its public link."""
        cached = self.cache.get(token)
        if cached is None:
            return Outcome(notice=NO_RESULT_NOTICE)

        payload = ShareRequest(
            images=cached.request.images,
            restaurant_name=cached.request.restaurant_name,
            menus=cached.request.menus,
            satisfaction=cached.request.satisfaction,
            variations=cached.variations,
        )
        try:
            response = self.http.post("/api/share", json=payload.model_dump(mode="json", by_alias=True))
        except httpx.TransportError as e:
            logger.warning("Share request failed: %s", e)
            return Outcome(notice=SHARE_FAILED_NOTICE)

        if response.status_code != 200:
            return Outcome(notice=SHARE_FAILED_NOTICE)
        try:
            share_id = response.json()["shareId"]
        except (json.JSONDecodeError, KeyError, TypeError):
            return Outcome(notice=SHARE_FAILED_NOTICE)

        return Outcome(value=ShareLink(share_id=share_id, url=f"{self.base_url}/shared/{share_id}"))

    def load_shared(self, share_id: str) -> Outcome[SharedTweetRecord]:
        """Fetch a shared record for display."""
        try:
            response = self.http.get(f"/api/share/{share_id}")
        except httpx.TransportError as e:
            logger.warning("Shared record fetch failed: %s", e)
            return Outcome(notice=SHARE_LOAD_FAILED_NOTICE)

        if response.status_code in (400, 404):
            return Outcome(notice=SHARE_NOT_FOUND_NOTICE)
        if response.status_code != 200:
            return Outcome(notice=SHARE_LOAD_FAILED_NOTICE)
        try:
            return Outcome(value=SharedTweetRecord.model_validate(response.json()))
        except (json.JSONDecodeError, PydanticValidationError):
            return Outcome(notice=SHARE_LOAD_FAILED_NOTICE)

    def _submit(self, token: str, request: GenerationRequest) -> Outcome[list[TweetVariation]]:
        try:
            response = self.http.post(
                "/api/generate", json=request.model_dump(mode="json", by_alias=True)
            )
        except httpx.TransportError as e:
            logger.warning("Generate request failed: %s", e)
            return Outcome(notice=NETWORK_NOTICE)

        if response.status_code != 200:
            return Outcome(notice=notice_for(_error_kind(response)))
        try:
            variations = GenerationResponse.model_validate(response.json()).variations
        except (json.JSONDecodeError, PydanticValidationError):
            return Outcome(notice=GENERIC_NOTICE)

        if not variations:
            return Outcome(notice=EMPTY_RESULT_NOTICE)

        stored = self.cache.put(token, request, variations)
        return Outcome(value=variations, notice=None if stored else STORAGE_NOTICE)
