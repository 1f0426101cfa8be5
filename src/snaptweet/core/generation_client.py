"""Tweet generation through an external multimodal chat model.

This module provides :class:`GenerationClient`, the single point of contact
with the model capability.  One call to :meth:`GenerationClient.generate`
performs exactly one chat-completions request; there is no retry.  A
"regenerate" in the UI is a brand-new, independent call.

Failure Policy
--------------
- Transport and provider failures (auth, quota, rate limit, connection,
  timeout) are raised as :class:`~snaptweet.core.errors.UpstreamError` with
  an :class:`~snaptweet.core.errors.ErrorKind` chosen from the SDK exception
  *type*.
- A reply that is not the expected JSON is **not** an error: it yields an
  empty variation list, which callers must surface as "try again".

Usage
-----
::

    from openai import OpenAI

    client = GenerationClient(OpenAI(api_key="..."), model_id="gpt-4o")
    response = client.generate(request)

See Also
--------
- :mod:`snaptweet.core.prompt_builder`: message construction.
- :mod:`snaptweet.api.main`: builds the client once in the app lifespan.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

import openai
from pydantic import ValidationError as PydanticValidationError

from snaptweet.core.errors import ErrorKind, UpstreamError
from snaptweet.core.models import (
    MAX_VARIATIONS,
    GenerationRequest,
    GenerationResponse,
    TweetVariation,
)
from snaptweet.core.prompt_builder import build_messages

if TYPE_CHECKING:
    from snaptweet.core.config import SnaptweetConfig

logger = logging.getLogger(__name__)


def classify_error(exc: Exception) -> ErrorKind:
    """Map an OpenAI SDK exception to a user-facing :class:`ErrorKind`.

    Args:
        exc: Exception raised while calling the model.

    Returns:
        The matching kind; :attr:`ErrorKind.GENERIC` when nothing more
        specific applies.
    """
    if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return ErrorKind.API_KEY
    if isinstance(exc, openai.RateLimitError):
        return ErrorKind.RATE_LIMIT
    if isinstance(exc, openai.APIConnectionError):
        # APITimeoutError is a subclass.
        return ErrorKind.NETWORK
    if isinstance(exc, openai.BadRequestError):
        hint = f"{exc.code or ''} {exc.param or ''}".lower()
        if "image" in hint:
            return ErrorKind.IMAGE
    return ErrorKind.GENERIC


def parse_variations(text: str | None) -> list[TweetVariation]:
    """Extract tweet variations from the model's JSON reply.

    Malformed input never raises.  Unparsable text, a missing or non-list
    ``variations`` key, or an empty reply all produce ``[]``.  Individual
    entries with an unknown tone or non-text content are dropped, and at
    most three variations are kept.

    Args:
        text: Raw text content of the model's reply.

    Returns:
        Parsed variations in the order the model returned them.
    """
    if not text:
        logger.warning("Model returned an empty reply.")
        return []

    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        logger.warning("Model reply is not valid JSON; returning no variations.")
        return []

    raw = payload.get("variations") if isinstance(payload, dict) else None
    if not isinstance(raw, list):
        logger.warning("Model reply has no 'variations' list; returning no variations.")
        return []

    variations: list[TweetVariation] = []
    for item in raw:
        try:
            variations.append(TweetVariation.model_validate(item))
        except PydanticValidationError:
            logger.warning("Dropping malformed variation: %r", item)

    return variations[:MAX_VARIATIONS]


class GenerationClient:
    """Turns a :class:`GenerationRequest` into a :class:`GenerationResponse`.

    Attributes:
        _client: OpenAI SDK client, or ``None`` when no API key is
            configured.
        _model_id (str): Fixed model identifier used for every request.
        _max_output_tokens (int): Output token cap per request.
    """

    def __init__(
        self,
        client: openai.OpenAI | None,
        *,
        model_id: str = "gpt-4o",
        max_output_tokens: int = 1000,
    ) -> None:
        self._client = client
        self._model_id = model_id
        self._max_output_tokens = max_output_tokens

    @classmethod
    def from_config(cls, config: SnaptweetConfig) -> GenerationClient:
        """Build a client from application configuration.

        A missing API key does not fail startup; every generation then
        raises an :attr:`ErrorKind.API_KEY` upstream error instead.
        """
        sdk_client = None
        if config.openai_api_key is not None:
            kwargs: dict = {"api_key": config.openai_api_key.get_secret_value()}
            if config.request_timeout is not None:
                kwargs["timeout"] = config.request_timeout
            sdk_client = openai.OpenAI(**kwargs)
        else:
            logger.warning("No OpenAI API key configured; generation requests will fail.")

        return cls(
            sdk_client,
            model_id=config.model_id,
            max_output_tokens=config.max_output_tokens,
        )

    @property
    def model_id(self) -> str:
        return self._model_id

    def generate(self, request: GenerationRequest) -> GenerationResponse:
        """Generate up to three tweet variations for *request*.

        Args:
            request: A validated generation request.

        Returns:
            The parsed response.  ``variations`` may be empty.

        Raises:
            UpstreamError: If the model could not be reached or refused the
                request.
        """
        if self._client is None:
            raise UpstreamError("OpenAI API key is not configured.", kind=ErrorKind.API_KEY)

        messages = build_messages(request)
        logger.info(
            "Requesting tweets from '%s' with %d image(s).",
            self._model_id,
            len(request.images),
        )

        try:
            completion = self._client.chat.completions.create(
                model=self._model_id,
                messages=messages,
                response_format={"type": "json_object"},
                max_tokens=self._max_output_tokens,
            )
        except openai.OpenAIError as e:
            kind = classify_error(e)
            logger.error("Model call failed (%s): %s", kind.value, e)
            raise UpstreamError(str(e), kind=kind) from e

        text = completion.choices[0].message.content if completion.choices else None
        variations = parse_variations(text)
        logger.info("Model returned %d variation(s).", len(variations))

        return GenerationResponse(variations=variations)
