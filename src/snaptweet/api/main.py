"""SnapTweet — FastAPI Application.

This module defines the application factory :func:`create_app`, every HTTP
route, and the ``main()`` CLI function that launches the uvicorn server.

Architecture
------------
- **Services** (the :class:`~snaptweet.core.generation_client.GenerationClient`
  and the :class:`~snaptweet.core.share_store.ShareStore`) are built once in
  the lifespan and stored on ``app.state``.  Tests inject fakes through
  :func:`create_app` instead of patching globals.
- **Validation** happens before any service call, so a rejected request
  never reaches the model or the database.
- **Errors** from :mod:`snaptweet.core.errors` are rendered as
  ``{"message", "kind", "field"}`` JSON bodies with localized messages.
- **Share pages** are served as raw ``HTMLResponse`` documents for
  link-unfurling crawlers.

Endpoints
---------
==========  ==========================  =====================================
Method      Path                        Purpose
==========  ==========================  =====================================
POST        ``/api/generate``           Generate three tweet variations
POST        ``/api/share``              Persist a result, return its id
GET         ``/api/share/{id}``         Fetch a share record as JSON
GET         ``/shared/{id}``            Social preview HTML page
GET         ``/shared/{id}/image``      First image of a share record
GET, HEAD   ``/api/health``             Liveness probe
==========  ==========================  =====================================

Usage
-----
CLI (installed entry point)::

    snaptweet

Direct invocation::

    python -m snaptweet.api.main
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, Response
from starlette.datastructures import UploadFile

from snaptweet import __version__
from snaptweet.api.models import ErrorBody, HealthStatus, ShareCreated
from snaptweet.core.config import SnaptweetConfig, config
from snaptweet.core.errors import (
    NotFoundError,
    SnaptweetError,
    StoreError,
    UpstreamError,
    ValidationError,
)
from snaptweet.core.generation_client import GenerationClient
from snaptweet.core.models import ShareRequest
from snaptweet.core.preview import render_error_page, render_not_found_page, render_shared_page
from snaptweet.core.share_store import ShareStore, is_valid_share_id
from snaptweet.core.validation import (
    MSG_BAD_IMAGE,
    MSG_BAD_REQUEST,
    field_message,
    validate_generation_request,
)

logger = logging.getLogger(__name__)

SERVICE_NAME = "snaptweet"

MSG_GENERATE_FAILED = "트윗 생성 중 오류가 발생했습니다"
MSG_SHARE_FAILED = "공유 링크 생성 중 오류가 발생했습니다."
MSG_FETCH_FAILED = "공유 트윗을 가져오는 중 오류가 발생했습니다."
MSG_NOT_FOUND = "공유 링크를 찾을 수 없습니다."
MSG_INVALID_ID = "유효하지 않은 ID입니다."
MSG_INTERNAL = "서버 오류가 발생했습니다."

IMAGE_CACHE_CONTROL = "public, max-age=86400"

router = APIRouter()


def _error_response(status_code: int, message: str, **extra: Any) -> JSONResponse:
    body = ErrorBody(message=message, **extra)
    return JSONResponse(status_code=status_code, content=body.model_dump())


# ---------------------------------------------------------------------------
# Request parsing helpers.
# ---------------------------------------------------------------------------


async def _read_generation_fields(request: Request) -> dict[str, Any]:
    """Collect the raw generation fields from a multipart or JSON body.

    Multipart uploads carry images as file parts and ``menus`` as a
    JSON-encoded string; JSON bodies carry images as base64 text.

    Raises:
        ValidationError: If the body cannot be read at all or a file part
            is not an image.
    """
    content_type = request.headers.get("content-type", "")

    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        form = await request.form()
        images: list[Any] = []
        for part in form.getlist("images"):
            if isinstance(part, UploadFile):
                if part.content_type and not part.content_type.startswith("image/"):
                    raise ValidationError("images", MSG_BAD_IMAGE)
                images.append(await part.read())
            else:
                images.append(part)

        menus = form.getlist("menus")
        return {
            "images": images,
            "restaurantName": form.get("restaurantName"),
            "menus": menus[0] if len(menus) == 1 else (menus or None),
            "satisfaction": form.get("satisfaction"),
        }

    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError("body", MSG_BAD_REQUEST) from e
    if not isinstance(body, dict):
        raise ValidationError("body", MSG_BAD_REQUEST)
    return body


def _public_base_url(request: Request) -> str:
    app_config: SnaptweetConfig = request.app.state.config
    return (app_config.public_base_url or str(request.base_url)).rstrip("/")


# ---------------------------------------------------------------------------
# Routes.
# ---------------------------------------------------------------------------


@router.post("/api/generate")
async def generate_tweets(request: Request) -> Any:
    """Generate up to three tweet variations for the uploaded photos.

    Returns:
        ``{"variations": [{"content", "tone"}, ...]}``.  An empty list is a
        valid result.

    Raises:
        ValidationError: 400, before the model is called.
    """
    fields = await _read_generation_fields(request)
    generation_request = validate_generation_request(fields)

    client: GenerationClient = request.app.state.generation_client
    try:
        response = await run_in_threadpool(client.generate, generation_request)
    except UpstreamError as e:
        logger.error("Tweet generation failed", exc_info=True)
        return _error_response(500, f"{MSG_GENERATE_FAILED}: {e.message}", kind=e.kind.value)

    return response.model_dump(mode="json", by_alias=True)


@router.post("/api/share")
async def create_share(payload: ShareRequest, request: Request) -> Any:
    """Persist a generation result and return its share id."""
    store: ShareStore = request.app.state.share_store
    try:
        share_id = await run_in_threadpool(store.create_share, payload)
    except StoreError:
        logger.error("Share creation failed", exc_info=True)
        return _error_response(500, MSG_SHARE_FAILED)

    return ShareCreated(share_id=share_id).model_dump(by_alias=True)


@router.get("/api/share/{share_id}")
async def get_share(share_id: str, request: Request) -> Any:
    """Return a share record as JSON.

    Raises:
        ValidationError: 400 if the id is malformed.
        NotFoundError: 404 if no record matches.
    """
    if not is_valid_share_id(share_id):
        raise ValidationError("id", MSG_INVALID_ID)

    store: ShareStore = request.app.state.share_store
    try:
        record = await run_in_threadpool(store.get_share, share_id)
    except StoreError:
        logger.error("Share lookup failed for %s", share_id, exc_info=True)
        return _error_response(500, MSG_FETCH_FAILED)

    if record is None:
        raise NotFoundError(MSG_NOT_FOUND)
    return record.model_dump(mode="json", by_alias=True)


@router.get("/shared/{share_id}", response_class=HTMLResponse)
async def shared_page(share_id: str, request: Request) -> HTMLResponse:
    """Serve the social preview page for a share."""
    if not is_valid_share_id(share_id):
        return HTMLResponse(render_not_found_page(), status_code=404)

    store: ShareStore = request.app.state.share_store
    try:
        record = await run_in_threadpool(store.get_share, share_id)
    except StoreError:
        logger.error("Shared page failed for %s", share_id, exc_info=True)
        return HTMLResponse(render_error_page(), status_code=500)

    if record is None:
        return HTMLResponse(render_not_found_page(), status_code=404)

    app_config: SnaptweetConfig = request.app.state.config
    html = render_shared_page(record, _public_base_url(request), app_config.app_url)
    return HTMLResponse(html)


@router.get("/shared/{share_id}/image")
async def shared_image(share_id: str, request: Request) -> Response:
    """Serve the first image of a share for preview cards."""
    if not is_valid_share_id(share_id):
        return Response("Image not found", status_code=404, media_type="text/plain")

    store: ShareStore = request.app.state.share_store
    try:
        record = await run_in_threadpool(store.get_share, share_id)
    except StoreError:
        logger.error("Shared image failed for %s", share_id, exc_info=True)
        return Response("Error serving image", status_code=500, media_type="text/plain")

    if record is None or not record.images:
        return Response("Image not found", status_code=404, media_type="text/plain")

    data = record.images[0]
    return Response(
        content=data,
        media_type="image/jpeg",
        headers={
            "Content-Length": str(len(data)),
            "Cache-Control": IMAGE_CACHE_CONTROL,
        },
    )


@router.api_route("/api/health", methods=["GET", "HEAD"])
async def health(request: Request) -> Any:
    app_config: SnaptweetConfig = request.app.state.config
    status = HealthStatus(
        timestamp=datetime.now(timezone.utc),
        service=SERVICE_NAME,
        version=__version__,
        environment=app_config.environment,
    )
    return status.model_dump(mode="json")


# ---------------------------------------------------------------------------
# Exception handlers.
# ---------------------------------------------------------------------------


async def _handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.field)
    return _error_response(400, exc.message, field=exc.field)


async def _handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    loc = errors[0].get("loc", ()) if errors else ()
    # loc looks like ("body", "images", 0, ...); a JSON syntax error puts an offset there
    field = loc[1] if len(loc) > 1 and isinstance(loc[1], str) else None
    message = field_message(field) if field else MSG_BAD_REQUEST
    return _error_response(400, message, field=field)


async def _handle_not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    return _error_response(404, str(exc) or MSG_NOT_FOUND)


async def _handle_snaptweet_error(request: Request, exc: SnaptweetError) -> JSONResponse:
    logger.error("Unhandled %s on %s", type(exc).__name__, request.url.path, exc_info=exc)
    return _error_response(500, MSG_INTERNAL)


# ---------------------------------------------------------------------------
# Application factory.
# ---------------------------------------------------------------------------


def create_app(
    app_config: SnaptweetConfig | None = None,
    generation_client: GenerationClient | None = None,
    share_store: ShareStore | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        app_config: Settings to use; defaults to the global ``config``.
        generation_client: Pre-built generation client.  When ``None`` one
            is built from *app_config* at startup.
        share_store: Pre-built share store.  When ``None`` one is opened at
            ``app_config.database_path`` at startup.

    Returns:
        The configured application.  Services become available on
        ``app.state`` once the lifespan has started.
    """
    settings = app_config or config

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.config = settings
        app.state.generation_client = (
            generation_client if generation_client is not None else GenerationClient.from_config(settings)
        )
        app.state.share_store = share_store if share_store is not None else ShareStore(settings.database_path)
        logger.info(
            "SnapTweet started (environment=%s, model=%s).",
            settings.environment,
            app.state.generation_client.model_id,
        )

        yield

        logger.info("SnapTweet stopped.")

    app = FastAPI(
        title="SnapTweet",
        description="Turns food photos into tweet drafts and shareable preview links.",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ValidationError, _handle_validation_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation_error)
    app.add_exception_handler(NotFoundError, _handle_not_found)
    app.add_exception_handler(SnaptweetError, _handle_snaptweet_error)
    app.include_router(router)

    return app


app = create_app()


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host, port and log level from :data:`~snaptweet.core.config.config`
    (``SNAPTWEET_SERVER_HOST``, ``SNAPTWEET_SERVER_PORT``,
    ``SNAPTWEET_LOG_LEVEL``).  Defaults to ``0.0.0.0:8000``.

    This function is registered as the ``snaptweet`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    uvicorn.run(
        "snaptweet.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
