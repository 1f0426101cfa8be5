"""Shared pytest fixtures for SnapTweet tests."""

from __future__ import annotations

import io
import json
import shutil
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from snaptweet.api.main import create_app
from snaptweet.core.config import SnaptweetConfig
from snaptweet.core.generation_client import GenerationClient
from snaptweet.core.models import GenerationRequest, Satisfaction, ShareRequest, TweetVariation
from snaptweet.core.share_store import ShareStore

SAMPLE_VARIATIONS = [
    {"content": "김치찌개 국물 미쳤다 진짜 밥 두 공기 각", "tone": "솔직톤"},
    {"content": "다이어트는 내일의 내가 하겠지 ㅋㅋ", "tone": "드립톤"},
    {"content": "이 집 된장찌개 못 먹어본 사람 인생 손해임", "tone": "극단톤"},
]


def fake_completion(content: str | None) -> SimpleNamespace:
    """Build an object shaped like an OpenAI chat completion."""
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> SnaptweetConfig:
    """Create a test configuration backed by a temporary database."""
    return SnaptweetConfig(
        openai_api_key=None,
        database_path=temp_dir / "db" / "snaptweet.db",
        environment="test",
        public_base_url="https://snaptweet.test",
        app_url="/",
    )


@pytest.fixture
def make_image() -> Callable[..., bytes]:
    """Factory producing encoded in-memory images."""

    def _make(
        width: int = 64,
        height: int = 48,
        color: tuple[int, int, int] = (200, 80, 40),
        fmt: str = "JPEG",
    ) -> bytes:
        buffer = io.BytesIO()
        Image.new("RGB", (width, height), color).save(buffer, format=fmt)
        return buffer.getvalue()

    return _make


@pytest.fixture
def jpeg_bytes(make_image) -> bytes:
    """A small valid JPEG."""
    return make_image()


@pytest.fixture
def sample_request(jpeg_bytes: bytes) -> GenerationRequest:
    """A valid generation request with three menus."""
    return GenerationRequest(
        images=[jpeg_bytes],
        restaurant_name="을지로 찌개집",
        menus=["김치찌개", "된장찌개", "불고기"],
        satisfaction=Satisfaction.AMAZING,
    )


@pytest.fixture
def sample_share(sample_request: GenerationRequest) -> ShareRequest:
    """A share payload built from :func:`sample_request`."""
    return ShareRequest(
        **sample_request.model_dump(),
        variations=[TweetVariation(**v) for v in SAMPLE_VARIATIONS],
    )


@pytest.fixture
def sample_variations() -> list[dict]:
    """Three well-formed variation dicts, one per tone."""
    return [dict(v) for v in SAMPLE_VARIATIONS]


@pytest.fixture
def completion() -> Callable[[str | None], SimpleNamespace]:
    """Factory for fake chat completions."""
    return fake_completion


@pytest.fixture
def mock_openai() -> MagicMock:
    """A mocked OpenAI SDK client that returns three variations."""
    client = MagicMock()
    client.chat.completions.create.return_value = fake_completion(
        json.dumps({"variations": SAMPLE_VARIATIONS}, ensure_ascii=False)
    )
    return client


@pytest.fixture
def generation_client(mock_openai: MagicMock) -> GenerationClient:
    return GenerationClient(mock_openai, model_id="gpt-4o", max_output_tokens=1000)


@pytest.fixture
def share_store(test_config: SnaptweetConfig) -> ShareStore:
    return ShareStore(test_config.database_path)


@pytest.fixture
def test_client(
    test_config: SnaptweetConfig,
    generation_client: GenerationClient,
    share_store: ShareStore,
) -> Generator[TestClient, None, None]:
    """FastAPI TestClient with injected fake services.

    The context manager runs the lifespan so services land on ``app.state``.
    """
    app = create_app(test_config, generation_client=generation_client, share_store=share_store)
    with TestClient(app) as client:
        yield client
