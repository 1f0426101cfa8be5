"""Tests for snaptweet.core.image_reducer — adaptive photo reduction.

The quality-step sequence is pinned by monkeypatching the module's
``_encode`` hook so that encoded sizes are deterministic.
"""

from __future__ import annotations

import io
import random

import pytest
from PIL import Image

from snaptweet.core import image_reducer
from snaptweet.core.errors import DecodeError, EncodeError
from snaptweet.core.image_reducer import (
    ReduceOptions,
    format_file_size,
    needs_compression,
    reduce_image,
)


@pytest.fixture
def recorded_encodes(monkeypatch):
    """Replace the encoder with one whose output size is scripted.

    Tests set ``sizes`` to a callable ``(quality, size) -> int``.
    """
    calls: list[tuple[int, tuple[int, int]]] = []
    script = {"sizes": lambda quality, size: 10}

    def fake_encode(image, fmt, quality):
        calls.append((quality, image.size))
        return b"x" * script["sizes"](quality, image.size)

    monkeypatch.setattr(image_reducer, "_encode", fake_encode)
    return calls, script


class TestDimensions:
    def test_downscales_into_bounding_box(self, make_image):
        """A 2400x1200 photo lands at 1200x600, keeping aspect ratio."""
        result = reduce_image(make_image(2400, 1200))
        assert (result.width, result.height) == (1200, 600)
        decoded = Image.open(io.BytesIO(result.data))
        assert decoded.size == (1200, 600)

    def test_tall_image_bounded_by_height(self, make_image):
        result = reduce_image(make_image(600, 2400), ReduceOptions(max_width=1200, max_height=1200))
        assert (result.width, result.height) == (300, 1200)

    def test_never_upscales(self, make_image):
        """Images already inside the box keep their size."""
        result = reduce_image(make_image(100, 50))
        assert (result.width, result.height) == (100, 50)

    def test_fits_byte_budget(self, make_image):
        opts = ReduceOptions(max_file_size=200 * 1024)
        result = reduce_image(make_image(1600, 1600), opts)
        assert result.size <= opts.max_file_size

    def test_noisy_over_budget_photo_never_grows(self):
        """A heavily compressed noisy photo over budget is not inflated."""
        rng = random.Random(7)
        noise = Image.frombytes("RGB", (800, 800), rng.randbytes(800 * 800 * 3))
        buffer = io.BytesIO()
        noise.save(buffer, format="JPEG", quality=5)
        source = buffer.getvalue()
        result = reduce_image(source, ReduceOptions(max_file_size=int(len(source) * 0.95)))
        assert result.size <= len(source)


class TestQualitySteps:
    """Quality drops 10 points at a time, then one final shrink."""

    def test_first_encode_uses_initial_quality(self, make_image, recorded_encodes):
        calls, _ = recorded_encodes
        reduce_image(make_image(), ReduceOptions(quality=0.8))
        assert calls[0][0] == 80

    def test_stops_once_within_budget(self, make_image, recorded_encodes):
        calls, script = recorded_encodes
        opts = ReduceOptions(max_file_size=1000)
        script["sizes"] = lambda quality, size: 2000 if quality > 50 else 500
        result = reduce_image(make_image(), opts)
        assert [q for q, _ in calls] == [80, 70, 60, 50]
        assert result.quality == 50

    def test_full_sequence_then_dimension_shrink(self, make_image, recorded_encodes):
        """Never fitting walks 80 → 10, then re-encodes smaller at 70."""
        calls, script = recorded_encodes
        opts = ReduceOptions(max_width=400, max_height=400, max_file_size=1000)
        script["sizes"] = lambda quality, size: 4000
        result = reduce_image(make_image(800, 400), opts)

        assert [q for q, _ in calls] == [80, 70, 60, 50, 40, 30, 20, 10, 70]
        # shrink = sqrt(1000 / 4000) = 0.5
        assert calls[-1][1] == (200, 100)
        assert (result.width, result.height) == (200, 100)
        assert result.quality == 70

    def test_final_step_does_not_loop(self, make_image, recorded_encodes):
        """The dimension shrink is best effort and may still exceed budget."""
        calls, script = recorded_encodes
        opts = ReduceOptions(max_width=100, max_height=100, max_file_size=1000)
        script["sizes"] = lambda quality, size: 5000
        result = reduce_image(make_image(200, 100), opts)
        assert len(calls) == 9
        assert result.size == 5000

    def test_low_initial_quality_skips_loop(self, make_image, recorded_encodes):
        calls, script = recorded_encodes
        script["sizes"] = lambda quality, size: 4000
        reduce_image(make_image(), ReduceOptions(quality=0.1, max_file_size=1000))
        assert [q for q, _ in calls] == [10, 70]

    def test_source_kept_when_reencode_is_larger(self, monkeypatch, make_image, recorded_encodes):
        """An in-box source already in the target format is not inflated."""
        _, script = recorded_encodes
        monkeypatch.setattr(image_reducer, "preferred_format", lambda: "JPEG")
        source = make_image(80, 60)
        script["sizes"] = lambda quality, size: len(source) + 100
        result = reduce_image(source)
        assert result.data == source

    def test_smaller_floor_encode_beats_shrink(self, make_image, recorded_encodes):
        """The shrunk encode is dropped when the floor-quality one is smaller."""
        _, script = recorded_encodes
        opts = ReduceOptions(max_width=100, max_height=100, max_file_size=1000)
        script["sizes"] = lambda quality, size: 3000 if quality == 70 and size != (100, 50) else 2000
        result = reduce_image(make_image(200, 100), opts)
        assert result.size == 2000
        assert (result.width, result.height) == (100, 50)
        assert result.quality == 10

    def test_over_budget_source_never_grows(self, make_image, recorded_encodes):
        """An in-box source is returned when every candidate is larger."""
        _, script = recorded_encodes
        source = make_image(80, 60)
        opts = ReduceOptions(max_file_size=len(source) - 1)
        script["sizes"] = lambda quality, size: len(source) * 3
        result = reduce_image(source, opts)
        assert result.data == source
        assert (result.width, result.height) == (80, 60)


class TestFormats:
    def test_jpeg_fallback_without_webp(self, monkeypatch, make_image):
        """Without WebP support the output is JPEG."""
        monkeypatch.setattr(image_reducer.features, "check", lambda name: False)
        result = reduce_image(make_image(fmt="PNG"))
        assert result.format == "JPEG"
        assert result.mime_type == "image/jpeg"
        assert Image.open(io.BytesIO(result.data)).format == "JPEG"

    def test_alpha_png_encodes(self, make_image):
        """RGBA sources encode in either target format."""
        buffer = io.BytesIO()
        Image.new("RGBA", (40, 40), (10, 20, 30, 128)).save(buffer, format="PNG")
        result = reduce_image(buffer.getvalue())
        assert result.size > 0

    def test_decode_error(self):
        with pytest.raises(DecodeError):
            reduce_image(b"definitely not an image")

    def test_encode_error(self, monkeypatch, make_image):
        """An unknown encoder surfaces as EncodeError."""
        monkeypatch.setattr(image_reducer, "preferred_format", lambda: "NOT-A-FORMAT")
        with pytest.raises(EncodeError):
            reduce_image(make_image())


class TestReduceOptions:
    @pytest.mark.parametrize(
        "kwargs",
        [{"max_width": 0}, {"max_height": -1}, {"quality": 0.0}, {"quality": 1.5}, {"max_file_size": 0}],
    )
    def test_invalid_options(self, kwargs):
        with pytest.raises(ValueError):
            ReduceOptions(**kwargs)


class TestHelpers:
    @pytest.mark.parametrize(
        "size, expected",
        [
            (0, "0 Bytes"),
            (500, "500 Bytes"),
            (1024, "1 KB"),
            (1536, "1.5 KB"),
            (2 * 1024 * 1024, "2 MB"),
        ],
    )
    def test_format_file_size(self, size, expected):
        assert format_file_size(size) == expected

    def test_needs_compression(self):
        assert needs_compression(2 * 1024 * 1024 + 1)
        assert not needs_compression(2 * 1024 * 1024)
        assert needs_compression(11, max_file_size=10)
