"""Adaptive photo size reduction.

Every photo is shrunk before it is submitted so that the multimodal request
stays small and the cached result fits in per-session storage.  The
procedure is:

1. Scale uniformly into ``max_width`` x ``max_height`` (never upscale).
2. Encode at the initial quality with the most space-efficient lossy format
   Pillow supports here: WebP, falling back to JPEG.
3. While the result exceeds ``max_file_size`` and quality is above 10%,
   drop quality by 10 points and re-encode at the same dimensions.
4. If it is still too large, shrink the dimensions by
   ``sqrt(max_file_size / current_size)``, resample from the decoded source,
   and encode once more at 70% quality.  This last step is best effort and
   does not loop.

Quality is tracked in whole percent so the 10-point steps stay exact.
"""

from __future__ import annotations

import io
import logging
import math
from dataclasses import dataclass

from PIL import Image, ImageOps, UnidentifiedImageError, features

from snaptweet.core.errors import DecodeError, EncodeError

logger = logging.getLogger(__name__)

QUALITY_STEP = 10
QUALITY_FLOOR = 10
FALLBACK_QUALITY = 70

_MIME_TYPES = {"WEBP": "image/webp", "JPEG": "image/jpeg"}


@dataclass(frozen=True)
class ReduceOptions:
    """Target constraints for :func:`reduce_image`."""

    max_width: int = 1200
    max_height: int = 1200
    quality: float = 0.8
    max_file_size: int = 2 * 1024 * 1024

    def __post_init__(self) -> None:
        if self.max_width < 1 or self.max_height < 1:
            raise ValueError("max_width and max_height must be positive")
        if not 0.0 < self.quality <= 1.0:
            raise ValueError(f"quality must be in (0, 1], got {self.quality}")
        if self.max_file_size < 1:
            raise ValueError("max_file_size must be positive")


@dataclass(frozen=True)
class ReducedImage:
    """Encoded output of :func:`reduce_image`."""

    data: bytes
    format: str
    width: int
    height: int
    quality: int

    @property
    def mime_type(self) -> str:
        return _MIME_TYPES.get(self.format, "image/jpeg")

    @property
    def size(self) -> int:
        return len(self.data)


def preferred_format() -> str:
    """Return ``"WEBP"`` when Pillow was built with WebP support, else ``"JPEG"``."""
    return "WEBP" if features.check("webp") else "JPEG"


def _decode(data: bytes) -> tuple[Image.Image, str | None]:
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Failed to load image: {e}") from e
    # Apply camera orientation so width/height match what the user sees.
    return ImageOps.exif_transpose(image), image.format


def _encode(image: Image.Image, fmt: str, quality: int) -> bytes:
    if fmt == "JPEG" and image.mode not in ("RGB", "L"):
        image = image.convert("RGB")
    elif fmt == "WEBP" and image.mode not in ("RGB", "RGBA"):
        has_alpha = "A" in image.mode or "transparency" in image.info
        image = image.convert("RGBA" if has_alpha else "RGB")

    buffer = io.BytesIO()
    try:
        image.save(buffer, format=fmt, quality=quality)
    except (KeyError, OSError, ValueError) as e:
        raise EncodeError(f"{fmt} encoder unavailable: {e}") from e
    return buffer.getvalue()


def _scaled(size: tuple[int, int], ratio: float) -> tuple[int, int]:
    width, height = size
    return max(1, round(width * ratio)), max(1, round(height * ratio))


def _resized(image: Image.Image, size: tuple[int, int]) -> Image.Image:
    if image.size == size:
        return image
    return image.resize(size, Image.Resampling.LANCZOS)


def reduce_image(data: bytes, options: ReduceOptions | None = None) -> ReducedImage:
    """Re-encode *data* so it fits the byte budget whenever achievable.

    Aspect ratio is preserved and the image is never upscaled.  A source
    that already fits the bounding box and is already in the target format
    is returned untouched if re-encoding would make it larger.  When the
    budget cannot be met, the smaller of the floor-quality and shrunk encodes
    wins, and an in-box source smaller than both is returned as is.

    Args:
        data: Encoded source image (any format Pillow can decode).
        options: Target constraints; defaults to :class:`ReduceOptions`.

    Returns:
        The re-encoded image.

    Raises:
        DecodeError: If *data* is not a decodable image.
        EncodeError: If the target encoder is unavailable.
    """
    opts = options or ReduceOptions()
    source, source_format = _decode(data)

    ratio = min(opts.max_width / source.width, opts.max_height / source.height, 1.0)
    width, height = _scaled(source.size, ratio)
    fmt = preferred_format()

    frame = _resized(source, (width, height))
    quality = max(1, round(opts.quality * 100))
    encoded = _encode(frame, fmt, quality)

    while len(encoded) > opts.max_file_size and quality > QUALITY_FLOOR:
        quality = max(1, quality - QUALITY_STEP)
        encoded = _encode(frame, fmt, quality)
        logger.debug("Re-encoded %dx%d at quality %d: %d bytes", width, height, quality, len(encoded))

    if len(encoded) > opts.max_file_size:
        floor_encoded, floor_size, floor_quality = encoded, (width, height), quality
        shrink = math.sqrt(opts.max_file_size / len(encoded))
        width, height = _scaled((width, height), shrink)
        encoded = _encode(_resized(source, (width, height)), fmt, FALLBACK_QUALITY)
        logger.debug("Shrunk to %dx%d for final encode: %d bytes", width, height, len(encoded))
        quality = FALLBACK_QUALITY
        if len(floor_encoded) < len(encoded):
            encoded, (width, height), quality = floor_encoded, floor_size, floor_quality
        if ratio == 1.0 and len(encoded) > len(data):
            # Budget missed and the source is the smallest in-box candidate.
            return ReducedImage(
                data=data,
                format=source_format or fmt,
                width=source.width,
                height=source.height,
                quality=quality,
            )

    if ratio == 1.0 and source_format == fmt and len(encoded) > len(data) and (
        (width, height) == source.size
    ):
        return ReducedImage(data=data, format=fmt, width=width, height=height, quality=quality)

    return ReducedImage(data=encoded, format=fmt, width=width, height=height, quality=quality)


def needs_compression(size: int, max_file_size: int = ReduceOptions.max_file_size) -> bool:
    """Return ``True`` when a file of *size* bytes exceeds the budget."""
    return size > max_file_size


def format_file_size(size: int) -> str:
    """Render a byte count for humans, e.g. ``"1.5 KB"``."""
    if size == 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    index = 0
    while size >= 1024 ** (index + 1) and index < len(units) - 1:
        index += 1
    value = round(size / 1024**index, 2)
    return f"{value:g} {units[index]}"
