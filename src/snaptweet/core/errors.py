"""Error taxonomy shared by every SnapTweet layer.

Each failing layer raises one of the exceptions below; the HTTP layer maps
them to status codes and the client maps :class:`ErrorKind` values to
localized notices.  Nothing downstream inspects message text to decide what
went wrong.

========================  ======  ==========================================
Exception                 HTTP    Raised by
========================  ======  ==========================================
:class:`ValidationError`  400     request validation, id checks
:class:`NotFoundError`    404     share lookups
:class:`UpstreamError`    500     the generation client (model failures)
:class:`StoreError`       500     the share store
:class:`DecodeError`      n/a     the image size reducer (bad source bytes)
:class:`EncodeError`      n/a     the image size reducer (no encoder)
========================  ======  ==========================================
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of user-facing failure categories for model calls."""

    API_KEY = "api_key"
    NETWORK = "network"
    RATE_LIMIT = "rate_limit"
    IMAGE = "image"
    GENERIC = "generic"


class SnaptweetError(Exception):
    """Base class for all SnapTweet errors."""


class ValidationError(SnaptweetError):
    """Client input violated a constraint.

    Attributes:
        field: Name of the offending field as it appears on the wire
            (``images``, ``menus``, ``satisfaction`` ...).
    """

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


class NotFoundError(SnaptweetError):
    """No share record matches the requested id."""


class UpstreamError(SnaptweetError):
    """The external model capability failed.

    Attributes:
        kind: Category used by the presentation layer to pick a notice.
    """

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.GENERIC) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind


class StoreError(SnaptweetError):
    """The persistent store rejected or failed an operation."""


class DecodeError(SnaptweetError):
    """Source bytes could not be decoded as an image."""


class EncodeError(SnaptweetError):
    """The image encoder is unavailable or failed."""
