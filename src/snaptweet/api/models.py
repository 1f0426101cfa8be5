"""Pydantic response models that exist only at the HTTP boundary.

Request and record models live in :mod:`snaptweet.core.models`; the models
here describe API-specific envelopes.

Models
------
ShareCreated
    Response of ``POST /api/share``.
ErrorBody
    JSON body of every 4xx/5xx response.
HealthStatus
    Response of ``GET /api/health``.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ShareCreated(BaseModel):
    """Id of a newly created share record."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    share_id: str


class ErrorBody(BaseModel):
    """Error envelope.

    Attributes:
        message: Localized, human-readable explanation.
        kind: :class:`~snaptweet.core.errors.ErrorKind` value for model
            failures, otherwise ``None``.
        field: Offending input field for validation failures, otherwise
            ``None``.
    """

    message: str
    kind: str | None = None
    field: str | None = None


class HealthStatus(BaseModel):
    status: str = "healthy"
    timestamp: datetime
    service: str
    version: str
    environment: str = Field(..., description="Runtime environment flag")
