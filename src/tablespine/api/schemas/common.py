"""
Common API schemas — shared envelopes.

Every successful response wraps its payload in ``{"data": ...}``; record
listings add ``{"pagination": ...}``.  Errors use the envelope rendered by
:mod:`tablespine.api.middleware.errors`.

Doc-Types: API_REFERENCE
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class ErrorBody(BaseModel):
    code: str = Field(description="Machine-readable error code (e.g. 'NOT_FOUND')")
    message: str = Field(description="Human-readable error description")
    details: list[dict[str, Any]] | None = Field(default=None, description="Field-level problems")


class ErrorEnvelope(BaseModel):
    """``{"error": {code, message, details?}}``"""

    error: ErrorBody


class PageMeta(BaseModel):
    """Pagination metadata for record listings."""

    model_config = ConfigDict(populate_by_name=True)

    total: int = Field(description="Total records across all pages")
    limit: int = Field(description="Records per page (requested)")
    offset: int = Field(description="Current offset (0-based)")
    has_more: bool = Field(alias="hasMore", description="True if more pages exist after this one")


class SuccessResponse(BaseModel, Generic[T]):
    """Standard success envelope."""

    data: T = Field(description="Response payload (type varies by endpoint)")


class PagedResponse(BaseModel, Generic[T]):
    """Paged success envelope."""

    data: list[T] = Field(description="Records for this page")
    pagination: PageMeta = Field(description="Pagination metadata")
