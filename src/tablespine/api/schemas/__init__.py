"""API schemas package."""

from tablespine.api.schemas.common import (
    ErrorBody,
    ErrorEnvelope,
    PagedResponse,
    PageMeta,
    SuccessResponse,
)

__all__ = [
    "ErrorBody",
    "ErrorEnvelope",
    "PageMeta",
    "PagedResponse",
    "SuccessResponse",
]
