"""HTTP middleware and exception handlers."""

from tablespine.api.middleware.errors import register_error_handlers
from tablespine.api.middleware.request_id import RequestIDMiddleware
from tablespine.api.middleware.timing import TimingMiddleware

__all__ = ["RequestIDMiddleware", "TimingMiddleware", "register_error_handlers"]
