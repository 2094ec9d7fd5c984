"""
urlguard: signed URLs for Python

Generate and validate time-limited URLs bound to a client IP address.
"""

from .models import FailureReason, SignedUrlRequest, ValidationError, ValidationResult
from .clock import FrozenClock, utc_now
from .params import SIG_PARAM, EXP_PARAM
from .guard import SignedUrlGuard
from .config import SignedUrlOptions, load_options
from .middleware.wsgi import SignedUrlWSGIMiddleware

__version__ = "0.1.0"

__all__ = [
    "FailureReason",
    "SignedUrlRequest",
    "ValidationError",
    "ValidationResult",
    "FrozenClock",
    "utc_now",
    "SIG_PARAM",
    "EXP_PARAM",
    "SignedUrlGuard",
    "SignedUrlOptions",
    "load_options",
    "SignedUrlWSGIMiddleware",
]

# ASGI middleware - optional, requires starlette
try:
    from .middleware.asgi import SignedUrlASGIMiddleware
    __all__.append("SignedUrlASGIMiddleware")
except ImportError:
    pass
