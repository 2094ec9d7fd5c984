"""
Signed URL middleware for ASGI and WSGI frameworks.

Re-exports middleware classes for convenient imports:
    from urlguard.middleware import SignedUrlASGIMiddleware
    from urlguard.middleware import SignedUrlWSGIMiddleware
"""

from .hook import Denial, SignedUrlState, check_request
from .wsgi import SignedUrlWSGIMiddleware

__all__: list[str] = [
    "Denial",
    "SignedUrlState",
    "SignedUrlWSGIMiddleware",
    "check_request",
]

# ASGI middleware (FastAPI, Starlette)
try:
    from .asgi import SignedUrlASGIMiddleware
    __all__.append("SignedUrlASGIMiddleware")
except ImportError:
    pass
