"""
ASGI middleware and route decorator for signed URLs (FastAPI/Starlette).
"""

from __future__ import annotations

import functools
import inspect
from typing import Any, Callable, Iterable

from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from ..config import SignedUrlOptions
from ..guard import SignedUrlGuard
from .hook import Denial, check_request, encode_path, is_protected, lazy_guard, resolve_guard

ClientAddressResolver = Callable[[Request], Any]


def _peer_address(request: Request) -> str | None:
    """Address of the connected peer, as reported by the ASGI server."""
    return request.client.host if request.client else None


def _denial_response(denial: Denial) -> Response:
    return Response(
        content=denial.body,
        status_code=denial.status,
        media_type=denial.content_type,
    )


def _request_url(request: Request) -> str:
    """
    Request URL with the path as the client sent it.

    ``request.url`` is rebuilt from the decoded ``scope["path"]``, which
    loses escapes such as ``%2F``. The raw path is used when the server
    provides it.
    """
    scope = request.scope
    raw_path = scope.get("raw_path")
    if raw_path:
        path = encode_path(raw_path.split(b"?", 1)[0], escaped=True)
    else:
        path = encode_path((scope.get("root_path", "") + scope["path"]).encode("utf-8"))

    url = f"{request.url.scheme}://{request.url.netloc}{path}"
    query = scope.get("query_string", b"").decode("latin-1")
    if query:
        url = f"{url}?{query}"
    return url


def _find_request(args: tuple[Any, ...], kwargs: dict[str, Any]) -> Request:
    for value in (*args, *kwargs.values()):
        if isinstance(value, Request):
            return value
    raise TypeError("signed_url_required endpoints must accept a Request argument")


class SignedUrlASGIMiddleware(BaseHTTPMiddleware):
    """
    ASGI middleware requiring a valid signed URL on protected paths.

    Requests failing validation get a 403 plain-text response carrying the
    failure message. Checked requests get `request.state.signed_url`, a
    SignedUrlState with the validation result.

    Args:
        app: ASGI application
        guard: Guard to validate with. Default: built from options
        options: SignedUrlOptions. Default: loaded from the environment
        protected_paths: Path prefixes to protect. Default: every path
        client_address_resolver: Callable returning the client address for a
            request. Default: the connected peer address

    Example (FastAPI):
        >>> from fastapi import FastAPI
        >>> from urlguard import SignedUrlASGIMiddleware, SignedUrlGuard
        >>>
        >>> app = FastAPI()
        >>> app.add_middleware(
        ...     SignedUrlASGIMiddleware,
        ...     guard=SignedUrlGuard("MySecret"),
        ...     protected_paths=["/static"],
        ... )
    """

    def __init__(
        self,
        app: Any,
        guard: SignedUrlGuard | None = None,
        options: SignedUrlOptions | None = None,
        protected_paths: Iterable[str] | None = None,
        client_address_resolver: ClientAddressResolver | None = None,
    ):
        super().__init__(app)
        self.guard = resolve_guard(guard, options)
        self.protected_paths = tuple(protected_paths) if protected_paths is not None else None
        self.client_address_resolver = client_address_resolver or _peer_address

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Any],
    ) -> Response:
        if not is_protected(request.url.path, self.protected_paths):
            return await call_next(request)

        state = check_request(
            self.guard,
            _request_url(request),
            self.client_address_resolver(request),
        )
        request.state.signed_url = state

        if state.denial is not None:
            return _denial_response(state.denial)

        return await call_next(request)


def signed_url_required(
    endpoint: Callable[..., Any] | None = None,
    *,
    guard: SignedUrlGuard | None = None,
    options: SignedUrlOptions | None = None,
    client_address_resolver: ClientAddressResolver | None = None,
) -> Any:
    """
    Require a valid signed URL for a single Starlette or FastAPI endpoint.

    The endpoint must take the `Request` as an argument. Usable bare or
    with arguments:

        >>> @app.get("/report")
        ... @signed_url_required(guard=guard)
        ... async def report(request: Request):
        ...     ...
    """
    resolver = client_address_resolver or _peer_address
    get_guard = lazy_guard(guard, options)

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            request = _find_request(args, kwargs)
            state = check_request(get_guard(), _request_url(request), resolver(request))
            request.state.signed_url = state

            if state.denial is not None:
                return _denial_response(state.denial)

            if inspect.iscoroutinefunction(func):
                return await func(*args, **kwargs)
            return await run_in_threadpool(func, *args, **kwargs)

        return wrapper

    if endpoint is not None:
        return decorator(endpoint)
    return decorator
