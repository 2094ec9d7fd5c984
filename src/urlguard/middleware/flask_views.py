"""
Per-view signed URL requirement for Flask.
"""

from __future__ import annotations

import functools
from typing import Any, Callable

from flask import Request, Response, request

from ..config import SignedUrlOptions
from ..guard import SignedUrlGuard
from .hook import check_request, lazy_guard
from .wsgi import ENVIRON_KEY, build_url

ClientAddressResolver = Callable[[Request], Any]


def _remote_addr(req: Request) -> str | None:
    return req.remote_addr


def signed_url_required(
    view: Callable[..., Any] | None = None,
    *,
    guard: SignedUrlGuard | None = None,
    options: SignedUrlOptions | None = None,
    client_address_resolver: ClientAddressResolver | None = None,
) -> Any:
    """
    Require a valid signed URL for a single Flask view.

    The SignedUrlState is stored in `request.environ["urlguard.signed_url"]`,
    the same key the WSGI middleware uses.

    Example:
        >>> @app.route("/static/<path:name>")
        ... @signed_url_required
        ... def download(name):
        ...     ...
    """
    resolver = client_address_resolver or _remote_addr
    get_guard = lazy_guard(guard, options)

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            state = check_request(get_guard(), build_url(request.environ), resolver(request))
            request.environ[ENVIRON_KEY] = state

            if state.denial is not None:
                return Response(
                    state.denial.body,
                    status=state.denial.status,
                    content_type=state.denial.content_type,
                )

            return func(*args, **kwargs)

        return wrapper

    if view is not None:
        return decorator(view)
    return decorator
