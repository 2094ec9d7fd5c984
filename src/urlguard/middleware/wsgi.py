"""
WSGI middleware for signed URLs (Flask and other WSGI apps).
"""

from __future__ import annotations

from typing import Any, Callable, Iterable

from ..config import SignedUrlOptions
from ..guard import SignedUrlGuard
from .hook import Denial, check_request, encode_path, is_protected, resolve_guard

# environ key holding the SignedUrlState of a checked request
ENVIRON_KEY = "urlguard.signed_url"

ClientAddressResolver = Callable[[dict[str, Any]], Any]


def _request_path(environ: dict[str, Any]) -> str:
    return environ.get("SCRIPT_NAME", "") + environ.get("PATH_INFO", "/")


def _wire_path(environ: dict[str, Any]) -> str:
    """
    Percent-encoded request path as the client sent it.

    Uses the raw request target when the server exposes one (``RAW_URI``
    from gunicorn, ``REQUEST_URI`` from mod_wsgi, uWSGI and Werkzeug).
    Otherwise the decoded ``SCRIPT_NAME`` and ``PATH_INFO`` are quoted
    again; WSGI carries them as latin-1 decoded bytes.
    """
    raw_uri = environ.get("RAW_URI") or environ.get("REQUEST_URI")
    if raw_uri and raw_uri.startswith("/"):
        return encode_path(raw_uri.split("?", 1)[0].encode("latin-1"), escaped=True)
    return encode_path(_request_path(environ).encode("latin-1"))


def build_url(environ: dict[str, Any]) -> str:
    """Build full URL from WSGI environ, keeping the path's wire encoding."""
    scheme = environ.get("wsgi.url_scheme", "http")
    host = environ.get("HTTP_HOST") or environ.get("SERVER_NAME", "localhost")
    path = _wire_path(environ)
    query = environ.get("QUERY_STRING", "")

    url = f"{scheme}://{host}{path}"
    if query:
        url = f"{url}?{query}"
    return url


def _remote_addr(environ: dict[str, Any]) -> str | None:
    return environ.get("REMOTE_ADDR")


class SignedUrlWSGIMiddleware:
    """
    WSGI middleware requiring a valid signed URL on protected paths.

    Requests failing validation get a 403 plain-text response carrying the
    failure message. Checked requests get `environ["urlguard.signed_url"]`,
    a SignedUrlState with the validation result.

    Args:
        app: WSGI application
        guard: Guard to validate with. Default: built from options
        options: SignedUrlOptions. Default: loaded from the environment
        protected_paths: Path prefixes to protect. Default: every path
        client_address_resolver: Callable returning the client address for a
            WSGI environ. Default: REMOTE_ADDR

    Example (Flask):
        >>> from flask import Flask
        >>> from urlguard.middleware.wsgi import SignedUrlWSGIMiddleware
        >>>
        >>> app = Flask(__name__)
        >>> app.wsgi_app = SignedUrlWSGIMiddleware(
        ...     app.wsgi_app,
        ...     guard=SignedUrlGuard("MySecret"),
        ...     protected_paths=["/static"],
        ... )
    """

    def __init__(
        self,
        app: Callable[..., Iterable[bytes]],
        guard: SignedUrlGuard | None = None,
        options: SignedUrlOptions | None = None,
        protected_paths: Iterable[str] | None = None,
        client_address_resolver: ClientAddressResolver | None = None,
    ):
        self.app = app
        self.guard = resolve_guard(guard, options)
        self.protected_paths = tuple(protected_paths) if protected_paths is not None else None
        self.client_address_resolver = client_address_resolver or _remote_addr

    def __call__(
        self,
        environ: dict[str, Any],
        start_response: Callable[..., Any],
    ) -> Iterable[bytes]:
        if not is_protected(_request_path(environ), self.protected_paths):
            return self.app(environ, start_response)

        state = check_request(
            self.guard,
            build_url(environ),
            self.client_address_resolver(environ),
        )
        environ[ENVIRON_KEY] = state

        if state.denial is not None:
            return self._error_response(start_response, state.denial)

        return self.app(environ, start_response)

    def _error_response(
        self,
        start_response: Callable[..., Any],
        denial: Denial,
    ) -> Iterable[bytes]:
        """Return the denial as a plain-text response."""
        body = denial.body.encode("utf-8")
        start_response(
            denial.status_line,
            [
                ("Content-Type", denial.content_type),
                ("Content-Length", str(len(body))),
            ],
        )
        return [body]
