"""
Framework-neutral signed URL check shared by the middleware adapters.
"""

from __future__ import annotations

import ipaddress
import logging
from dataclasses import dataclass
from functools import lru_cache
from http import HTTPStatus
from typing import Callable, Iterable
from urllib.parse import quote

import httpx

from ..config import SignedUrlOptions, load_options
from ..guard import IPAddress, SignedUrlGuard
from ..models import ValidationResult

logger = logging.getLogger(__name__)

UNKNOWN_ADDRESS_MESSAGE = "Unknown client address"

DENIAL_CONTENT_TYPE = "text/plain; charset=utf-8"

# Characters httpx leaves unescaped in a path
_PATH_SAFE = "/;=,@:!$&'()*+~[]"


@dataclass(frozen=True)
class Denial:
    """
    Response that short-circuits a request.

    Attributes:
        body: Plain-text reason sent to the client
        status: HTTP status code
        content_type: Response content type
    """
    body: str
    status: int = HTTPStatus.FORBIDDEN.value
    content_type: str = DENIAL_CONTENT_TYPE

    @property
    def status_line(self) -> str:
        return f"{self.status} {HTTPStatus(self.status).phrase}"


@dataclass
class SignedUrlState:
    """
    Signed URL state attached to checked requests.

    Attributes:
        result: Validation result, or None if the client address was unknown
        denial: Response to send instead of the handler's, or None to continue
    """
    result: ValidationResult | None
    denial: Denial | None = None

    @property
    def allowed(self) -> bool:
        return self.denial is None


def parse_client_address(value: object) -> IPAddress | None:
    """Parse a peer address, returning None if it is missing or not an IP."""
    if value is None or value == "":
        return None
    if isinstance(value, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return value
    try:
        return ipaddress.ip_address(str(value).strip())
    except ValueError:
        return None


def encode_path(path: bytes, *, escaped: bool = False) -> str:
    """
    Percent-encode request path bytes into their wire form.

    Decoded paths (WSGI ``PATH_INFO``, ASGI ``path``) must have every
    ``%``, ``#`` and ``?`` escaped again. Raw request targets are already
    escaped, so existing ``%XX`` sequences are kept and only stray bytes
    are encoded.

    Examples:
        >>> encode_path("/files/café#1.pdf".encode("utf-8"))
        '/files/caf%C3%A9%231.pdf'
        >>> encode_path(b"/a%2Fb", escaped=True)
        '/a%2Fb'
    """
    return quote(path, safe=_PATH_SAFE + ("%" if escaped else ""))


def is_protected(path: str, protected_paths: Iterable[str] | None) -> bool:
    """
    Check if a request path falls under one of the protected prefixes.

    A prefix matches itself and anything below it: ``/static`` covers
    ``/static`` and ``/static/a.pdf`` but not ``/statics``. ``None``
    protects every path.
    """
    if protected_paths is None:
        return True
    for prefix in protected_paths:
        base = prefix.rstrip("/")
        if path == prefix or path == base or path.startswith(base + "/"):
            return True
    return False


def resolve_guard(
    guard: SignedUrlGuard | None = None,
    options: SignedUrlOptions | None = None,
) -> SignedUrlGuard:
    """Use the given guard, else build one from options or the environment."""
    if guard is not None:
        return guard
    return (options or load_options()).create_guard()


def lazy_guard(
    guard: SignedUrlGuard | None = None,
    options: SignedUrlOptions | None = None,
) -> Callable[[], SignedUrlGuard]:
    """Defer resolve_guard until first use; decorators run at import time."""

    @lru_cache(maxsize=None)
    def get_guard() -> SignedUrlGuard:
        return resolve_guard(guard, options)

    return get_guard


def check_request(
    guard: SignedUrlGuard,
    url: str,
    client_address: object,
) -> SignedUrlState:
    """
    Validate an inbound request URL for the client that sent it.

    Args:
        guard: Guard holding the shared secret
        url: Request URL as seen by the client, including the query string
        client_address: Peer address as reported by the server

    Returns:
        SignedUrlState whose ``denial`` is None when the request may continue
    """
    path = httpx.URL(url).path
    address = parse_client_address(client_address)

    if address is None:
        logger.warning("Denied %s: client address %r is not an IP address", path, client_address)
        return SignedUrlState(result=None, denial=Denial(UNKNOWN_ADDRESS_MESSAGE))

    result = guard.validate_signed_url(url, address)

    if result.error is not None:
        logger.info("Denied %s for %s: %s", path, address, result.error.message)
        return SignedUrlState(result=result, denial=Denial(result.error.message))

    return SignedUrlState(result=result)
