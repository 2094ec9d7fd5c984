"""
Signed URL engine: generates and validates client-bound, expiring URLs.
"""

from __future__ import annotations

import hashlib
import hmac
import ipaddress
import logging
from datetime import datetime, timedelta, timezone
from typing import Union

import httpx

from .clock import Clock, utc_now
from .models import FailureReason, SignedUrlRequest, ValidationResult
from .params import extract_signature_params, parse_expiration, set_signature_params

logger = logging.getLogger(__name__)

# Default HMAC digest; 128-bit output, kept for compatibility with issued URLs
DEFAULT_DIGEST = "md5"

# Relative URIs are resolved against this base so only path and query matter.
# It is never part of a returned URL.
_PLACEHOLDER_BASE = httpx.URL("https://domain.invalid")

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_SECOND = timedelta(seconds=1)

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]
URLTypes = Union[str, httpx.URL]


def _absolute_url(url: httpx.URL) -> httpx.URL:
    """Resolve a URL against the placeholder base when it is relative."""
    if url.is_relative_url:
        return _PLACEHOLDER_BASE.join(url)
    return url


def _encoded_path(url: httpx.URL) -> str:
    """Path as sent on the wire, percent-escapes kept, query excluded."""
    return url.raw_path.split(b"?", 1)[0].decode("ascii")


def _format_address(client_address: IPAddress | str) -> str:
    """
    Render a client address in canonical textual form.

    Raises:
        TypeError: If the address is None
        ValueError: If the address is not a valid IPv4 or IPv6 address
    """
    if client_address is None:
        raise TypeError("client_address is required")
    return str(ipaddress.ip_address(client_address))


def _as_timedelta(ttl: timedelta | int | float) -> timedelta:
    if not isinstance(ttl, timedelta):
        ttl = timedelta(seconds=ttl)
    if ttl < timedelta(0):
        raise ValueError(f"ttl must not be negative, got {ttl}")
    return ttl


def _unix_seconds(instant: datetime) -> int:
    """Whole seconds since the Unix epoch, rounded down."""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return (instant - _EPOCH) // _ONE_SECOND


class SignedUrlGuard:
    """
    Generates and validates signed URLs with a shared secret.

    A signature covers the URL path, the expiration second and the client
    address, joined as ``path:expiration:address`` and keyed with the
    secret. It is carried in the ``sig`` query parameter next to the
    expiration in ``exp``.

    Instances hold no mutable state and can be shared between threads.

    Args:
        secret: Shared secret key. Strings are UTF-8 encoded.
        clock: Callable returning the current UTC instant. Default: system clock
        digest: ``hashlib`` algorithm name for the HMAC. Default: md5

    Example:
        >>> guard = SignedUrlGuard("MySecret")
        >>> url = guard.generate_signed_url("/static/report.pdf", timedelta(minutes=5), "203.0.113.7")
        >>> guard.validate_signed_url(url, "203.0.113.7").is_success
        True
    """

    def __init__(
        self,
        secret: str | bytes,
        clock: Clock = utc_now,
        digest: str = DEFAULT_DIGEST,
    ):
        if isinstance(secret, str):
            secret = secret.encode("utf-8")
        # Fail on unknown algorithms at construction rather than first use
        hashlib.new(digest)

        self._key = bytes(secret)
        self._clock = clock
        self.digest = digest

    def __repr__(self) -> str:
        return f"{type(self).__name__}(digest={self.digest!r})"

    def compute_signature(self, request: SignedUrlRequest) -> str:
        """Uppercase hex HMAC of the canonical message for ``request``."""
        mac = hmac.new(self._key, request.message().encode("utf-8"), self.digest)
        return mac.hexdigest().upper()

    def generate_signed_url(
        self,
        uri: URLTypes,
        ttl: timedelta | int | float,
        client_address: IPAddress | str,
    ) -> str:
        """
        Sign a URL for one client until ``now + ttl``.

        Args:
            uri: Absolute or relative target URL
            ttl: Validity period, a timedelta or a number of seconds (>= 0)
            client_address: IP address the URL is bound to

        Returns:
            The URL with ``sig`` and ``exp`` set. Absolute input gives an
            absolute URL, relative input gives path and query only.

        Raises:
            TypeError: If client_address is None
            ValueError: If client_address is not an IP address or ttl is negative
        """
        address = _format_address(client_address)
        ttl = _as_timedelta(ttl)

        url = httpx.URL(uri)
        absolute = _absolute_url(url)

        expiration = _unix_seconds(self._clock() + ttl)
        request = SignedUrlRequest(
            path=_encoded_path(absolute),
            expiration=expiration,
            client_address=address,
        )
        signed = set_signature_params(absolute, self.compute_signature(request), expiration)

        logger.debug("Signed URL for %s expiring at %d", request.path, expiration)

        if url.is_relative_url:
            return signed.raw_path.decode("ascii")
        return str(signed)

    def validate_signed_url(
        self,
        uri: URLTypes,
        client_address: IPAddress | str,
    ) -> ValidationResult:
        """
        Check a signed URL's signature and expiration for one client.

        Checks run in a fixed order and the first failure is returned:
        missing signature, malformed timestamp, expired, signature mismatch.
        The expiration second itself is still valid.

        Args:
            uri: Absolute or relative URL carrying ``sig`` and ``exp``
            client_address: IP address of the requesting client

        Returns:
            ValidationResult, never raises for a bad or tampered URL

        Raises:
            TypeError: If client_address is None
            ValueError: If client_address is not an IP address
        """
        address = _format_address(client_address)
        url = _absolute_url(httpx.URL(uri))

        sig, exp_value = extract_signature_params(url)

        if not sig:
            return self._reject(url, FailureReason.MISSING_SIGNATURE)

        exp = parse_expiration(exp_value)
        if exp is None:
            return self._reject(url, FailureReason.MALFORMED_TIMESTAMP)

        if _unix_seconds(self._clock()) > exp:
            return self._reject(url, FailureReason.EXPIRED)

        expected = self.compute_signature(
            SignedUrlRequest(path=_encoded_path(url), expiration=exp, client_address=address)
        )
        if not hmac.compare_digest(expected.encode("utf-8"), sig.encode("utf-8")):
            return self._reject(url, FailureReason.SIGNATURE_MISMATCH)

        return ValidationResult.success()

    def _reject(self, url: httpx.URL, reason: FailureReason) -> ValidationResult:
        logger.debug("Rejected signed URL for %s: %s", url.path, reason.value)
        return ValidationResult.failure(reason)
