"""
Signature query parameters: names, extraction and embedding.
"""

import re

import httpx


# Query parameter carrying the hex signature
SIG_PARAM = "sig"

# Query parameter carrying the expiration in Unix seconds
EXP_PARAM = "exp"

SIGNATURE_PARAMS = frozenset({
    SIG_PARAM,
    EXP_PARAM,
})

# Expirations are signed 64-bit Unix seconds
_EXP_PATTERN = re.compile(r"[+-]?[0-9]+")
_EXP_MIN = -(2**63)
_EXP_MAX = 2**63 - 1


def parse_expiration(value: str | None) -> int | None:
    """
    Parse an ``exp`` parameter value into Unix seconds.

    Accepts an optional sign followed by ASCII digits, with surrounding
    whitespace ignored. Anything else, including values outside the signed
    64-bit range, is rejected.

    Args:
        value: Raw parameter value, or None if the parameter was absent

    Returns:
        The expiration in Unix seconds, or None if missing or malformed

    Examples:
        >>> parse_expiration("1700000000")
        1700000000
        >>> parse_expiration(" -5 ")
        -5
        >>> parse_expiration("1_000") is None
        True
        >>> parse_expiration("soon") is None
        True
    """
    if value is None:
        return None

    value = value.strip()
    if not _EXP_PATTERN.fullmatch(value):
        return None

    exp = int(value)
    if exp < _EXP_MIN or exp > _EXP_MAX:
        return None
    return exp


def extract_signature_params(url: httpx.URL) -> tuple[str | None, str | None]:
    """
    Read the ``sig`` and ``exp`` values from a URL's query string.

    When a parameter is repeated, the first occurrence wins.

    Returns:
        ``(sig, exp)``, each None when the parameter is absent
    """
    params = url.params
    return params.get(SIG_PARAM), params.get(EXP_PARAM)


def set_signature_params(url: httpx.URL, sig: str, exp: int) -> httpx.URL:
    """
    Return a copy of ``url`` carrying the given signature and expiration.

    Existing ``sig``/``exp`` values are replaced; every other parameter is
    kept in its original position.

    The query is re-serialized from its decoded pairs, so the other
    parameters come back in canonical form: a bare ``flag`` becomes
    ``flag=`` and escapes may be normalized. The signature does not cover
    the query, so this never affects validation.

    Examples:
        >>> url = httpx.URL("https://example.com/a?x=1&sig=old")
        >>> str(set_signature_params(url, "ABC", 10))
        'https://example.com/a?x=1&sig=ABC&exp=10'
    """
    return url.copy_set_param(SIG_PARAM, sig).copy_set_param(EXP_PARAM, str(exp))

