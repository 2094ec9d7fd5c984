"""Tests for result models and query parameter helpers."""

import httpx
import pytest

from urlguard import FailureReason, SignedUrlRequest, ValidationError, ValidationResult
from urlguard.params import (
    EXP_PARAM,
    SIG_PARAM,
    extract_signature_params,
    parse_expiration,
    set_signature_params,
)


class TestValidationResult:
    """Tests for ValidationResult constructors."""

    def test_success(self):
        """Success carries no error."""
        result = ValidationResult.success()

        assert result.valid is True
        assert result.is_success
        assert not result.is_failure
        assert result.error is None
        assert result.reason is None

    def test_failure(self):
        """Failure carries its reason and message."""
        result = ValidationResult.failure(FailureReason.EXPIRED)

        assert result.valid is False
        assert result.is_failure
        assert result.reason == FailureReason.EXPIRED
        assert result.error.message == "URL signature expired"

    @pytest.mark.parametrize("reason,message", [
        (FailureReason.MISSING_SIGNATURE, "Bad URL hash"),
        (FailureReason.MALFORMED_TIMESTAMP, "Bad URL timestamp"),
        (FailureReason.EXPIRED, "URL signature expired"),
        (FailureReason.SIGNATURE_MISMATCH, "URL signature mismatch"),
    ])
    def test_error_messages(self, reason, message):
        """Each reason has a fixed client-facing message."""
        error = ValidationError.for_reason(reason)

        assert error.message == message
        assert str(error) == message

    def test_reason_values(self):
        """Reason values are their short descriptions."""
        assert FailureReason.MISSING_SIGNATURE.value == "missing signature"
        assert FailureReason.MALFORMED_TIMESTAMP.value == "malformed timestamp"
        assert FailureReason.EXPIRED.value == "expired"
        assert FailureReason.SIGNATURE_MISMATCH.value == "signature mismatch"


class TestSignedUrlRequest:
    """Tests for the canonical message."""

    def test_message(self):
        """Fields are joined with colons in path, expiration, address order."""
        request = SignedUrlRequest(path="/static/a.pdf", expiration=1700000000, client_address="10.0.0.1")

        assert request.message() == "/static/a.pdf:1700000000:10.0.0.1"

    def test_ipv6_not_escaped(self):
        """Delimiters inside fields are not escaped."""
        request = SignedUrlRequest(path="/a", expiration=1, client_address="2001:db8::1")

        assert request.message() == "/a:1:2001:db8::1"


class TestParseExpiration:
    """Tests for parse_expiration."""

    @pytest.mark.parametrize("value,expected", [
        ("1700000000", 1700000000),
        ("0", 0),
        ("-5", -5),
        ("+5", 5),
        (" 42 ", 42),
        ("9223372036854775807", 2**63 - 1),
    ])
    def test_valid(self, value, expected):
        """Signed decimal integers parse."""
        assert parse_expiration(value) == expected

    @pytest.mark.parametrize("value", [
        None,
        "",
        "abc",
        "1.5",
        "1_000",
        "0x10",
        "9223372036854775808",
        "١٢٣",
    ])
    def test_invalid(self, value):
        """Anything else is rejected."""
        assert parse_expiration(value) is None


class TestSignatureParams:
    """Tests for reading and writing sig/exp."""

    def test_param_names(self):
        """Wire names are fixed."""
        assert SIG_PARAM == "sig"
        assert EXP_PARAM == "exp"

    def test_extract(self):
        """Both values are read from the query."""
        url = httpx.URL("https://example.com/a?x=1&sig=ABC&exp=10")

        assert extract_signature_params(url) == ("ABC", "10")

    def test_extract_missing(self):
        """Absent parameters are None."""
        assert extract_signature_params(httpx.URL("/a?x=1")) == (None, None)

    def test_extract_repeated_uses_first(self):
        """The first occurrence of a repeated parameter wins."""
        url = httpx.URL("/a?sig=FIRST&sig=SECOND&exp=1")

        assert extract_signature_params(url) == ("FIRST", "1")

    def test_set_appends(self):
        """New parameters go after existing ones."""
        url = set_signature_params(httpx.URL("https://example.com/a?x=1"), "ABC", 10)

        assert str(url) == "https://example.com/a?x=1&sig=ABC&exp=10"

    def test_set_replaces(self):
        """Existing values are replaced in place."""
        url = set_signature_params(httpx.URL("/a?exp=1&x=1&sig=OLD"), "NEW", 10)

        assert url.params.multi_items() == [("exp", "10"), ("x", "1"), ("sig", "NEW")]

    def test_set_normalizes_other_params(self):
        """Other parameters are re-serialized in canonical form."""
        url = set_signature_params(httpx.URL("https://example.com/a?flag"), "ABC", 10)

        assert url.params.multi_items() == [("flag", ""), ("sig", "ABC"), ("exp", "10")]
        assert str(url) == "https://example.com/a?flag=&sig=ABC&exp=10"
