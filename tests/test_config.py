"""Tests for SignedUrlOptions."""

from datetime import timedelta

import pydantic
import pytest

from urlguard import SignedUrlGuard, SignedUrlOptions, load_options


@pytest.fixture
def env(monkeypatch):
    """Environment with the sample secret."""
    monkeypatch.setenv("SIGNED_URL_SECRET", "MySecret")
    monkeypatch.delenv("SIGNED_URL_DIGEST", raising=False)
    return monkeypatch


class TestSignedUrlOptions:
    """Tests for loading options from the environment."""

    def test_loads_secret(self, env):
        """The secret comes from SIGNED_URL_SECRET."""
        options = SignedUrlOptions(_env_file=None)

        assert options.secret.get_secret_value() == "MySecret"
        assert options.digest == "md5"

    def test_digest_override(self, env):
        """SIGNED_URL_DIGEST selects the HMAC digest, case-insensitively."""
        env.setenv("SIGNED_URL_DIGEST", "SHA256")

        assert SignedUrlOptions(_env_file=None).digest == "sha256"

    def test_missing_secret(self, monkeypatch):
        """A missing secret is a configuration error."""
        monkeypatch.delenv("SIGNED_URL_SECRET", raising=False)

        with pytest.raises(pydantic.ValidationError):
            SignedUrlOptions(_env_file=None)

    def test_empty_secret(self, env):
        """An empty secret is a configuration error."""
        env.setenv("SIGNED_URL_SECRET", "")

        with pytest.raises(pydantic.ValidationError, match="secret must not be empty"):
            SignedUrlOptions(_env_file=None)

    def test_unknown_digest(self, env):
        """Unknown digests are rejected."""
        env.setenv("SIGNED_URL_DIGEST", "not-a-hash")

        with pytest.raises(pydantic.ValidationError, match="unsupported digest"):
            SignedUrlOptions(_env_file=None)

    def test_secret_not_in_repr(self, env):
        """The secret is masked when options are printed."""
        options = SignedUrlOptions(_env_file=None)

        assert "MySecret" not in repr(options)
        assert "MySecret" not in str(options)

    def test_explicit_values(self):
        """Options can be built in code without the environment."""
        options = SignedUrlOptions(secret="Explicit", digest="sha256", _env_file=None)

        assert options.create_guard().digest == "sha256"


class TestCreateGuard:
    """Tests for building a guard from options."""

    def test_guard_shares_secret(self, env, guard, clock):
        """Guards from options accept URLs signed with the same secret."""
        url = guard.generate_signed_url("/a", timedelta(minutes=5), "10.0.0.1")
        from_options = SignedUrlOptions(_env_file=None).create_guard(clock=clock)

        assert isinstance(from_options, SignedUrlGuard)
        assert from_options.validate_signed_url(url, "10.0.0.1").is_success

    def test_load_options_cached(self, env):
        """load_options returns the same instance until the cache is cleared."""
        assert load_options() is load_options()
