"""
Signed URL configuration loaded from the environment.

Settings live under the ``SIGNED_URL_`` prefix, e.g. ``SIGNED_URL_SECRET``,
and may also be placed in a ``.env`` file.
"""

from __future__ import annotations

import hashlib
from functools import lru_cache

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .clock import Clock, utc_now
from .guard import DEFAULT_DIGEST, SignedUrlGuard


class SignedUrlOptions(BaseSettings):
    """Options for generating and validating signed URLs."""

    model_config = SettingsConfigDict(
        env_prefix="SIGNED_URL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    secret: SecretStr = Field(..., description="Shared secret used to sign URLs")
    digest: str = Field(DEFAULT_DIGEST, description="hashlib algorithm for the HMAC")

    @field_validator("secret")
    @classmethod
    def _secret_not_empty(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value():
            raise ValueError("secret must not be empty")
        return value

    @field_validator("digest")
    @classmethod
    def _digest_available(cls, value: str) -> str:
        value = value.lower()
        if value not in hashlib.algorithms_available:
            raise ValueError(f"unsupported digest algorithm: {value}")
        return value

    def create_guard(self, clock: Clock | None = None) -> SignedUrlGuard:
        return SignedUrlGuard(
            self.secret.get_secret_value(),
            clock=clock or utc_now,
            digest=self.digest,
        )


@lru_cache
def load_options() -> SignedUrlOptions:
    """Load options from the environment once per process."""
    return SignedUrlOptions()
