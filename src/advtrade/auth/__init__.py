"""Credential handling and message signing."""

from .signer import (
    REST_AUDIENCE,
    STREAM_AUDIENCE,
    ApiKeyType,
    LegacySigner,
    OAuthSigner,
    Signer,
    TokenSigner,
    create_signer,
)

__all__ = [
    "REST_AUDIENCE",
    "STREAM_AUDIENCE",
    "ApiKeyType",
    "LegacySigner",
    "OAuthSigner",
    "Signer",
    "TokenSigner",
    "create_signer",
]
