"""
Provider credentials and credential failure semantics.

Credentials are provider-scoped API keys. A credential store is an
immutable mapping of provider to credential; every helper returns a new
store. API keys never appear in ``repr`` output or in log records.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional


@dataclass(frozen=True)
class ProviderCredential:
    """An API key for one provider."""
    provider: str
    api_key: str = field(repr=False)
    metadata: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}), repr=False)

    @property
    def has_key(self) -> bool:
        return isinstance(self.api_key, str) and bool(self.api_key.strip())


CredentialStore = Mapping[str, ProviderCredential]


def create_credential_store(*credentials: ProviderCredential) -> CredentialStore:
    return MappingProxyType({c.provider: c for c in credentials})


def get_credential(store: CredentialStore, provider: str) -> Optional[ProviderCredential]:
    return store.get(provider)


def set_credential(store: CredentialStore, credential: ProviderCredential) -> CredentialStore:
    updated = dict(store)
    updated[credential.provider] = credential
    return MappingProxyType(updated)


def remove_credential(store: CredentialStore, provider: str) -> CredentialStore:
    return MappingProxyType({k: v for k, v in store.items() if k != provider})


def providers_with_credentials(store: CredentialStore) -> List[str]:
    return [provider for provider, cred in store.items() if cred is not None]


class CredentialFailureReason(str, Enum):
    NO_KEY_PROVIDED = "NO_KEY_PROVIDED"
    AUTH_ERROR = "AUTH_ERROR"
    RATE_LIMITED = "RATE_LIMITED"
    PROVIDER_ERROR = "PROVIDER_ERROR"


@dataclass(frozen=True)
class CredentialFailure:
    """
    A credential-class failure.

    Any failure means the model is not (or no longer) invoked and the seat
    may fall back to manual control.
    """
    reason: CredentialFailureReason
    message: str
    provider: str
    recoverable: bool = False
    allow_manual_fallback: bool = True


def create_no_key_failure(provider: str) -> CredentialFailure:
    return CredentialFailure(
        reason=CredentialFailureReason.NO_KEY_PROVIDED,
        message=(
            f"No API key provided for {provider}. "
            "Please configure your API key to use this provider."
        ),
        provider=provider,
        recoverable=True,
    )


def create_auth_error_failure(provider: str, details: Optional[str] = None) -> CredentialFailure:
    detail_text = f": {details}" if details else ""
    return CredentialFailure(
        reason=CredentialFailureReason.AUTH_ERROR,
        message=f"Authentication failed for {provider}{detail_text}. Please check your API key.",
        provider=provider,
        recoverable=True,
    )


def create_rate_limited_failure(provider: str, retry_after: Optional[float] = None) -> CredentialFailure:
    retry_text = f" Please try again after {retry_after:g} seconds." if retry_after is not None else ""
    return CredentialFailure(
        reason=CredentialFailureReason.RATE_LIMITED,
        message=f"Rate limit exceeded for {provider}.{retry_text}",
        provider=provider,
    )


def create_provider_error_failure(provider: str, details: Optional[str] = None) -> CredentialFailure:
    detail_text = f": {details}" if details else ""
    return CredentialFailure(
        reason=CredentialFailureReason.PROVIDER_ERROR,
        message=f"Provider error for {provider}{detail_text}. Please try again later.",
        provider=provider,
    )


def map_provider_error_to_failure(
    provider: str,
    status_code: int,
    error_body: Any = None,
) -> CredentialFailure:
    """
    Map a provider HTTP error status to a credential failure.

    401/403 are authentication errors, 429 is rate limiting (honouring a
    numeric ``retry_after`` in the body), 5xx are provider errors and any
    other status is reported as a provider error carrying the status.
    """
    message = None
    if isinstance(error_body, dict) and isinstance(error_body.get("message"), str):
        message = error_body["message"]

    if status_code in (401, 403):
        return create_auth_error_failure(provider, message)
    if status_code == 429:
        retry_after = None
        if isinstance(error_body, dict):
            value = error_body.get("retry_after")
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                retry_after = value
        return create_rate_limited_failure(provider, retry_after)
    if 500 <= status_code <= 599:
        return create_provider_error_failure(provider, message)
    return create_provider_error_failure(provider, f"HTTP {status_code}")


def check_credential(
    credential: Optional[ProviderCredential],
    provider: str,
) -> Optional[CredentialFailure]:
    """
    Check that ``credential`` can be used against ``provider``.

    Returns:
        None if usable; a NO_KEY_PROVIDED failure if the credential is
        absent, belongs to another provider or has an empty key
    """
    if credential is None:
        return create_no_key_failure(provider)
    if credential.provider != provider:
        return create_no_key_failure(provider)
    if not credential.has_key:
        return create_no_key_failure(provider)
    return None


def credential_summary(credential: Optional[ProviderCredential]) -> Dict[str, Any]:
    """Log-safe description of a credential."""
    if credential is None:
        return {"provider": "unknown", "has_key": False}
    return {"provider": credential.provider, "has_key": credential.has_key}
