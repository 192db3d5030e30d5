"""
Tests for provider credentials and credential failures.
"""

import pytest
from cardpt.gateway.credentials import (
    CredentialFailureReason, ProviderCredential, check_credential, create_credential_store,
    create_rate_limited_failure, credential_summary, get_credential, map_provider_error_to_failure,
    providers_with_credentials, remove_credential, set_credential,
)


class TestCredentialStore:
    """Tests for the immutable credential store."""

    def test_lookup(self):
        store = create_credential_store(ProviderCredential("qwen", "sk-1"))
        assert get_credential(store, "qwen").api_key == "sk-1"
        assert get_credential(store, "gemini") is None

    def test_store_is_read_only(self):
        store = create_credential_store(ProviderCredential("qwen", "sk-1"))
        with pytest.raises(TypeError):
            store["gemini"] = ProviderCredential("gemini", "g-1")

    def test_set_and_remove_return_new_stores(self):
        store = create_credential_store(ProviderCredential("qwen", "sk-1"))
        updated = set_credential(store, ProviderCredential("gemini", "g-1"))
        assert providers_with_credentials(store) == ["qwen"]
        assert providers_with_credentials(updated) == ["qwen", "gemini"]
        assert providers_with_credentials(remove_credential(updated, "qwen")) == ["gemini"]

    def test_key_hidden_from_repr(self):
        credential = ProviderCredential("qwen", "sk-secret")
        assert "sk-secret" not in repr(credential)
        assert credential_summary(credential) == {"provider": "qwen", "has_key": True}


class TestCheckCredential:
    """Tests for check_credential."""

    def test_usable(self):
        assert check_credential(ProviderCredential("qwen", "sk-1"), "qwen") is None

    @pytest.mark.parametrize("credential", [
        None,
        ProviderCredential("gemini", "g-1"),
        ProviderCredential("qwen", "   "),
    ])
    def test_no_key(self, credential):
        failure = check_credential(credential, "qwen")
        assert failure.reason == CredentialFailureReason.NO_KEY_PROVIDED
        assert failure.message == (
            "No API key provided for qwen. Please configure your API key to use this provider."
        )
        assert failure.allow_manual_fallback


class TestProviderErrorMapping:
    """Tests for map_provider_error_to_failure."""

    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_errors(self, status):
        failure = map_provider_error_to_failure("deepseek", status, {"message": "bad key"})
        assert failure.reason == CredentialFailureReason.AUTH_ERROR
        assert failure.message == "Authentication failed for deepseek: bad key. Please check your API key."

    def test_rate_limited(self):
        failure = map_provider_error_to_failure("gemini", 429, {"retry_after": 30})
        assert failure.reason == CredentialFailureReason.RATE_LIMITED
        assert failure.message == "Rate limit exceeded for gemini. Please try again after 30 seconds."

    def test_rate_limited_without_hint(self):
        assert create_rate_limited_failure("qwen").message == "Rate limit exceeded for qwen."

    def test_server_error(self):
        failure = map_provider_error_to_failure("doubao", 503)
        assert failure.reason == CredentialFailureReason.PROVIDER_ERROR
        assert failure.message == "Provider error for doubao. Please try again later."

    def test_other_status(self):
        failure = map_provider_error_to_failure("doubao", 418)
        assert failure.message == "Provider error for doubao: HTTP 418. Please try again later."
