"""Tests for the bearer token gate."""

import pytest

from event_bus_service.core.auth import authenticate
from event_bus_service.core.errors import AuthenticationError

from conftest import TEST_JWT_SECRET, make_token


class TestAuthenticate:
    """Test suite for authenticate()."""

    def test_valid_token_decodes_identity(self):
        """A valid token yields the embedded id, user type and email."""
        token = make_token(id="user-42", userType="restaurant", email="chef@example.com")

        identity = authenticate(f"Bearer {token}", TEST_JWT_SECRET)

        assert identity.id == "user-42"
        assert identity.user_type == "restaurant"
        assert identity.email == "chef@example.com"

    def test_sub_claim_used_when_id_missing(self):
        token = make_token(id=None, sub="subject-7")

        identity = authenticate(f"Bearer {token}", TEST_JWT_SECRET)

        assert identity.id == "subject-7"

    def test_missing_header_rejected(self):
        with pytest.raises(AuthenticationError, match="Missing authorization header"):
            authenticate(None, TEST_JWT_SECRET)

    def test_empty_header_rejected(self):
        with pytest.raises(AuthenticationError):
            authenticate("", TEST_JWT_SECRET)

    def test_wrong_scheme_rejected(self):
        token = make_token()
        with pytest.raises(AuthenticationError, match="Bearer"):
            authenticate(f"Token {token}", TEST_JWT_SECRET)

    def test_bearer_without_token_rejected(self):
        with pytest.raises(AuthenticationError, match="Missing bearer token"):
            authenticate("Bearer ", TEST_JWT_SECRET)

    def test_invalid_signature_rejected(self):
        token = make_token(secret="another-secret")
        with pytest.raises(AuthenticationError, match="Invalid token"):
            authenticate(f"Bearer {token}", TEST_JWT_SECRET)

    def test_garbage_token_rejected(self):
        with pytest.raises(AuthenticationError, match="Invalid token"):
            authenticate("Bearer not-a-jwt", TEST_JWT_SECRET)

    def test_expired_token_rejected(self):
        token = make_token(expires_in=-60)
        with pytest.raises(AuthenticationError, match="expired"):
            authenticate(f"Bearer {token}", TEST_JWT_SECRET)

    def test_unconfigured_secret_rejects_everything(self):
        token = make_token()
        with pytest.raises(AuthenticationError, match="not configured"):
            authenticate(f"Bearer {token}", None)

    def test_error_maps_to_401(self):
        assert AuthenticationError.status_code == 401
