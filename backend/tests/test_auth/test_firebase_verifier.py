"""Tests for Firebase ID token verification."""

from unittest.mock import MagicMock, patch

import pytest
from firebase_admin import auth

from app.auth.firebase import FirebaseIdentityVerifier, InvalidCredentialError, VerifiedUser


@pytest.fixture
def firebase_verifier() -> FirebaseIdentityVerifier:
    return FirebaseIdentityVerifier(MagicMock())


class TestFirebaseIdentityVerifier:
    @pytest.mark.asyncio
    async def test_valid_token(self, firebase_verifier):
        decoded = {"uid": "user_123", "email": "athlete@test.com", "admin": True}
        with patch("app.auth.firebase.auth.verify_id_token", return_value=decoded) as mock_verify:
            user = await firebase_verifier.verify("id-token")

        assert user == VerifiedUser(uid="user_123", email="athlete@test.com", claims=decoded)
        assert user.is_admin is True
        assert mock_verify.call_args.args == ("id-token",)
        assert mock_verify.call_args.kwargs["check_revoked"] is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            auth.ExpiredIdTokenError("Token expired", None),
            auth.InvalidIdTokenError("Malformed token"),
            auth.RevokedIdTokenError("Token revoked"),
            ValueError("Illegal ID token provided"),
        ],
    )
    async def test_rejected_tokens(self, firebase_verifier, error):
        with patch("app.auth.firebase.auth.verify_id_token", side_effect=error):
            with pytest.raises(InvalidCredentialError):
                await firebase_verifier.verify("bad-token")

    @pytest.mark.asyncio
    async def test_certificate_fetch_error_propagates(self, firebase_verifier):
        error = auth.CertificateFetchError("Failed to fetch certificates", None)
        with patch("app.auth.firebase.auth.verify_id_token", side_effect=error):
            with pytest.raises(auth.CertificateFetchError):
                await firebase_verifier.verify("id-token")


def test_admin_claim_must_be_true():
    assert VerifiedUser(uid="u", claims={"admin": "yes"}).is_admin is False
    assert VerifiedUser(uid="u").is_admin is False
