"""Tests for Firebase ID-token verification (firebase_admin.auth patched)."""

import pytest
from unittest.mock import MagicMock, patch

from bouldering.domain.errors import AuthenticationError
from bouldering.infrastructure.auth.firebase_verifier import (
    FirebaseTokenVerifier,
    extract_bearer_token,
)
from bouldering.infrastructure.config import FirebaseConfig


class TestExtractBearerToken:
    def test_valid_header(self):
        assert extract_bearer_token("Bearer abc.def") == "abc.def"

    @pytest.mark.parametrize("header", [None, "", "Basic xyz", "bearer abc"])
    def test_invalid_header(self, header):
        with pytest.raises(AuthenticationError, match="authorization header"):
            extract_bearer_token(header)

    def test_empty_token(self):
        with pytest.raises(AuthenticationError, match="Missing ID token"):
            extract_bearer_token("Bearer   ")


class TestFirebaseTokenVerifier:
    @pytest.mark.asyncio
    async def test_valid_token(self):
        app = MagicMock()
        verifier = FirebaseTokenVerifier(FirebaseConfig(), app=app)
        decoded = {"uid": "u1", "email": "a@example.com", "email_verified": True}

        with patch(
            "bouldering.infrastructure.auth.firebase_verifier.auth.verify_id_token",
            return_value=decoded,
        ) as verify:
            user = await verifier.verify("tok")

        verify.assert_called_once_with("tok", app=app)
        assert user.uid == "u1"
        assert user.email == "a@example.com"
        assert user.email_verified is True

    @pytest.mark.asyncio
    async def test_invalid_token(self):
        verifier = FirebaseTokenVerifier(FirebaseConfig(), app=MagicMock())

        with patch(
            "bouldering.infrastructure.auth.firebase_verifier.auth.verify_id_token",
            side_effect=ValueError("malformed"),
        ):
            with pytest.raises(AuthenticationError, match="Invalid or expired token"):
                await verifier.verify("tok")

    def test_error_is_unauthorized(self):
        assert AuthenticationError("x").status_code == 401
