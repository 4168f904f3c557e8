"""
Recipe Book Backend — Token Verifier Unit Tests
================================================

What:  Tests for bearer extraction, the Firebase verifier and the unverified
       development decoder.
How:   firebase_admin.auth.verify_id_token is patched; no network calls.
"""

import base64
import json
from unittest.mock import MagicMock, patch

import pytest
from firebase_admin import auth as firebase_auth

from app.config import Settings
from app.exceptions import InvalidTokenError, UnauthenticatedError
from app.security import build_token_verifier, extract_bearer_token
from app.services.firebase_verifier import FirebaseTokenVerifier
from app.services.token_verifier_base import AuthenticatedUser
from app.services.unverified_decoder import UnverifiedTokenDecoder


def _segment(data: dict) -> str:
    raw = json.dumps(data).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def make_unsigned_jwt(claims: dict) -> str:
    header = _segment({"alg": "RS256", "typ": "JWT"})
    return f"{header}.{_segment(claims)}.c2ln"


class TestExtractBearerToken:

    def test_returns_token(self):
        assert extract_bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"

    @pytest.mark.parametrize("header", [None, "", "Basic abc", "bearer abc", "Bearer ", "Bearer    "])
    def test_rejects_missing_or_wrong_scheme(self, header):
        with pytest.raises(UnauthenticatedError) as exc_info:
            extract_bearer_token(header)
        assert exc_info.value.message == "No token provided"


class TestAuthenticatedUser:

    def test_display_name_prefers_email_local_part(self):
        user = AuthenticatedUser(uid="u1", email="chef@example.com", name="Chef")
        assert user.display_name == "chef"

    def test_display_name_falls_back(self):
        assert AuthenticatedUser(uid="u1", name="Chef").display_name == "Chef"
        assert AuthenticatedUser(uid="u1").display_name == "User"

    @pytest.mark.parametrize("key", ["uid", "user_id", "sub"])
    def test_from_claims_subject_keys(self, key):
        assert AuthenticatedUser.from_claims({key: "abc"}).uid == "abc"

    def test_from_claims_without_subject(self):
        with pytest.raises(ValueError):
            AuthenticatedUser.from_claims({"email": "a@b.c"})


class TestFirebaseTokenVerifier:

    def setup_method(self):
        self.config = Settings(firebase_project_id="recipe-book-test")
        self.firebase_app = MagicMock()
        self.verifier = FirebaseTokenVerifier(self.config, firebase_app=self.firebase_app)

    @pytest.mark.asyncio
    async def test_valid_token(self):
        claims = {"uid": "alice-uid", "email": "alice@example.com", "name": "Alice"}
        with patch(
            "app.services.firebase_verifier.firebase_auth.verify_id_token",
            return_value=claims,
        ) as mock_verify:
            user = await self.verifier.verify("good-token")

        assert user.uid == "alice-uid"
        assert user.email == "alice@example.com"
        mock_verify.assert_called_once_with(
            "good-token", app=self.firebase_app, check_revoked=False
        )

    @pytest.mark.asyncio
    async def test_sdk_rejection_becomes_invalid_token(self):
        with patch(
            "app.services.firebase_verifier.firebase_auth.verify_id_token",
            side_effect=firebase_auth.ExpiredIdTokenError("Token expired", cause=None),
        ):
            with pytest.raises(InvalidTokenError) as exc_info:
                await self.verifier.verify("expired-token")

        assert exc_info.value.message == "Invalid token"
        assert "expired" in exc_info.value.reason.lower()

    @pytest.mark.asyncio
    async def test_malformed_token_becomes_invalid_token(self):
        with patch(
            "app.services.firebase_verifier.firebase_auth.verify_id_token",
            side_effect=ValueError("Illegal ID token provided."),
        ):
            with pytest.raises(InvalidTokenError) as exc_info:
                await self.verifier.verify("garbage")

        assert exc_info.value.reason == "Illegal ID token provided."

    @pytest.mark.asyncio
    async def test_claims_without_subject_are_rejected(self):
        with patch(
            "app.services.firebase_verifier.firebase_auth.verify_id_token",
            return_value={"email": "nobody@example.com"},
        ):
            with pytest.raises(InvalidTokenError):
                await self.verifier.verify("weird-token")

    def test_build_token_verifier_default_is_firebase(self):
        assert isinstance(build_token_verifier(self.config), FirebaseTokenVerifier)
        assert build_token_verifier(self.config).verifies_signature is True


class TestUnverifiedTokenDecoder:

    def setup_method(self):
        self.decoder = UnverifiedTokenDecoder()

    @pytest.mark.asyncio
    async def test_decodes_payload_without_signature_check(self):
        token = make_unsigned_jwt(
            {"user_id": "emulator-uid", "email": "cook@example.com", "name": "Cook"}
        )

        user = await self.decoder.verify(token)

        assert user.uid == "emulator-uid"
        assert user.display_name == "cook"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", ["not-a-jwt", "a.b", "%%%.%%%.%%%"])
    async def test_rejects_malformed(self, token):
        with pytest.raises(InvalidTokenError):
            await self.decoder.verify(token)

    @pytest.mark.asyncio
    async def test_rejects_payload_without_subject(self):
        with pytest.raises(InvalidTokenError):
            await self.decoder.verify(make_unsigned_jwt({"email": "x@example.com"}))

    def test_selected_by_auth_mode(self):
        config = Settings(auth_mode="UNVERIFIED")
        verifier = build_token_verifier(config)

        assert isinstance(verifier, UnverifiedTokenDecoder)
        assert verifier.verifies_signature is False
