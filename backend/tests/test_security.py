"""
Tests for identity token handling.
"""

from unittest.mock import MagicMock, patch

import pytest
from fastapi import HTTPException
from starlette.requests import Request

from pitchdeck.api import deps
from pitchdeck.core import security
from pitchdeck.core.config import ModeEnum, settings


def make_request(authorization: str | None = None) -> Request:
    headers = []
    if authorization is not None:
        headers.append((b"authorization", authorization.encode()))
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers})


class TestBearerExtraction:
    """Tests for reading the Authorization header."""

    def test_valid_header(self):
        assert security.extract_bearer_token(make_request("Bearer abc.def")) == "abc.def"

    @pytest.mark.parametrize("header", [None, "", "Basic abc", "Bearer ", "Bearer"])
    def test_missing_or_malformed(self, header):
        assert security.extract_bearer_token(make_request(header)) is None


class TestClaims:
    """Tests for mapping decoded tokens to claims."""

    def test_name_falls_back_to_email(self):
        claims = security.claims_from_token({"uid": "u1", "email": "jane@acme.io"})
        assert claims.uid == "u1"
        assert claims.name == "jane"

    def test_sub_used_when_uid_missing(self):
        claims = security.claims_from_token({"sub": "u2", "email": "x@y.z", "name": "X"})
        assert claims.uid == "u2"
        assert claims.name == "X"

    def test_missing_email_is_none(self):
        """Phone sign-ins carry no email; the name falls back to the uid."""
        claims = security.claims_from_token({"uid": "u3", "phone_number": "+15550100"})
        assert claims.email is None
        assert claims.name == "u3"

    def test_missing_uid_rejected(self):
        with pytest.raises(HTTPException) as exc:
            security.claims_from_token({"email": "x@y.z"})
        assert exc.value.status_code == 401


class TestVerifyToken:
    """Tests for Firebase verification, with the SDK patched out."""

    async def test_valid_token(self):
        decoded = {"uid": "u1", "email": "jane@acme.io", "name": "Jane"}
        with (
            patch.object(security, "get_firebase_app", return_value=MagicMock()),
            patch.object(security.firebase_auth, "verify_id_token", return_value=decoded) as verify,
        ):
            claims = await security.get_token_claims(make_request("Bearer good"))
        assert claims.uid == "u1"
        assert verify.call_args.args[0] == "good"

    async def test_rejected_token(self):
        with (
            patch.object(security, "get_firebase_app", return_value=MagicMock()),
            patch.object(security.firebase_auth, "verify_id_token", side_effect=ValueError("expired")),
        ):
            with pytest.raises(HTTPException) as exc:
                await security.get_token_claims(make_request("Bearer stale"))
        assert exc.value.status_code == 401
        assert exc.value.detail == "Invalid or expired token"

    async def test_missing_token(self):
        with pytest.raises(HTTPException) as exc:
            await security.get_token_claims(make_request())
        assert exc.value.detail == "No authorization token provided"


class TestDevBypass:
    """Tests for the development-mode identity."""

    async def test_dev_mode_without_token(self):
        with patch.object(settings, "MODE", ModeEnum.development):
            claims = await deps.get_token_claims(make_request())
        assert claims == deps.DEV_CLAIMS

    async def test_testing_mode_requires_token(self):
        with pytest.raises(HTTPException):
            await deps.get_token_claims(make_request())
