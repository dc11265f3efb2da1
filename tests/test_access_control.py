"""Tests for the bearer and admin-secret gates."""
from datetime import timedelta

import pytest

from poolrent.config import get_settings
from poolrent.core.auth import authenticate_bearer, check_admin_secret
from poolrent.core.exceptions import (
    ServerMisconfiguredException,
    TokenExpiredException,
    TokenInvalidException,
    UnauthorizedException,
)
from poolrent.core.security import TokenService
from poolrent.main import app
from tests.conftest import (
    ADMIN_SECRET,
    JWT_SECRET,
    admin_headers,
    auth_headers,
    create_pool,
    make_settings,
    pool_payload,
    register_user,
)


class TestCheckAdminSecret:

    def test_matching_secret_passes(self):
        assert check_admin_secret("s3cret", "s3cret") is None

    def test_wrong_or_missing_secret_rejected(self):
        with pytest.raises(UnauthorizedException):
            check_admin_secret("nope", "s3cret")
        with pytest.raises(UnauthorizedException):
            check_admin_secret(None, "s3cret")

    def test_unconfigured_secret_fails_closed(self):
        with pytest.raises(ServerMisconfiguredException):
            check_admin_secret("anything", "")
        with pytest.raises(ServerMisconfiguredException):
            check_admin_secret(None, None)


class TestAuthenticateBearer:

    def test_missing_token(self):
        with pytest.raises(UnauthorizedException) as exc_info:
            authenticate_bearer(None, None)
        assert exc_info.value.error_code == "AUTH_REQUIRED"

    def test_expired_and_invalid_are_distinct(self):
        tokens = TokenService(JWT_SECRET)
        expired = tokens.issue("user", expires_delta=timedelta(seconds=-1))

        with pytest.raises(TokenExpiredException):
            authenticate_bearer(expired, tokens)
        with pytest.raises(TokenInvalidException):
            authenticate_bearer("garbage", tokens)

    def test_valid_token_yields_subject(self):
        tokens = TokenService(JWT_SECRET)
        assert authenticate_bearer(tokens.issue("abc"), tokens) == "abc"


class TestBearerGateOverHttp:

    def test_no_token(self, client):
        resp = client.post("/api/pools", json=pool_payload())
        assert resp.status_code == 401
        assert resp.json() == {"message": "Auth required", "code": "AUTH_REQUIRED"}

    def test_expired_token(self, client):
        user = register_user(client)
        token = TokenService(JWT_SECRET).issue(user["user"]["id"], expires_delta=timedelta(seconds=-5))

        resp = client.post("/api/pools", json=pool_payload(), headers=auth_headers(token))
        assert resp.status_code == 401
        assert resp.json()["code"] == "TOKEN_EXPIRED"

    def test_token_signed_with_other_secret(self, client):
        token = TokenService("some-other-secret").issue("64b7f0c2a1b2c3d4e5f60718")

        resp = client.post("/api/pools", json=pool_payload(), headers=auth_headers(token))
        assert resp.status_code == 401
        assert resp.json()["code"] == "TOKEN_INVALID"

    def test_non_bearer_scheme_counts_as_missing(self, client):
        resp = client.post("/api/pools", json=pool_payload(), headers={"Authorization": "Basic abc"})
        assert resp.status_code == 401
        assert resp.json()["code"] == "AUTH_REQUIRED"

    def test_unconfigured_jwt_secret_fails_closed(self, client):
        token = TokenService(JWT_SECRET).issue("64b7f0c2a1b2c3d4e5f60718")
        app.dependency_overrides[get_settings] = lambda: make_settings(JWT_SECRET="")

        resp = client.post("/api/pools", json=pool_payload(), headers=auth_headers(token))
        assert resp.status_code == 500
        assert resp.json()["message"] == "Server misconfigured"

        # A missing token is still reported before the secret is needed
        resp = client.post("/api/pools", json=pool_payload())
        assert resp.status_code == 401


class TestAdminGateOverHttp:

    def test_missing_header(self, client):
        resp = client.get("/api/admin/users")
        assert resp.status_code == 401
        assert resp.json()["message"] == "Unauthorized"

    def test_wrong_secret(self, client):
        resp = client.get("/api/admin/users", headers=admin_headers("wrong"))
        assert resp.status_code == 401

    def test_bearer_token_is_not_enough(self, client):
        user = register_user(client)
        pool = create_pool(client, user["accessToken"])

        resp = client.put(
            f"/api/pools/{pool['id']}/visibility",
            json={"isVisible": True},
            headers=auth_headers(user["accessToken"]),
        )
        assert resp.status_code == 401

    def test_unconfigured_admin_secret(self, client):
        app.dependency_overrides[get_settings] = lambda: make_settings(ADMIN_SECRET="")

        resp = client.get("/api/admin/users", headers=admin_headers(ADMIN_SECRET))
        assert resp.status_code == 500
        assert resp.json() == {"message": "Server misconfigured", "code": "SERVER_MISCONFIGURED"}
