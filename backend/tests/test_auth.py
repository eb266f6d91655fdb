# test_auth.py - Puerta JWT de /purchases

from datetime import timedelta

import pytest
from fastapi import Depends, FastAPI, Request
from fastapi.testclient import TestClient

from app.utils.auth import require_user
from tests.conftest import make_token


def test_missing_token_is_401(api):
    res = api.get("/purchases/")
    assert res.status_code == 401
    assert res.json()["detail"] == "Missing Authorization header"
    assert res.headers["www-authenticate"] == "Bearer"


def test_invalid_token_is_403(api):
    res = api.get("/purchases/", headers={"Authorization": "Bearer not-a-jwt"})
    assert res.status_code == 403
    assert res.json()["detail"] == "Invalid token"


def test_wrong_secret_is_403(api):
    token = make_token(secret="another-secret-with-enough-length-987654321")
    res = api.get("/purchases/", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 403


def test_expired_token_is_403(api):
    token = make_token(expires_in=timedelta(minutes=-5))
    res = api.get("/purchases/", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 403
    assert res.json()["detail"] == "Token expired"


def test_token_without_bearer_scheme_is_verified(api):
    res = api.get("/purchases/", headers={"Authorization": make_token()})
    assert res.status_code == 200
    assert res.json() == {"purchases": []}


@pytest.mark.parametrize("value", ["Basic dXNlcjpwYXNz", "Token abc"])
def test_other_schemes_are_invalid_tokens(api, db, value):
    res = api.get("/purchases/", headers={"Authorization": value})
    assert res.status_code == 403
    assert res.json()["detail"] == "Invalid token"
    assert db.calls == []


@pytest.mark.parametrize("method, path", [
    ("post", "/purchases/"),
    ("get", "/purchases/00000000-0000-0000-0000-000000000000"),
    ("put", "/purchases/00000000-0000-0000-0000-000000000000"),
    ("delete", "/purchases/00000000-0000-0000-0000-000000000000"),
    ("get", "/purchases/client/00000000-0000-0000-0000-000000000000"),
])
def test_every_route_is_gated(api, db, method, path):
    res = getattr(api, method)(path)
    assert res.status_code == 401
    assert db.calls == []


def test_identity_is_attached_to_request():
    app = FastAPI()

    @app.get("/me")
    def me(request: Request, user_id: str = Depends(require_user)):
        return {"user_id": user_id, "email": request.state.user["email"]}

    token = make_token(sub="user-42")
    res = TestClient(app).get("/me", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 200
    assert res.json() == {"user_id": "user-42", "email": "user-42@example.com"}
