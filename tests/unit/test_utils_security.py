from fastapi import FastAPI, Depends
from fastapi.testclient import TestClient

from storefront.users import service as users_service
from storefront.utils.security import (
    get_current_user,
    require_admin,
    COOKIE_NAME,
)


def _make_app():
    app = FastAPI()

    @app.get("/me")
    def me(user=Depends(get_current_user)):
        return user

    @app.get("/admin")
    def admin(user=Depends(require_admin)):
        return {"ok": True}

    return app


def test_determine_role():
    assert users_service.determine_role({"role": "ADMIN"}) == "admin"
    assert users_service.determine_role({"role": "seller"}) == "user"
    assert users_service.determine_role(None) == "user"


def test_get_current_user_bearer_then_cookie(monkeypatch):
    seen = []

    def _fake_get_user_from_token(token):
        seen.append(token)
        return {"id": "u1", "email": "a@b", "role": "user", "token": token}
    monkeypatch.setattr(users_service, "get_user_from_token", _fake_get_user_from_token)
    client = TestClient(_make_app())

    r = client.get("/me", headers={"Authorization": "Bearer tok-bearer"})
    assert r.status_code == 200
    assert r.json()["id"] == "u1"

    client.cookies.set(COOKIE_NAME, "tok-cookie")
    assert client.get("/me").status_code == 200
    assert seen == ["tok-bearer", "tok-cookie"]


def test_get_current_user_without_token_is_401():
    r = TestClient(_make_app()).get("/me")
    assert r.status_code == 401


def test_get_current_user_rejected_token_is_401(monkeypatch):
    def _invalid(token):
        raise RuntimeError("invalid JWT")
    monkeypatch.setattr(users_service, "get_user_from_token", _invalid)

    r = TestClient(_make_app()).get("/me", headers={"Authorization": "Bearer bad"})
    assert r.status_code == 401


def test_require_admin(monkeypatch):
    role = {"value": "user"}
    monkeypatch.setattr(users_service, "get_user_from_token", lambda token: {"id": "u1", "role": role["value"]})
    client = TestClient(_make_app())

    assert client.get("/admin", headers={"Authorization": "Bearer t"}).status_code == 403
    role["value"] = "admin"
    assert client.get("/admin", headers={"Authorization": "Bearer t"}).status_code == 200


def test_get_user_from_token_role_from_app_metadata(monkeypatch):
    from storefront.users import repository as users_repository
    monkeypatch.setattr(users_repository, "get_user_from_access_token", lambda token: {
        "id": "u9", "email": "x@y", "user_metadata": {"role": "admin"}, "app_metadata": {"role": "user"},
    })
    user = users_service.get_user_from_token("tok")
    assert user == {"id": "u9", "email": "x@y", "metadata": {"role": "admin"}, "role": "user", "token": "tok"}
