import pytest

pytestmark = pytest.mark.django_db


def test_me_lists_workflow_roles(client_for, make_user):
    user = make_user("legal", "director", username="dual-hat")

    res = client_for(user).get("/api/v1/me/")

    assert res.status_code == 200
    body = res.json()
    assert body["user"]["username"] == "dual-hat"
    assert body["roles"] == ["director", "legal"]
    assert body["acts_on"] == ["pending_approval", "commercial_review"]


def test_superuser_holds_super_admin(client_for, make_user):
    user = make_user(username="root-user", is_superuser=True)
    assert client_for(user).get("/api/v1/me/").json()["roles"] == ["super_admin"]


def test_me_requires_auth(api_client):
    assert api_client.get("/api/v1/me/").status_code == 401


def test_login_sets_cookies_and_cookie_auth_works(api_client, make_user):
    make_user("legal", username="cookie-user")

    res = api_client.post(
        "/api/v1/auth/login/",
        {"username": "cookie-user", "password": "testpass"},
        format="json",
    )

    assert res.status_code == 200
    assert "hn_access" in res.cookies
    assert "hn_refresh" in res.cookies
    assert res.json()["roles"] == ["legal"]

    me = api_client.get("/api/v1/me/")
    assert me.status_code == 200
    assert me.json()["roles"] == ["legal"]


def test_bad_credentials_are_rejected(api_client, make_user):
    make_user(username="someone")
    res = api_client.post(
        "/api/v1/auth/login/",
        {"username": "someone", "password": "wrong"},
        format="json",
    )
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "authentication_failed"


def test_refresh_without_cookie_is_401(api_client):
    res = api_client.post("/api/v1/auth/refresh/")
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "not_authenticated"


def test_logout_clears_cookies(client_for, make_user):
    res = client_for(make_user("director")).post("/api/v1/auth/logout/")
    assert res.status_code == 200
    assert res.cookies["hn_access"].value == ""
