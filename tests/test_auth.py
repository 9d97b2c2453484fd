"""Login, logout and the user CLI helper."""

import pytest

from create_user import create_user
from models import User


def test_create_user_hashes_password(app) -> None:
    user = create_user("planner", "s3cret", "admin")

    assert user.password != "s3cret"
    assert user.check_password("s3cret")
    assert create_user("planner", "other", "user") is None
    assert User.query.count() == 1


def test_create_user_rejects_unknown_role(app) -> None:
    with pytest.raises(ValueError):
        create_user("x", "y", "superuser")


def test_login_and_logout(client, app) -> None:
    create_user("operator", "pw", "user")

    bad = client.post("/auth/login", json={"username": "operator", "password": "nope"})
    assert bad.status_code == 401

    ok = client.post("/auth/login", json={"username": "operator", "password": "pw"})
    assert ok.status_code == 200
    assert ok.get_json()["role"] == "user"

    me = client.get("/auth/me")
    assert me.get_json()["username"] == "operator"

    assert client.post("/auth/logout").status_code == 200
