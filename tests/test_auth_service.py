import uuid

import pytest

from tasktracker import auth, crud, deps, errors, schemas, security


def _user_in(**overrides) -> schemas.UserCreate:
    tag = uuid.uuid4().hex[:8]
    data = {"email": f"svc_{tag}@example.com", "password": "secret1", "username": f"svc_{tag}"}
    data.update(overrides)
    return schemas.UserCreate(**data)


def test_register_then_login_service(db):
    user_in = _user_in()
    registered = auth.register(db, user_in)
    logged_in = auth.login(db, user_in.email, "secret1")
    assert logged_in.user == registered.user
    assert security.decode_access_token(logged_in.token) == registered.user.id


def test_unique_constraint_is_authoritative(db, monkeypatch):
    """A registration that slips past the pre-check still ends in DuplicateUser."""
    first = _user_in()
    auth.register(db, first)

    monkeypatch.setattr(crud, "user_exists", lambda *a, **k: False)
    with pytest.raises(errors.DuplicateUser):
        auth.register(db, _user_in(email=first.email))
    with pytest.raises(errors.DuplicateUser):
        auth.register(db, _user_in(username=first.username))


def test_login_unknown_email_still_verifies_a_hash(db, monkeypatch):
    calls = []
    monkeypatch.setattr(security, "verify_password_dummy", lambda plain: calls.append(plain) or False)
    with pytest.raises(errors.InvalidCredentials):
        auth.login(db, "ghost@example.com", "secret1")
    assert calls == ["secret1"]


def test_login_wrong_password(db):
    user_in = _user_in()
    auth.register(db, user_in)
    with pytest.raises(errors.InvalidCredentials):
        auth.login(db, user_in.email, "secret2")


def test_current_user_strips_hash(db):
    registered = auth.register(db, _user_in())
    me = auth.current_user(db, registered.user.id)
    assert me.model_dump() == {"id": registered.user.id, "email": registered.user.email, "username": registered.user.username}


def test_current_user_missing(db):
    with pytest.raises(errors.NotFound):
        auth.current_user(db, 987654321)


@pytest.mark.parametrize("header,expected", [
    (None, None),
    ("", None),
    ("Bearer", None),
    ("Bearer   ", None),
    ("Basic abc", None),
    ("Bearer abc.def.ghi", "abc.def.ghi"),
    ("bearer abc", "abc"),
])
def test_extract_bearer_token(header, expected):
    assert deps.extract_bearer_token(header) == expected
