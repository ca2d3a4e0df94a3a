import pytest
from pydantic import ValidationError

from tasktracker.settings import DEFAULT_CORS_ORIGINS, Settings


def test_missing_secret_fails_fast(monkeypatch):
    monkeypatch.delenv("SECRET_KEY", raising=False)
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


@pytest.mark.parametrize("secret", ["", "   ", "change_me", "your-secret-key"])
def test_placeholder_secret_rejected(monkeypatch, secret):
    monkeypatch.setenv("SECRET_KEY", secret)
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_defaults(monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "a-real-secret-value")
    monkeypatch.delenv("ACCESS_TOKEN_EXPIRE_MINUTES", raising=False)
    monkeypatch.delenv("CORS_ORIGINS", raising=False)
    s = Settings(_env_file=None)
    assert s.ACCESS_TOKEN_EXPIRE_MINUTES == 7 * 24 * 60
    assert s.ALGORITHM == "HS256"
    assert s.CORS_ORIGINS == DEFAULT_CORS_ORIGINS


def test_cors_origins_comma_separated(monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "a-real-secret-value")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")
    s = Settings(_env_file=None)
    assert s.CORS_ORIGINS == ["http://a.test", "http://b.test"]


def test_cors_origins_json(monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "a-real-secret-value")
    monkeypatch.setenv("CORS_ORIGINS", '["http://a.test"]')
    s = Settings(_env_file=None)
    assert s.CORS_ORIGINS == ["http://a.test"]
