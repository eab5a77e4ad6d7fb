"""Settings tests."""

import pytest
from pydantic import ValidationError

from crud_oauth.config import Settings


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


def test_development_cookie_is_lax_and_plain_http():
    settings = make_settings(environment="development")
    assert not settings.is_production
    assert settings.session_same_site == "lax"
    assert not settings.session_https_only


def test_production_cookie_is_cross_site_and_secure():
    settings = make_settings(environment="production", jwt_secret="j" * 32, session_secret="s" * 32)
    assert settings.is_production
    assert settings.session_same_site == "none"
    assert settings.session_https_only


def test_production_refuses_default_secrets():
    with pytest.raises(ValidationError):
        make_settings(environment="production")


def test_derived_urls():
    settings = make_settings(backend_url="https://api.example.com/", frontend_url="https://app.example.com/")
    assert settings.google_callback_url == "https://api.example.com/auth/google/callback"
    assert settings.allowed_origins[0] == "https://app.example.com"
