"""Tests for settings parsing and server bootstrap options."""
from __future__ import annotations

from watchparty_signaling.__main__ import _ssl_options
from watchparty_signaling.core.config import Settings


def test_defaults(monkeypatch):
    for name in ("PORT", "HOST", "ORIGIN", "CORS_ALLOW_ORIGINS", "SSL_CERT_FILE", "SSL_KEY_FILE"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.port == 3001
    assert settings.host == "0.0.0.0"
    assert settings.cors_allow_origins == ["*"]
    assert settings.renotify_on_rejoin is False
    assert settings.ssl_enabled is False


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PORT", "8443")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://watch.example, https://party.example")
    monkeypatch.setenv("RENOTIFY_ON_REJOIN", "true")

    settings = Settings(_env_file=None)

    assert settings.port == 8443
    assert settings.cors_allow_origins == ["https://watch.example", "https://party.example"]
    assert settings.renotify_on_rejoin is True


def test_origin_alias(monkeypatch):
    monkeypatch.delenv("CORS_ALLOW_ORIGINS", raising=False)
    monkeypatch.setenv("ORIGIN", "https://watch.example")

    assert Settings(_env_file=None).cors_allow_origins == ["https://watch.example"]


def test_ssl_options_use_readable_material(tmp_path):
    cert = tmp_path / "cert.pem"
    key = tmp_path / "key.pem"
    cert.write_text("cert")
    key.write_text("key")

    settings = Settings(_env_file=None, ssl_cert_file=str(cert), ssl_key_file=str(key))

    assert _ssl_options(settings) == {"ssl_certfile": str(cert), "ssl_keyfile": str(key)}


def test_ssl_options_fall_back_to_http(tmp_path):
    settings = Settings(
        _env_file=None,
        ssl_cert_file=str(tmp_path / "missing.pem"),
        ssl_key_file=str(tmp_path / "missing.key"),
    )

    assert _ssl_options(settings) == {}
    assert _ssl_options(Settings(_env_file=None)) == {}
