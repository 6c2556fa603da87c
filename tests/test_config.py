from unittest.mock import MagicMock, patch

from infrastructure import config


def fake_secrets(values):
    secrets = MagicMock()
    secrets.get.side_effect = values.get
    return secrets


def test_defaults_when_nothing_configured(monkeypatch):
    for key in ("ESTATE_API_URL", "ESTATE_API_TIMEOUT", "ESTATE_ALERT_ON_FAILURE"):
        monkeypatch.delenv(key, raising=False)
    with patch.object(config.st, "secrets", fake_secrets({})):
        settings = config.load_api_settings()
    assert settings.base_url == "http://localhost:8080/api"
    assert settings.timeout == 20.0
    assert settings.alert_on_failure is True


def test_secrets_take_precedence_over_env(monkeypatch):
    monkeypatch.setenv("ESTATE_API_URL", "http://env.test/api")
    with patch.object(config.st, "secrets", fake_secrets({"ESTATE_API_URL": "http://secret.test/api"})):
        assert config.load_api_settings().base_url == "http://secret.test/api"


def test_env_values(monkeypatch):
    monkeypatch.setenv("ESTATE_API_URL", "http://env.test/api")
    monkeypatch.setenv("ESTATE_API_TIMEOUT", "30")
    monkeypatch.setenv("ESTATE_ALERT_ON_FAILURE", "false")
    with patch.object(config.st, "secrets", fake_secrets({})):
        settings = config.load_api_settings()
    assert settings.base_url == "http://env.test/api"
    assert settings.timeout == 30.0
    assert settings.alert_on_failure is False


def test_invalid_timeout_falls_back(monkeypatch):
    monkeypatch.setenv("ESTATE_API_TIMEOUT", "soon")
    with patch.object(config.st, "secrets", fake_secrets({})):
        assert config.load_api_settings().timeout == 20.0
    monkeypatch.setenv("ESTATE_API_TIMEOUT", "-5")
    with patch.object(config.st, "secrets", fake_secrets({})):
        assert config.load_api_settings().timeout == 20.0


def test_missing_secrets_file(monkeypatch):
    monkeypatch.setenv("ESTATE_API_URL", "http://env.test/api")
    secrets = MagicMock()
    secrets.get.side_effect = FileNotFoundError("no secrets.toml")
    with patch.object(config.st, "secrets", secrets):
        assert config.get_secret("ESTATE_API_URL") == "http://env.test/api"
