"""Tests for octoapp.config module."""

from __future__ import annotations

import pytest

from octoapp.config import DEFAULT_API_URL, Config, _env_flag


class TestEnvFlag:
    """Tests for _env_flag() function."""

    def test_unset_returns_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("SOME_FLAG", raising=False)
        assert _env_flag("SOME_FLAG", True) is True
        assert _env_flag("SOME_FLAG", False) is False

    def test_blank_returns_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SOME_FLAG", "   ")
        assert _env_flag("SOME_FLAG", True) is True

    @pytest.mark.parametrize("value", ["0", "false", "FALSE", "no", "off", " Off "])
    def test_false_values(self, monkeypatch: pytest.MonkeyPatch, value: str) -> None:
        monkeypatch.setenv("SOME_FLAG", value)
        assert _env_flag("SOME_FLAG", True) is False

    @pytest.mark.parametrize("value", ["1", "true", "yes", "on"])
    def test_true_values(self, monkeypatch: pytest.MonkeyPatch, value: str) -> None:
        monkeypatch.setenv("SOME_FLAG", value)
        assert _env_flag("SOME_FLAG", False) is True


class TestConfig:
    """Tests for the Config dataclass."""

    def test_defaults(self) -> None:
        config = Config()
        assert config.app_id == ""
        assert config.private_key_path == ""
        assert config.webhook_secret == ""
        assert config.api_url == DEFAULT_API_URL
        assert config.verify_signatures is True

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITHUB_APP_ID", "12345")
        monkeypatch.setenv("GITHUB_PRIVATE_KEY_PATH", "/keys/app.pem")
        monkeypatch.setenv("GITHUB_WEBHOOK_SECRET", "s3cret")
        monkeypatch.setenv("GITHUB_API_URL", "https://ghe.example.com/api/v3/")
        monkeypatch.setenv("GITHUB_VERIFY_SIGNATURES", "false")
        config = Config()
        assert config.app_id == "12345"
        assert config.private_key_path == "/keys/app.pem"
        assert config.webhook_secret == "s3cret"
        assert config.api_url == "https://ghe.example.com/api/v3"
        assert config.verify_signatures is False


class TestValidate:
    """Tests for Config.validate()."""

    def test_valid_config_has_no_issues(self) -> None:
        config = Config(app_id="1", private_key_path="/k.pem", webhook_secret="s")
        assert config.validate() == []

    def test_empty_config_reports_every_missing_value(self) -> None:
        issues = Config().validate()
        assert len(issues) == 3
        assert any("GITHUB_APP_ID" in i for i in issues)
        assert any("GITHUB_PRIVATE_KEY_PATH" in i for i in issues)
        assert any("GITHUB_WEBHOOK_SECRET" in i for i in issues)

    def test_secret_not_required_when_verification_disabled(self) -> None:
        config = Config(app_id="1", private_key_path="/k.pem", verify_signatures=False)
        assert config.validate() == []
