"""Tests for settings defaults and environment overrides."""

import pytest

from infrascope.config.settings import (
    AwsSettings,
    Environment,
    LogLevel,
    ResolutionSettings,
    Settings,
)


class TestSettings:
    """Tests for the settings models."""

    def test_resolution_defaults(self):
        settings = ResolutionSettings()

        assert settings.fetch_timeout_seconds == 30.0
        assert settings.stage_timeout_seconds == 30.0
        assert settings.cluster_name_suffix == "-eks"
        assert settings.cluster_tag_prefixes == ["kubernetes.io/cluster/"]
        assert settings.region_label_keys[0] == "topology.kubernetes.io/region"
        assert settings.clear_credentials_on_refresh is False
        assert settings.retry_attempts == 3

    def test_resolution_env_override(self, monkeypatch):
        monkeypatch.setenv("RESOLUTION_FETCH_TIMEOUT_SECONDS", "5")
        monkeypatch.setenv("RESOLUTION_CLEAR_CREDENTIALS_ON_REFRESH", "true")

        settings = ResolutionSettings()

        assert settings.fetch_timeout_seconds == 5.0
        assert settings.clear_credentials_on_refresh is True

    def test_aws_env_prefix(self, monkeypatch):
        monkeypatch.setenv("AWS_PROFILE", "staging")
        monkeypatch.setenv("AWS_CREDENTIAL_REFRESH_INTERVAL_SECONDS", "60")

        settings = AwsSettings()

        assert settings.profile == "staging"
        assert settings.credential_refresh_interval_seconds == 60

    @pytest.mark.parametrize("value,expected", [("DEBUG", LogLevel.DEBUG), ("warning", LogLevel.WARNING)])
    def test_log_level_normalised(self, value, expected):
        assert Settings(log_level=value).log_level == expected

    def test_environment_normalised(self):
        assert Settings(environment="PRODUCTION").environment == Environment.PRODUCTION

    def test_create_from_env(self, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "json")

        settings = Settings.create_from_env()

        assert settings.log_format == "json"
        assert isinstance(settings.resolution, ResolutionSettings)
