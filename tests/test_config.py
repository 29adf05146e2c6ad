"""Tests for pydantic-settings configuration loading."""

import pytest
from pydantic import ValidationError

from chartseries.config import ApiSettings, AppSettings, PipelineSettings


class TestPipelineSettings:
    """Tests for PipelineSettings."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for var in ("PIPELINE_SMA_PERIOD", "PIPELINE_EMA_PERIOD", "PIPELINE_RSI_PERIOD", "PIPELINE_STRICT"):
            monkeypatch.delenv(var, raising=False)
        settings = PipelineSettings()

        assert settings.sma_period == 20
        assert settings.ema_period == 20
        assert settings.rsi_period == 14
        assert settings.strict is False

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PIPELINE_SMA_PERIOD", "50")
        monkeypatch.setenv("PIPELINE_STRICT", "true")
        monkeypatch.setenv("PIPELINE_MAX_WORKERS", "4")

        settings = PipelineSettings()

        assert settings.sma_period == 50
        assert settings.strict is True
        assert settings.max_workers == 4

    def test_period_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            PipelineSettings(rsi_period=0)


class TestAppSettings:
    """Tests for the root AppSettings."""

    def test_nested_env_delimiter(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PIPELINE__EMA_PERIOD", "9")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        settings = AppSettings(_env_file=None)

        assert settings.pipeline.ema_period == 9
        assert settings.log_level == "DEBUG"

    def test_api_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("API_PORT", raising=False)
        assert ApiSettings().port == 8080
