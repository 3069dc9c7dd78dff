import logging

from sketchtunes.config import Settings
from sketchtunes.core.logging import ColoredFormatter, QUIET_LOGGERS, setup_logging


def _settings(**overrides):
    values = {
        "frontend_url": "http://localhost:3000",
        "supabase_url": "http://localhost:54321",
        "supabase_key": "key",
        "secret_key": "secret",
    }
    values.update(overrides)
    return Settings(**values)


def test_defaults():
    settings = _settings(environment="development")

    assert settings.default_volume == 0.7
    assert settings.waveform_bar_count == 100
    assert settings.max_waveform_bars == 1000
    assert settings.max_upload_bytes == 50 * 1024 * 1024
    assert settings.allowed_cors_origins == ["http://localhost:3000"]
    assert settings.is_development and settings.debug
    assert not settings.is_production


def test_production_flags():
    settings = _settings(environment="production")
    assert settings.is_production
    assert not settings.debug


def test_colored_formatter_restores_levelname():
    record = logging.LogRecord("x", logging.WARNING, __file__, 1, "careful", None, None)
    output = ColoredFormatter(fmt="%(levelname)s %(message)s").format(record)

    assert "WARNING" in output and "\033[" in output
    assert record.levelname == "WARNING"


def test_setup_logging_quiets_third_party_loggers():
    setup_logging("DEBUG")

    assert logging.getLogger().level == logging.DEBUG
    for name in QUIET_LOGGERS:
        assert logging.getLogger(name).level == logging.WARNING
