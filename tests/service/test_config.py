import pytest

from proforma_service.config import Settings, load_settings


def test_defaults(monkeypatch):
    for name in (
        "PROFORMA_LOG_LEVEL",
        "PROFORMA_SNAPSHOT_STORE",
        "PROFORMA_SNAPSHOT_DIR",
        "PROFORMA_DEFAULT_MONTHS",
        "PROFORMA_PROJECTION_CACHE_SIZE",
    ):
        monkeypatch.delenv(name, raising=False)

    assert load_settings() == Settings()
    assert Settings().default_months == 36


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PROFORMA_LOG_LEVEL", "debug")
    monkeypatch.setenv("PROFORMA_SNAPSHOT_STORE", "FILE")
    monkeypatch.setenv("PROFORMA_SNAPSHOT_DIR", "/tmp/scenarios")
    monkeypatch.setenv("PROFORMA_DEFAULT_MONTHS", "48")
    monkeypatch.setenv("PROFORMA_PROJECTION_CACHE_SIZE", "0")

    settings = load_settings()
    assert settings.log_level == "DEBUG"
    assert settings.snapshot_store == "file"
    assert settings.snapshot_dir == "/tmp/scenarios"
    assert settings.default_months == 48
    assert settings.projection_cache_size == 0


def test_blank_integer_uses_default(monkeypatch):
    monkeypatch.setenv("PROFORMA_DEFAULT_MONTHS", "  ")
    assert load_settings().default_months == 36


def test_bad_integer(monkeypatch):
    monkeypatch.setenv("PROFORMA_DEFAULT_MONTHS", "three years")
    with pytest.raises(ValueError):
        load_settings()
