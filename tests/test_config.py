"""
Tests for environment-driven settings.
"""

import pytest
from pydantic import ValidationError

from bizledger.config import AppSettings, RemoteSettings, get_settings, validate_all_settings


@pytest.fixture(autouse=True)
def clean_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestRemoteSettings:
    """Tests for RemoteSettings."""

    def test_reads_prefixed_environment(self, monkeypatch):
        monkeypatch.setenv("BIZLEDGER_API_BASE_URL", "https://books.example.com/api/")
        monkeypatch.setenv("BIZLEDGER_API_TOKEN", "abc")
        settings = RemoteSettings()
        assert settings.base_url == "https://books.example.com/api"
        assert settings.token == "abc"

    def test_rejects_non_http_url(self):
        with pytest.raises(ValidationError):
            RemoteSettings(base_url="ftp://books.example.com")


class TestAppSettings:
    """Tests for AppSettings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("BIZLEDGER_PAGE_SIZE", raising=False)
        settings = AppSettings()
        assert settings.page_size == 20
        assert settings.temp_id_prefix == "temp-"
        assert settings.trend_months == 6

    def test_page_size_must_be_positive(self):
        with pytest.raises(ValidationError):
            AppSettings(page_size=0)


def test_validate_all_settings_reports_bad_values(monkeypatch):
    monkeypatch.setenv("BIZLEDGER_API_BASE_URL", "not-a-url")
    results = validate_all_settings()
    assert results["remote"] is False
    assert "remote_error" in results
    assert results["app"] is True


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
