"""Tests for environment driven settings."""

from app.config import Settings


def test_csv_lists_are_split(monkeypatch):
    monkeypatch.setenv("NOTIFICATION_AUTHOR_ROLES", "admin, supervisor ,")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test,http://b.test")

    settings = Settings(_env_file=None)

    assert settings.notification_author_roles == ["admin", "supervisor"]
    assert settings.cors_origins == ["http://a.test", "http://b.test"]


def test_page_size_defaults(monkeypatch):
    monkeypatch.delenv("NOTIFICATIONS_DEFAULT_PAGE_SIZE", raising=False)

    settings = Settings(_env_file=None)

    assert settings.notifications_default_page_size == 50
    assert settings.notifications_max_page_size == 200
