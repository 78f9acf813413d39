from __future__ import annotations

from dragon_drop.core.config import Settings


def test_defaults():
    settings = Settings()

    assert settings.APP_VERSION == "0.1.0"
    assert settings.COSMOS_DB_DATABASE == "dragon-drop"
    assert settings.COSMOS_DB_EMPLOYEES_CONTAINER == "employees"
    assert settings.COSMOS_DB_CHANGE_LOG_CONTAINER == "changeLog"
    assert settings.TENURE_ALERT_HOUR == 9
    assert settings.CELEBRATIONS_ADVANCE_NOTICE_DAYS == 0
    assert settings.CELEBRATIONS_ENABLE_BIRTHDAYS is True


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("SLACK_WEBHOOK_URL", "https://hooks.slack.com/services/T/B/X")
    monkeypatch.setenv("TENURE_ALERT_HOUR", "14")
    monkeypatch.setenv("CELEBRATIONS_ENABLE_ANNIVERSARIES", "false")

    settings = Settings()

    assert settings.SLACK_WEBHOOK_URL == "https://hooks.slack.com/services/T/B/X"
    assert settings.TENURE_ALERT_HOUR == 14
    assert settings.CELEBRATIONS_ENABLE_ANNIVERSARIES is False
