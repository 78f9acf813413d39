import sys

from pydantic_settings import BaseSettings

_ENV_FILE = None if "pytest" in sys.modules else ".env"


class Settings(BaseSettings):
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    COSMOS_DB_ENDPOINT: str = ""
    COSMOS_DB_KEY: str = ""
    COSMOS_DB_DATABASE: str = "dragon-drop"
    COSMOS_DB_EMPLOYEES_CONTAINER: str = "employees"
    COSMOS_DB_TEAMS_CONTAINER: str = "teams"
    COSMOS_DB_CHANGE_LOG_CONTAINER: str = "changeLog"

    SLACK_WEBHOOK_URL: str = ""
    N8N_WEBHOOK_URL: str = ""
    WEBHOOK_TIMEOUT_SECONDS: int = 15

    CELEBRATIONS_CHANNEL_ID: str = ""
    CELEBRATIONS_ENABLE_BIRTHDAYS: bool = True
    CELEBRATIONS_ENABLE_ANNIVERSARIES: bool = True
    CELEBRATIONS_ADVANCE_NOTICE_DAYS: int = 0

    TENURE_ALERT_HOUR: int = 9
    SUBSCRIPTION_POLL_SECONDS: float = 5.0

    model_config = {
        "env_file": _ENV_FILE,
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }


settings = Settings()
