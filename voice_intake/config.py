from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    database_url: str | None = Field(None, validation_alias="DATABASE_URL")

    intake_notify_email: str | None = Field(None, validation_alias="INTAKE_NOTIFY_EMAIL")
    mail_from: str = Field(
        "Intake Assistant <intake@localhost>", validation_alias="MAIL_FROM"
    )

    smtp_host: str | None = Field(None, validation_alias="SMTP_HOST")
    smtp_port: int = Field(587, validation_alias="SMTP_PORT")
    smtp_username: str | None = Field(None, validation_alias="SMTP_USERNAME")
    smtp_password: str | None = Field(None, validation_alias="SMTP_PASSWORD")
    smtp_use_ssl: bool = Field(False, validation_alias="SMTP_USE_SSL")
    smtp_starttls: bool = Field(True, validation_alias="SMTP_STARTTLS")
    smtp_timeout: float = Field(10.0, validation_alias="SMTP_TIMEOUT")

    log_level: str = Field("INFO", validation_alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
