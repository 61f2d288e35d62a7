"""Configuration management using Pydantic Settings"""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_prefix="ABA_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # SECURITY: the app refuses access until a password is configured
    app_password: str = Field(
        default="", validation_alias=AliasChoices("ABA_APP_PASSWORD", "ASIC_APP_PASSWORD")
    )
    log_level: str = "INFO"

    # Descriptive record defaults shown in the form
    bsb: str = ""
    account: str = ""
    bank: str = "CBA"
    user_name: str = ""
    user_number: str = "301500"
    description: str = "PAYMENTS"


settings = Settings()
