import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    SECRET: str
    DATABASE_URL: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    LOG_LEVEL: str = "INFO"
    RUN_MIGRATIONS_ON_STARTUP: bool = True

    # Messaging rules
    MESSAGE_EDIT_WINDOW_MINUTES: int = 15
    MESSAGE_MAX_LENGTH: int = 10000
    MESSAGE_PAGE_SIZE: int = 50

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    @classmethod
    def get_required_fields(cls) -> list[str]:
        """Get all required fields (those without default values)."""
        return [
            name for name, field in cls.model_fields.items() if field.is_required()
        ]

    def __init__(self, **kwargs: Any):
        try:
            super().__init__(**kwargs)
        except ValidationError as e:
            env_file = Path(".env")
            missing_fields = [
                field for field in self.get_required_fields() if not os.getenv(field)
            ]

            if not missing_fields:
                raise

            fields_str = "\n".join(f"- {field}" for field in missing_fields)
            example_env = "\n".join(
                f"{field}=your_{field.lower()}_here" for field in missing_fields
            )

            if not env_file.exists():
                error_msg = (
                    f"\n\nError: Missing required environment variables!"
                    f"\nMissing variables:\n{fields_str}"
                    f"\n\nFor local development, create a .env file with:"
                    f"\n{example_env}"
                    f"\n\nIn deployed environments, set these as environment variables."
                )
            else:
                error_msg = (
                    f"\n\nError: Missing required environment variables!"
                    f"\nMissing variables:\n{fields_str}"
                    f"\n\nPlease add these to your .env file or set as environment variables."
                )

            raise ValueError(error_msg) from e


settings = Settings()
