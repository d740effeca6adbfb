"""
Runtime configuration.

Values are read from the environment (a local .env file is honored).
"""

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

# Engine default for index.max_result_window
INDEX_MAX_RESULT_WINDOW = 10_000
DEFAULT_PAGE_SIZE = 10


class Settings(BaseModel):
    """Settings shared by all request builders."""

    max_result_window: int = Field(default=INDEX_MAX_RESULT_WINDOW, ge=1)
    default_page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1)
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from environment variables.

        Reads:
        - REQUEST_FACTORY_MAX_RESULT_WINDOW
        - REQUEST_FACTORY_DEFAULT_PAGE_SIZE
        - REQUEST_FACTORY_LOG_LEVEL
        """
        return cls(
            max_result_window=int(
                os.getenv("REQUEST_FACTORY_MAX_RESULT_WINDOW", INDEX_MAX_RESULT_WINDOW)
            ),
            default_page_size=int(
                os.getenv("REQUEST_FACTORY_DEFAULT_PAGE_SIZE", DEFAULT_PAGE_SIZE)
            ),
            log_level=os.getenv("REQUEST_FACTORY_LOG_LEVEL", "WARNING"),
        )


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Apply the configured log level to the package logger."""
    settings = settings or Settings.from_env()
    logging.getLogger("request_factory").setLevel(settings.log_level.upper())
