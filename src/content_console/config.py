"""Configuration management for the content console."""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env file from config directory or project root
config_env = Path(__file__).parent.parent.parent / "config" / ".env"
if config_env.exists():
    load_dotenv(config_env)
else:
    load_dotenv()


TOKEN_ENV_VAR = "SANITY_TOKEN"


class Config:
    """Application configuration."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        # Sanity project settings
        self.project_id = os.getenv("SANITY_PROJECT_ID", "")
        self.dataset = os.getenv("SANITY_DATASET", "production")
        self.api_version = os.getenv("SANITY_API_VERSION", "2024-01-01").lstrip("v")

        # Read-only token snapshot for building request headers; the write gate
        # re-reads the environment on every save (see WriteCapability)
        self.token: Optional[str] = os.getenv(TOKEN_ENV_VAR) or None

        # HTTP settings
        self.request_timeout = float(
            os.getenv("CONTENT_CONSOLE_REQUEST_TIMEOUT", "30")
        )
        self.upload_concurrency = max(
            1, int(os.getenv("CONTENT_CONSOLE_UPLOAD_CONCURRENCY", "4"))
        )

        # Logging
        self.log_level = os.getenv("CONTENT_CONSOLE_LOG_LEVEL", "INFO").upper()

    @property
    def api_host(self) -> str:
        """Base URL of the project's API host."""
        return f"https://{self.project_id}.api.sanity.io/v{self.api_version}"

    @property
    def cdn_host(self) -> str:
        """Base URL for image assets of this project and dataset."""
        return f"https://cdn.sanity.io/images/{self.project_id}/{self.dataset}"


def get_config() -> Config:
    """Get application configuration."""
    return Config()
