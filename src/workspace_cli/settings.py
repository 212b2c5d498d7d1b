"""Settings management for workspace-cli."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support.

    Environment variables are prefixed with GWS_.
    Example: GWS_TOKEN_PATH=/path/to/token.json
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="GWS_",
    )

    # Google OAuth settings
    token_path: Path = Field(
        default=Path("~/.config/gws/token.json"),
        description="Path to the authorized-user token file",
    )
    client_id: str | None = Field(
        default=None,
        description="OAuth client ID, used when the token file does not carry one",
    )
    client_secret: str | None = Field(
        default=None,
        description="OAuth client secret, used when the token file does not carry one",
    )

    # Logging settings
    log_level: str = Field(
        default="WARNING",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    log_format: str = Field(
        default="pretty",
        description="Log format: 'pretty' for colored output, 'json' for structured",
    )

    @property
    def resolved_token_path(self) -> Path:
        return self.token_path.expanduser()


# Global settings instance
settings = Settings()
