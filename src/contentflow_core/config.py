"""Environment-driven configuration.

Each connector gets its own pydantic model so that a missing or malformed
value is reported against the connector that needs it. Values are read from
the process environment, with a `.env` file in the working directory loaded
first (existing environment variables win).
"""
import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator

from .errors import ConfigurationError

logger = logging.getLogger("contentflow-core.config")

DEFAULT_TOKENS_FILE = "google-tokens.json"


class GitHubConfig(BaseModel):
    """Source-host connector configuration."""

    token: str = Field(..., min_length=1)
    owner: str = Field(..., min_length=1)
    repo: str = Field(..., min_length=1)
    default_branch: str = Field("main", min_length=1)


class NotionConfig(BaseModel):
    """Document-workspace connector configuration."""

    token: str = Field(..., min_length=1)
    database_id: str = Field(..., min_length=1)


class GoogleCalendarConfig(BaseModel):
    """Calendar connector and OAuth bootstrap configuration."""

    client_id: str = Field(..., min_length=1)
    client_secret: str = Field(..., min_length=1)
    redirect_uri: str = Field(..., min_length=1)
    tokens_file: Path = Path(DEFAULT_TOKENS_FILE)

    @field_validator("redirect_uri")
    @classmethod
    def redirect_uri_is_http(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("must be an http(s) URL")
        return value


class ResearchConfig(BaseModel):
    """Research connector configuration. Mode is fixed for the process lifetime."""

    enabled: bool = False


def _env_flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() == "true"


def _build(model: type[BaseModel], name: str, env_names: dict[str, str], values: dict):
    """Validate a connector config, turning pydantic errors into ConfigurationError."""
    missing = [env_names[field] for field, value in values.items() if field in env_names and not value]
    if missing:
        raise ConfigurationError(
            f"{name} configuration missing. Please set {', '.join(missing)} environment variables."
        )
    try:
        return model(**{k: v for k, v in values.items() if v is not None})
    except PydanticValidationError as e:
        problems = "; ".join(
            f"{env_names.get(str(err['loc'][0]), err['loc'][0])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(f"{name} configuration invalid: {problems}") from e


class Settings:
    """Process settings read from an environment mapping.

    Connector configs are validated lazily so that `Settings` itself never
    fails; the service factory touches each property at startup, which makes
    a misconfigured connector fail fast.
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self.environ = dict(os.environ if environ is None else environ)
        self.log_level = self.environ.get("LOG_LEVEL", "INFO").upper()
        self.oauth_host = self.environ.get("OAUTH_HOST", "127.0.0.1")
        try:
            self.http_timeout = float(self.environ.get("HTTP_TIMEOUT", "30"))
            self.oauth_port = int(self.environ.get("OAUTH_PORT", "3000"))
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric setting: {e}") from e

    @property
    def github(self) -> GitHubConfig:
        env = {"token": "GITHUB_TOKEN", "owner": "GITHUB_OWNER", "repo": "GITHUB_REPO"}
        return _build(GitHubConfig, "GitHub", env, {
            "token": self.environ.get("GITHUB_TOKEN"),
            "owner": self.environ.get("GITHUB_OWNER"),
            "repo": self.environ.get("GITHUB_REPO"),
            "default_branch": self.environ.get("GITHUB_DEFAULT_BRANCH"),
        })

    @property
    def notion(self) -> NotionConfig:
        env = {"token": "NOTION_TOKEN", "database_id": "NOTION_DATABASE_ID"}
        return _build(NotionConfig, "Notion", env, {
            "token": self.environ.get("NOTION_TOKEN"),
            "database_id": self.environ.get("NOTION_DATABASE_ID"),
        })

    @property
    def google_calendar(self) -> GoogleCalendarConfig:
        env = {
            "client_id": "GOOGLE_CLIENT_ID",
            "client_secret": "GOOGLE_CLIENT_SECRET",
            "redirect_uri": "GOOGLE_REDIRECT_URI",
        }
        return _build(GoogleCalendarConfig, "Google Calendar", env, {
            "client_id": self.environ.get("GOOGLE_CLIENT_ID"),
            "client_secret": self.environ.get("GOOGLE_CLIENT_SECRET"),
            "redirect_uri": self.environ.get("GOOGLE_REDIRECT_URI"),
            "tokens_file": self.environ.get("GOOGLE_TOKENS_FILE"),
        })

    @property
    def research(self) -> ResearchConfig:
        return ResearchConfig(enabled=_env_flag(self.environ.get("WEB_SEARCH_ENABLED")))


@lru_cache()
def get_settings() -> Settings:
    """Load `.env` once and return the cached process settings."""
    if load_dotenv():
        logger.info("Loaded environment overrides from .env")
    return Settings()
