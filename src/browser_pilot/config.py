# config.py
# Environment-driven settings. Values come from the process environment,
# with a local .env file loaded first.

import os
from typing import Mapping

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from browser_pilot.completion import DEFAULT_BASE_URL, DEFAULT_MODEL


class ConfigError(Exception):
    """Raised when required settings are missing or malformed."""


ENV_VARS = {
    "api_key": "API_KEY",
    "api_base_url": "API_BASE_URL",
    "api_organization": "API_ORGANIZATION",
    "api_project": "API_PROJECT",
    "model_id": "MODEL_ID",
    "max_tokens": "MAX_TOKENS",
    "max_steps": "MAX_STEPS",
    "close_browser_on_done": "CLOSE_BROWSER_ON_DONE",
    "headless": "HEADLESS",
}


class Settings(BaseModel):
    api_key: str = Field(..., min_length=1)
    api_base_url: str = DEFAULT_BASE_URL
    api_organization: str | None = None
    api_project: str | None = None
    model_id: str = DEFAULT_MODEL
    max_tokens: int = Field(default=4096, gt=0)
    max_steps: int = Field(default=100, gt=0)
    close_browser_on_done: bool = True
    headless: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """
        Build settings from `environ` (defaults to os.environ after loading
        .env). Empty values count as unset.
        """
        if environ is None:
            load_dotenv()
            environ = os.environ

        values = {
            field: environ[var]
            for field, var in ENV_VARS.items()
            if environ.get(var, "").strip()
        }
        if "api_key" not in values:
            raise ConfigError("API_KEY is not set.")
        try:
            return cls.model_validate(values)
        except ValidationError as exc:
            raise ConfigError(f"Invalid settings: {exc}") from exc
