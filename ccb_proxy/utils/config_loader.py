"""
Configuration loader for the CCB proxy
"""

import logging
import os
import re
from typing import Dict, Literal, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

DEFAULT_FORM_IDS = "connect_card_jdd=85"

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m)?\s*$")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, None: 1.0}


class ConfigError(ValueError):
    pass


def parse_duration(value) -> float:
    """
    Parse a duration into seconds.

    Accepts numbers (seconds) or strings such as "5", "5s", "500ms", "1m".
    """
    if isinstance(value, (int, float)):
        return float(value)
    match = _DURATION_RE.match(str(value))
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return float(amount) * _DURATION_UNITS[unit]


def parse_form_ids(raw: str) -> Dict[str, int]:
    """Parse "name=id,name=id" into a name -> form ID mapping."""
    form_ids: Dict[str, int] = {}
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        name, sep, form_id = item.partition("=")
        if not sep or not name.strip():
            raise ValueError(f"Invalid form ID entry: {item!r} (expected name=id)")
        try:
            form_ids[name.strip()] = int(form_id)
        except ValueError as exc:
            raise ValueError(f"Invalid form ID for {name.strip()!r}: {form_id!r}") from exc
    return form_ids


class CCBConfig(BaseModel):
    """Connection settings for the Church Community Builder API"""

    username: str = ""
    password: str = ""
    api_url: str = ""
    default_timeout: float = Field(default=5.0, gt=0)  # per attempt, seconds

    @field_validator("default_timeout", mode="before")
    @classmethod
    def _parse_timeout(cls, value):
        return parse_duration(value)

    @field_validator("api_url")
    @classmethod
    def _strip_slash(cls, value: str) -> str:
        return value.rstrip("/")


class RetryConfig(BaseModel):
    """Exponential backoff settings for calls to CCB"""

    initial_interval: float = Field(default=0.1, gt=0)
    multiplier: float = Field(default=2.0, ge=1.0)
    max_elapsed_time: float = Field(default=15.0, gt=0)

    @field_validator("initial_interval", "max_elapsed_time", mode="before")
    @classmethod
    def _parse_seconds(cls, value):
        return parse_duration(value)


class APIConfig(BaseModel):
    """Inbound API settings"""

    username: str = ""
    password: str = ""
    form_ids: Dict[str, int] = Field(default_factory=lambda: parse_form_ids(DEFAULT_FORM_IDS))
    log_level: str = "INFO"


class AppConfig(BaseModel):
    ccb: CCBConfig = Field(default_factory=CCBConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    api: APIConfig = Field(default_factory=APIConfig)
    integrations_mode: Literal["real", "mock"] = "real"


def load_app_config(env: Optional[Mapping[str, str]] = None) -> AppConfig:
    """
    Load and validate configuration from environment variables

    Args:
        env: Mapping to read from. Defaults to os.environ (after loading .env)

    Returns:
        Validated AppConfig object

    Raises:
        ConfigError: If a value is missing or doesn't match the schema
    """
    if env is None:
        load_dotenv()
        env = os.environ

    mode = env.get("INTEGRATIONS_MODE", "real").strip().lower() or "real"

    try:
        config = AppConfig(
            ccb=CCBConfig(
                username=env.get("CCB_USERNAME", ""),
                password=env.get("CCB_PASSWORD", ""),
                api_url=env.get("CCB_API_URL", ""),
                default_timeout=env.get("CCB_DEFAULT_TIMEOUT", "5s"),
            ),
            retry=RetryConfig(
                initial_interval=env.get("CCB_RETRY_INITIAL_INTERVAL", "100ms"),
                multiplier=env.get("CCB_RETRY_MULTIPLIER", "2.0"),
                max_elapsed_time=env.get("CCB_RETRY_MAX_ELAPSED", "15s"),
            ),
            api=APIConfig(
                username=env.get("API_USERNAME", ""),
                password=env.get("API_PASSWORD", ""),
                form_ids=parse_form_ids(env.get("CCB_FORM_IDS", DEFAULT_FORM_IDS)),
                log_level=env.get("LOG_LEVEL", "INFO").upper(),
            ),
            integrations_mode=mode,
        )
    except (ValidationError, ValueError) as e:
        logger.error(f"Configuration validation failed: {e}")
        raise ConfigError(f"Invalid configuration: {e}") from e

    if config.integrations_mode == "real" and not config.ccb.api_url:
        raise ConfigError("CCB_API_URL is not configured.")

    if not config.api.username:
        logger.warning("API_USERNAME is not set; all authenticated routes will reject requests.")

    logger.info(
        "Loaded configuration: mode=%s ccb_api_url=%s forms=%s",
        config.integrations_mode,
        config.ccb.api_url,
        sorted(config.api.form_ids),
    )
    return config
