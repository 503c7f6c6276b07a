"""
Environment-driven settings for the completion service.

The invocation core never reads the environment itself; this is the one
place that does, turning variables (and an optional .env file) into the
config objects the core accepts.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from dotenv import dotenv_values

from ..ratelimit import RateLimitConfig
from ..retry import RetryConfig

logger = logging.getLogger(__name__)


def _in_range(key: str, value, default, positive: bool):
    """Return `value` unless it is negative, NaN, or zero when `positive`; otherwise warn and use `default`."""
    if not value >= 0 or (positive and value == 0):
        qualifier = "positive" if positive else "non-negative"
        logger.warning(f"Ignoring {key}={value!r}, must be {qualifier}; using {default}")
        return default
    return value


def _get_int(env: Mapping[str, str], key: str, default: int, positive: bool = False) -> int:
    value = env.get(key)
    if value is None or value == "":
        return default
    try:
        return _in_range(key, int(value), default, positive)
    except ValueError:
        logger.warning(f"Ignoring non-integer {key}={value!r}, using {default}")
        return default


def _get_float(env: Mapping[str, str], key: str, default: float, positive: bool = False) -> float:
    value = env.get(key)
    if value is None or value == "":
        return default
    try:
        return _in_range(key, float(value), default, positive)
    except ValueError:
        logger.warning(f"Ignoring non-numeric {key}={value!r}, using {default}")
        return default


@dataclass(frozen=True)
class InvocationSettings:
    """
    Settings for calling the completion API.

    Attributes:
        api_key: OPENAI_API_KEY
        model: OPENAI_MODEL (default: gpt-4o-mini)
        base_url: OPENAI_BASE_URL
        max_requests: OPENAI_MAX_REQUESTS per window (default: 10)
        window: OPENAI_WINDOW_SECONDS (default: 60)
        max_retries: OPENAI_MAX_RETRIES (default: 3)
        base_delay: OPENAI_BASE_DELAY seconds (default: 1.0)
        max_delay: OPENAI_MAX_DELAY seconds (default: 60.0)
    """

    api_key: str = ""
    model: str = "gpt-4o-mini"
    base_url: str = "https://api.openai.com/v1"
    max_requests: int = 10
    window: float = 60.0
    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 60.0

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        dotenv_path: str | Path | None = None,
    ) -> "InvocationSettings":
        """
        Build settings from the environment.

        Values from `dotenv_path` (or a `.env` in the working directory) are
        used only where the environment has no value.

        Args:
            environ: Variables to read (default: os.environ)
            dotenv_path: .env file to load

        Returns:
            Parsed settings; malformed or out-of-range numbers fall back
            to defaults with a warning, so the derived configs always validate
        """
        path = Path(dotenv_path) if dotenv_path is not None else Path.cwd() / ".env"
        file_values = {}
        if path.is_file():
            file_values = {k: v for k, v in dotenv_values(path).items() if v is not None}
        env = {**file_values, **(os.environ if environ is None else environ)}

        defaults = cls()
        return cls(
            api_key=env.get("OPENAI_API_KEY", defaults.api_key),
            model=env.get("OPENAI_MODEL") or defaults.model,
            base_url=env.get("OPENAI_BASE_URL") or defaults.base_url,
            max_requests=_get_int(env, "OPENAI_MAX_REQUESTS", defaults.max_requests, positive=True),
            window=_get_float(env, "OPENAI_WINDOW_SECONDS", defaults.window, positive=True),
            max_retries=_get_int(env, "OPENAI_MAX_RETRIES", defaults.max_retries),
            base_delay=_get_float(env, "OPENAI_BASE_DELAY", defaults.base_delay),
            max_delay=_get_float(env, "OPENAI_MAX_DELAY", defaults.max_delay),
        )

    def rate_limit_config(self) -> RateLimitConfig:
        return RateLimitConfig(max_requests=self.max_requests, window=self.window)

    def retry_config(self) -> RetryConfig:
        return RetryConfig(
            max_retries=self.max_retries,
            base_delay=self.base_delay,
            max_delay=self.max_delay,
        )
