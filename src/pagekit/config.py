"""Environment-driven configuration."""

import os
from dataclasses import dataclass

from pagekit.client import DEFAULT_TIMEOUT, ApiClient

DEFAULT_API_URL = "http://localhost:8000/api"

_TRUE_STRINGS = {"1", "true", "yes", "on"}


@dataclass
class Settings:
    """Runtime settings for the client and CLI."""

    api_url: str = DEFAULT_API_URL
    token: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    log_level: str = "INFO"
    log_json: bool = False

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "Settings":
        """Load settings from ``PAGEKIT_*`` environment variables.

        Raises:
            ValueError: If ``PAGEKIT_TIMEOUT`` is not a positive number.
        """
        env = os.environ if environ is None else environ

        timeout = float(env.get("PAGEKIT_TIMEOUT", DEFAULT_TIMEOUT))
        if timeout <= 0:
            raise ValueError(f"PAGEKIT_TIMEOUT must be positive, got {timeout}")

        return cls(
            api_url=env.get("PAGEKIT_API_URL", DEFAULT_API_URL),
            token=env.get("PAGEKIT_TOKEN") or None,
            timeout=timeout,
            log_level=env.get("PAGEKIT_LOG_LEVEL", "INFO").upper(),
            log_json=env.get("PAGEKIT_LOG_JSON", "false").strip().lower() in _TRUE_STRINGS,
        )

    def client(self, **kwargs) -> ApiClient:
        """Build an API client from these settings."""
        return ApiClient(self.api_url, token=self.token, timeout=self.timeout, **kwargs)
