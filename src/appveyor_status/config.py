"""AppVeyor status configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_URL = "https://ci.appveyor.com"


@dataclass
class AppVeyorConfig:
    """Configuration for the AppVeyor API client, loaded from environment variables."""

    url: str = DEFAULT_URL
    token: str = ""
    timeout: float = 30
    ssl_verify: bool = True

    @classmethod
    def from_env(cls) -> AppVeyorConfig:
        url = os.getenv("APPVEYOR_URL", DEFAULT_URL).rstrip("/")
        token = os.getenv("APPVEYOR_API_TOKEN") or os.getenv("APPVEYOR_TOKEN", "")
        timeout = float(os.getenv("APPVEYOR_TIMEOUT", "30"))
        ssl_verify = os.getenv("APPVEYOR_SSL_VERIFY", "true").lower() not in (
            "false",
            "0",
            "no",
        )

        return cls(
            url=url,
            token=token,
            timeout=timeout,
            ssl_verify=ssl_verify,
        )

    @property
    def api_url(self) -> str:
        return f"{self.url.rstrip('/')}/api"

    def validate(self) -> None:
        if not self.url:
            msg = "APPVEYOR_URL must not be empty"
            raise ValueError(msg)
        if self.timeout <= 0:
            msg = f"APPVEYOR_TIMEOUT must be positive, got {self.timeout}"
            raise ValueError(msg)
