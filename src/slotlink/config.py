"""Configuration loading from YAML + environment variables."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from dotenv import load_dotenv

DEFAULT_BASE_URL = "https://api.calendly.com"
TOKEN_ENV_VAR = "CALENDLY_TOKEN"


@dataclass
class ProviderConfig:
    base_url: str = DEFAULT_BASE_URL
    token: str = ""
    timeout_seconds: float = 15.0

    @property
    def has_token(self) -> bool:
        # Unresolved ${VAR} placeholders count as missing
        return bool(self.token) and not re.fullmatch(r"\$\{\w+\}", self.token)


@dataclass
class BookingConfig:
    link_ttl_hours: float = 2
    timezone: str = "UTC"  # reference clock for the "today" window rule


@dataclass
class RetryConfig:
    max_retries: int = 0  # 0 = fail fast, no retries
    base_delay: float = 1.0
    max_delay: float = 30.0


@dataclass
class WebConfig:
    host: str = "127.0.0.1"
    port: int = 8080
    allowed_origins: list[str] = field(default_factory=list)


@dataclass
class Config:
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    booking: BookingConfig = field(default_factory=BookingConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    web: WebConfig = field(default_factory=WebConfig)


def _resolve_env_vars(value: str) -> str:
    """Replace ${VAR} with environment variable values."""
    def replacer(match):
        var_name = match.group(1)
        return os.environ.get(var_name, match.group(0))
    return re.sub(r"\$\{(\w+)\}", replacer, value)


def _resolve_dict(d: dict) -> dict:
    """Recursively resolve env vars in a dict."""
    resolved = {}
    for k, v in d.items():
        if isinstance(v, str):
            resolved[k] = _resolve_env_vars(v)
        elif isinstance(v, dict):
            resolved[k] = _resolve_dict(v)
        elif isinstance(v, list):
            resolved[k] = [_resolve_env_vars(i) if isinstance(i, str) else i for i in v]
        else:
            resolved[k] = v
    return resolved


def load_config(
    config_path: str | Path | None = None,
    env_path: str | Path | None = None,
) -> Config:
    """Load config from an optional YAML file with env var resolution.

    Without a config path, defaults plus the environment are used.
    """
    if config_path is not None:
        config_path = Path(config_path).resolve()

    if env_path:
        load_dotenv(env_path)
    elif config_path is not None and (config_path.parent / ".env").exists():
        load_dotenv(config_path.parent / ".env")
    else:
        load_dotenv()

    raw: dict = {}
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}
        raw = _resolve_dict(raw)

    provider_data = raw.get("provider", {})
    provider = ProviderConfig(
        base_url=str(provider_data.get("base_url", DEFAULT_BASE_URL)).rstrip("/"),
        token=provider_data.get("token") or os.environ.get(TOKEN_ENV_VAR, ""),
        timeout_seconds=float(provider_data.get("timeout_seconds", 15.0)),
    )

    booking_data = raw.get("booking", {})
    booking = BookingConfig(
        link_ttl_hours=float(booking_data.get("link_ttl_hours", 2)),
        timezone=booking_data.get("timezone", "UTC"),
    )

    retry_data = raw.get("retry", {})
    retry = RetryConfig(
        max_retries=int(retry_data.get("max_retries", 0)),
        base_delay=float(retry_data.get("base_delay", 1.0)),
        max_delay=float(retry_data.get("max_delay", 30.0)),
    )

    web_data = raw.get("web", {})
    port = int(web_data.get("port", 8080))
    if not (1 <= port <= 65535):
        raise ValueError(f"Invalid web port: {port}. Must be 1-65535.")
    web = WebConfig(
        host=web_data.get("host", "127.0.0.1"),
        port=port,
        allowed_origins=web_data.get("allowed_origins", []),
    )

    return Config(provider=provider, booking=booking, retry=retry, web=web)
