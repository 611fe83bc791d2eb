"""Runtime configuration for the endpoint (environment) and the form client (YAML)."""
from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

DEFAULT_MODEL_ID = "gemini-1.5-flash"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"
DEFAULT_CLIENT_CFG = "configs/client.yaml"
DEFAULT_ENDPOINT_URL = "http://localhost:8000/api/generate"
DEFAULT_CLIENT_TIMEOUT_S = 30.0


@dataclass(frozen=True)
class ServerSettings:
    """Provider settings, resolved from the environment at request time."""
    api_key: str | None
    model_id: str = DEFAULT_MODEL_ID
    base_url: str = DEFAULT_BASE_URL
    timeout_s: float = 60.0

    @classmethod
    def from_env(cls) -> "ServerSettings":
        return cls(
            api_key=os.getenv("GEMINI_API_KEY") or None,
            model_id=os.getenv("GEMINI_MODEL_ID", DEFAULT_MODEL_ID),
            base_url=os.getenv("GEMINI_BASE_URL", DEFAULT_BASE_URL),
            timeout_s=float(os.getenv("GEMINI_TIMEOUT_S", "60")),
        )

    def __repr__(self) -> str:
        key = "***" if self.api_key else None
        return (
            f"ServerSettings(api_key={key!r}, model_id={self.model_id!r}, "
            f"base_url={self.base_url!r}, timeout_s={self.timeout_s!r})"
        )


@dataclass(frozen=True)
class ClientSettings:
    endpoint_url: str = DEFAULT_ENDPOINT_URL
    timeout_s: float = DEFAULT_CLIENT_TIMEOUT_S


def load_cfg(path: str) -> dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_client_settings(path: str = DEFAULT_CLIENT_CFG) -> ClientSettings:
    """
    Load form client settings from YAML.

    A missing file yields the defaults so the runner works from any directory.

    Args:
        path: YAML config path with optional endpoint_url and timeout_s keys.
    """
    if not Path(path).exists():
        return ClientSettings()
    cfg = load_cfg(path)
    return ClientSettings(
        endpoint_url=str(cfg.get("endpoint_url", DEFAULT_ENDPOINT_URL)),
        timeout_s=float(cfg.get("timeout_s", DEFAULT_CLIENT_TIMEOUT_S)),
    )
