"""
Configuration system for the swarmone client.

Provides the ClientConfig dataclass and helpers for loading it from
.swarmone/config.json and the environment.
"""

import json
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping


DEFAULT_CONFIG_PATH = Path(".swarmone/config.json")

# Environment variable selecting the API base URL; empty means relative paths
API_BASE_ENV = "SWARMONE_API_BASE"
ORIGIN_ENV = "SWARMONE_ORIGIN"

DEFAULT_TEMPLATE_ID = "task.reply.email.v1"


def _check_url(name: str, value: str) -> None:
    if value and not value.startswith(("http://", "https://")):
        raise ValueError(
            f"Invalid {name}: {value}. Must be empty or start with http:// or https://"
        )


@dataclass
class ClientConfig:
    """
    Configuration for the consensus API client.

    Attributes:
        api_base: Base URL prepended to every request path. Empty means
                  requests use relative paths resolved against `origin`
                  (reverse-proxy deployments).
        origin: Origin that relative request paths resolve against
                (default: http://localhost:8080)
        ask_path: Path of the ask endpoint (default: /v1/ask)
        health_path: Path of the health endpoint (default: /health)
        timeout: Overall request timeout in seconds (default: 30)
        template_id: Template id sent with ask requests; empty to let the
                     server pick its default
    """

    api_base: str = ""
    origin: str = "http://localhost:8080"
    ask_path: str = "/v1/ask"
    health_path: str = "/health"
    timeout: float = 30.0
    template_id: str = DEFAULT_TEMPLATE_ID

    def __post_init__(self):
        """Validate configuration values."""
        _check_url("api_base", self.api_base)
        _check_url("origin", self.origin)
        if not self.origin:
            raise ValueError("Invalid origin: must not be empty")
        for name in ("ask_path", "health_path"):
            value = getattr(self, name)
            if not value.startswith("/"):
                raise ValueError(f"Invalid {name}: {value}. Must start with '/'")
        if not self.timeout > 0:
            raise ValueError(f"Invalid timeout: {self.timeout}. Must be positive")

    def endpoint(self, path: str) -> str:
        """Return the request URL for `path`: absolute with api_base, else relative."""
        if not self.api_base:
            return path
        return self.api_base.rstrip("/") + path

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClientConfig":
        """Create ClientConfig from a dictionary, ignoring unknown keys."""
        defaults = cls()
        return cls(
            api_base=data.get("api_base", defaults.api_base),
            origin=data.get("origin", defaults.origin),
            ask_path=data.get("ask_path", defaults.ask_path),
            health_path=data.get("health_path", defaults.health_path),
            timeout=float(data.get("timeout", defaults.timeout)),
            template_id=data.get("template_id", defaults.template_id),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {f.name: getattr(self, f.name) for f in fields(self)}


def config_from_env(config: ClientConfig, environ: Mapping[str, str] | None = None) -> ClientConfig:
    """Return a copy of `config` with environment overrides applied."""
    if environ is None:
        environ = os.environ

    overrides: dict[str, Any] = {}
    api_base = environ.get(API_BASE_ENV, "").strip()
    if api_base:
        overrides["api_base"] = api_base
    origin = environ.get(ORIGIN_ENV, "").strip()
    if origin:
        overrides["origin"] = origin

    if not overrides:
        return config
    return replace(config, **overrides)


def load_config(
    config_path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> ClientConfig:
    """
    Load configuration from file and environment, or return defaults.

    Args:
        config_path: Path to config file. If None, looks for .swarmone/config.json
        environ: Environment mapping. If None, uses os.environ

    Returns:
        ClientConfig with file values, then environment overrides, applied
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH
    else:
        config_path = Path(config_path)

    config = ClientConfig()
    if config_path.exists():
        try:
            data = json.loads(config_path.read_text())
            if not isinstance(data, dict):
                raise ValueError("top-level value must be an object")
            config = ClientConfig.from_dict(data)
        except (json.JSONDecodeError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid config file {config_path}: {e}")

    return config_from_env(config, environ)


def save_config(config: ClientConfig, config_path: str | Path | None = None) -> None:
    """
    Save configuration to file.

    Args:
        config: ClientConfig to save
        config_path: Path to config file. If None, saves to .swarmone/config.json
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH
    else:
        config_path = Path(config_path)

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(config.to_dict(), indent=2))
