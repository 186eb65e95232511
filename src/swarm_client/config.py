"""Centralized client configuration."""

import tomllib
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

DEFAULT_DATA_DIR = Path.home() / ".local" / "swarm-client"
DEFAULT_HOST = "unix:///var/run/docker.sock"
DEFAULT_API_VERSION = "1.43"

_SCHEMES = ("unix", "tcp", "http", "https")


class Config(BaseModel):
    """Client-wide configuration."""

    model_config = ConfigDict(frozen=True)

    data_dir: Path = Field(description="Base directory for config file and logs")
    host: str = Field(default=DEFAULT_HOST, description="Engine endpoint: unix://, tcp:// or http(s):// URL")
    api_version: str | None = Field(
        default=DEFAULT_API_VERSION, pattern=r"^\d+\.\d+$", description="API version path prefix (None = unversioned)"
    )
    timeout: float = Field(default=30.0, gt=0, description="Connect/write timeout in seconds")
    stream_buffer: int = Field(default=16, ge=1, description="Undelivered chunks buffered per demultiplexed output")

    @field_validator("host")
    @classmethod
    def check_host(cls, value: str) -> str:
        """Reject endpoints with an unsupported scheme."""
        scheme = urlsplit(value).scheme
        if scheme not in _SCHEMES:
            msg = f"Unsupported host scheme '{scheme}' (expected one of {', '.join(_SCHEMES)})."
            raise ValueError(msg)
        return value

    @computed_field(description="Optional TOML configuration file")
    @property
    def config_path(self) -> Path:
        """Optional TOML configuration file."""
        return self.data_dir / "config.toml"

    @computed_field(description="Log file")
    @property
    def log_path(self) -> Path:
        """Log file."""
        return self.data_dir / "client.log"

    @computed_field(description="Unix socket of the engine, if the host is a unix:// URL")
    @property
    def socket_path(self) -> Path | None:
        """Unix socket of the engine, if the host is a unix:// URL."""
        parts = urlsplit(self.host)
        if parts.scheme != "unix":
            return None
        return Path(parts.netloc + parts.path)

    @computed_field(description="HTTP base URL including the API version prefix")
    @property
    def base_url(self) -> str:
        """HTTP base URL including the API version prefix."""
        parts = urlsplit(self.host)
        match parts.scheme:
            case "unix":
                root = "http://docker"
            case "tcp":
                root = f"http://{parts.netloc}"
            case _:
                root = self.host.rstrip("/")
        if self.api_version:
            return f"{root}/v{self.api_version}"
        return root

    @staticmethod
    def build(data_dir: Path | None = None, host: str | None = None) -> "Config":
        """Build a Config from defaults, optional config.toml, and explicit overrides."""
        resolved_dir = data_dir if data_dir is not None else DEFAULT_DATA_DIR
        config_path = resolved_dir / "config.toml"

        kwargs: dict[str, Any] = {"data_dir": resolved_dir}
        if config_path.is_file():
            with config_path.open("rb") as f:
                toml_data = tomllib.load(f)
            if isinstance(toml_data.get("host"), str):
                kwargs["host"] = toml_data["host"]
            if isinstance(toml_data.get("api_version"), str):
                kwargs["api_version"] = toml_data["api_version"]
            if isinstance(toml_data.get("timeout"), int | float):
                kwargs["timeout"] = toml_data["timeout"]
            if isinstance(toml_data.get("stream_buffer"), int):
                kwargs["stream_buffer"] = toml_data["stream_buffer"]
        if host is not None:
            kwargs["host"] = host

        return Config(**kwargs)
