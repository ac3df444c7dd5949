"""Bridge configuration model."""

import ipaddress
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from tourbridge.models.persistence import ModelFile

DEFAULT_PORT = 50500
DEFAULT_BIND_ADDRESS = "127.0.0.1"
DEFAULT_CONFIG_PATH = Path.home() / ".tourbridge" / "config.json"


class BridgeConfig(BaseModel):
    """Listener and session settings."""

    # Listener
    port: int = Field(
        default=DEFAULT_PORT,
        ge=0,
        le=65535,
        description="TCP port the console connects to (0 = pick a free port)",
    )
    bind_address: str = Field(
        default=DEFAULT_BIND_ADDRESS,
        description="IPv4 address to bind (0.0.0.0 for all interfaces)",
    )
    backlog: int = Field(default=5, ge=1, description="listen() backlog")
    accept_timeout: float = Field(
        default=0.5,
        gt=0,
        description="Accept poll interval; bounds how long stop() waits for the accept thread (seconds)",
    )

    # Sessions
    recv_size: int = Field(default=1024, ge=1, description="Maximum bytes per socket read")
    read_timeout: float | None = Field(
        default=None,
        gt=0,
        description="Per-read deadline (seconds); None blocks until data or disconnect",
    )

    # Shutdown
    join_timeout: float = Field(
        default=2.0,
        gt=0,
        description="How long stop() waits for each worker thread (seconds)",
    )

    @field_validator("bind_address")
    @classmethod
    def validate_bind_address(cls, value: str) -> str:
        """Only IPv4 literals are accepted; the console protocol runs over IPv4."""
        try:
            ipaddress.IPv4Address(value)
        except ValueError as e:
            raise ValueError(f"'{value}' is not an IPv4 address") from e
        return value

    @classmethod
    def load_or_default(cls, path: Path | None = None) -> "BridgeConfig":
        """
        Load config from file or return default.

        Args:
            path: Path to config file. If None, uses ~/.tourbridge/config.json.

        Raises:
            ConfigFileInvalidError: If config file has invalid JSON syntax
            ConfigValidationError: If config values fail validation
        """
        return ModelFile(path or DEFAULT_CONFIG_PATH, cls).read_or_default()

    def save(self, path: Path | None = None) -> Path:
        """Write config to file, keeping the previous file as a .bak. Returns the path."""
        target = ModelFile(path or DEFAULT_CONFIG_PATH, BridgeConfig)
        target.write(self)
        return target.path
