"""Configuration models."""

from .config import DEFAULT_BIND_ADDRESS, DEFAULT_CONFIG_PATH, DEFAULT_PORT, BridgeConfig
from .persistence import ModelFile

__all__ = [
    "BridgeConfig",
    "DEFAULT_BIND_ADDRESS",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_PORT",
    "ModelFile",
]
