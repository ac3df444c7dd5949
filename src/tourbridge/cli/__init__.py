"""Command line interface for tourbridge."""

from .main import cli

__all__ = ["cli"]
