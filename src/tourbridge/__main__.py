"""Allow running tourbridge with ``python -m tourbridge``."""

from tourbridge.cli.main import cli

if __name__ == "__main__":
    cli()
