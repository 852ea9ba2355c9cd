"""Main entry point for ``python -m ambientled``."""

from ambientled.cli.main import cli

if __name__ == "__main__":
    cli()
