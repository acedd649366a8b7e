"""CLI entry points for Lockbox."""

from lockbox.cli.cli import cli


def entrypoint() -> None:
    """Entry point for CLI."""
    cli()
