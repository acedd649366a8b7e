"""Main CLI implementation."""

from pathlib import Path
from typing import Optional

import click
import structlog
from rich.console import Console
from rich.table import Table

from .. import __version__
from ..audit import EventType, audit_event, setup_logging
from ..config import LockboxConfig
from ..crypto import EncryptionError
from ..generator import generate_password
from ..storage import (
    CredentialRecord,
    ErrorKind,
    LoadFailedError,
    Vault,
    VaultSession,
    VaultState,
    VaultStoreError,
    inspect_state,
)

# Initialize logger
logger = structlog.get_logger()
console = Console()

MAX_PASSWORD_ATTEMPTS = 3
USER = "cli"


def print_table(title: str, rows: list[dict], columns: list[tuple[str, str]]) -> None:
    """Print data in a formatted table.

    Args:
        title: Table title
        rows: List of row dictionaries
        columns: List of (key, header) tuples defining columns
    """
    table = Table(title=title)
    for key, header in columns:
        table.add_column(header, style="cyan")

    for row in rows:
        values = [str(row.get(key, "")) for key, _ in columns]
        table.add_row(*values)

    console.print(table)


def mask(secret: str) -> str:
    return "*" * len(secret)


def open_vault(config: LockboxConfig) -> tuple[VaultSession, Vault]:
    """Prompt for the master password and load the vault.

    A wrong password is re-prompted up to MAX_PASSWORD_ATTEMPTS times. A
    missing vault yields an empty one, asking for the new master password
    twice.
    """
    state = inspect_state(config.vault_path, config.salt_path)
    first_run = state in (VaultState.UNINITIALIZED, VaultState.SALT_ONLY)

    for attempt in range(1, MAX_PASSWORD_ATTEMPTS + 1):
        password = click.prompt(
            "New master password" if first_run else "Master password",
            hide_input=True,
            confirmation_prompt=first_run,
        )
        session = VaultSession(
            config.vault_path, config.salt_path, password, config.kdf
        )
        try:
            vault = session.load_or_init()
        except LoadFailedError as e:
            audit_event(
                event_type=EventType.VAULT_LOAD,
                user=USER,
                success=False,
                details={"path": str(config.vault_path), "attempt": attempt},
                error=e,
            )
            if e.kind is not ErrorKind.AUTHENTICATION_FAILED:
                raise click.ClickException(str(e))
            click.echo(f"Error: {e}", err=True)
            continue
        except VaultStoreError as e:
            audit_event(
                event_type=EventType.VAULT_LOAD,
                user=USER,
                success=False,
                details={"path": str(config.vault_path)},
                error=e,
            )
            raise click.ClickException(str(e))

        audit_event(
            event_type=EventType.VAULT_INIT if first_run else EventType.VAULT_LOAD,
            user=USER,
            success=True,
            details={"path": str(config.vault_path), "records": len(vault.records)},
        )
        return session, vault

    raise click.ClickException(
        f"Giving up after {MAX_PASSWORD_ATTEMPTS} failed password attempts"
    )


def save_vault(session: VaultSession, vault: Vault) -> None:
    """Save the vault, reporting failures as CLI errors."""
    try:
        session.save(vault)
    except (VaultStoreError, EncryptionError) as e:
        audit_event(
            event_type=EventType.VAULT_SAVE,
            user=USER,
            success=False,
            details={"path": str(session.vault_path)},
            error=e,
        )
        raise click.ClickException(f"Failed to save vault: {e}")

    audit_event(
        event_type=EventType.VAULT_SAVE,
        user=USER,
        success=True,
        details={"path": str(session.vault_path), "records": len(vault.records)},
    )


@click.group()
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding the vault and salt files",
)
@click.option(
    "--vault",
    "vault_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Encrypted vault file",
)
@click.option(
    "--salt",
    "salt_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Salt file paired with the vault",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    default="INFO",
    help="Set logging level",
)
@click.version_option(version=__version__, prog_name="lockbox")
@click.pass_context
def cli(
    ctx: click.Context,
    data_dir: Optional[Path],
    vault_file: Optional[Path],
    salt_file: Optional[Path],
    log_level: str,
) -> None:
    """Lockbox: a password manager for the terminal."""
    settings = {}
    if data_dir is not None:
        settings["data_dir"] = data_dir
    if vault_file is not None:
        settings["vault_file"] = vault_file
    if salt_file is not None:
        settings["salt_file"] = salt_file

    config = LockboxConfig(**settings)
    # Before setup_logging, which would create data_dir/logs with 0750
    config.ensure_dirs()
    setup_logging(log_level=log_level, base_dir=config.log_path)
    logger.debug("cli_invoked", command=ctx.invoked_subcommand)
    ctx.obj = config


@cli.command()
@click.option("--service", "-s", required=True, help="Service name")
@click.option("--username", "-u", default=None, help="Username for the service")
@click.option(
    "--password",
    "-p",
    "secret",
    prompt="Password to store",
    hide_input=True,
    confirmation_prompt=True,
    help="Password to store",
)
@click.pass_obj
def add(config: LockboxConfig, service: str, username: Optional[str], secret: str) -> None:
    """Add or update the password of a service."""
    if not service.strip():
        raise click.BadParameter("Service name cannot be empty", param_hint="--service")

    session, vault = open_vault(config)
    existed = vault.find(service) is not None
    vault.add(
        CredentialRecord(service=service, username=username, secret=secret),
        replace=True,
    )
    save_vault(session, vault)

    audit_event(
        event_type=EventType.CRED_UPDATE if existed else EventType.CRED_CREATE,
        user=USER,
        success=True,
        details={"service": service},
    )
    click.echo(f"Password {'updated' if existed else 'added'} for: {service}")
    click.echo(f"   Username: {username or '(none)'}")
    click.echo(f"   Password: {mask(secret)}")


@cli.command()
@click.argument("length", type=click.IntRange(min=1), default=16)
@click.option("--no-symbols", is_flag=True, help="Only letters and digits")
def generate(length: int, no_symbols: bool) -> None:
    """Generate a random password of LENGTH characters."""
    password = generate_password(length, use_symbols=not no_symbols)
    audit_event(
        event_type=EventType.PASSWORD_GENERATE,
        user=USER,
        success=True,
        details={"length": length, "symbols": not no_symbols},
    )
    click.echo(password)


@cli.command(name="list")
@click.option("--verbose", "-v", is_flag=True, help="Show passwords in clear text")
@click.pass_obj
def list_records(config: LockboxConfig, verbose: bool) -> None:
    """List stored passwords."""
    _, vault = open_vault(config)
    records = vault.list_records()

    audit_event(
        event_type=EventType.CRED_LIST,
        user=USER,
        success=True,
        details={"count": len(records), "verbose": verbose},
    )

    if not records:
        click.echo("No passwords stored.")
        return

    rows = [
        {
            "service": r.service,
            "username": r.username or "(none)",
            "secret": r.secret if verbose else mask(r.secret),
        }
        for r in records
    ]
    columns = [
        ("service", "Service"),
        ("username", "Username"),
        ("secret", "Password"),
    ]
    print_table("Stored Passwords", rows, columns)


@cli.command()
@click.argument("service")
@click.option("--force", "-f", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
def remove(config: LockboxConfig, service: str, force: bool) -> None:
    """Remove the password of SERVICE."""
    session, vault = open_vault(config)

    if vault.find(service) is None:
        audit_event(
            event_type=EventType.CRED_DELETE,
            user=USER,
            success=False,
            details={"service": service, "reason": "not_found"},
        )
        raise click.ClickException(f"No password stored for: {service}")

    if not force and not click.confirm(f"Remove password of {service}?"):
        click.echo("Operation cancelled")
        return

    vault.remove(service)
    save_vault(session, vault)

    audit_event(
        event_type=EventType.CRED_DELETE,
        user=USER,
        success=True,
        details={"service": service},
    )
    click.echo(f"Password of '{service}' removed")


@cli.command()
@click.argument("service")
@click.pass_obj
def show(config: LockboxConfig, service: str) -> None:
    """Show the stored password of SERVICE."""
    _, vault = open_vault(config)
    record = vault.find(service)

    audit_event(
        event_type=EventType.CRED_READ,
        user=USER,
        success=record is not None,
        details={"service": service},
    )
    if record is None:
        raise click.ClickException(f"No password stored for: {service}")

    click.echo(f"Service: {record.service}")
    click.echo(f"User: {record.username or '(none)'}")
    click.echo(f"Password: {record.secret}")


def main() -> None:
    """CLI entry point."""
    cli()
