"""CLI for the Device Password Rotator."""
import asyncio
import json
import sys

import click

from rotator import dependencies
from rotator.core.config import settings
from rotator.domain.errors import RotationError
from rotator.jobs.rotation_scheduler import tick
from rotator.logging_hardening import setup_logging


def _run(coro):
    try:
        return asyncio.run(coro)
    except RotationError as e:
        click.echo(f"Error [{e.code}]: {e}", err=True)
        sys.exit(1)


@click.group()
def cli():
    """Device Password Rotator CLI."""
    setup_logging(settings.LOG_LEVEL)


@cli.group()
def target():
    """Manage SEMP targets."""
    pass


@target.command("put")
@click.argument("name")
@click.option("--url", help="SEMP base URL, e.g. https://device:8080")
@click.option("--admin-username", help="Admin username for SEMP authentication")
@click.option("--admin-password", help="Admin password for SEMP authentication")
@click.option("--semp-version", help="SEMP schema version, e.g. soltr/10_4")
@click.option("--tls-skip-verify/--tls-verify", default=None, help="Skip TLS certificate verification")
def put_target(name, url, admin_username, admin_password, semp_version, tls_skip_verify):
    """Create or update a target."""
    fields = {
        "url": url,
        "admin_username": admin_username,
        "admin_password": admin_password,
        "semp_version": semp_version,
        "tls_skip_verify": tls_skip_verify,
    }
    service = dependencies.get_target_service()
    result = _run(service.write(name, {k: v for k, v in fields.items() if v is not None}))
    click.echo(f"✓ Target '{name}' saved")
    click.echo(json.dumps(result.redacted(), indent=2))


@target.command("list")
def list_targets():
    """List configured targets."""
    for name in _run(dependencies.get_target_service().list()):
        click.echo(name)


@cli.group()
def account():
    """Manage managed accounts."""
    pass


@account.command("put")
@click.argument("name")
@click.option("--target", "target_name", help="Target the account lives on")
@click.option("--remote-username", help="CLI username on the target")
@click.option("--rotation-period", type=int, help="Seconds between automatic rotations (0 disables)")
@click.option("--password-length", type=int, help="Generated password length (16-128)")
def put_account(name, target_name, remote_username, rotation_period, password_length):
    """Create or update a managed account."""
    fields = {
        "target": target_name,
        "remote_username": remote_username,
        "rotation_period": rotation_period,
        "password_length": password_length,
    }
    service = dependencies.get_account_service()
    result = _run(service.write(name, {k: v for k, v in fields.items() if v is not None}))
    click.echo(f"✓ Account '{name}' saved")
    click.echo(json.dumps(result.config_view(), indent=2, default=str))


@account.command("list")
def list_accounts():
    """List managed accounts."""
    for name in _run(dependencies.get_account_service().list()):
        click.echo(name)


@cli.command("rotate")
@click.argument("name")
def rotate(name: str):
    """Rotate an account's password now."""
    result = _run(dependencies.get_rotation_service().rotate(name))
    click.echo(f"✓ Rotated '{name}' at {result.last_rotated.isoformat()}")


@cli.command("creds")
@click.argument("name")
def creds(name: str):
    """Print an account's current credentials as JSON."""
    result = _run(dependencies.get_account_service().read_credentials(name))
    click.echo(result.model_dump_json(indent=2))


@cli.command("tick")
def run_tick():
    """Run one scheduler pass over all accounts."""
    _run(tick(dependencies.get_rotation_service(), dependencies.get_account_repository()))
    click.echo("✓ Tick complete")


if __name__ == "__main__":
    cli()
