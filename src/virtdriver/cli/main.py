#!/usr/bin/env python3
"""
virtdriver Command Line Interface
Query machine state and addresses and manage snapshots on a libvirt host.
"""
import sys
import logging
import click
from pathlib import Path
from typing import Optional

from virtdriver.core.unified_logger import LoggerConfig, LoggerFactory


def get_settings_lazy():
    """Lazy import and create settings to improve startup time"""
    from ..config.settings import ProviderSettings
    return ProviderSettings()


def parse_config_lazy(config_path: Path):
    """Lazy import configuration parsing to improve startup time"""
    from ..config.parser import parse_config
    from ..core.exceptions import ConfigurationError
    try:
        return parse_config(config_path)
    except ConfigurationError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)


def get_config(ctx):
    """Get configuration from context with fallback (lazy loading)"""
    ctx.ensure_object(dict)
    if 'config' not in ctx.obj:
        ctx.obj['config'] = get_settings_lazy()
    return ctx.obj['config']


def configure_logging(verbose: bool, log_file: Optional[Path]) -> None:
    LoggerFactory.set_default_config(LoggerConfig(
        name="virtdriver",
        component="virtdriver",
        file_path=log_file,
        console_level=logging.DEBUG if verbose else logging.WARNING
    ))


@click.group()
@click.option('--config', '-c', type=click.Path(exists=True, path_type=Path), help='Path to YAML configuration file')
@click.option('--uri', help='Libvirt URI (overrides configuration)')
@click.option('--log-file', type=click.Path(path_type=Path), help='Write a detailed log to this file')
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
@click.version_option(package_name='virtdriver')
@click.pass_context
def cli(ctx, config: Optional[Path], uri: Optional[str], log_file: Optional[Path], verbose: bool):
    """virtdriver - libvirt machine state, address and snapshot control"""
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose
    configure_logging(verbose, log_file)

    if 'config' not in ctx.obj:
        ctx.obj['config'] = parse_config_lazy(config) if config else get_settings_lazy()
    if uri:
        ctx.obj['config'] = ctx.obj['config'].model_copy(update={'uri': uri})


@cli.command()
@click.argument('machine_ids', nargs=-1, required=True)
@click.pass_context
def state(ctx, machine_ids):
    """Display machine state

    MACHINE_IDS: Libvirt domain UUIDs
    """
    from .commands import StateCommandHandler

    handler = StateCommandHandler(get_config(ctx), ctx.obj['verbose'], driver=ctx.obj.get('driver'))
    if not handler.execute(machine_ids=machine_ids):
        sys.exit(1)


@cli.command()
@click.argument('machine_id')
@click.pass_context
def ip(ctx, machine_id: str):
    """Display the IP address of a machine

    MACHINE_ID: Libvirt domain UUID
    """
    from .commands import AddressCommandHandler

    handler = AddressCommandHandler(get_config(ctx), ctx.obj['verbose'], driver=ctx.obj.get('driver'))
    if not handler.execute(machine_id=machine_id):
        sys.exit(1)


@cli.group()
def snapshot():
    """Manage machine snapshots"""


def _run_snapshot(ctx, action: str, machine_id: str, snapshot_name: str = "") -> None:
    from .commands import SnapshotCommandHandler

    handler = SnapshotCommandHandler(get_config(ctx), ctx.obj['verbose'], driver=ctx.obj.get('driver'))
    if not handler.execute(action=action, machine_id=machine_id, snapshot_name=snapshot_name):
        sys.exit(1)


@snapshot.command('create')
@click.argument('machine_id')
@click.argument('snapshot_name')
@click.pass_context
def snapshot_create(ctx, machine_id: str, snapshot_name: str):
    """Create or replace a snapshot"""
    _run_snapshot(ctx, 'create', machine_id, snapshot_name)


@snapshot.command('list')
@click.argument('machine_id')
@click.pass_context
def snapshot_list(ctx, machine_id: str):
    """List snapshot names"""
    _run_snapshot(ctx, 'list', machine_id)


@snapshot.command('delete')
@click.argument('machine_id')
@click.argument('snapshot_name')
@click.pass_context
def snapshot_delete(ctx, machine_id: str, snapshot_name: str):
    """Delete a snapshot"""
    _run_snapshot(ctx, 'delete', machine_id, snapshot_name)


@snapshot.command('revert')
@click.argument('machine_id')
@click.argument('snapshot_name')
@click.pass_context
def snapshot_revert(ctx, machine_id: str, snapshot_name: str):
    """Revert a machine to a snapshot (forced)"""
    _run_snapshot(ctx, 'revert', machine_id, snapshot_name)


def main():
    """Main entry point"""
    cli()


if __name__ == '__main__':
    main()
