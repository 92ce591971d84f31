"""
Database maintenance commands for tagreflector.
"""

import json
from pathlib import Path
from typing import Optional

import click

from ..cli_utils import standard_command, add_common_options, output_rows
from ..database import TagStore, get_database_info, reset_database


@click.group('db')
def db_cmd():
    """Inspect, back up and restore the tag database."""
    pass


@db_cmd.command('info')
@add_common_options('quiet', 'format')
@click.pass_context
@standard_command
def db_info(ctx, quiet: bool, output_format: Optional[str]):
    """Show database location and record count."""
    store: TagStore = ctx.obj
    info = get_database_info(ctx.meta['config'], db_path=store.db_path)
    output_rows([info], output_format, list(info.keys()), title="Database")


@db_cmd.command('reset')
@click.option('--yes', is_flag=True, help='Do not ask for confirmation')
@add_common_options('quiet')
@click.pass_context
@standard_command
def db_reset(ctx, yes: bool, quiet: bool):
    """Delete every stored record and recreate the database."""
    if not yes:
        click.confirm("This deletes all cached tags. Continue?", abort=True)
    config = dict(ctx.meta['config'])
    store: TagStore = ctx.obj
    if store.db_path is not None:
        config['database'] = {'path': str(store.db_path)}
    reset_database(config)
    output_rows([{"reset": True}], None, ["reset"])


@db_cmd.command('dump')
@add_common_options('quiet')
@click.pass_obj
@standard_command
def db_dump(store: TagStore, quiet: bool):
    """Write every raw record to stdout as JSON lines."""
    for entry in store.dump():
        # Bytes that are not UTF-8 survive as surrogate escapes; db load reverses this
        value = entry["value"].decode("utf-8", "surrogateescape")
        print(json.dumps({"key": entry["key"], "value": value}), flush=True)


@db_cmd.command('load')
@click.argument('dump_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@add_common_options('quiet')
@click.pass_obj
@standard_command
def db_load(store: TagStore, dump_file: Path, quiet: bool):
    """Restore records from a file written by `db dump`."""
    with open(dump_file, 'r', encoding='utf-8') as f:
        entries = [json.loads(line) for line in f if line.strip()]
    count = store.load(entries)
    output_rows([{"loaded": count}], None, ["loaded"])
