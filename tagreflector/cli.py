#!/usr/bin/env python3

from pathlib import Path

import click

from tagreflector.config import load_config, setup_logging
from tagreflector.database import TagStore
from tagreflector.commands.tags import tags_cmd
from tagreflector.commands.latest import latest_cmd
from tagreflector.commands.db import db_cmd


@click.group()
@click.version_option(package_name='tagreflector')
@click.option('--db', 'db_path', type=click.Path(dir_okay=False, path_type=Path),
              help='Database file (default: TAGREFLECTOR_DB, config, or ~/.tagreflector/tags.db)')
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              help='Override the configured log level')
@click.pass_context
def cli(ctx, db_path, log_level):
    """tagreflector - Image tag cache and latest-tag policy engine.

    Stores the tags scanners find in image repositories and selects the
    tag to deploy with alphabetical, numerical or semver policies.
    """
    config = load_config()
    setup_logging(config, level=log_level)
    ctx.meta['config'] = config
    ctx.obj = TagStore(db_path=db_path, config=config)


cli.add_command(tags_cmd)
cli.add_command(latest_cmd)
cli.add_command(db_cmd)


def main():
    cli()

if __name__ == "__main__":
    main()
