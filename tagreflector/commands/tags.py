"""
Tag record commands for tagreflector.

Lets an operator inspect the cache and feed it by hand, the same way an
external scanner does through TagStore.set().
"""

from pathlib import Path
from typing import Optional, Tuple

import click

from ..cli_utils import standard_command, add_common_options, output_rows
from ..database import TagStore, decode_tags
from ..domain import parse_tag_reference


@click.group('tags')
def tags_cmd():
    """Read and write the cached tags of repositories."""
    pass


@tags_cmd.command('get')
@click.argument('repository')
@add_common_options('quiet', 'format')
@click.pass_obj
@standard_command
def tags_get(store: TagStore, repository: str, quiet: bool, output_format: Optional[str]):
    """Show the tags stored for REPOSITORY.

    Examples:
        tagreflector tags get library/nginx
        tagreflector tags get library/nginx -f table
    """
    rows = [{"name": tag.name, "digest": tag.digest} for tag in store.get(repository)]
    output_rows(rows, output_format, ["name", "digest"], title=repository)


@tags_cmd.command('set')
@click.argument('repository')
@click.argument('tags', nargs=-1)
@click.option('--file', 'tags_file', type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help='Read tags from a JSON file (tag objects or bare names)')
@add_common_options('quiet')
@click.pass_obj
@standard_command
def tags_set(store: TagStore, repository: str, tags: Tuple[str, ...], tags_file: Optional[Path],
             quiet: bool):
    """Replace the tags stored for REPOSITORY.

    Each TAG is NAME or NAME@DIGEST. The previous record is discarded
    entirely.

    Examples:
        tagreflector tags set library/nginx 1.25.3@sha256:ab12 1.25.4
        tagreflector tags set library/nginx --file tags.json
    """
    if tags and tags_file:
        raise click.UsageError("give tags as arguments or with --file, not both")

    if tags_file:
        parsed = decode_tags(tags_file.read_bytes())
    else:
        parsed = [parse_tag_reference(ref) for ref in tags]

    store.set(repository, parsed)
    output_rows([{"repository": repository, "count": len(parsed)}], None, ["repository", "count"])


@tags_cmd.command('list')
@add_common_options('quiet', 'format')
@click.pass_obj
@standard_command
def tags_list(store: TagStore, quiet: bool, output_format: Optional[str]):
    """List repositories with a tag record.

    Examples:
        tagreflector tags list -f table
    """
    rows = [
        {"repository": repo, "count": len(store.get(repo))}
        for repo in store.repositories()
    ]
    output_rows(rows, output_format, ["repository", "count"], title="Repositories")


@tags_cmd.command('delete')
@click.argument('repository')
@add_common_options('quiet')
@click.pass_obj
@standard_command
def tags_delete(store: TagStore, repository: str, quiet: bool):
    """Remove the tag record for REPOSITORY."""
    deleted = store.delete(repository)
    output_rows([{"repository": repository, "deleted": deleted}], None, ["repository", "deleted"])
