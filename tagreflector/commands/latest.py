"""
Latest-tag selection command for tagreflector.
"""

from typing import Optional

import click

from ..cli_utils import standard_command, add_common_options, output_rows
from ..config import get_selection_rule
from ..database import TagStore
from ..policy import PolicyChoice
from ..services import FilterSpec, SelectionRule, SelectionService


def rule_from_options(
    semver: Optional[str],
    alphabetical: Optional[str],
    numerical: Optional[str],
    pattern: Optional[str],
    extract: Optional[str],
) -> SelectionRule:
    """Build a selection rule from command-line options."""
    if extract and not pattern:
        raise click.UsageError("--extract requires --filter")

    choice = PolicyChoice(
        semver_range=semver,
        alphabetical_order=alphabetical,
        numerical_order=numerical,
    )
    filter_spec = FilterSpec(pattern=pattern, extract=extract or "") if pattern is not None else None
    return SelectionRule(policy=choice, filter_tags=filter_spec)


@click.command('latest')
@click.argument('repository')
@click.option('--semver', metavar='RANGE', help='Highest semantic version in RANGE (e.g. "^1.0")')
@click.option('--alphabetical', metavar='ORDER', help='Alphabetical ordering, ASC or DESC')
@click.option('--numerical', metavar='ORDER', help='Numerical ordering, ASC or DESC')
@click.option('--filter', 'pattern', metavar='REGEX', help='Only consider tags matching REGEX')
@click.option('--extract', metavar='TEMPLATE', help='Rewrite matching tags before ordering (e.g. "$1")')
@click.option('--rule', 'rule_name', help='Use a named rule from the "policies" config section')
@add_common_options('quiet', 'format')
@click.pass_context
@standard_command
def latest_cmd(ctx, repository, semver, alphabetical, numerical, pattern, extract, rule_name,
               quiet, output_format):
    """Select the latest tag of REPOSITORY from the cache.

    Exactly one of --semver, --alphabetical, --numerical or --rule is
    required. Order keywords may be empty, which means ASC.

    Examples:
        tagreflector latest library/nginx --semver "1.25.x"
        tagreflector latest my/app --numerical ASC --filter '^main-[a-f0-9]+-(?P<ts>\\d+)' --extract '$ts'
        tagreflector latest my/app --rule production
    """
    store: TagStore = ctx.obj
    if rule_name:
        if any(v is not None for v in (semver, alphabetical, numerical, pattern, extract)):
            raise click.UsageError("--rule cannot be combined with policy or filter options")
        rule = SelectionRule.from_dict(get_selection_rule(ctx.meta['config'], rule_name))
    else:
        rule = rule_from_options(semver, alphabetical, numerical, pattern, extract)

    tag = SelectionService(store, rule).select(repository)
    output_rows(
        [{"repository": repository, "name": tag.name, "digest": tag.digest}],
        output_format,
        ["repository", "name", "digest"],
    )
