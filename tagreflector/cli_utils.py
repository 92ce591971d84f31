"""
Common CLI utilities and decorators for consistent command behavior.
"""

import json
import logging
import sys
from functools import wraps
from typing import Any, Dict, Iterable, List, Optional

import click
from rich.console import Console

from .exit_codes import SUCCESS, INTERRUPTED, get_exit_code_for_exception
from .format_utils import OUTPUT_FORMATS, format_output, get_format_from_env, print_table

logger = logging.getLogger(__name__)

console = Console()


def standard_command(func):
    """
    Decorator that provides standard CLI error behavior.

    - Errors are logged to stderr and, unless --quiet, reported as a JSON
      object on stdout so piped consumers always get parseable output
    - The exit code comes from the exception (see exit_codes)
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        quiet = kwargs.get('quiet', False)
        try:
            result = func(*args, **kwargs)
        except KeyboardInterrupt:
            logger.error("Interrupted by user")
            sys.exit(INTERRUPTED)
        except click.ClickException:
            raise
        except Exception as e:
            logger.error(f"Command failed: {e}")
            if not quiet:
                error_obj = {
                    "error": str(e),
                    "type": type(e).__name__,
                }
                print(json.dumps(error_obj, ensure_ascii=False), flush=True)
            sys.exit(get_exit_code_for_exception(e))
        sys.exit(result if isinstance(result, int) else SUCCESS)

    return wrapper


def output_rows(rows: Iterable[Dict[str, Any]], output_format: Optional[str],
                columns: List[str], title: Optional[str] = None) -> None:
    """
    Write result rows in the requested format.

    Args:
        rows: Result dictionaries
        output_format: One of format_utils.OUTPUT_FORMATS, or None for the
            TAGREFLECTOR_FORMAT default
        columns: Columns shown in table and TSV output
        title: Optional table title
    """
    if output_format is None:
        output_format = get_format_from_env('jsonl')

    if output_format == 'table':
        print_table(console, list(rows), columns, title=title)
        return

    for line in format_output(rows, output_format, columns if output_format == 'tsv' else None):
        print(line, flush=True)


# Standard options that many commands share
common_options = {
    'quiet': click.option('-q', '--quiet', is_flag=True,
                          help='Suppress JSON error output'),
    'format': click.option('-f', '--format', 'output_format',
                           type=click.Choice(OUTPUT_FORMATS),
                           help='Output format (default: jsonl, or from TAGREFLECTOR_FORMAT env)'),
}


def add_common_options(*option_names):
    """
    Decorator to add common options to a command.

    Example:
        @add_common_options('quiet', 'format')
        def my_command(quiet, output_format):
            ...
    """
    def decorator(func):
        for name in reversed(option_names):
            if name in common_options:
                func = common_options[name](func)
        return func
    return decorator
