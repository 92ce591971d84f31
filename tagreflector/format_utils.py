"""
Output format utilities for tagreflector CLI commands.

Provides functions to format data as JSONL, JSON, YAML, TSV, or a table.
"""

import json
import os
from typing import Dict, List, Any, Iterable, Iterator, Optional

import yaml
from rich.console import Console
from rich.table import Table

OUTPUT_FORMATS = ['jsonl', 'json', 'yaml', 'tsv', 'table']


def get_format_from_env(default: str = 'jsonl') -> str:
    """Get the output format from TAGREFLECTOR_FORMAT, if set and valid."""
    value = os.environ.get('TAGREFLECTOR_FORMAT', '').lower()
    return value if value in OUTPUT_FORMATS else default


def format_output(data: Iterable[Dict[str, Any]], format: str,
                  fields: Optional[List[str]] = None) -> Iterator[str]:
    """
    Format data according to the specified format.

    Args:
        data: Iterable of dictionaries to format
        format: Output format (jsonl, json, yaml, tsv)
        fields: Optional list of fields to include (for TSV)

    Yields:
        Formatted strings for output
    """
    if format == "jsonl":
        yield from format_jsonl(data)
    elif format == "json":
        yield from format_json(data)
    elif format == "yaml":
        yield from format_yaml(data)
    elif format == "tsv":
        yield from format_tsv(data, fields)
    else:
        raise ValueError(f"Unknown format: {format}")


def format_jsonl(data: Iterable[Dict[str, Any]]) -> Iterator[str]:
    """Format data as JSON Lines (one JSON object per line)."""
    for item in data:
        yield json.dumps(item, ensure_ascii=False)


def format_json(data: Iterable[Dict[str, Any]]) -> Iterator[str]:
    """Format data as a single JSON array."""
    yield json.dumps(list(data), ensure_ascii=False, indent=2)


def format_yaml(data: Iterable[Dict[str, Any]]) -> Iterator[str]:
    """Format data as YAML."""
    yield yaml.dump(list(data), default_flow_style=False, allow_unicode=True, sort_keys=False)


def format_tsv(data: Iterable[Dict[str, Any]], fields: Optional[List[str]] = None) -> Iterator[str]:
    """Format data as tab-separated values with a header row."""
    rows = list(data)
    if not rows:
        return
    if fields is None:
        fields = list(rows[0].keys())
    yield "\t".join(fields)
    for row in rows:
        yield "\t".join(str(row.get(field, "")) for field in fields)


def print_table(console: Console, rows: List[Dict[str, Any]], columns: List[str],
                title: Optional[str] = None) -> None:
    """Render rows as a rich table."""
    table = Table(show_header=True, header_style="bold cyan", title=title)
    styles = ["green", "blue", "yellow"]
    for index, column in enumerate(columns):
        table.add_column(column.capitalize(), style=styles[index % len(styles)])
    for row in rows:
        table.add_row(*(str(row.get(column, "")) for column in columns))
    console.print(table)
