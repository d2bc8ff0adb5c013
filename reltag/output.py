"""
Output helpers shared by reltag commands.

Records go to stdout one JSON object per line so CI steps can pipe them
into ``jq``; ``--pretty`` renders the same records as a Rich table for
people reading a build log.

Usage:
    from reltag.output import emit, emit_error

    emit(annotations, pretty=pretty)
    emit_error("Tag already exists", type="tag_conflict", context={"tag": "1.0.0-main.0"})
"""

import json
import sys
from typing import Any, Dict, Iterable, List, Optional

from rich.console import Console
from rich.table import Table

# Column order for the record kinds reltag prints; other keys follow alphabetically
PREFERRED_COLUMNS = [
    'tag', 'version', 'branch', 'dist_tag', 'additional',
    'path', 'line', 'column', 'severity', 'title', 'message',
]
MAX_COLUMNS = 8


def emit(
    records: Iterable[Any],
    pretty: bool = False,
    columns: Optional[List[str]] = None,
    err: bool = False
) -> None:
    """
    Write records as JSONL, or as a table when ``pretty`` is set.

    Records may be dicts or objects with a ``to_dict()`` method.
    """
    if pretty:
        _emit_table(records, columns, err=err)
    else:
        _emit_jsonl(records, sys.stderr if err else sys.stdout)


def _to_dict(record: Any) -> Dict[str, Any]:
    if isinstance(record, dict):
        return record
    if hasattr(record, 'to_dict'):
        return record.to_dict()
    return {'value': str(record)}


def _emit_jsonl(records: Iterable[Any], stream) -> None:
    for record in records:
        stream.write(json.dumps(_to_dict(record), ensure_ascii=False) + "\n")
        stream.flush()


def _emit_table(records: Iterable[Any], columns: Optional[List[str]] = None, err: bool = False) -> None:
    rows = [_to_dict(r) for r in records]
    console = Console(stderr=err)

    if not rows:
        console.print("No results found")
        return

    columns = columns or _columns_for(rows)
    table = Table(show_header=True, header_style="bold")
    for name in columns:
        table.add_column(name)
    for row in rows:
        table.add_row(*(_cell(row.get(name)) for name in columns))
    console.print(table)


def _columns_for(rows: List[Dict[str, Any]]) -> List[str]:
    """Known columns first in a fixed order, then the rest by name."""
    keys = set().union(*(row.keys() for row in rows))
    ordered = [name for name in PREFERRED_COLUMNS if name in keys]
    ordered += sorted(keys.difference(ordered))
    return ordered[:MAX_COLUMNS]


def _cell(value: Any, width: int = 60) -> str:
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'yes' if value else 'no'
    if isinstance(value, (list, tuple)):
        return ', '.join(str(v) for v in value)
    text = str(value)
    return text if len(text) <= width else text[:width - 3] + '...'


def emit_error(
    error: str,
    type: str = "error",
    context: Optional[Dict[str, Any]] = None
) -> None:
    """
    Write one JSON error object to stderr.

    Args:
        error: Human-readable message
        type: Short error kind, e.g. "already_released" or "git"
        context: Extra fields such as the tag or git command
    """
    payload: Dict[str, Any] = {'error': error, 'type': type}
    if context:
        payload['context'] = context
    sys.stderr.write(json.dumps(payload, ensure_ascii=False) + "\n")
    sys.stderr.flush()
