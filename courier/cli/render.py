from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from typing import Any

from rich.console import Console
from rich.table import Table
from rich.text import Text

from .results import CommandResult


@dataclass(frozen=True, slots=True)
class RenderSettings:
    output: str  # "table" | "json"
    quiet: bool
    verbosity: int
    include_headers: bool = False


def _error_title(error_type: str) -> str:
    mapping = {
        "usage_error": "Usage error",
        "network_error": "Network error",
        "http_error": "HTTP error",
        "cache_error": "Cache error",
    }
    return mapping.get((error_type or "").strip(), "Error")


def _status_style(status: int) -> str:
    if 200 <= status < 300:
        return "green"
    if 300 <= status < 400:
        return "yellow"
    return "red"


def _headers_table(headers: dict[str, str]) -> Table:
    table = Table(show_header=True, header_style="bold", box=None)
    table.add_column("Header")
    table.add_column("Value", overflow="fold")
    for name in sorted(headers):
        table.add_row(name, headers[name])
    return table


def _render_body(console: Console, body: Any) -> None:
    if body is None or body == "":
        return
    if isinstance(body, (dict, list)):
        console.print_json(json.dumps(body))
        return
    console.print(Text(str(body)))


def render_result(result: CommandResult, *, settings: RenderSettings) -> None:
    stdout = Console(file=sys.stdout, force_terminal=False, soft_wrap=True)
    stderr = Console(file=sys.stderr, force_terminal=False)

    if not result.ok:
        error = result.error
        if error is None:  # pragma: no cover
            return
        stderr.print(f"{_error_title(error.type)}: {error.message}")
        if error.hint and not settings.quiet:
            stderr.print(f"Hint: {error.hint}")
        return

    data = result.data
    if not isinstance(data, dict) or "status" not in data:
        if data is not None:
            _render_body(stdout, data)
        return

    status = int(data["status"])
    if not settings.quiet:
        stderr.print(
            Text(f"{data.get('method', '')} {data.get('url', '')} -> HTTP {status}"),
            style=_status_style(status),
        )
    if settings.include_headers or settings.verbosity >= 1:
        stdout.print(_headers_table(data.get("headers") or {}))
    if data.get("bodyEncoding") == "base64":
        stdout.print(Text("[binary body; use --json for base64]"))
        return
    _render_body(stdout, data.get("body"))
