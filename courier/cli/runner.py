from __future__ import annotations

import json
import sys
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from rich.console import Console

from .click_compat import click
from .context import CLIContext, build_result, error_info_for_exception, exit_code_for_exception
from .render import RenderSettings, render_result
from .results import CommandResult


@dataclass(frozen=True, slots=True)
class CommandOutput:
    data: Any | None = None
    warnings: list[str] | None = None
    include_headers: bool = False


CommandFn = Callable[[CLIContext, list[str]], CommandOutput]


def _stderr() -> Console:
    return Console(file=sys.stderr, force_terminal=False)


def _emit_json(result: CommandResult) -> None:
    payload = result.model_dump(by_alias=True, mode="json")
    if payload["meta"].get("coalesceMs") is None:
        payload["meta"].pop("coalesceMs", None)
    sys.stdout.write(json.dumps(payload, ensure_ascii=False) + "\n")


def _timing_footer(result: CommandResult) -> str:
    parts = [f"{result.meta.duration_ms}ms"]
    if result.meta.coalesce_ms is not None:
        parts.append(f"coalesced over {result.meta.coalesce_ms:g}ms")
    return f"{result.command}: " + ", ".join(parts)


def emit_result(ctx: CLIContext, result: CommandResult, *, include_headers: bool = False) -> None:
    if ctx.output == "json":
        _emit_json(result)
        return

    render_result(
        result,
        settings=RenderSettings(
            output="table",
            quiet=ctx.quiet,
            verbosity=ctx.verbosity,
            include_headers=include_headers,
        ),
    )
    if ctx.quiet:
        return
    stderr = _stderr()
    for warning in result.warnings:
        stderr.print(f"Warning: {warning}")
    if ctx.verbosity >= 1:
        stderr.print(_timing_footer(result), style="dim")


def run_command(ctx: CLIContext, *, command: str, fn: CommandFn) -> None:
    """
    Run a command body and emit its envelope.

    Exceptions are mapped to an error envelope and an exit code (2 for usage
    errors, 1 otherwise).
    """
    started = time.time()
    warnings: list[str] = []
    try:
        out = fn(ctx, warnings)
    except Exception as exc:
        result = build_result(
            ok=False,
            command=command,
            started_at=started,
            data=None,
            warnings=warnings,
            coalesce_ms=ctx.coalesce_ms,
            error=error_info_for_exception(exc),
        )
        emit_result(ctx, result)
        raise click.exceptions.Exit(exit_code_for_exception(exc)) from exc

    result = build_result(
        ok=True,
        command=command,
        started_at=started,
        data=out.data,
        warnings=[*warnings, *(out.warnings or [])],
        coalesce_ms=ctx.coalesce_ms,
    )
    emit_result(ctx, result, include_headers=out.include_headers)
