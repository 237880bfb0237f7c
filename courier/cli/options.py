from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from .click_compat import click
from .context import CLIContext

F = TypeVar("F", bound=Callable[..., object])


def _override_output(ctx: click.Context, param: click.Parameter, value: object) -> object:
    # Group-level --json/--output can be repeated after the subcommand name.
    if not value or not isinstance(ctx.obj, CLIContext):
        return value
    ctx.obj.output = "json" if param.name == "json" else value  # type: ignore[assignment]
    return value


def output_options(fn: F) -> F:
    fn = click.option(
        "--output",
        type=click.Choice(["table", "json"]),
        default=None,
        help="Override output format for this command.",
        callback=_override_output,
        expose_value=False,
    )(fn)
    return click.option(
        "--json",
        "json",
        is_flag=True,
        help="Alias for --output json.",
        callback=_override_output,
        expose_value=False,
    )(fn)


_REQUEST_OPTIONS = (
    click.option(
        "-p",
        "--param",
        "params",
        multiple=True,
        metavar="KEY=VALUE",
        help="Query parameter (repeatable; repeated keys become lists).",
    ),
    click.option(
        "-H",
        "--header",
        "headers",
        multiple=True,
        metavar='"NAME: VALUE"',
        help="Request header (repeatable).",
    ),
    click.option("-i", "--include", is_flag=True, help="Show response headers."),
    click.option("--fail", is_flag=True, help="Exit with code 1 on a non-2xx status."),
    click.option("--with-credentials", is_flag=True, help="Send cookies from the client jar."),
)


def request_options(fn: F) -> F:
    for option in reversed(_REQUEST_OPTIONS):
        fn = option(fn)
    return fn
