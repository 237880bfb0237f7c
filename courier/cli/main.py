from __future__ import annotations

import courier

from .click_compat import RichGroup, click
from .context import CLIContext
from .logging import configure_logging, restore_logging


@click.group(
    name="courier",
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
    cls=RichGroup,
)
@click.option(
    "--output",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format.",
)
@click.option("--json", "json_flag", is_flag=True, help="Alias for --output json.")
@click.option("-q", "--quiet", is_flag=True, help="Suppress non-essential stderr output.")
@click.option("-v", "verbose", count=True, help="Increase verbosity (-v, -vv).")
@click.option("--base-url", type=str, default=None, help="Resolve relative URLs against this base.")
@click.option(
    "--location",
    type=str,
    default=None,
    help="Document origin used for same-origin (XSRF) checks. Defaults to --base-url.",
)
@click.option(
    "--coalesce-ms",
    type=float,
    default=None,
    envvar="COURIER_COALESCE_MS",
    help="Buffer completions for this many milliseconds before delivering them.",
)
@click.version_option(version=courier.__version__, prog_name="courier")
@click.pass_context
def cli(
    click_ctx: click.Context,
    *,
    output: str,
    json_flag: bool,
    quiet: bool,
    verbose: int,
    base_url: str | None,
    location: str | None,
    coalesce_ms: float | None,
) -> None:
    """Send HTTP requests through the courier interceptor pipeline."""
    if click_ctx.invoked_subcommand is None:
        # No args: show help; no network calls.
        click.echo(click_ctx.get_help())
        raise click.exceptions.Exit(0)

    click_ctx.obj = CLIContext(
        output="json" if json_flag else output,  # type: ignore[arg-type]
        quiet=quiet,
        verbosity=verbose,
        base_url=base_url,
        coalesce_ms=coalesce_ms,
        location=location,
    )

    previous_logging = configure_logging(verbosity=verbose)
    click_ctx.call_on_close(lambda: restore_logging(previous_logging))


def main() -> None:
    cli()


# Register commands
from .commands.request_cmds import get_cmd as _get_cmd  # noqa: E402
from .commands.request_cmds import request_cmd as _request_cmd  # noqa: E402
from .commands.version_cmd import version_cmd as _version_cmd  # noqa: E402

cli.add_command(_version_cmd)
cli.add_command(_request_cmd)
cli.add_command(_get_cmd)
