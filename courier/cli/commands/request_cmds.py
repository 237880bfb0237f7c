from __future__ import annotations

import asyncio
import json
from typing import Any

from courier import Response

from ..click_compat import RichCommand, click
from ..context import CLIContext
from ..errors import CLIError
from ..options import output_options, request_options
from ..results import ResponseData
from ..runner import CommandOutput, run_command

_METHODS = ["GET", "HEAD", "DELETE", "POST", "PUT", "PATCH", "JSONP"]


def parse_params(values: tuple[str, ...]) -> dict[str, Any] | None:
    if not values:
        return None
    params: dict[str, Any] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise CLIError.usage(
                f"Invalid --param {item!r}; expected key=value",
                hint="Repeat -p to send a key more than once, e.g. -p tag=a -p tag=b.",
            )
        if key in params:
            existing = params[key]
            params[key] = [*existing, value] if isinstance(existing, list) else [existing, value]
        else:
            params[key] = value
    return params


def parse_header_options(values: tuple[str, ...]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for item in values:
        name, sep, value = item.partition(":")
        if not sep or not name.strip():
            raise CLIError.usage(f'Invalid --header {item!r}; expected "Name: value"')
        headers[name.strip()] = value.strip()
    return headers


def parse_data(data: str | None) -> Any | None:
    """JSON text becomes a structured body; anything else is sent verbatim."""
    if data is None:
        return None
    try:
        return json.loads(data)
    except json.JSONDecodeError:
        return data


def _perform(
    ctx: CLIContext,
    *,
    method: str,
    url: str,
    params: dict[str, Any] | None,
    headers: dict[str, str],
    body: Any | None,
    with_credentials: bool,
) -> Response:
    async def _go() -> Response:
        async with ctx.build_http() as http:
            return await http.call(
                url,
                method,
                params=params,
                headers=headers,
                body=body,
                with_credentials=with_credentials,
            )

    return asyncio.run(_go())


def _execute(
    ctx: CLIContext,
    *,
    command: str,
    method: str,
    url: str,
    params: tuple[str, ...],
    headers: tuple[str, ...],
    data: str | None,
    include: bool,
    fail: bool,
    with_credentials: bool,
) -> None:
    def fn(_: CLIContext, warnings: list[str]) -> CommandOutput:
        if data is not None and method in ("GET", "HEAD"):
            warnings.append(f"{method} requests usually carry no body; sending it anyway.")
        response = _perform(
            ctx,
            method=method,
            url=url,
            params=parse_params(params),
            headers=parse_header_options(headers),
            body=parse_data(data),
            with_credentials=with_credentials,
        )
        if fail and not response.ok:
            raise CLIError(
                f"HTTP {response.status} from {method} {url}",
                error_type="http_error",
                details={"status": response.status},
            )
        return CommandOutput(
            data=ResponseData.from_response(response).model_dump(by_alias=True, mode="json"),
            include_headers=include,
        )

    run_command(ctx, command=command, fn=fn)


@click.command(name="request", cls=RichCommand)
@click.argument("method", type=click.Choice(_METHODS, case_sensitive=False))
@click.argument("url")
@click.option("-d", "--data", type=str, default=None, help="Request body (JSON or text).")
@request_options
@output_options
@click.pass_obj
def request_cmd(
    ctx: CLIContext,
    method: str,
    url: str,
    data: str | None,
    params: tuple[str, ...],
    headers: tuple[str, ...],
    include: bool,
    fail: bool,
    with_credentials: bool,
) -> None:
    """Send METHOD to URL through the request pipeline."""
    _execute(
        ctx,
        command="request",
        method=method.upper(),
        url=url,
        params=params,
        headers=headers,
        data=data,
        include=include,
        fail=fail,
        with_credentials=with_credentials,
    )


@click.command(name="get", cls=RichCommand)
@click.argument("url")
@request_options
@output_options
@click.pass_obj
def get_cmd(
    ctx: CLIContext,
    url: str,
    params: tuple[str, ...],
    headers: tuple[str, ...],
    include: bool,
    fail: bool,
    with_credentials: bool,
) -> None:
    """GET URL through the request pipeline."""
    _execute(
        ctx,
        command="get",
        method="GET",
        url=url,
        params=params,
        headers=headers,
        data=None,
        include=include,
        fail=fail,
        with_credentials=with_credentials,
    )
