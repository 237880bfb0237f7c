from __future__ import annotations

import base64
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from courier import Response, build_url


class CourierModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ResponseData(CourierModel):
    url: str
    method: str
    status: int
    headers: dict[str, str] = Field(default_factory=dict)
    body: Any | None = None
    body_encoding: Literal["base64"] | None = Field(None, alias="bodyEncoding")

    @classmethod
    def from_response(cls, response: Response) -> ResponseData:
        config = response.config
        body = response.body
        encoding: Literal["base64"] | None = None
        if isinstance(body, (bytes, bytearray)):
            body = base64.b64encode(body).decode("ascii")
            encoding = "base64"
        return cls(
            url=build_url(config.url, config.params) if config is not None else "",
            method=config.method if config is not None else "",
            status=response.status,
            headers=dict(response.headers),
            body=body,
            body_encoding=encoding,
        )


class ErrorInfo(CourierModel):
    type: str
    message: str
    hint: str | None = None
    details: dict[str, Any] | None = None


class CommandMeta(CourierModel):
    duration_ms: int = Field(..., alias="durationMs")
    coalesce_ms: float | None = Field(None, alias="coalesceMs")


class CommandResult(CourierModel):
    ok: bool
    command: str
    data: Any | None = None
    warnings: list[str] = Field(default_factory=list)
    meta: CommandMeta
    error: ErrorInfo | None = None
