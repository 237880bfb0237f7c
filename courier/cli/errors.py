from __future__ import annotations

from typing import Any


class CLIError(Exception):
    """
    A failure the CLI reports without a traceback.

    `error_type` lands in the JSON envelope; `hint` is printed under the message
    in table output.
    """

    def __init__(
        self,
        message: str,
        *,
        exit_code: int = 1,
        error_type: str = "error",
        hint: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code
        self.error_type = error_type
        self.hint = hint
        self.details = details

    @classmethod
    def usage(cls, message: str, *, hint: str | None = None) -> CLIError:
        return cls(message, exit_code=2, error_type="usage_error", hint=hint)
