"""Domain exceptions for normalization and CLI diagnostics."""

from __future__ import annotations


class InvalidInputError(TypeError):
    """Raised when detection or normalization receives a non-string value."""

    def __init__(self, operation: str, value: object) -> None:
        """Initialize an input error naming the rejected value type."""

        detail = f"{operation} expects a string, got {type(value).__name__}."
        super().__init__(detail)
        self.operation = operation
        self.detail = detail


class CommandStageError(RuntimeError):
    """Raised when a specific CLI stage fails before or around a batch run."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped command error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint


def require_text(operation: str, value: object) -> str:
    """Return `value` unchanged when it is a string, otherwise raise `InvalidInputError`."""

    if not isinstance(value, str):
        raise InvalidInputError(operation, value)
    return value
