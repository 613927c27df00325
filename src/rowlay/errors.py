# -------------------------------------
# rowlay errors
# -------------------------------------
"""
Exception taxonomy for row-wise application.

Every error is fatal to the current call. Errors raised by the user
function itself are never wrapped and do not appear here.
"""
from __future__ import annotations

__all__ = [
    "LayError",
    "InvalidStrategyError",
    "TypeCoercionError",
    "InconsistentOutputShapeError",
    "InvalidOutputShapeError",
    "FunctionSpecError",
]


class LayError(Exception):
    """Base class for rowlay errors.

    Args:
        message: Human readable description
        row: Index of the offending row, when known
    """

    def __init__(self, message: str, row: int | None = None):
        self.row = row
        if row is not None:
            message = f"row {row}: {message}"
        super().__init__(message)


class InvalidStrategyError(LayError, ValueError):
    pass


class TypeCoercionError(LayError, TypeError):
    pass


class InconsistentOutputShapeError(LayError, ValueError):
    pass


class InvalidOutputShapeError(LayError, ValueError):
    pass


class FunctionSpecError(LayError, ValueError):
    pass
