"""
Mobbex integration exceptions.

Raised synchronously by readiness-gated operations (capture). The webhook
path never raises these to the caller; it reports failure kinds through
ReconcileResult instead.
"""
from typing import Any


class MobbexError(Exception):
    """
    Base class for Mobbex errors.

    Attributes:
        message: human readable message
        details: extra context for logs
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class PluginNotReadyError(MobbexError):
    """Integration disabled or credentials missing."""


class CaptureValidationError(MobbexError):
    """Required capture parameters are empty."""


class OperationFailedError(MobbexError):
    """Gateway unreachable or it answered with an unsuccessful result."""
