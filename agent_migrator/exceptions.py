"""Exceptions raised by the migration core.

Everything derives from ``MigrationError`` so callers can catch the
whole family with a single ``except`` clause.
"""

from typing import Any, Dict, Optional


class MigrationError(Exception):
    """Base exception for migration errors."""

    def __init__(self, message: str = "", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details: Dict[str, Any] = details or {}


class StepActionFailure(MigrationError):
    """A step's action raised; aborts the flow at that step."""

    def __init__(self, step_id: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.step_id = step_id
        self.message = message


class InvalidFlowState(MigrationError):
    """Usage error: an operation was invoked on a flow or input in the wrong state."""


class CollaboratorUnavailable(MigrationError):
    """An optional collaborator (e.g. text generation) could not be reached.

    Always caught at the point of use and replaced with a fallback value.
    """

    def __init__(self, collaborator: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.collaborator = collaborator
