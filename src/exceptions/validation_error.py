"""Validation error exceptions.

This module defines the errors raised when raw stakeholder data or a user
query fails validation. A validation error is fatal to the current analysis
attempt: no partial graph is ever produced.
"""

from src.exceptions.base import BaseExplorerError


class ValidationError(BaseExplorerError):
    """Raised when validation fails.

    Used directly for query and graph-invariant failures, and as the base
    of the more specific graph input errors below.
    """

    pass


class MalformedStakeholder(ValidationError):
    """Raised when a stakeholder entry lacks a name or role, or its goals are not a list."""

    pass


class MalformedRelationship(ValidationError):
    """Raised when a relationship record lacks `from`, `to` or `label`."""

    pass


class DanglingReference(ValidationError):
    """Raised when a relationship points at a stakeholder id that does not exist."""

    pass
