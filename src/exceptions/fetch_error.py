"""Fetch error exceptions.

This module defines the errors raised when a collaborator (graph source or
detail source) fails or answers with a payload of the wrong shape. Fetch
errors are recoverable: the caller surfaces a dismissible message and keeps
its prior state.
"""

from src.exceptions.base import BaseExplorerError


class FetchError(BaseExplorerError):
    """Raised when a collaborator call fails.

    Covers transport failures, timeouts, exhausted retries and explicit
    `success: false` answers.
    """

    pass


class FormatError(FetchError):
    """Raised when a collaborator response does not match its schema.

    Handled exactly like any other FetchError. It is never retried since a
    malformed payload is not a transient condition.
    """

    pass


class WorkflowFetchError(FetchError):
    """Raised when the workflow steps for a stakeholder cannot be fetched."""

    pass


class PainPointFetchError(FetchError):
    """Raised when the pain-point analysis for a workflow step cannot be fetched."""

    pass
