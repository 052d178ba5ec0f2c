"""Custom exception classes for the stakeholder explorer.

This package contains the exception hierarchy:
- BaseExplorerError: Base exception for all explorer errors
- ValidationError: Raised when graph input or a query fails validation
  (MalformedStakeholder, MalformedRelationship, DanglingReference)
- FetchError: Raised when a collaborator call fails
  (FormatError, WorkflowFetchError, PainPointFetchError)
"""

from src.exceptions.base import BaseExplorerError
from src.exceptions.validation_error import (DanglingReference,
                                             MalformedRelationship,
                                             MalformedStakeholder,
                                             ValidationError)
from src.exceptions.fetch_error import (FetchError, FormatError,
                                        PainPointFetchError,
                                        WorkflowFetchError)

__all__ = [
    "BaseExplorerError",
    "ValidationError",
    "MalformedStakeholder",
    "MalformedRelationship",
    "DanglingReference",
    "FetchError",
    "FormatError",
    "WorkflowFetchError",
    "PainPointFetchError",
]
