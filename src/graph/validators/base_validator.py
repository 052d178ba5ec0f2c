"""Base validator class for graph validators.

Validators return ValidationResult objects instead of raising, so callers
can decide whether a finding is fatal (errors) or informational (warnings).
The graph builder turns errors into a ValidationError; the session only
logs warnings.
"""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field


class ValidationResult(BaseModel):
    """Result of a validation pass.

    Attributes:
        is_valid: Whether validation passed
        errors: Blocking findings
        warnings: Non-blocking findings
    """

    model_config = {"extra": "forbid"}

    is_valid: bool = Field(
        ...,
        description="Whether validation passed",
    )

    errors: list[str] = Field(
        default_factory=list,
        description="List of error messages",
    )

    warnings: list[str] = Field(
        default_factory=list,
        description="List of warning messages",
    )

    def add_error(self, message: str) -> None:
        """Record a blocking finding and mark the result invalid.

        Args:
            message: Error message; blank messages are ignored
        """
        if message and message.strip():
            self.errors.append(message.strip())
            self.is_valid = False

    def add_warning(self, message: str) -> None:
        """Record a non-blocking finding.

        Args:
            message: Warning message; blank messages are ignored
        """
        if message and message.strip():
            self.warnings.append(message.strip())

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    def get_summary(self) -> str:
        """Get a one-line summary of the result.

        Returns:
            Summary string with error and warning counts
        """
        error_count = len(self.errors)
        warning_count = len(self.warnings)

        if self.is_valid:
            if warning_count > 0:
                return f"Validation passed with {warning_count} warning(s)"
            return "Validation passed"

        parts = [f"Validation failed: {error_count} error(s)"]
        if warning_count > 0:
            parts.append(f"{warning_count} warning(s)")

        return ", ".join(parts)

    @classmethod
    def success(cls) -> "ValidationResult":
        """Create a passing result with no findings."""
        return cls(is_valid=True)

    @classmethod
    def failure(cls, *error_messages: str) -> "ValidationResult":
        """Create a failing result.

        Args:
            *error_messages: One or more error message strings

        Returns:
            ValidationResult with is_valid=False and the given errors
        """
        result = cls(is_valid=False)
        for message in error_messages:
            result.add_error(message)
        return result


class BaseValidator(ABC):
    """Base class for validators.

    Subclasses implement validate() and name. validate() must not raise for
    validation failures; it reports them in the returned ValidationResult.
    """

    @abstractmethod
    def validate(self, data: dict[str, Any]) -> ValidationResult:
        """Validate data and return the result.

        Args:
            data: Validator-specific input dictionary

        Returns:
            ValidationResult with status, errors and warnings
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Validator name used in logs."""
        pass
