"""Validators for stakeholder graphs.

- BaseValidator: Abstract base class for all validators
- ValidationResult: Errors and warnings produced by a validator
- GraphValidator: Structural invariants of a StakeholderGraph
"""

from src.graph.validators.base_validator import BaseValidator, ValidationResult
from src.graph.validators.graph_validator import GraphValidator

__all__ = [
    "BaseValidator",
    "ValidationResult",
    "GraphValidator",
]
