"""Tests for the exception hierarchy."""

import pytest

from src.exceptions import (BaseExplorerError, DanglingReference, FetchError,
                            FormatError, MalformedRelationship,
                            MalformedStakeholder, PainPointFetchError,
                            ValidationError, WorkflowFetchError)


class TestBaseExplorerError:
    """Tests for BaseExplorerError."""

    def test_message_and_context(self) -> None:
        error = BaseExplorerError("Something failed", context={"stakeholder_id": "cfo"})

        assert error.message == "Something failed"
        assert error.context == {"stakeholder_id": "cfo"}
        assert str(error) == "Something failed"

    def test_context_defaults_to_empty_dict(self) -> None:
        error = BaseExplorerError("Something failed")

        assert error.context == {}

    def test_repr_includes_context(self) -> None:
        error = FetchError("Timed out", context={"operation": "fetch_graph"})

        assert repr(error) == "FetchError('Timed out', context={'operation': 'fetch_graph'})"

    def test_repr_without_context(self) -> None:
        assert repr(ValidationError("Bad input")) == "ValidationError('Bad input')"


class TestHierarchy:
    """Tests for the subclass relationships callers rely on."""

    @pytest.mark.parametrize(
        "error_class",
        [MalformedStakeholder, MalformedRelationship, DanglingReference],
    )
    def test_graph_input_errors_are_validation_errors(self, error_class) -> None:
        assert issubclass(error_class, ValidationError)
        assert issubclass(error_class, BaseExplorerError)

    @pytest.mark.parametrize(
        "error_class",
        [FormatError, WorkflowFetchError, PainPointFetchError],
    )
    def test_source_errors_are_fetch_errors(self, error_class) -> None:
        assert issubclass(error_class, FetchError)
        assert issubclass(error_class, BaseExplorerError)

    def test_validation_and_fetch_errors_are_distinct(self) -> None:
        assert not issubclass(FetchError, ValidationError)
        assert not issubclass(ValidationError, FetchError)

    def test_can_be_caught_as_base(self) -> None:
        with pytest.raises(BaseExplorerError):
            raise DanglingReference("Relationship 0 references non-existent stakeholder 'x'")
