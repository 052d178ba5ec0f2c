"""Tests for the collaborator retry and timeout policy.

This module contains unit tests for call_source_with_retry to verify retry
attempts, exhaustion, timeouts and the no-retry rule for format errors.
"""

import asyncio

import pytest

from src.config import Config
from src.exceptions.fetch_error import FetchError, FormatError
from src.utils.retry import call_source_with_retry


def _config(**overrides) -> Config:
    values = {
        "source_retry_attempts": 3,
        "source_retry_backoff_min": 0.0,
        "source_retry_backoff_max": 0.0,
        "source_timeout": 1.0,
    }
    values.update(overrides)
    return Config(_env_file=None, **values)


class TestCallSourceWithRetry:
    """Tests for call_source_with_retry."""

    @pytest.mark.asyncio
    async def test_successful_call_no_retry(self) -> None:
        """Test that successful calls don't trigger retries."""
        call_count = 0

        async def call() -> str:
            nonlocal call_count
            call_count += 1
            return "ok"

        result = await call_source_with_retry("fetch_graph", call, _config())

        assert result == "ok"
        assert call_count == 1

    @pytest.mark.asyncio
    async def test_retries_transient_failure(self) -> None:
        """Test that a failure followed by a success returns the success."""
        call_count = 0

        async def call() -> str:
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                raise ConnectionError("connection reset")
            return "ok"

        result = await call_source_with_retry("fetch_graph", call, _config())

        assert result == "ok"
        assert call_count == 3

    @pytest.mark.asyncio
    async def test_exhausted_retries_raise_fetch_error(self) -> None:
        """Test that exhausting all attempts raises FetchError with context."""
        call_count = 0

        async def call() -> str:
            nonlocal call_count
            call_count += 1
            raise ConnectionError("connection reset")

        with pytest.raises(FetchError) as exc_info:
            await call_source_with_retry("fetch_workflow", call, _config(source_retry_attempts=2))

        assert call_count == 2
        assert exc_info.value.message == "fetch_workflow failed after 2 attempt(s)"
        assert exc_info.value.context["error_type"] == "ConnectionError"
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    @pytest.mark.asyncio
    async def test_format_error_not_retried(self) -> None:
        """Test that FormatError is raised immediately and unchanged."""
        call_count = 0
        error = FormatError("Invalid workflow data format")

        async def call() -> str:
            nonlocal call_count
            call_count += 1
            raise error

        with pytest.raises(FormatError) as exc_info:
            await call_source_with_retry("fetch_workflow", call, _config())

        assert call_count == 1
        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_timeout_raises_fetch_error(self) -> None:
        """Test that an attempt exceeding source_timeout counts as a failure."""
        call_count = 0

        async def call() -> str:
            nonlocal call_count
            call_count += 1
            await asyncio.sleep(1)
            return "late"

        with pytest.raises(FetchError, match="timed out"):
            await call_source_with_retry(
                "fetch_pain_points",
                call,
                _config(source_retry_attempts=2, source_timeout=0.01),
            )

        assert call_count == 2
