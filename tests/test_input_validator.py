"""Tests for input validation and sanitization utilities."""

import pytest

from src.config import Config
from src.exceptions.validation_error import ValidationError
from src.utils.input_validator import (EMPTY_QUERY_MESSAGE,
                                       sanitize_industry_query, validate_url)


class TestSanitizeIndustryQuery:
    """Tests for sanitize_industry_query."""

    def test_collapses_whitespace(self) -> None:
        assert sanitize_industry_query("  Health   care \n") == "Health care"

    def test_strips_markup_and_control_characters(self) -> None:
        assert sanitize_industry_query('<b>Retail</b>\x00 "banking"') == "b Retail /b banking"

    @pytest.mark.parametrize("query", ["", "   ", "\t\n", "<>", None])
    def test_empty_query_rejected(self, query) -> None:
        with pytest.raises(ValidationError) as exc_info:
            sanitize_industry_query(query)

        assert exc_info.value.message == EMPTY_QUERY_MESSAGE
        assert str(exc_info.value) == "Please enter an industry or use-case"

    def test_too_long_query_rejected(self) -> None:
        config = Config(_env_file=None, max_query_length=10)

        with pytest.raises(ValidationError) as exc_info:
            sanitize_industry_query("pharmaceutical distribution", config)

        assert exc_info.value.context["max_length"] == 10

    def test_query_at_limit_accepted(self) -> None:
        config = Config(_env_file=None, max_query_length=10)

        assert sanitize_industry_query("healthcare", config) == "healthcare"


class TestValidateUrl:
    """Tests for validate_url."""

    def test_accepts_https(self) -> None:
        assert validate_url("https://example.com/a?b=1") == (True, "https://example.com/a?b=1")

    def test_lower_cases_scheme_and_host_and_drops_fragment(self) -> None:
        assert validate_url("HTTP://News.Example.COM/Story#top") == (True, "http://news.example.com/Story")

    @pytest.mark.parametrize(
        "url",
        ["", "   ", "example.com/page", "javascript:alert(1)", "mailto:someone@example.com", "ftp://example.com"],
    )
    def test_rejects_unusable_urls(self, url: str) -> None:
        assert validate_url(url) == (False, None)
