"""Input validation and sanitization utilities.

This module validates the two kinds of untrusted text that reach the core:
- the free-text industry query typed by the user
- the source URLs quoted as pain-point evidence by the detail source
"""

import logging
import re
from typing import Any
from urllib.parse import urlparse, urlunparse

from src.config import get_config
from src.exceptions.validation_error import ValidationError

logger = logging.getLogger(__name__)

# Control characters and markup delimiters stripped from queries
DANGEROUS_CHARS = re.compile(r'[<>"\\\x00-\x1f\x7f-\x9f]')

ALLOWED_URL_SCHEMES = {'http', 'https'}

EMPTY_QUERY_MESSAGE = "Please enter an industry or use-case"


def sanitize_industry_query(query: str, config: Any | None = None) -> str:
    """Validate and sanitize an industry or use-case query.

    Args:
        query: Raw user input
        config: Optional Config instance. If not provided, uses get_config()

    Returns:
        Query trimmed, stripped of control and markup characters, with runs
        of whitespace collapsed to one space

    Raises:
        ValidationError: If the query is empty after sanitization or longer
            than Config.max_query_length

    Example:
        ```python
        sanitize_industry_query("  Health   care ")
        # Returns: "Health care"
        ```
    """
    if config is None:
        config = get_config()

    sanitized = DANGEROUS_CHARS.sub(' ', query or '')
    sanitized = re.sub(r'\s+', ' ', sanitized).strip()

    if not sanitized:
        raise ValidationError(
            EMPTY_QUERY_MESSAGE,
            context={"query_length": len(query or '')}
        )

    if len(sanitized) > config.max_query_length:
        raise ValidationError(
            f"Industry query is too long. Maximum length: {config.max_query_length} characters",
            context={
                "query_length": len(sanitized),
                "max_length": config.max_query_length
            }
        )

    logger.debug(
        f"Query sanitized: original_length={len(query)}, "
        f"sanitized_length={len(sanitized)}"
    )
    return sanitized


def validate_url(url: str) -> tuple[bool, str | None]:
    """Validate an evidence URL.

    Only absolute http(s) URLs are accepted; the fragment is dropped and the
    host lower-cased.

    Args:
        url: URL string to validate

    Returns:
        Tuple of (is_valid, sanitized_url); sanitized_url is None if invalid

    Example:
        ```python
        validate_url("https://Example.com/post#top")
        # Returns: (True, "https://example.com/post")

        validate_url("javascript:alert(1)")
        # Returns: (False, None)
        ```
    """
    if not url or not url.strip():
        return False, None

    url = url.strip()
    parsed = urlparse(url)

    if not parsed.scheme or not parsed.netloc:
        logger.debug(f"URL validation failed: missing scheme or netloc: {url}")
        return False, None

    scheme = parsed.scheme.lower()
    if scheme not in ALLOWED_URL_SCHEMES:
        logger.debug(f"URL validation failed: disallowed scheme '{scheme}': {url}")
        return False, None

    sanitized = urlunparse((
        scheme,
        parsed.netloc.lower(),
        parsed.path,
        parsed.params,
        parsed.query,
        ''
    ))
    return True, sanitized
