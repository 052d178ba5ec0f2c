"""Pytest configuration and shared fixtures.

This module contains pytest configuration and shared fixtures used
across all test files.
"""

import pytest

import src.config as config_module
from src.config import Config
from src.drilldown.cache import AnalysisCache
from src.utils.metrics import get_metrics_collector
from tests.fixtures.fake_sources import FakeDetailSource, FakeGraphSource


@pytest.fixture
def fast_config() -> Config:
    """Config with a single attempt and no backoff so failures are immediate."""
    return Config(
        _env_file=None,
        source_retry_attempts=1,
        source_retry_backoff_min=0.0,
        source_retry_backoff_max=0.0,
        source_timeout=5.0,
        layout_tick_interval=0.001,
    )


@pytest.fixture
def graph_source() -> FakeGraphSource:
    return FakeGraphSource()


@pytest.fixture
def detail_source() -> FakeDetailSource:
    return FakeDetailSource()


@pytest.fixture
def cache() -> AnalysisCache:
    return AnalysisCache()


@pytest.fixture(autouse=True)
def reset_global_state():
    """Reset the config singleton and the metrics collector around each test.

    This ensures test isolation: environment patches in one test do not
    leak into another through the cached Config, and metrics recorded by
    one test are not seen by the next.
    """
    config_module._config = None
    get_metrics_collector().clear_metrics()
    yield
    config_module._config = None
    get_metrics_collector().clear_metrics()
