"""Metrics tracking for collaborator calls.

This module provides a decorator and a collector for timing calls to the
graph source and the detail source. It records per-call duration and
outcome and aggregates them per component, so slow or failing
collaborators show up without extra instrumentation at each call site.
"""

import functools
import inspect
import logging
import time
from collections import defaultdict
from dataclasses import dataclass, field
from threading import Lock
from typing import Any, Callable, TypeVar

from src.config import get_config

logger = logging.getLogger(__name__)

# Type variable for function return type
T = TypeVar("T")


@dataclass
class ExecutionMetrics:
    """Metrics for a single call.

    Attributes:
        name: Name of the component being tracked
        execution_time: Execution time in seconds
        timestamp: Unix timestamp when the call started
        success: Whether the call completed without raising
        error: Error message if the call failed
    """
    name: str
    execution_time: float
    timestamp: float
    success: bool = True
    error: str | None = None


@dataclass
class AggregatedMetrics:
    """Aggregated metrics for a component.

    Attributes:
        name: Name of the component
        total_executions: Total number of calls
        successful_executions: Number of successful calls
        failed_executions: Number of failed calls
        total_execution_time: Total time in seconds
        average_execution_time: Average time in seconds
        min_execution_time: Fastest call in seconds
        max_execution_time: Slowest call in seconds
        metrics: Individual call metrics
    """
    name: str
    total_executions: int = 0
    successful_executions: int = 0
    failed_executions: int = 0
    total_execution_time: float = 0.0
    average_execution_time: float = 0.0
    min_execution_time: float = 0.0
    max_execution_time: float = 0.0
    metrics: list[ExecutionMetrics] = field(default_factory=list)


class MetricsCollector:
    """Collects and aggregates call metrics.

    Thread-safe so the collector can be shared with code running in an
    executor.
    """

    def __init__(self) -> None:
        self._metrics: dict[str, list[ExecutionMetrics]] = defaultdict(list)
        self._lock = Lock()

    def record_metrics(self, metrics: ExecutionMetrics) -> None:
        """Record metrics for one call."""
        with self._lock:
            self._metrics[metrics.name].append(metrics)

    def get_aggregated_metrics(self, name: str | None = None) -> dict[str, AggregatedMetrics]:
        """Aggregate metrics for one or all components.

        Args:
            name: Optional component name. If None, aggregates every component.

        Returns:
            Dictionary mapping component names to AggregatedMetrics
        """
        with self._lock:
            if name is not None:
                components = {name: list(self._metrics[name])} if name in self._metrics else {}
            else:
                components = {key: list(value) for key, value in self._metrics.items()}

        aggregated = {}
        for component_name, component_metrics in components.items():
            if not component_metrics:
                continue

            execution_times = [m.execution_time for m in component_metrics]
            successful = sum(1 for m in component_metrics if m.success)
            total_time = sum(execution_times)

            aggregated[component_name] = AggregatedMetrics(
                name=component_name,
                total_executions=len(component_metrics),
                successful_executions=successful,
                failed_executions=len(component_metrics) - successful,
                total_execution_time=total_time,
                average_execution_time=total_time / len(execution_times),
                min_execution_time=min(execution_times),
                max_execution_time=max(execution_times),
                metrics=component_metrics,
            )

        return aggregated

    def clear_metrics(self, name: str | None = None) -> None:
        """Clear metrics for one or all components."""
        with self._lock:
            if name:
                self._metrics.pop(name, None)
            else:
                self._metrics.clear()


# Global metrics collector instance
_metrics_collector: MetricsCollector | None = None


def get_metrics_collector() -> MetricsCollector:
    """Get the global metrics collector instance (singleton)."""
    global _metrics_collector
    if _metrics_collector is None:
        _metrics_collector = MetricsCollector()
    return _metrics_collector


def _record(name: str, started: float, error: BaseException | None) -> None:
    execution_time = time.perf_counter() - started
    metrics = ExecutionMetrics(
        name=name,
        execution_time=execution_time,
        timestamp=time.time() - execution_time,
        success=error is None,
        error=str(error) if error is not None else None,
    )
    get_metrics_collector().record_metrics(metrics)
    logger.debug(
        f"Metrics for {name}: time={execution_time:.3f}s, success={metrics.success}"
    )


def track_execution_time(component_name: str | None = None) -> Callable:
    """Decorator to track execution time and outcome.

    Works on plain functions and on coroutine functions. When
    Config.metrics_enabled is False the wrapped function runs untouched.

    Args:
        component_name: Name of the component being tracked. If None, uses
            the function's __name__ attribute.

    Returns:
        Decorator function

    Example:
        ```python
        @track_execution_time("workflow_source")
        async def fetch_workflow(source, request):
            return await source.fetch_workflow(request.to_payload())
        ```
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        name = component_name or func.__name__

        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                if not get_config().metrics_enabled:
                    return await func(*args, **kwargs)
                started = time.perf_counter()
                error: BaseException | None = None
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    error = e
                    raise
                finally:
                    _record(name, started, error)

            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            if not get_config().metrics_enabled:
                return func(*args, **kwargs)
            started = time.perf_counter()
            error: BaseException | None = None
            try:
                return func(*args, **kwargs)
            except Exception as e:
                error = e
                raise
            finally:
                _record(name, started, error)

        return wrapper

    return decorator
