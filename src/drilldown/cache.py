"""Session-scoped cache of pain-point analyses.

Analyses are keyed by a normalised (industry, stakeholder, step title)
triple. The cache is append-only for the lifetime of a graph: the first
analysis stored under a key is kept, later writes for the same key are
ignored. Only clear(), called when a new graph replaces the current one,
drops entries.

Concurrent requests for a key that is already being fetched join the
in-flight fetch instead of starting a second one.
"""

import asyncio
import logging
import re
from typing import Any, Awaitable, Callable

from src.models.pain_point_model import StepAnalysis

logger = logging.getLogger(__name__)

WHITESPACE = re.compile(r"\s+")


def normalize_cache_key(industry: str, stakeholder: str, step: str) -> str:
    """Build the cache key for a pain-point analysis.

    Each component is trimmed and lower-cased, runs of whitespace become a
    single underscore, and the components are joined with underscores.

    Args:
        industry: Industry or use-case
        stakeholder: Stakeholder name
        step: Workflow step title

    Returns:
        Normalised key, e.g. ``"healthcare_cfo_approve_budget"``
    """
    return "_".join(
        WHITESPACE.sub("_", component.strip().lower())
        for component in (industry, stakeholder, step)
    )


class AnalysisCache:
    """In-memory store of StepAnalysis results with request de-duplication.

    Attributes:
        hits: Lookups answered from a stored entry
        misses: Lookups that started a fetch
        joined: Lookups that joined a fetch already in flight
    """

    def __init__(self) -> None:
        self._entries: dict[str, StepAnalysis] = {}
        self._pending: dict[str, asyncio.Future] = {}
        # Bumped by clear() so fetches started before it cannot write back
        self._epoch = 0
        self.hits = 0
        self.misses = 0
        self.joined = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def contains(self, key: str) -> bool:
        return key in self._entries

    def get(self, key: str) -> StepAnalysis | None:
        """Return the stored analysis for a key, or None."""
        return self._entries.get(key)

    def put(self, key: str, analysis: StepAnalysis) -> StepAnalysis:
        """Store an analysis unless the key already has one.

        Args:
            key: Normalised cache key
            analysis: Analysis to store

        Returns:
            The analysis held under the key after the call
        """
        existing = self._entries.get(key)
        if existing is not None:
            if existing != analysis:
                logger.debug(f"Ignoring second analysis for cached key '{key}'")
            return existing
        self._entries[key] = analysis
        logger.debug(f"Cached analysis for '{key}' ({len(analysis.pain_points)} pain points)")
        return analysis

    def is_pending(self, key: str) -> bool:
        """Whether a fetch for the key is currently in flight."""
        return key in self._pending

    async def get_or_fetch(
        self,
        key: str,
        fetch: Callable[[], Awaitable[StepAnalysis]],
    ) -> StepAnalysis:
        """Return the cached analysis, fetching it at most once.

        If an entry exists it is returned without calling `fetch`. If a fetch
        for the same key is already running, the caller waits for that fetch.
        Otherwise `fetch` is started and its result stored under `key`.

        Cancelling a caller does not cancel the shared fetch.

        Args:
            key: Normalised cache key
            fetch: Zero-argument coroutine factory producing the analysis

        Returns:
            The cached or freshly fetched analysis

        Raises:
            Whatever `fetch` raises. Failures are not cached.
        """
        cached = self._entries.get(key)
        if cached is not None:
            self.hits += 1
            return cached

        task = self._pending.get(key)
        if task is None:
            self.misses += 1
            task = asyncio.ensure_future(self._fetch_and_store(key, fetch, self._epoch))
            task.add_done_callback(self._retrieve_exception)
            self._pending[key] = task
        else:
            self.joined += 1
            logger.debug(f"Joining in-flight analysis fetch for '{key}'")

        return await asyncio.shield(task)

    @staticmethod
    def _retrieve_exception(task: asyncio.Future) -> None:
        # Every caller may have been cancelled, leaving nobody to read the failure
        if not task.cancelled() and task.exception() is not None:
            logger.debug(f"Shared analysis fetch failed: {task.exception()!r}")

    async def _fetch_and_store(
        self,
        key: str,
        fetch: Callable[[], Awaitable[StepAnalysis]],
        epoch: int,
    ) -> StepAnalysis:
        try:
            analysis = await fetch()
        finally:
            if epoch == self._epoch:
                self._pending.pop(key, None)

        if epoch != self._epoch:
            logger.debug(f"Discarding analysis for '{key}' fetched before the cache was cleared")
            return analysis
        return self.put(key, analysis)

    def clear(self) -> None:
        """Drop every entry and orphan in-flight fetches."""
        self._epoch += 1
        self._entries.clear()
        self._pending.clear()
        self.hits = self.misses = self.joined = 0
        logger.debug("Analysis cache cleared")

    def get_stats(self) -> dict[str, Any]:
        """Get cache statistics.

        Returns:
            Dictionary with hits, misses, joined, size and pending counts
        """
        return {
            "hits": self.hits,
            "misses": self.misses,
            "joined": self.joined,
            "size": len(self._entries),
            "pending": len(self._pending),
        }
