"""Main entry point for the Stakeholder Explorer core.

This module provides logging setup and convenience functions for running a
stakeholder analysis end to end: create a session, analyse an industry,
let the layout settle and return the resulting scene.

Example:
    ```python
    import asyncio

    from src.main import configure_logging, run_analysis

    configure_logging()
    frame = asyncio.run(run_analysis("healthcare", graph_source, detail_source))
    print(frame.positions)
    ```
"""

import logging

from src.config import Config, get_config
from src.drilldown.sources import DetailSource, GraphSource
from src.session import AnalysisSession, SceneFrame

logger = logging.getLogger(__name__)


def configure_logging(level: str | None = None) -> None:
    """Configure root logging.

    Args:
        level: Log level name. If not provided, uses Config.log_level
    """
    level = level or get_config().log_level
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_session(
    graph_source: GraphSource,
    detail_source: DetailSource,
    width: float = 800,
    height: float = 600,
    config: Config | None = None,
) -> AnalysisSession:
    """Create an AnalysisSession bound to the given collaborators.

    Args:
        graph_source: Collaborator returning raw stakeholder graphs
        detail_source: Collaborator returning workflows and pain points
        width: Viewport width
        height: Viewport height
        config: Optional Config instance. If not provided, uses get_config()

    Returns:
        A session with no graph committed yet
    """
    config = config or get_config()
    logger.debug(f"Creating session for a {width}x{height} viewport")
    return AnalysisSession(
        graph_source,
        detail_source,
        config=config,
        width=width,
        height=height,
    )


async def run_analysis(
    industry: str,
    graph_source: GraphSource,
    detail_source: DetailSource,
    width: float = 800,
    height: float = 600,
    config: Config | None = None,
    max_ticks: int = 1000,
) -> SceneFrame:
    """Analyse an industry and return the settled scene.

    Args:
        industry: Industry or use-case query
        graph_source: Collaborator returning raw stakeholder graphs
        detail_source: Collaborator returning workflows and pain points
        width: Viewport width
        height: Viewport height
        config: Optional Config instance. If not provided, uses get_config()
        max_ticks: Upper bound on layout ticks

    Returns:
        The frame of the last layout tick

    Raises:
        BaseExplorerError: The exception behind a failed analysis
    """
    session = create_session(graph_source, detail_source, width, height, config)
    try:
        if not await session.analyze(industry):
            raise session.last_error
        if session.notice:
            logger.warning(session.notice)

        frame = session.settle(max_ticks)
        logger.info(
            f"Analysis of '{session.industry}' settled after {frame.tick} ticks"
        )
        return frame
    finally:
        session.close()
