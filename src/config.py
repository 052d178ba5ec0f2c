"""Configuration management for the Stakeholder Explorer.

This module handles environment variable loading and provides type-safe
configuration access using Pydantic models. Layout, label placement and
collaborator call policy are all tunable from here.
"""

import logging
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Application configuration loaded from environment variables and .env file.

    All configuration values are automatically loaded from:
    1. `.env` file in the project root (if present)
    2. Environment variables (as fallback)

    Attributes:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        max_nodes_to_display: Upper bound on rendered stakeholders (default: 20)
        max_query_length: Maximum character length for industry queries
        layout_link_distance: Rest length of an edge in the force layout
        layout_charge_strength: Pairwise repulsion strength (negative repels)
        layout_center_strength: Fraction of the centroid offset removed per tick
        layout_alpha_min: Energy threshold below which the simulation stops
        layout_alpha_decay: Per-tick rate at which energy approaches its target
        layout_velocity_decay: Fraction of velocity lost per tick
        layout_drag_alpha_target: Energy target while a node is being dragged
        layout_two_node_spacing: Fixed separation for two-node graphs
        layout_min_spacing: Arc length reserved per node on the initial circle
        layout_degree_radius_step: Radius reduction per incident edge
        layout_node_radius: Smallest radius a node may start at
        layout_seed: Seed for the jiggle applied to coincident nodes
        layout_tick_interval: Seconds between ticks of the background runner
        edge_curvature: Control point offset as a fraction of edge length
        label_curve_offset: Label offset along the normal as a fraction of edge length
        label_offset_min: Base perpendicular label offset
        label_offset_step: Extra label offset per parallel edge
        label_offset_max: Cap on the base label offset
        label_spread_boost: Nonlinear boost applied to parallel label offsets
        source_timeout: Seconds allowed for a single collaborator call
        source_retry_attempts: Attempts per collaborator call (default: 2)
        source_retry_backoff_min: Minimum backoff time in seconds
        source_retry_backoff_max: Maximum backoff time in seconds
        metrics_enabled: Enable/disable metrics tracking (default: True)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )

    max_nodes_to_display: int = Field(
        default=20,
        description="Maximum number of stakeholders kept after graph reduction",
        ge=1,
        le=500,
    )

    max_query_length: int = Field(
        default=200,
        description="Maximum character length for industry queries",
        ge=10,
        le=5000,
    )

    # Force layout
    layout_link_distance: float = Field(
        default=300.0,
        description="Target rest distance between the endpoints of an edge",
        gt=0.0,
    )

    layout_charge_strength: float = Field(
        default=-2000.0,
        description="Many-body strength; negative values push nodes apart",
    )

    layout_center_strength: float = Field(
        default=0.1,
        description="Fraction of the centroid offset from the viewport centre removed each tick",
        ge=0.0,
        le=1.0,
    )

    layout_alpha_min: float = Field(
        default=0.001,
        description="Simulation stops once alpha drops below this value",
        gt=0.0,
        lt=1.0,
    )

    layout_alpha_decay: float = Field(
        default=0.0228,
        description="Per-tick decay of alpha toward its target (about 300 ticks to cool)",
        gt=0.0,
        lt=1.0,
    )

    layout_velocity_decay: float = Field(
        default=0.4,
        description="Fraction of node velocity removed every tick",
        ge=0.0,
        le=1.0,
    )

    layout_drag_alpha_target: float = Field(
        default=0.3,
        description="Alpha target while a drag gesture is active",
        ge=0.0,
        le=1.0,
    )

    layout_two_node_spacing: float = Field(
        default=250.0,
        description="Horizontal separation used for graphs with exactly two nodes",
        gt=0.0,
    )

    layout_min_spacing: float = Field(
        default=250.0,
        description="Arc length reserved per node when seeding the initial circle",
        gt=0.0,
    )

    layout_degree_radius_step: float = Field(
        default=20.0,
        description="Initial radius reduction per incident edge",
        ge=0.0,
    )

    layout_node_radius: float = Field(
        default=45.0,
        description="Lower bound on the initial placement radius",
        ge=0.0,
    )

    layout_seed: int = Field(
        default=0,
        description="Seed for the jiggle that separates coincident nodes",
    )

    layout_tick_interval: float = Field(
        default=1.0 / 60.0,
        description="Seconds between ticks when the layout runs as a background task",
        ge=0.0,
        le=1.0,
    )

    # Edge label placement
    edge_curvature: float = Field(
        default=0.2,
        description="Control point offset of curved edges as a fraction of edge length",
        ge=0.0,
        le=2.0,
    )

    label_curve_offset: float = Field(
        default=0.15,
        description="Label offset along the edge normal as a fraction of edge length, keeping labels on the curve",
        ge=0.0,
        le=2.0,
    )

    label_offset_min: float = Field(
        default=40.0,
        description="Base perpendicular offset for edge labels",
        ge=0.0,
    )

    label_offset_step: float = Field(
        default=5.0,
        description="Additional base offset per parallel edge",
        ge=0.0,
    )

    label_offset_max: float = Field(
        default=60.0,
        description="Upper bound on the base label offset",
        ge=0.0,
    )

    label_spread_boost: float = Field(
        default=0.3,
        description="Nonlinear boost applied to the offset of parallel labels",
        ge=0.0,
        le=5.0,
    )

    # Collaborator calls
    source_timeout: float = Field(
        default=60.0,
        description="Timeout in seconds for a single graph or detail source call",
        gt=0.0,
        le=600.0,
    )

    source_retry_attempts: int = Field(
        default=2,
        description="Maximum number of attempts for a collaborator call",
        ge=1,
        le=10,
    )

    source_retry_backoff_min: float = Field(
        default=0.5,
        description="Minimum backoff time in seconds for exponential backoff",
        ge=0.0,
        le=60.0,
    )

    source_retry_backoff_max: float = Field(
        default=10.0,
        description="Maximum backoff time in seconds for exponential backoff",
        ge=0.0,
        le=300.0,
    )

    metrics_enabled: bool = Field(
        default=True,
        description="Enable/disable timing of collaborator calls",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate log level is one of the allowed values.

        Args:
            value: Log level string to validate

        Returns:
            Uppercase log level string

        Raises:
            ValueError: If log level is not one of the allowed values
        """
        allowed_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in allowed_levels:
            raise ValueError(
                f"log_level must be one of {allowed_levels}, got {value}"
            )
        return upper_value


# Global configuration instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance.

    Loads configuration from `.env` file (if present) and environment variables
    on first call and returns the same instance on subsequent calls (singleton pattern).

    Returns:
        Config instance with loaded configuration values

    Raises:
        ValueError: If configuration values are invalid
    """
    logger = logging.getLogger(__name__)

    global _config
    if _config is None:
        _config = Config()
        logger.debug(
            f"Configuration loaded: "
            f"MAX_NODES_TO_DISPLAY={_config.max_nodes_to_display}, "
            f"SOURCE_RETRY_ATTEMPTS={_config.source_retry_attempts}, "
            f"SOURCE_TIMEOUT={_config.source_timeout}"
        )
    return _config


def reload_config() -> Config:
    """Reload configuration from environment variables.

    Useful for testing or when configuration changes at runtime.

    Returns:
        New Config instance with reloaded configuration values
    """
    global _config
    _config = Config()
    return _config
