"""Pain point models for workflow step analysis.

A StepAnalysis is the memoised result of analysing one workflow step: the
pain points found and the source mentions that evidence each of them.
"""

from pydantic import BaseModel, Field, field_validator

from src.utils.input_validator import validate_url


class SourceMention(BaseModel):
    """A single piece of evidence for a pain point.

    Attributes:
        platform: Platform tag (e.g. "twitter", "linkedin", "news")
        title: Title of the cited item
        url: Location of the cited item
        date: ISO date of the cited item
        evidence: Verbatim quote supporting the pain point
    """

    model_config = {"extra": "ignore"}

    platform: str = Field(default="", description="Platform tag")
    title: str = Field(default="", description="Title of the cited item")
    url: str = Field(default="", description="URL of the cited item")
    date: str = Field(default="", description="ISO date of the cited item")
    evidence: str = Field(default="", description="Verbatim evidence quote")

    @field_validator("platform")
    @classmethod
    def normalize_platform(cls, value: str) -> str:
        """Lower-case the platform tag so lookups are case-insensitive."""
        return value.strip().lower()

    @field_validator("url")
    @classmethod
    def sanitize_url(cls, value: str) -> str:
        """Blank out URLs that are not absolute http(s) links.

        Args:
            value: URL reported by the detail source

        Returns:
            Sanitized URL, or an empty string when it is unusable as a link
        """
        is_valid, sanitized = validate_url(value)
        return sanitized if is_valid and sanitized else ""


class PainPoint(BaseModel):
    """An evidenced friction point tied to a workflow step."""

    model_config = {"extra": "ignore"}

    point: str = Field(
        ...,
        description="Pain point statement",
        min_length=1,
    )

    sources: list[SourceMention] = Field(
        default_factory=list,
        description="Ordered source mentions supporting the pain point",
    )


class StepAnalysis(BaseModel):
    """Pain-point analysis of one (industry, stakeholder, step) context."""

    model_config = {"extra": "ignore", "populate_by_name": True}

    pain_points: list[PainPoint] = Field(
        ...,
        alias="painPoints",
        description="Pain points found for the step",
    )
