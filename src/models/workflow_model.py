"""Workflow models for the stakeholder drill-down.

This module defines the workflow step returned by the detail source and the
per-stakeholder section that groups those steps in the explorer.
"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

SectionStatus = Literal["uninitialized", "loading", "ready"]


def make_step_id(stakeholder: str, index: int) -> str:
    """Build the positional identifier of a workflow step.

    Args:
        stakeholder: Stakeholder name owning the step
        index: Position of the step in the detail source response

    Returns:
        Identifier of the form ``"<stakeholder>-step-<index>"``
    """
    return f"{stakeholder}-step-{index}"


class WorkflowStep(BaseModel):
    """One stage in a stakeholder's workflow.

    The identifier is synthesised locally from the stakeholder name and the
    position of the step in the response, so reordering the response changes
    step identity.

    Attributes:
        id: Positional identifier (see make_step_id)
        stakeholder: Name of the owning stakeholder
        title: Step title
        description: Step description
        estimated_time: Free-form time estimate
        key_outputs: Ordered outputs produced by the step
        decisions: Ordered decisions taken during the step
    """

    model_config = {"extra": "ignore", "populate_by_name": True}

    id: str = Field(..., description="Positional step identifier", min_length=1)
    stakeholder: str = Field(..., description="Owning stakeholder name", min_length=1)

    title: str = Field(
        ...,
        description="Step title",
        min_length=1,
    )

    description: str = Field(
        default="",
        description="Step description",
    )

    estimated_time: str = Field(
        default="",
        alias="estimatedTime",
        description="Estimated time for the step",
    )

    key_outputs: list[str] = Field(
        default_factory=list,
        alias="keyOutputs",
        description="Key outputs of the step",
    )

    decisions: list[str] = Field(
        default_factory=list,
        description="Decisions made during the step",
    )

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str) -> str:
        """Reject blank titles since the title is part of the cache key."""
        if not value.strip():
            raise ValueError("Workflow step title cannot be empty")
        return value.strip()


class WorkflowSection(BaseModel):
    """The workflow steps of one stakeholder plus its expand/collapse flag.

    Sections are replaced rather than mutated when their state changes.
    """

    model_config = {"extra": "forbid"}

    stakeholder: str = Field(..., description="Stakeholder name", min_length=1)

    is_expanded: bool = Field(
        default=False,
        description="Whether the section is visibly expanded",
    )

    steps: list[WorkflowStep] = Field(
        default_factory=list,
        description="Ordered workflow steps",
    )

    def find_step(self, step_id: str) -> WorkflowStep | None:
        """Return the step with the given id, if it belongs to this section."""
        for step in self.steps:
            if step.id == step_id:
                return step
        return None
