"""Request and response schemas for the detail source.

Each collaborator operation has an explicit schema validated at the
boundary, so nothing past `src.drilldown.sources` ever handles an untyped
payload. Wire names are camelCase; Python attributes are snake_case.
"""

from typing import Any

from pydantic import BaseModel, Field

from src.models.pain_point_model import StepAnalysis


class WorkflowRequest(BaseModel):
    """Request for the workflow steps of one stakeholder."""

    model_config = {"extra": "forbid", "populate_by_name": True}

    industry: str = Field(..., description="Industry or use-case being analysed")
    stakeholder: str = Field(..., description="Stakeholder whose workflow is requested")

    other_stakeholders: list[str] = Field(
        default_factory=list,
        alias="otherStakeholders",
        description="Names of every other stakeholder in the current graph",
    )

    def to_payload(self) -> dict[str, Any]:
        """Serialise using wire names."""
        return self.model_dump(by_alias=True)


class PainPointRequest(BaseModel):
    """Request for the pain-point analysis of one workflow step."""

    model_config = {"extra": "forbid"}

    industry: str = Field(..., description="Industry or use-case being analysed")
    stakeholder: str = Field(..., description="Stakeholder owning the step")
    step: str = Field(..., description="Workflow step title")
    description: str = Field(default="", description="Workflow step description")

    def to_payload(self) -> dict[str, Any]:
        """Serialise using wire names."""
        return self.model_dump(by_alias=True)


class WorkflowStepPayload(BaseModel):
    """A workflow step as returned by the detail source, before an id is assigned."""

    model_config = {"extra": "ignore", "populate_by_name": True}

    title: str = Field(..., min_length=1)
    description: str = ""
    estimated_time: str = Field(default="", alias="estimatedTime")
    key_outputs: list[str] = Field(default_factory=list, alias="keyOutputs")
    decisions: list[str] = Field(default_factory=list)


class WorkflowResponse(BaseModel):
    """Detail source answer to a WorkflowRequest."""

    model_config = {"extra": "ignore"}

    workflow: list[WorkflowStepPayload] = Field(
        ...,
        description="Ordered workflow steps",
    )


class PainPointResponse(BaseModel):
    """Detail source answer to a PainPointRequest.

    `data` is present when `success` is true; `error` carries the reason
    otherwise.
    """

    model_config = {"extra": "ignore"}

    success: bool = Field(..., description="Whether the analysis succeeded")
    data: StepAnalysis | None = Field(default=None, description="Analysis result")
    error: str | None = Field(default=None, description="Failure reason")
