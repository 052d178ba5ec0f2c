"""Tests for Pydantic models.

This module contains unit tests for the graph, workflow, pain-point and
collaborator payload models.
"""

import pytest
from pydantic import ValidationError

from src.models.pain_point_model import PainPoint, SourceMention, StepAnalysis
from src.models.source_payloads import (PainPointRequest, PainPointResponse,
                                        WorkflowRequest, WorkflowResponse)
from src.models.stakeholder_graph import (RelationshipEdge, StakeholderGraph,
                                          StakeholderNode)
from src.models.workflow_model import (WorkflowSection, WorkflowStep,
                                       make_step_id)


def _graph() -> StakeholderGraph:
    return StakeholderGraph(
        nodes=[
            StakeholderNode(id="cfo", name="CFO", role="Finance"),
            StakeholderNode(id="ceo", name="CEO", role="Executive"),
            StakeholderNode(id="nurse", name="Head Nurse", role="Clinical"),
        ],
        edges=[
            RelationshipEdge(source="cfo", target="ceo", label="reports to"),
            RelationshipEdge(source="cfo", target="ceo", label="presents budget to"),
            RelationshipEdge(source="nurse", target="nurse", label="self-reviews"),
        ],
    )


class TestStakeholderGraph:
    """Tests for the graph model types."""

    def test_node_defaults(self) -> None:
        node = StakeholderNode(id="cfo", name="CFO", role="Finance")

        assert node.goals == []
        assert (node.x, node.y) == (0.0, 0.0)
        assert node.fx is None and node.fy is None
        assert node.is_pinned is False

    def test_node_is_pinned_when_both_pins_set(self) -> None:
        node = StakeholderNode(id="cfo", name="CFO", role="Finance", fx=1.0, fy=2.0)

        assert node.is_pinned is True

    def test_node_rejects_unknown_fields(self) -> None:
        with pytest.raises(ValidationError):
            StakeholderNode(id="cfo", name="CFO", role="Finance", department="x")

    def test_edge_is_frozen(self) -> None:
        edge = RelationshipEdge(source="cfo", target="ceo", label="reports to")

        with pytest.raises(ValidationError):
            edge.label = "manages"

    def test_node_ids_and_names_keep_order(self) -> None:
        graph = _graph()

        assert graph.node_ids() == ["cfo", "ceo", "nurse"]
        assert graph.node_names() == ["CFO", "CEO", "Head Nurse"]

    def test_get_node(self) -> None:
        graph = _graph()

        assert graph.get_node("ceo").name == "CEO"
        assert graph.get_node("missing") is None

    def test_degrees_count_parallel_edges_and_self_loops_once(self) -> None:
        assert _graph().degrees() == {"cfo": 2, "ceo": 2, "nurse": 1}


class TestWorkflowModels:
    """Tests for WorkflowStep and WorkflowSection."""

    def test_make_step_id(self) -> None:
        assert make_step_id("CFO", 0) == "CFO-step-0"
        assert make_step_id("Head Nurse", 3) == "Head Nurse-step-3"

    def test_step_accepts_wire_names(self) -> None:
        step = WorkflowStep(
            id="CFO-step-0",
            stakeholder="CFO",
            title="Approve Budget",
            estimatedTime="1 week",
            keyOutputs=["Approved budget"],
        )

        assert step.estimated_time == "1 week"
        assert step.key_outputs == ["Approved budget"]
        assert step.decisions == []

    def test_step_title_is_stripped(self) -> None:
        step = WorkflowStep(id="CFO-step-0", stakeholder="CFO", title="  Approve Budget ")

        assert step.title == "Approve Budget"

    def test_step_rejects_blank_title(self) -> None:
        with pytest.raises(ValidationError, match="cannot be empty"):
            WorkflowStep(id="CFO-step-0", stakeholder="CFO", title="   ")

    def test_section_defaults_to_collapsed(self) -> None:
        section = WorkflowSection(stakeholder="CFO")

        assert section.is_expanded is False
        assert section.steps == []

    def test_find_step(self) -> None:
        step = WorkflowStep(id="CFO-step-0", stakeholder="CFO", title="Approve Budget")
        section = WorkflowSection(stakeholder="CFO", steps=[step])

        assert section.find_step("CFO-step-0") == step
        assert section.find_step("CEO-step-0") is None


class TestPainPointModels:
    """Tests for SourceMention, PainPoint and StepAnalysis."""

    def test_platform_is_lower_cased(self) -> None:
        mention = SourceMention(platform=" LinkedIn ")

        assert mention.platform == "linkedin"

    def test_valid_url_is_normalised(self) -> None:
        mention = SourceMention(url="https://Example.com/post#comments")

        assert mention.url == "https://example.com/post"

    @pytest.mark.parametrize("url", ["javascript:alert(1)", "not a url", "ftp://example.com/file", ""])
    def test_unusable_url_is_blanked(self, url: str) -> None:
        assert SourceMention(url=url).url == ""

    def test_pain_point_requires_text(self) -> None:
        with pytest.raises(ValidationError):
            PainPoint(point="")

    def test_step_analysis_from_wire_payload(self) -> None:
        analysis = StepAnalysis.model_validate({
            "painPoints": [
                {"point": "Manual reconciliation", "sources": [{"platform": "news", "title": "t"}]},
            ],
        })

        assert len(analysis.pain_points) == 1
        assert analysis.pain_points[0].sources[0].platform == "news"

    def test_step_analysis_requires_pain_points(self) -> None:
        with pytest.raises(ValidationError):
            StepAnalysis.model_validate({})


class TestSourcePayloads:
    """Tests for collaborator request and response schemas."""

    def test_workflow_request_serialises_wire_names(self) -> None:
        request = WorkflowRequest(industry="healthcare", stakeholder="CFO", other_stakeholders=["CEO"])

        assert request.to_payload() == {
            "industry": "healthcare",
            "stakeholder": "CFO",
            "otherStakeholders": ["CEO"],
        }

    def test_pain_point_request_payload(self) -> None:
        request = PainPointRequest(
            industry="healthcare",
            stakeholder="CFO",
            step="Approve Budget",
            description="Sign off",
        )

        assert request.to_payload() == {
            "industry": "healthcare",
            "stakeholder": "CFO",
            "step": "Approve Budget",
            "description": "Sign off",
        }

    def test_workflow_response_rejects_non_sequence(self) -> None:
        with pytest.raises(ValidationError):
            WorkflowResponse.model_validate({"workflow": "Review Budget"})

    def test_workflow_response_requires_workflow(self) -> None:
        with pytest.raises(ValidationError):
            WorkflowResponse.model_validate({"steps": []})

    def test_pain_point_response_failure(self) -> None:
        response = PainPointResponse.model_validate({"success": False, "error": "quota exceeded"})

        assert response.success is False
        assert response.data is None
        assert response.error == "quota exceeded"
