"""
Tests for the flow schema: edges, loading from data, graph validation.
"""

import pytest

from fitforge.errors import GraphIntegrityError
from fitforge.schemas.question_flow import ALL_QUESTIONS, QUESTION_FLOW, build_question_flow
from fitforge.schemas.questionnaire import (
    GOAL_BRANCH,
    GOAL_BRANCH_SENTINEL,
    INJURY_CHAIN,
    INJURY_CHAIN_SENTINEL,
    TERMINAL,
    FlowGraph,
    LiteralEdge,
    Question,
    QuestionType,
    edge_from_value,
)


def _flow_data(**overrides):
    data = {
        "version": "1",
        "startId": "goals",
        "goalQuestionId": "goals",
        "goalEntries": {"strength": "lifts"},
        "postGoalsId": "gate",
        "injuryGateId": "gate",
        "injuryQuestionId": "areas",
        "postInjuryId": "done",
        "categories": [{"id": "main", "label": "Main"}],
        "questions": {
            "goals": {
                "id": "goals", "category": "main", "type": "multi-select",
                "options": [{"id": "strength", "label": "Strength"}],
                "minSelections": 1, "maxSelections": 1,
                "defaultNextId": GOAL_BRANCH_SENTINEL,
            },
            "lifts": {"id": "lifts", "category": "main", "type": "number-input",
                      "min": 0, "max": 500, "defaultNextId": GOAL_BRANCH_SENTINEL},
            "gate": {
                "id": "gate", "category": "main", "type": "single-select",
                "options": [{"id": "none", "label": "No"}, {"id": "yes", "label": "Yes"}],
                "branches": [{"condition": ["yes"], "nextQuestionId": "areas"}],
                "defaultNextId": "done",
            },
            "areas": {"id": "areas", "category": "main", "type": "injury-selector",
                      "options": [{"id": "lumbar-spine", "label": "Back"}],
                      "defaultNextId": INJURY_CHAIN_SENTINEL},
            "done": {"id": "done", "category": "main", "type": "text-input"},
        },
    }
    data.update(overrides)
    return data


# ═══════════════════════════════════════════════════════════════
# EDGES
# ═══════════════════════════════════════════════════════════════

class TestEdges:
    """Edge values and sentinels."""

    def test_sentinels(self):
        assert edge_from_value(GOAL_BRANCH_SENTINEL) is GOAL_BRANCH
        assert edge_from_value(INJURY_CHAIN_SENTINEL) is INJURY_CHAIN
        assert edge_from_value(None) is TERMINAL

    def test_literal(self):
        assert edge_from_value("gym-access") == LiteralEdge("gym-access")


# ═══════════════════════════════════════════════════════════════
# LOADING
# ═══════════════════════════════════════════════════════════════

class TestFromDict:
    """Loading a flow from plain data."""

    def test_flow_from_dict(self):
        flow = FlowGraph.from_dict(_flow_data()).validate()
        assert flow.start_id == "goals"
        assert flow.get("goals").default_next is GOAL_BRANCH
        assert flow.get("areas").default_next is INJURY_CHAIN
        assert flow.get("done").default_next is TERMINAL
        assert flow.get("gate").branches[0].condition == ("yes",)
        assert flow.get("lifts").type == QuestionType.NUMBER_INPUT

    def test_question_to_dict(self):
        data = QUESTION_FLOW.get("primary-goal").to_dict()
        assert data["type"] == "multi-select"
        assert data["maxSelections"] == 2
        assert [o["id"] for o in data["options"]] == ["bodybuilding", "powerlifting", "athleticism"]
        assert "branches" not in data


# ═══════════════════════════════════════════════════════════════
# VALIDATION
# ═══════════════════════════════════════════════════════════════

class TestValidate:
    """Graph integrity checks."""

    def test_shipped_flow_is_valid(self):
        assert build_question_flow().start_id == "basics-info"
        assert len(QUESTION_FLOW.questions) == len(ALL_QUESTIONS)

    def test_unknown_target(self):
        data = _flow_data()
        data["questions"]["done"]["defaultNextId"] = "missing"
        with pytest.raises(GraphIntegrityError):
            FlowGraph.from_dict(data).validate()

    def test_dynamic_id_space_allowed(self):
        data = _flow_data()
        data["questions"]["done"]["defaultNextId"] = "pain-triggers-lumbar-spine"
        FlowGraph.from_dict(data).validate()

    def test_bad_selection_bounds(self):
        data = _flow_data()
        data["questions"]["goals"]["maxSelections"] = 3
        with pytest.raises(GraphIntegrityError):
            FlowGraph.from_dict(data).validate()

    def test_missing_start(self):
        with pytest.raises(GraphIntegrityError):
            FlowGraph.from_dict(_flow_data(startId="nope")).validate()

    def test_unknown_goal_entry(self):
        with pytest.raises(GraphIntegrityError):
            FlowGraph.from_dict(_flow_data(goalEntries={"strength": "nope"})).validate()

    def test_question_option_lookup(self):
        q = Question(id="q", category="c", title="Q", type=QuestionType.SINGLE_SELECT)
        assert q.get_option("x") is None
        assert QUESTION_FLOW.get("sleep-quality").get_option("good").label == "Good (7-9 hours)"
