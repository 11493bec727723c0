"""Shared fixtures for questionnaire tests."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from fitforge.branching.engine import QuestionnaireEngine
from fitforge.injury_kb import load_default_knowledge_base
from fitforge.schemas.question_flow import QUESTION_FLOW


IMPERIAL_BASICS = {"age": 28, "gender": "male", "unit-preference": "imperial"}
IMPERIAL_BODY = {"height-feet": 5, "height-inches": 10, "weight": 185}

# Everything after the injury section for a full-gym user
TAIL_ANSWERS = ["full-gym", "4", "60", "good", "low", [], []]


@pytest.fixture
def graph():
    return QUESTION_FLOW


@pytest.fixture
def kb():
    return load_default_knowledge_base()


@pytest.fixture
def engine(graph, kb):
    return QuestionnaireEngine(graph, kb)


@pytest.fixture
def answer_all(engine):
    """Advance through a list of answers, returning every intermediate state."""
    def _run(answers, state=None):
        state = state or engine.initial_state()
        states = [state]
        for value in answers:
            state = engine.advance(state, value)
            states.append(state)
        return states
    return _run
