"""
Branching logic for the questionnaire flow.

This module provides:
- Immutable engine state and history
- Transition resolution (branch rules, goal queue, injury chain)
- Runtime synthesis of pain-trigger questions
- Answer validation and profile projection
"""

from .state import EngineState, HistoryEntry
from .synthesizer import DynamicNodeSynthesizer, InjuryChain
from .resolver import TransitionResolver, Transition
from .projector import AnswerProjector, Projection, ResolvedSubField, resolve_subfield
from .engine import QuestionnaireEngine, QuestionnaireSession

__all__ = [
    "EngineState",
    "HistoryEntry",
    "DynamicNodeSynthesizer",
    "InjuryChain",
    "TransitionResolver",
    "Transition",
    "AnswerProjector",
    "Projection",
    "ResolvedSubField",
    "resolve_subfield",
    "QuestionnaireEngine",
    "QuestionnaireSession"
]
