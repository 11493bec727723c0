"""
Schema definitions for the FitForge questionnaire.
"""

from .questionnaire import (
    QuestionType,
    QuestionOption,
    SubField,
    ShowWhen,
    BranchRule,
    Question,
    Category,
    FlowGraph,
    LiteralEdge,
    GoalBranchEdge,
    InjuryChainEdge,
    TerminalEdge,
    edge_from_value,
)
from .profile import Profile
from .question_flow import QUESTION_FLOW, build_question_flow

__all__ = [
    "QuestionType",
    "QuestionOption",
    "SubField",
    "ShowWhen",
    "BranchRule",
    "Question",
    "Category",
    "FlowGraph",
    "LiteralEdge",
    "GoalBranchEdge",
    "InjuryChainEdge",
    "TerminalEdge",
    "edge_from_value",
    "Profile",
    "QUESTION_FLOW",
    "build_question_flow",
]
