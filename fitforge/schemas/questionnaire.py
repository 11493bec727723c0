"""
Questionnaire Type Definitions

The questionnaire is a branching graph where each question can route to
different follow-up questions based on the user's answer.

Key concepts:
- Question: a single question with its type, options, and routing edge
- SubField: one input on a multi-field screen (with visibility + variants)
- Edge: where a question goes next (literal id, goal queue, injury chain, end)
- FlowGraph: the complete set of questions organized by ID
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from ..errors import GraphIntegrityError


class QuestionType(str, Enum):
    """Input style of a question."""
    SINGLE_SELECT = "single-select"        # Pick one option
    MULTI_SELECT = "multi-select"          # Pick several options
    SLIDER = "slider"                      # Numeric range
    TEXT_INPUT = "text-input"              # Free text
    NUMBER_INPUT = "number-input"          # Numeric entry
    INJURY_SELECTOR = "injury-selector"    # Multi-select of body areas
    MULTI_TEXT_ADD = "multi-text-add"      # Several free-text entries
    MULTI_FIELD = "multi-field"            # Several inputs on one screen


SELECT_TYPES = (QuestionType.MULTI_SELECT, QuestionType.INJURY_SELECTOR)
NUMERIC_TYPES = (QuestionType.NUMBER_INPUT, QuestionType.SLIDER)


# =============================================================================
# EDGES
# =============================================================================

GOAL_BRANCH_SENTINEL = "__next_goal_branch__"
INJURY_CHAIN_SENTINEL = "__dynamic_pain_triggers__"


@dataclass(frozen=True)
class LiteralEdge:
    """Go to a fixed question id."""
    target: str


@dataclass(frozen=True)
class GoalBranchEdge:
    """Pop the next pending goal branch, or continue past the goal section."""


@dataclass(frozen=True)
class InjuryChainEdge:
    """Enter the pain-trigger chain synthesized for the selected injury areas."""


@dataclass(frozen=True)
class TerminalEdge:
    """End of the questionnaire."""


Edge = Union[LiteralEdge, GoalBranchEdge, InjuryChainEdge, TerminalEdge]

GOAL_BRANCH = GoalBranchEdge()
INJURY_CHAIN = InjuryChainEdge()
TERMINAL = TerminalEdge()


def edge_from_value(value: Optional[str]) -> Edge:
    """Map a raw default-next value (id, sentinel or None) to an edge."""
    if value is None:
        return TERMINAL
    if value == GOAL_BRANCH_SENTINEL:
        return GOAL_BRANCH
    if value == INJURY_CHAIN_SENTINEL:
        return INJURY_CHAIN
    return LiteralEdge(value)


# =============================================================================
# QUESTIONS
# =============================================================================

@dataclass(frozen=True)
class QuestionOption:
    """Option for select-type questions."""
    id: str
    label: str
    description: str = ""
    icon: str = ""


@dataclass(frozen=True)
class BranchRule:
    """Route to next_question_id when the primary answer matches condition."""
    condition: Union[str, tuple[str, ...]]
    next_question_id: str

    def matches(self, primary: Any) -> bool:
        if primary is None:
            return False
        if isinstance(self.condition, tuple):
            return primary in self.condition
        return primary == self.condition


@dataclass(frozen=True)
class ShowWhen:
    """Only show a sub-field when another field holds `value`."""
    field: str
    value: str


@dataclass(frozen=True)
class SubField:
    """One input on a multi-field screen."""
    id: str
    label: str
    type: QuestionType
    placeholder: str = ""
    unit: str = ""
    min: Optional[float] = None
    max: Optional[float] = None
    options: tuple[QuestionOption, ...] = ()
    required: bool = False
    show_when: Optional[ShowWhen] = None
    # key -> partial override (unit, placeholder, min, max, label)
    variants: dict[str, dict[str, Any]] = field(default_factory=dict)

    def option_ids(self) -> list[str]:
        return [o.id for o in self.options]

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "label": self.label,
            "type": self.type.value,
            "placeholder": self.placeholder,
            "unit": self.unit,
            "min": self.min,
            "max": self.max,
            "required": self.required,
        }
        if self.options:
            data["options"] = [_option_to_dict(o) for o in self.options]
        if self.show_when:
            data["showWhen"] = {"field": self.show_when.field, "value": self.show_when.value}
        return data


@dataclass(frozen=True)
class Question:
    """A single question node in the flow graph."""
    id: str
    category: str
    title: str
    type: QuestionType
    subtitle: str = ""
    options: tuple[QuestionOption, ...] = ()

    # Slider/number config
    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None
    unit: str = ""

    placeholder: str = ""
    fields: tuple[SubField, ...] = ()

    # Validation
    required: bool = False
    min_selections: Optional[int] = None
    max_selections: Optional[int] = None

    # Routing
    branches: tuple[BranchRule, ...] = ()
    default_next: Edge = TERMINAL

    # UI hints
    auto_advance: bool = False
    progress_weight: float = 1.0

    def option_ids(self) -> list[str]:
        return [o.id for o in self.options]

    def get_option(self, option_id: str) -> Optional[QuestionOption]:
        for option in self.options:
            if option.id == option_id:
                return option
        return None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Question":
        """Build a question from the camelCase form used by flow data files."""
        return cls(
            id=data["id"],
            category=data["category"],
            title=data.get("title", ""),
            subtitle=data.get("subtitle", ""),
            type=QuestionType(data["type"]),
            options=tuple(_option_from_dict(o) for o in data.get("options", [])),
            min=data.get("min"),
            max=data.get("max"),
            step=data.get("step"),
            unit=data.get("unit", ""),
            placeholder=data.get("placeholder", ""),
            fields=tuple(_subfield_from_dict(f) for f in data.get("fields", [])),
            required=bool(data.get("required", False)),
            min_selections=data.get("minSelections"),
            max_selections=data.get("maxSelections"),
            branches=tuple(
                BranchRule(
                    condition=tuple(b["condition"]) if isinstance(b["condition"], list) else b["condition"],
                    next_question_id=b["nextQuestionId"],
                )
                for b in data.get("branches", [])
            ),
            default_next=edge_from_value(data.get("defaultNextId")),
            auto_advance=bool(data.get("autoAdvance", False)),
            progress_weight=float(data.get("progressWeight", 1.0)),
        )

    def to_dict(self) -> dict[str, Any]:
        """camelCase display form for hosts (routing is not exposed)."""
        data: dict[str, Any] = {
            "id": self.id,
            "category": self.category,
            "title": self.title,
            "subtitle": self.subtitle,
            "type": self.type.value,
            "required": self.required,
            "autoAdvance": self.auto_advance,
        }
        if self.options:
            data["options"] = [_option_to_dict(o) for o in self.options]
        if self.type in (QuestionType.NUMBER_INPUT, QuestionType.SLIDER):
            data.update({"min": self.min, "max": self.max, "step": self.step, "unit": self.unit})
        if self.placeholder:
            data["placeholder"] = self.placeholder
        if self.min_selections is not None:
            data["minSelections"] = self.min_selections
        if self.max_selections is not None:
            data["maxSelections"] = self.max_selections
        if self.fields:
            data["fields"] = [f.to_dict() for f in self.fields]
        return data


def _option_to_dict(option: QuestionOption) -> dict[str, Any]:
    data = {"id": option.id, "label": option.label}
    if option.description:
        data["description"] = option.description
    if option.icon:
        data["icon"] = option.icon
    return data


def _option_from_dict(data: dict[str, Any]) -> QuestionOption:
    return QuestionOption(
        id=data["id"],
        label=data.get("label", data["id"]),
        description=data.get("description", ""),
        icon=data.get("icon", ""),
    )


def _subfield_from_dict(data: dict[str, Any]) -> SubField:
    show_when = data.get("showWhen")
    return SubField(
        id=data["id"],
        label=data.get("label", data["id"]),
        type=QuestionType(data["type"]),
        placeholder=data.get("placeholder", ""),
        unit=data.get("unit", ""),
        min=data.get("min"),
        max=data.get("max"),
        options=tuple(_option_from_dict(o) for o in data.get("options", [])),
        required=bool(data.get("required", False)),
        show_when=ShowWhen(show_when["field"], show_when["value"]) if show_when else None,
        variants=dict(data.get("variants", {})),
    )


# =============================================================================
# FLOW GRAPH
# =============================================================================

@dataclass(frozen=True)
class Category:
    id: str
    label: str


@dataclass(frozen=True)
class FlowGraph:
    """The complete static question flow. Read-only."""
    version: str
    start_id: str
    questions: dict[str, Question]
    categories: tuple[Category, ...]

    # Goal-branch routing
    goal_question_id: str
    goal_entries: dict[str, str]           # goal id -> sub-graph entry node
    post_goals_id: Optional[str]

    # Injury routing
    injury_gate_id: str
    injury_question_id: str
    post_injury_id: str

    dynamic_prefix: str = "pain-triggers-"

    def get(self, question_id: str) -> Optional[Question]:
        return self.questions.get(question_id)

    def __contains__(self, question_id: str) -> bool:
        return question_id in self.questions

    def category_index(self, category_id: str) -> int:
        for idx, category in enumerate(self.categories):
            if category.id == category_id:
                return idx
        return len(self.categories)

    def is_dynamic_id(self, question_id: str) -> bool:
        return question_id.startswith(self.dynamic_prefix)

    def validate(self) -> "FlowGraph":
        """
        Check the graph invariants.

        Every literal target must exist in the graph (or belong to the
        synthesizable pain-trigger id space), and selection bounds must fit
        the option count.

        Raises:
            GraphIntegrityError: on the first violation found
        """
        def check_target(source: str, target: str) -> None:
            if target not in self.questions and not self.is_dynamic_id(target):
                raise GraphIntegrityError(f"{source} routes to unknown question '{target}'")

        if self.start_id not in self.questions:
            raise GraphIntegrityError(f"Start question '{self.start_id}' is not in the graph")

        for question in self.questions.values():
            for rule in question.branches:
                check_target(question.id, rule.next_question_id)
            if isinstance(question.default_next, LiteralEdge):
                check_target(question.id, question.default_next.target)

            if question.options:
                low = question.min_selections or 0
                high = question.max_selections if question.max_selections is not None else len(question.options)
                if not 0 <= low <= high <= len(question.options):
                    raise GraphIntegrityError(
                        f"{question.id} has invalid selection bounds "
                        f"[{question.min_selections}, {question.max_selections}] "
                        f"for {len(question.options)} options"
                    )

        for goal_id, entry_id in self.goal_entries.items():
            check_target(f"goal '{goal_id}'", entry_id)
        for fixed in (self.post_goals_id, self.post_injury_id, self.goal_question_id,
                      self.injury_question_id, self.injury_gate_id):
            if fixed is not None:
                check_target("flow config", fixed)

        return self

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FlowGraph":
        """Load a flow from its camelCase data form (sentinel strings allowed)."""
        questions = {q_id: Question.from_dict(q) for q_id, q in data["questions"].items()}
        return cls(
            version=data.get("version", "0"),
            start_id=data["startId"],
            questions=questions,
            categories=tuple(Category(c["id"], c["label"]) for c in data.get("categories", [])),
            goal_question_id=data["goalQuestionId"],
            goal_entries=dict(data.get("goalEntries", {})),
            post_goals_id=data.get("postGoalsId"),
            injury_gate_id=data["injuryGateId"],
            injury_question_id=data["injuryQuestionId"],
            post_injury_id=data["postInjuryId"],
        )
