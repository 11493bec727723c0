"""
Answer Projector - validates raw answers and folds them into the Profile.

- Select answers are stored verbatim under the question id; known questions
  also write their typed profile field (FIELD_MAP)
- Multi-field screens go through resolve_subfield() per sub-field:
  visibility first, then variant overrides, then validation
- Unit conversions: imperial height -> cm (round half up), lbs -> kg for
  weight, one-rep maxes stay in the entered unit (lift_unit)

Validation failures are returned in Projection.errors, never raised.
The engine decides what to do with them.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Any, Optional

from ..schemas.profile import Profile
from ..schemas.questionnaire import (
    NUMERIC_TYPES,
    SELECT_TYPES,
    FlowGraph,
    Question,
    QuestionType,
    SubField,
)


LBS_TO_KG = 0.45359237
CM_PER_INCH = 2.54

# Variant overrides a sub-field may carry
VARIANT_KEYS = ("unit", "placeholder", "min", "max", "label")


# =============================================================================
# UNIT HELPERS
# =============================================================================

def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives (177.8 -> 178, 177.5 -> 178)."""
    return int(math.floor(value + 0.5))


def feet_inches_to_cm(feet: float, inches: float) -> int:
    return round_half_up((feet * 12 + inches) * CM_PER_INCH)


def lbs_to_kg(lbs: float) -> float:
    return lbs * LBS_TO_KG


# =============================================================================
# SUB-FIELD RESOLUTION
# =============================================================================

@dataclass(frozen=True)
class ResolvedSubField:
    """A sub-field after its variant override, plus whether it is shown."""
    field: SubField
    visible: bool
    variant: Optional[str] = None

    @property
    def id(self) -> str:
        return self.field.id

    @property
    def label(self) -> str:
        return self.field.label

    @property
    def type(self) -> QuestionType:
        return self.field.type

    @property
    def unit(self) -> str:
        return self.field.unit

    @property
    def min(self) -> Optional[float]:
        return self.field.min

    @property
    def max(self) -> Optional[float]:
        return self.field.max

    @property
    def required(self) -> bool:
        return self.field.required

    def to_dict(self) -> dict[str, Any]:
        data = self.field.to_dict()
        data["visible"] = self.visible
        data["variant"] = self.variant
        return data


def _held_value(field_id: str, profile: Profile, screen_values: dict[str, Any]) -> Any:
    # Same-screen values win over earlier answers
    if screen_values.get(field_id) not in (None, ""):
        return screen_values[field_id]
    return profile.answers.get(field_id)


def resolve_subfield(
    sub: SubField,
    profile: Profile,
    screen_values: Optional[dict[str, Any]] = None,
) -> ResolvedSubField:
    """
    Effective sub-field for the current answers.

    Visibility: a ShowWhen predicate must match the referenced field's value.
    Variants: the first variant key (table order) equal to any held scalar
    answer value has its overrides merged onto the field.
    """
    screen_values = screen_values or {}

    visible = True
    if sub.show_when is not None:
        held = _held_value(sub.show_when.field, profile, screen_values)
        visible = held is not None and str(held) == sub.show_when.value

    if not sub.variants:
        return ResolvedSubField(sub, visible)

    held = dict(profile.answers)
    held.update({k: v for k, v in screen_values.items() if v not in (None, "")})
    held_values = {
        str(v) for v in held.values()
        if isinstance(v, (str, int, float)) and not isinstance(v, bool)
    }
    for key, overrides in sub.variants.items():
        if key in held_values:
            merged = replace(sub, **{k: v for k, v in overrides.items() if k in VARIANT_KEYS})
            return ResolvedSubField(merged, visible, key)

    return ResolvedSubField(sub, visible)


# =============================================================================
# PROJECTION
# =============================================================================

# question id -> (profile field, coercion)
FIELD_MAP: dict[str, tuple[str, Any]] = {
    "experience-level": ("experience_level", None),
    "target-muscles": ("target_muscles", None),
    "split-preference": ("split_preference", None),
    "competition-goal": ("competition_goal", None),
    "weak-points": ("weak_points", None),
    "sport": ("sport", None),
    "performance-goals": ("performance_goals", None),
    "injury-areas": ("injury_areas", None),
    "injury-notes": ("injury_notes", None),
    "additional-limitations": ("additional_limitations", None),
    "gym-access": ("gym_access", None),
    "available-equipment": ("available_equipment", None),
    "days-per-week": ("days_per_week", int),
    "minutes-per-session": ("minutes_per_session", int),
    "sleep-quality": ("sleep_quality", None),
    "stress-level": ("stress_level", None),
    "exercise-likes": ("exercise_likes", None),
    "exercise-dislikes": ("exercise_dislikes", None),
}

MAX_LIFT_FIELDS = {
    "max-squat": "max_squat",
    "max-bench": "max_bench",
    "max-deadlift": "max_deadlift",
}

# Numeric answers that must be whole numbers
INTEGER_FIELDS = {"age"}

_MISSING = object()


@dataclass(frozen=True)
class Projection:
    """Outcome of projecting one answer. On errors, profile is unchanged."""
    profile: Profile
    errors: dict[str, str]
    value: Any = None

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def answers(self) -> dict[str, Any]:
        return self.profile.answers


def _fmt(number: Optional[float]) -> str:
    if number is None:
        return "?"
    return str(int(number)) if float(number).is_integer() else str(number)


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _clean_number(number: float) -> float | int:
    return int(number) if number.is_integer() else number


class AnswerProjector:
    """Turns raw answers into a new Profile for a given question."""

    MAX_TEXT_ENTRIES = 20

    def __init__(self, graph: FlowGraph):
        self.graph = graph

    def project(self, node: Question, raw_value: Any, profile: Profile) -> Projection:
        if node.type == QuestionType.MULTI_FIELD:
            return self._project_fields(node, raw_value, profile)

        errors: dict[str, str] = {}
        value = self._validate(node, raw_value, errors, node.id)
        if errors:
            return Projection(profile, errors)

        answers = dict(profile.answers)
        if value is _MISSING:
            answers.pop(node.id, None)
            value = None
        else:
            answers[node.id] = value

        updated = self._write_typed(node, value, replace(profile, answers=answers))
        return Projection(updated, {}, value)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _validate(self, node: Question | SubField, raw: Any, errors: dict[str, str], key: str) -> Any:
        """Clean one value; returns _MISSING for an accepted empty answer."""
        q_type = node.type

        if q_type == QuestionType.SINGLE_SELECT:
            if isinstance(raw, int) and not isinstance(raw, bool):
                raw = str(raw)
            if _is_empty(raw):
                if node.required:
                    errors[key] = "Required"
                return _MISSING
            if not isinstance(raw, str) or raw not in node.option_ids():
                errors[key] = f"Unknown option '{raw}'"
                return _MISSING
            return raw

        if q_type in SELECT_TYPES:
            return self._validate_selection(node, raw, errors, key)

        if q_type in NUMERIC_TYPES:
            if _is_empty(raw):
                if node.required:
                    errors[key] = "Required"
                return _MISSING
            number = _parse_number(raw)
            if number is None:
                errors[key] = "Must be a number"
                return _MISSING
            if key in INTEGER_FIELDS and not float(number).is_integer():
                errors[key] = "Must be a whole number"
                return _MISSING
            if (node.min is not None and number < node.min) or (node.max is not None and number > node.max):
                errors[key] = f"Must be between {_fmt(node.min)} and {_fmt(node.max)}"
                return _MISSING
            return _clean_number(number)

        if q_type == QuestionType.TEXT_INPUT:
            if _is_empty(raw):
                if node.required:
                    errors[key] = "Required"
                return _MISSING
            if not isinstance(raw, str):
                errors[key] = "Must be text"
                return _MISSING
            return raw.strip()

        if q_type == QuestionType.MULTI_TEXT_ADD:
            return self._validate_entries(node, raw, errors, key)

        errors[key] = f"Unsupported question type '{q_type.value}'"
        return _MISSING

    def _validate_selection(self, node: Question, raw: Any, errors: dict[str, str], key: str) -> Any:
        if raw is None:
            raw = []
        if not isinstance(raw, (list, tuple)):
            errors[key] = "Expected a list of options"
            return _MISSING

        known = node.option_ids()
        seen: list[str] = []
        for item in raw:
            if item not in known:
                errors[key] = f"Unknown option '{item}'"
                return _MISSING
            if item in seen:
                errors[key] = f"Duplicate option '{item}'"
                return _MISSING
            seen.append(item)

        low = node.min_selections
        if low is None:
            low = 1 if node.required else 0
        high = node.max_selections if node.max_selections is not None else len(known)
        if len(seen) < low:
            errors[key] = "Required" if low == 1 else f"Select at least {low}"
            return _MISSING
        if len(seen) > high:
            errors[key] = f"Select at most {high}"
            return _MISSING
        return seen

    def _validate_entries(self, node: Question, raw: Any, errors: dict[str, str], key: str) -> Any:
        if raw is None:
            raw = []
        if isinstance(raw, str):
            raw = [raw]
        if not isinstance(raw, (list, tuple)):
            errors[key] = "Expected a list of entries"
            return _MISSING

        entries: list[str] = []
        lowered: set[str] = set()
        for item in raw:
            if not isinstance(item, str):
                continue
            text = item.strip()
            if not text or text.lower() in lowered:
                continue
            lowered.add(text.lower())
            entries.append(text)
            if len(entries) == self.MAX_TEXT_ENTRIES:
                break

        if not entries and node.required:
            errors[key] = "Required"
            return _MISSING
        return entries

    # ------------------------------------------------------------------
    # Multi-field screens
    # ------------------------------------------------------------------

    def _project_fields(self, node: Question, raw_value: Any, profile: Profile) -> Projection:
        if raw_value is None:
            raw_value = {}
        if not isinstance(raw_value, dict):
            return Projection(profile, {node.id: "Expected an object of field values"})

        errors: dict[str, str] = {}
        accepted: dict[str, Any] = {}
        resolved: dict[str, ResolvedSubField] = {}
        hidden: list[str] = []

        for sub in node.fields:
            field_state = resolve_subfield(sub, profile, raw_value)
            if not field_state.visible:
                hidden.append(sub.id)
                continue
            resolved[sub.id] = field_state
            value = self._validate(field_state.field, raw_value.get(sub.id), errors, sub.id)
            if value is not _MISSING:
                accepted[sub.id] = value

        if errors:
            return Projection(profile, errors)

        answers = dict(profile.answers)
        for field_id in hidden:
            answers.pop(field_id, None)
        for sub in node.fields:
            if sub.id in resolved and sub.id not in accepted:
                answers.pop(sub.id, None)
        answers.update(accepted)
        answers[node.id] = dict(accepted)

        updated = self._write_subfields(accepted, resolved, replace(profile, answers=answers))
        return Projection(updated, {}, dict(accepted))

    # ------------------------------------------------------------------
    # Typed profile writes
    # ------------------------------------------------------------------

    def _write_typed(self, node: Question, value: Any, profile: Profile) -> Profile:
        graph = self.graph

        if node.id == graph.goal_question_id:
            goals = list(value) if value else None
            return replace(profile, goals=goals, primary_goal=goals[0] if goals else None)

        if node.id == graph.injury_gate_id:
            return replace(profile, has_injuries=None if value is None else value != "none")

        if graph.is_dynamic_id(node.id):
            area = node.id[len(graph.dynamic_prefix):]
            pain_triggers = dict(profile.pain_triggers)
            pain_triggers[area] = list(value or [])
            return replace(profile, pain_triggers=pain_triggers)

        mapping = FIELD_MAP.get(node.id)
        if mapping is None:
            return profile
        attr, coerce = mapping
        if value is not None:
            value = coerce(value) if coerce else (list(value) if isinstance(value, list) else value)
        return replace(profile, **{attr: value})

    def _write_subfields(
        self,
        accepted: dict[str, Any],
        resolved: dict[str, ResolvedSubField],
        profile: Profile,
    ) -> Profile:
        updates: dict[str, Any] = {}

        if "age" in accepted:
            updates["age"] = int(accepted["age"])
        if "gender" in accepted:
            updates["gender"] = accepted["gender"]
        if "unit-preference" in accepted:
            updates["unit_preference"] = accepted["unit-preference"]

        if "height" in accepted:
            updates["height_cm"] = accepted["height"]
        elif "height-feet" in accepted:
            updates["height_cm"] = feet_inches_to_cm(accepted["height-feet"], accepted.get("height-inches", 0))

        if "weight" in accepted:
            weight = accepted["weight"]
            updates["weight_kg"] = lbs_to_kg(weight) if resolved["weight"].unit == "lbs" else weight

        for field_id, attr in MAX_LIFT_FIELDS.items():
            if field_id in accepted:
                updates[attr] = accepted[field_id]
                updates["lift_unit"] = resolved[field_id].unit

        return replace(profile, **updates) if updates else profile


# =============================================================================
# RETRACTION
# =============================================================================

def clear_answers(graph: FlowGraph, profile: Profile, question_ids) -> Profile:
    """
    Forget the answers to `question_ids` along with the typed profile fields
    they wrote. Multi-field screens drop their sub-field answers too.
    """
    answers = dict(profile.answers)
    updates: dict[str, Any] = {}
    for question_id in question_ids:
        answers.pop(question_id, None)
        if question_id in FIELD_MAP:
            updates[FIELD_MAP[question_id][0]] = None
        question = graph.get(question_id)
        for sub in (question.fields if question else ()):
            answers.pop(sub.id, None)
            if sub.id in MAX_LIFT_FIELDS:
                updates[MAX_LIFT_FIELDS[sub.id]] = None
                updates["lift_unit"] = None

    if answers == profile.answers and all(getattr(profile, k) is None for k in updates):
        return profile
    return replace(profile, answers=answers, **updates)
