"""
User Profile Schema

The profile is the typed, accumulated projection of every accepted answer.
It is what the plan generator consumes once the questionnaire completes.
The raw `answers` map is kept alongside so earlier answers can be re-edited.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Optional


@dataclass(frozen=True)
class Profile:
    """Typed fitness profile plus raw answers keyed by question/sub-field id."""

    # -- Basics --
    age: Optional[int] = None
    gender: Optional[str] = None
    unit_preference: Optional[str] = None      # "metric" | "imperial"
    height_cm: Optional[float] = None           # imperial input is rounded to whole cm
    weight_kg: Optional[float] = None

    # -- Experience --
    experience_level: Optional[str] = None     # beginner | intermediate | advanced

    # -- Goals --
    goals: Optional[list[str]] = None          # selection order, max 2
    primary_goal: Optional[str] = None         # first selected goal

    # Bodybuilding
    target_muscles: Optional[list[str]] = None
    split_preference: Optional[str] = None

    # Powerlifting (entered unit, see lift_unit)
    max_squat: Optional[float] = None
    max_bench: Optional[float] = None
    max_deadlift: Optional[float] = None
    lift_unit: Optional[str] = None
    competition_goal: Optional[str] = None
    weak_points: Optional[list[str]] = None

    # Athleticism
    sport: Optional[str] = None
    performance_goals: Optional[list[str]] = None

    # -- Injuries & constraints --
    has_injuries: Optional[bool] = None
    injury_areas: Optional[list[str]] = None
    pain_triggers: dict[str, list[str]] = field(default_factory=dict)   # area id -> trigger ids
    injury_notes: Optional[str] = None
    additional_limitations: Optional[list[str]] = None

    # -- Equipment --
    gym_access: Optional[str] = None
    available_equipment: Optional[list[str]] = None

    # -- Schedule --
    days_per_week: Optional[int] = None
    minutes_per_session: Optional[int] = None

    # -- Recovery & stress --
    sleep_quality: Optional[str] = None
    stress_level: Optional[str] = None

    # -- Preferences --
    exercise_likes: Optional[list[str]] = None
    exercise_dislikes: Optional[list[str]] = None

    # -- Raw answers --
    answers: dict[str, Any] = field(default_factory=dict)

    def get_answer(self, answer_id: str) -> Any:
        return self.answers.get(answer_id)

    def to_dict(self) -> dict[str, Any]:
        """camelCase dict of the populated fields, for the plan generator."""
        result: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, dict):
                value = {k: list(v) if isinstance(v, list) else v for k, v in value.items()}
            elif isinstance(value, list):
                value = list(value)
            result[_camel(f.name)] = value
        return result


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)
