"""
Base classes for workout plan generation.

The questionnaire only hands a completed Profile over; plan generators
(rule-based, LLM-backed, remote) implement PlanGenerator and return a
WorkoutPlan. Generators that speak JSON can use the from_dict helpers.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any
from enum import Enum

from ..schemas.profile import Profile


class ConstraintType(str, Enum):
    """What a plan constraint restricts."""
    INJURY = "injury"
    EQUIPMENT = "equipment"
    TIME = "time"
    SCHEDULE = "schedule"
    EXERCISE_EXCLUSION = "exercise-exclusion"


class Severity(str, Enum):
    HARD = "hard"
    SOFT = "soft"


@dataclass
class PlanConstraint:
    """A rule the plan has to respect."""
    type: ConstraintType
    description: str
    severity: Severity = Severity.HARD

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlanConstraint":
        return cls(
            type=ConstraintType(data["type"]),
            description=data.get("description", ""),
            severity=Severity(data.get("severity", "hard")),
        )


@dataclass
class ProgressionRule:
    type: str           # e.g. "linear", "double-progression", "mesocycle"
    description: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProgressionRule":
        return cls(type=data.get("type", ""), description=data.get("description", ""))


@dataclass
class PlannedExercise:
    """One exercise within a workout day."""
    exercise_name: str
    sets: int
    reps: str                           # "8-10", "5x5"
    rir: Optional[int] = None           # reps in reserve
    rest_seconds: Optional[int] = None
    notes: str = ""
    tier: Optional[str] = None          # T1 | T2 | T3
    progression_rule: Optional[str] = None
    is_warmup: bool = False
    superset_with: Optional[str] = None
    tempo_guide: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlannedExercise":
        return cls(
            exercise_name=data["exerciseName"],
            sets=int(data.get("sets", 0)),
            reps=str(data.get("reps", "")),
            rir=data.get("rir"),
            rest_seconds=data.get("restSeconds"),
            notes=data.get("notes", ""),
            tier=data.get("tier"),
            progression_rule=data.get("progressionRule"),
            is_warmup=bool(data.get("isWarmup", False)),
            superset_with=data.get("supersetWith"),
            tempo_guide=data.get("tempoGuide"),
        )


@dataclass
class WorkoutDay:
    day_number: int
    name: str
    focus: str
    exercises: List[PlannedExercise] = field(default_factory=list)
    estimated_minutes: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkoutDay":
        return cls(
            day_number=int(data["dayNumber"]),
            name=data.get("name", ""),
            focus=data.get("focus", ""),
            exercises=[PlannedExercise.from_dict(e) for e in data.get("exercises", [])],
            estimated_minutes=data.get("estimatedMinutes"),
        )


@dataclass
class WeekPlan:
    """One concrete week of the plan."""
    week_number: int
    days: List[WorkoutDay] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WeekPlan":
        return cls(
            week_number=int(data.get("weekNumber", 1)),
            days=[WorkoutDay.from_dict(d) for d in data.get("days", [])],
        )


@dataclass
class WorkoutPlan:
    """A generated weekly training plan."""
    plan_name: str
    split_type: str
    days_per_week: int
    days: List[WorkoutDay] = field(default_factory=list)
    week_plan: Optional[WeekPlan] = None
    progression_rules: List[ProgressionRule] = field(default_factory=list)
    constraints: List[str] = field(default_factory=list)
    generated_at: str = ""
    generator: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkoutPlan":
        return cls(
            plan_name=data.get("planName", ""),
            split_type=data.get("splitType", ""),
            days_per_week=int(data.get("daysPerWeek", len(data.get("days", [])))),
            days=[WorkoutDay.from_dict(d) for d in data.get("days", [])],
            week_plan=WeekPlan.from_dict(data["weekPlan"]) if data.get("weekPlan") else None,
            progression_rules=[ProgressionRule.from_dict(r) for r in data.get("progressionRules", [])],
            constraints=list(data.get("constraints", [])),
            generated_at=data.get("generatedAt", ""),
        )


class PlanGenerator(ABC):
    """
    Abstract base class for plan generators.

    Implementations receive the completed Profile and must return a
    WorkoutPlan. They may block (network calls); the hand-off runs them on
    a worker thread with a timeout.
    """

    name: str = "generator"

    @abstractmethod
    def generate(self, profile: Profile) -> WorkoutPlan:
        """
        Build a plan for a completed questionnaire.

        Args:
            profile: Typed profile from the finished session

        Returns:
            WorkoutPlan for the user
        """
        pass
