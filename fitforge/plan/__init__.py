"""
Plan generation interfaces and the post-questionnaire hand-off.
"""

from .base import (
    PlanGenerator,
    WorkoutPlan,
    WeekPlan,
    WorkoutDay,
    PlannedExercise,
    ProgressionRule,
    PlanConstraint,
    ConstraintType,
    Severity,
)
from .handoff import generate_plan

__all__ = [
    "PlanGenerator",
    "WorkoutPlan",
    "WeekPlan",
    "WorkoutDay",
    "PlannedExercise",
    "ProgressionRule",
    "PlanConstraint",
    "ConstraintType",
    "Severity",
    "generate_plan"
]
