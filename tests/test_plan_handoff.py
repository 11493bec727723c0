"""
Tests for plan dataclasses and the timeout/fallback hand-off.

Generators are faked; nothing leaves the process.
"""

import threading
from concurrent.futures import TimeoutError as FutureTimeout
from unittest.mock import MagicMock

import pytest

from fitforge.plan import (
    ConstraintType,
    PlanConstraint,
    PlanGenerator,
    Severity,
    WeekPlan,
    WorkoutPlan,
    generate_plan,
)
from fitforge.schemas.profile import Profile


class StaticGenerator(PlanGenerator):
    def __init__(self, name, plan_name="Static"):
        self.name = name
        self.plan_name = plan_name
        self.calls = 0

    def generate(self, profile):
        self.calls += 1
        return WorkoutPlan(plan_name=self.plan_name, split_type="full-body",
                           days_per_week=profile.days_per_week or 3)


class BlockingGenerator(PlanGenerator):
    name = "slow"

    def __init__(self):
        self.release = threading.Event()

    def generate(self, profile):
        self.release.wait(5)
        return WorkoutPlan(plan_name="Too late", split_type="", days_per_week=0)


class FailingGenerator(PlanGenerator):
    name = "broken"

    def generate(self, profile):
        raise RuntimeError("upstream 503")


PROFILE = Profile(days_per_week=4, goals=["bodybuilding"], primary_goal="bodybuilding")


# ═══════════════════════════════════════════════════════════════
# DATACLASSES
# ═══════════════════════════════════════════════════════════════

class TestPlanFromDict:
    """Building plan dataclasses from generator output."""

    def test_workout_plan(self):
        plan = WorkoutPlan.from_dict({
            "planName": "PPL Hypertrophy",
            "splitType": "Push/Pull/Legs",
            "daysPerWeek": 3,
            "days": [{
                "dayNumber": 1,
                "name": "Push",
                "focus": "Chest, Shoulders",
                "exercises": [
                    {"exerciseName": "Bench Press", "sets": 4, "reps": "6-8", "rir": 2, "tier": "T1"},
                    {"exerciseName": "Band Pull-Apart", "sets": 2, "reps": 15, "isWarmup": True},
                ],
            }],
            "progressionRules": [{"type": "double-progression", "description": "Add reps, then load"}],
            "constraints": ["No overhead pressing"],
            "generatedAt": "2026-01-01T00:00:00Z",
        })
        assert plan.plan_name == "PPL Hypertrophy"
        assert plan.days[0].exercises[0].rir == 2
        assert plan.days[0].exercises[1].reps == "15"
        assert plan.days[0].exercises[1].is_warmup
        assert plan.progression_rules[0].type == "double-progression"

    def test_week_plan(self):
        plan = WorkoutPlan.from_dict({
            "planName": "Upper/Lower",
            "days": [{"dayNumber": 1, "name": "Upper"}],
            "weekPlan": {"weekNumber": 2, "days": [{"dayNumber": 1, "name": "Upper"}]},
        })
        assert isinstance(plan.week_plan, WeekPlan)
        assert plan.week_plan.week_number == 2
        assert plan.week_plan.days[0].name == "Upper"

    def test_week_plan_optional(self):
        assert WorkoutPlan.from_dict({"days": []}).week_plan is None

    def test_days_per_week_defaults_to_day_count(self):
        plan = WorkoutPlan.from_dict({"days": [{"dayNumber": 1}, {"dayNumber": 2}]})
        assert plan.days_per_week == 2

    def test_constraint(self):
        c = PlanConstraint.from_dict({"type": "exercise-exclusion", "description": "No deadlifts"})
        assert c.type == ConstraintType.EXERCISE_EXCLUSION
        assert c.severity == Severity.HARD

    def test_generator_is_abstract(self):
        with pytest.raises(TypeError):
            PlanGenerator()


# ═══════════════════════════════════════════════════════════════
# HAND-OFF
# ═══════════════════════════════════════════════════════════════

class TestGeneratePlan:
    """Timeout and fallback around plan generation."""

    def test_primary_used_when_fast(self):
        primary, fallback = StaticGenerator("ai"), StaticGenerator("rules")
        plan = generate_plan(PROFILE, primary, fallback, timeout=2)
        assert plan.generator == "ai"
        assert plan.days_per_week == 4
        assert fallback.calls == 0

    def test_fallback_on_failure(self):
        fallback = StaticGenerator("rules", plan_name="Fallback")
        plan = generate_plan(PROFILE, FailingGenerator(), fallback, timeout=2)
        assert plan.plan_name == "Fallback"
        assert plan.generator == "rules"

    def test_fallback_on_timeout(self):
        slow = BlockingGenerator()
        try:
            plan = generate_plan(PROFILE, slow, StaticGenerator("rules"), timeout=0.05)
        finally:
            slow.release.set()
        assert plan.generator == "rules"

    def test_failure_without_fallback_raises(self):
        with pytest.raises(RuntimeError):
            generate_plan(PROFILE, FailingGenerator(), None, timeout=2)

    def test_timeout_without_fallback_raises(self):
        slow = BlockingGenerator()
        try:
            with pytest.raises(FutureTimeout):
                generate_plan(PROFILE, slow, None, timeout=0.05)
        finally:
            slow.release.set()

    def test_generator_receives_profile(self):
        primary = MagicMock(spec=PlanGenerator)
        primary.name = "mock"
        primary.generate.return_value = WorkoutPlan(plan_name="M", split_type="", days_per_week=4)
        generate_plan(PROFILE, primary, timeout=2)
        primary.generate.assert_called_once_with(PROFILE)
