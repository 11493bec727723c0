"""
Tests for the terminal front end: input parsing, replay and the interactive loop.
"""

import json

import pytest

from fitforge import cli
from fitforge.branching.engine import QuestionnaireSession
from fitforge.schemas.question_flow import (
    ADDITIONAL_LIMITATIONS,
    DAYS_PER_WEEK,
    INJURY_AREAS,
    SLEEP_QUALITY,
)


REPLAY = [
    {"age": 35, "gender": "female", "unit-preference": "metric"},
    {"height": 165, "weight": 60},
    "advanced",
    ["powerlifting"],
    {"max-squat": 140, "max-bench": 80, "max-deadlift": 170},
    "upcoming-comp",
    ["bench-lockout"],
    "none",
    "home-gym",
    ["barbell", "squat-rack", "bench"],
    "4", "75", "good", "high", ["squats"], ["burpees"],
]


def _scripted(lines):
    it = iter(lines)
    return lambda prompt="": next(it)


class TestParsing:
    """Turning typed input into answer values."""

    def test_choice_by_number(self):
        assert cli.parse_choice(SLEEP_QUALITY, "3") == "good"

    def test_numeric_option_id_wins(self):
        # "3" is itself an option id here, not the third option
        assert cli.parse_choice(DAYS_PER_WEEK, "3") == "3"

    def test_multi_select(self):
        assert cli.parse_response(INJURY_AREAS, "1, wrist-pain") == ["lumbar-spine", "wrist-pain"]
        assert cli.parse_response(INJURY_AREAS, "") == []

    def test_multi_text(self):
        assert cli.parse_response(ADDITIONAL_LIMITATIONS, "no impact; bad balance") == ["no impact", " bad balance"]


class TestReplay:
    """Replaying a saved answer list through the engine."""

    def test_replay_completes(self, engine):
        session = cli.replay_answers(engine, REPLAY)
        assert session.is_complete
        profile = session.profile
        assert profile.lift_unit == "kg"
        assert profile.max_deadlift == 170
        assert profile.weight_kg == 60
        assert profile.available_equipment == ["barbell", "squat-rack", "bench"]

    def test_main_with_answers_file(self, tmp_path, capsys):
        answers = tmp_path / "answers.json"
        answers.write_text(json.dumps(REPLAY))
        out = tmp_path / "profile.json"

        cli.main(["--answers", str(answers), "--output", str(out)])

        saved = json.loads(out.read_text())
        assert saved["primaryGoal"] == "powerlifting"
        assert saved["competitionGoal"] == "upcoming-comp"
        assert "Profile saved to" in capsys.readouterr().out

    def test_main_rejects_bad_answer(self, tmp_path):
        answers = tmp_path / "answers.json"
        answers.write_text(json.dumps([{"age": 3, "gender": "male", "unit-preference": "metric"}]))
        with pytest.raises(SystemExit) as exc:
            cli.main(["--answers", str(answers)])
        assert exc.value.code == 1

    def test_main_rejects_non_list(self, tmp_path):
        answers = tmp_path / "answers.json"
        answers.write_text(json.dumps({"age": 3}))
        with pytest.raises(SystemExit):
            cli.main(["--answers", str(answers)])


class TestInteractive:
    """The prompt loop with scripted input."""

    def test_fields_then_back_then_quit(self, engine, capsys):
        session = QuestionnaireSession(engine)
        lines = [
            "", "30", "2", "metric",     # basics-info: enter, age, gender #2, units
            "status",
            "back",
            "quit",
        ]
        completed = cli.run_interactive(session, input_fn=_scripted(lines))
        assert completed is False
        assert session.current_node().id == "basics-info"
        assert session.profile.gender == "female"
        assert "Progress:" in capsys.readouterr().out

    def test_validation_errors_are_printed(self, engine, capsys):
        session = QuestionnaireSession(engine)
        lines = ["", "200", "male", "metric", "quit"]
        cli.run_interactive(session, input_fn=_scripted(lines))
        assert "age: Must be between 14 and 80" in capsys.readouterr().out
        assert session.current_node().id == "basics-info"
