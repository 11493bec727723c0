"""
End-to-end properties of the shipped question flow.

Each test walks real answers through the engine and checks a behaviour
that spans several questions: goal ordering, the pain-trigger chain,
back-navigation and progress.
"""

from conftest import IMPERIAL_BASICS, IMPERIAL_BODY, TAIL_ANSWERS


PREFIX = [IMPERIAL_BASICS, IMPERIAL_BODY, "intermediate"]
POWERLIFTING = [{"max-squat": 315, "max-bench": 225, "max-deadlift": 405}, "no-comp", []]
BODYBUILDING = [["chest", "back"], "upper-lower"]
INJURY_PREFIX = PREFIX + [["bodybuilding"]] + BODYBUILDING + ["yes"]


def _visited(states):
    return [s.current_question_id for s in states]


# ═══════════════════════════════════════════════════════════════
# GOAL BRANCHES
# ═══════════════════════════════════════════════════════════════

class TestGoalOrdering:
    """Goal sub-graphs follow the selection."""

    def test_powerlifting_before_bodybuilding(self, answer_all):
        states = answer_all(PREFIX + [["powerlifting", "bodybuilding"]] + POWERLIFTING + BODYBUILDING)
        visited = _visited(states)
        assert visited.index("max-lifts") < visited.index("target-muscles")
        assert visited[-1] == "injury-gate"
        assert states[-1].profile.primary_goal == "powerlifting"

    def test_reverse_selection_reverses_order(self, answer_all):
        states = answer_all(PREFIX + [["bodybuilding", "powerlifting"]] + BODYBUILDING + POWERLIFTING)
        visited = _visited(states)
        assert visited.index("target-muscles") < visited.index("max-lifts")
        assert states[-1].profile.primary_goal == "bodybuilding"

    def test_unselected_goal_is_skipped(self, answer_all):
        states = answer_all(PREFIX + [["athleticism"], "basketball", ["speed"]])
        visited = _visited(states)
        assert visited[-1] == "injury-gate"
        assert "max-lifts" not in visited
        assert "target-muscles" not in visited

    def test_back_restores_goal_queue(self, engine, answer_all):
        answers = PREFIX + [["powerlifting", "bodybuilding"]] + POWERLIFTING + BODYBUILDING[:1]
        state = answer_all(answers)[-1]
        assert state.current_question_id == "split-preference"

        # back into the powerlifting sub-graph
        state = engine.back(engine.back(state))
        assert state.current_question_id == "weak-points"
        assert state.pending_goal_branches == ("bodybuilding",)

        state = engine.advance(state, ["grip"])
        assert state.current_question_id == "target-muscles"
        assert state.profile.answers["target-muscles"] == ["chest", "back"]

    def test_regoaling_drops_old_sub_graph_answers(self, engine, answer_all):
        state = answer_all(PREFIX + [["powerlifting"]] + POWERLIFTING[:2] + [["grip"]])[-1]
        assert state.current_question_id == "injury-gate"
        assert state.profile.max_squat == 315

        # back to the goal question and pick a different goal
        for _ in range(4):
            state = engine.back(state)
        assert state.current_question_id == "primary-goal"

        states = answer_all([["bodybuilding"]] + BODYBUILDING + ["none"] + TAIL_ANSWERS, state)
        profile = states[-1].profile
        assert states[-1].is_complete
        assert profile.goals == ["bodybuilding"]
        assert profile.target_muscles == ["chest", "back"]
        for attr in ("max_squat", "max_bench", "max_deadlift", "lift_unit", "competition_goal", "weak_points"):
            assert getattr(profile, attr) is None
        for answer_id in ("max-lifts", "max-squat", "competition-goal", "weak-points"):
            assert answer_id not in profile.answers
        assert "maxSquat" not in profile.to_dict()

    def test_kept_goal_keeps_its_answers(self, engine, answer_all):
        answers = PREFIX + [["powerlifting", "bodybuilding"]] + POWERLIFTING + BODYBUILDING
        state = answer_all(answers)[-1]
        for _ in range(len(POWERLIFTING) + len(BODYBUILDING) + 1):
            state = engine.back(state)
        assert state.current_question_id == "primary-goal"

        state = engine.advance(state, ["powerlifting"])
        assert state.profile.max_deadlift == 405
        assert state.profile.target_muscles is None
        assert "split-preference" not in state.profile.answers


# ═══════════════════════════════════════════════════════════════
# INJURY CHAIN
# ═══════════════════════════════════════════════════════════════

class TestInjuryChain:
    """Pain-trigger questions for selected injury areas."""

    def test_two_areas_two_questions_in_order(self, answer_all):
        states = answer_all(INJURY_PREFIX + [["lumbar-spine", "wrist-pain"], ["morning-stiffness"], []])
        visited = _visited(states)
        assert visited[-3:] == ["pain-triggers-lumbar-spine", "pain-triggers-wrist-pain", "injury-notes"]
        final = states[-1]
        assert final.dynamic_order == ["pain-triggers-lumbar-spine", "pain-triggers-wrist-pain"]
        assert final.profile.pain_triggers == {"lumbar-spine": ["morning-stiffness"], "wrist-pain": []}

    def test_unprofiled_area_recorded_without_question(self, answer_all):
        state = answer_all(INJURY_PREFIX + [["elbow", "wrist-pain"]])[-1]
        assert state.current_question_id == "pain-triggers-wrist-pain"
        assert state.profile.injury_areas == ["elbow", "wrist-pain"]
        assert state.dynamic_order == ["pain-triggers-wrist-pain"]

    def test_same_selection_keeps_chain(self, engine, answer_all):
        areas = ["lumbar-spine", "wrist-pain"]
        state = answer_all(INJURY_PREFIX + [areas])[-1]
        before = state.dynamic_questions

        state = engine.advance(engine.back(state), areas)
        assert state.dynamic_questions is before
        assert state.dynamic_order == ["pain-triggers-lumbar-spine", "pain-triggers-wrist-pain"]

    def test_changed_selection_rebuilds_and_discards(self, engine, answer_all):
        state = answer_all(INJURY_PREFIX + [["lumbar-spine", "wrist-pain"], ["morning-stiffness"], ["wrist-weakness-grip"]])[-1]
        assert state.current_question_id == "injury-notes"

        for _ in range(3):
            state = engine.back(state)
        assert state.current_question_id == "injury-areas"

        state = engine.advance(state, ["wrist-pain", "rotator-cuff"])
        assert state.dynamic_order == ["pain-triggers-wrist-pain", "pain-triggers-rotator-cuff"]
        assert state.current_question_id == "pain-triggers-wrist-pain"
        assert "lumbar-spine" not in state.profile.pain_triggers
        assert "pain-triggers-lumbar-spine" not in state.profile.answers
        assert state.profile.pain_triggers["wrist-pain"] == ["wrist-weakness-grip"]

    def test_full_injury_run(self, answer_all):
        answers = INJURY_PREFIX + [
            ["patellar-tendon"], ["pain-deep-squatting"], "ACL repair 2021", ["No jumping"],
        ] + TAIL_ANSWERS
        final = answer_all(answers)[-1]
        assert final.is_complete
        assert final.profile.has_injuries is True
        assert final.profile.injury_notes == "ACL repair 2021"
        assert final.profile.additional_limitations == ["No jumping"]
        assert final.profile.pain_triggers == {"patellar-tendon": ["pain-deep-squatting"]}


# ═══════════════════════════════════════════════════════════════
# NO-INJURY PATH
# ═══════════════════════════════════════════════════════════════

class TestNoInjuries:
    """Answering "none" at the injury gate."""

    def test_none_completes_without_injury_areas(self, answer_all):
        final = answer_all(PREFIX + [["bodybuilding"]] + BODYBUILDING + ["none"] + TAIL_ANSWERS)[-1]
        assert final.is_complete
        assert final.profile.has_injuries is False
        assert final.profile.injury_areas is None

    def test_switching_to_none_drops_injury_data(self, engine, answer_all):
        state = answer_all(INJURY_PREFIX + [["lumbar-spine"], ["morning-stiffness"], "disc bulge", ["no running"]])[-1]
        assert state.current_question_id == "gym-access"
        for _ in range(5):
            state = engine.back(state)
        assert state.current_question_id == "injury-gate"

        state = engine.advance(state, "none")
        assert state.current_question_id == "gym-access"
        assert state.profile.injury_areas is None
        assert state.profile.pain_triggers == {}
        assert state.dynamic_questions == {}
        assert "injury-areas" not in state.profile.answers
        assert state.profile.injury_notes is None
        assert state.profile.additional_limitations is None
        assert "injury-notes" not in state.profile.answers
        assert "additional-limitations" not in state.profile.answers

        final = answer_all(TAIL_ANSWERS, state)[-1]
        assert final.is_complete
        data = final.profile.to_dict()
        assert data["hasInjuries"] is False
        assert "injuryNotes" not in data
        assert "additionalLimitations" not in data


# ═══════════════════════════════════════════════════════════════
# BACK + PROGRESS
# ═══════════════════════════════════════════════════════════════

class TestBackAndProgress:
    """Back-navigation and progress across the whole flow."""

    def test_back_after_every_advance(self, engine, answer_all):
        answers = INJURY_PREFIX + [["lumbar-spine"], ["morning-stiffness"], "", []] + TAIL_ANSWERS
        states = answer_all(answers)
        for before, after in zip(states, states[1:]):
            restored = engine.back(after)
            assert restored.current_question_id == before.current_question_id
            assert restored.history == before.history
            answered = before.current_question_id
            if answered in after.profile.answers:
                assert restored.profile.answers[answered] == after.profile.answers[answered]

    def test_imperial_height(self, answer_all):
        state = answer_all(PREFIX[:2])[-1]
        assert state.profile.height_cm == 178

    def test_progress_monotonic_and_complete(self, answer_all):
        answers = PREFIX + [["powerlifting", "bodybuilding"]] + POWERLIFTING + BODYBUILDING + [
            "yes", ["lumbar-spine", "wrist-pain"], [], [], "", [],
        ] + TAIL_ANSWERS
        states = answer_all(answers)
        progress = [s.progress for s in states]
        assert progress == sorted(progress)
        assert progress[-1] == 1.0
        assert all(p < 1.0 for p in progress[:-1])
