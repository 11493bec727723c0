"""
Engine State - immutable snapshot of one questionnaire session.

Every accepted answer produces a new EngineState; nothing is mutated in
place, so undo is just a matter of keeping earlier snapshots around.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..schemas.profile import Profile
from ..schemas.questionnaire import Question


@dataclass(frozen=True)
class HistoryEntry:
    """A question that was answered, plus the goal queue in force when it was shown."""
    question_id: str
    pending_goal_branches: tuple[str, ...] = ()


@dataclass(frozen=True)
class EngineState:
    """Current position, answers and runtime routing tables for one session."""
    current_question_id: str
    history: tuple[HistoryEntry, ...] = ()
    profile: Profile = field(default_factory=Profile)

    # Pain-trigger questions synthesized this session, in chain order
    dynamic_questions: dict[str, Question] = field(default_factory=dict)
    # Injury-area selection the dynamic chain was built from
    injury_selection: tuple[str, ...] = ()

    # Goal branches still to visit, in selection order
    pending_goal_branches: tuple[str, ...] = ()

    is_complete: bool = False
    progress: float = 0.0

    @property
    def history_ids(self) -> list[str]:
        return [entry.question_id for entry in self.history]

    @property
    def dynamic_order(self) -> list[str]:
        return list(self.dynamic_questions)

    def can_go_back(self) -> bool:
        return len(self.history) > 0
