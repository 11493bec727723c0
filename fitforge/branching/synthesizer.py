"""
Dynamic Node Synthesizer - runtime-only parts of the question graph.

Handles the two routes that cannot be written down statically:
- Goal branches: one sub-graph per selected goal, visited in selection order
- Pain triggers: one multi-select question per selected injury area that
  has a knowledge-base profile, chained in selection order
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterable, Optional

from ..errors import UnresolvableSentinelError
from ..injury_kb import InjuryKnowledgeBase
from ..schemas.profile import Profile
from ..schemas.questionnaire import (
    FlowGraph,
    LiteralEdge,
    Question,
    QuestionOption,
    QuestionType,
)
from .projector import clear_answers
from .state import EngineState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InjuryChain:
    """Result of (re)building the pain-trigger chain for a selection."""
    questions: dict[str, Question]
    selection: tuple[str, ...]
    profile: Profile
    rebuilt: bool = False

    @property
    def first_id(self) -> Optional[str]:
        return next(iter(self.questions), None)


def _ordered_unique(values: Iterable[str]) -> tuple[str, ...]:
    seen: list[str] = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return tuple(seen)


class DynamicNodeSynthesizer:
    """Builds goal-branch queues and pain-trigger questions for a session."""

    def __init__(self, graph: FlowGraph, knowledge_base: InjuryKnowledgeBase):
        self.graph = graph
        self.knowledge_base = knowledge_base
        self.goal_subgraphs = {
            goal_id: tuple(self._reachable([entry_id])) for goal_id, entry_id in graph.goal_entries.items()
        }
        self.injury_section = self._map_injury_section()

    # ------------------------------------------------------------------
    # Goal branches
    # ------------------------------------------------------------------

    def start_goal_branches(self, selected_goals: Optional[Iterable[str]]) -> tuple[str, ...]:
        """Queue the selected goals in selection order (not canonical order)."""
        return _ordered_unique(selected_goals or ())

    def next_goal_branch(self, pending: tuple[str, ...]) -> tuple[str, tuple[str, ...]]:
        """
        Pop the next goal's entry node.

        Returns:
            (entry question id, remaining queue). When the queue is empty the
            fixed post-goals node is returned with an empty queue.

        Raises:
            UnresolvableSentinelError: unknown goal id, or empty queue with no
                post-goals node configured
        """
        if pending:
            goal_id, remaining = pending[0], pending[1:]
            entry_id = self.graph.goal_entries.get(goal_id)
            if entry_id is None:
                raise UnresolvableSentinelError(f"No sub-graph entry configured for goal '{goal_id}'", goal_id)
            logger.debug("Goal branch '%s' -> %s (remaining: %s)", goal_id, entry_id, list(remaining))
            return entry_id, remaining

        if self.graph.post_goals_id is None:
            raise UnresolvableSentinelError("Goal-branch queue is empty and no post-goals question is configured")
        return self.graph.post_goals_id, ()

    def discard_unselected_goals(self, profile: Profile, selected_goals: Optional[Iterable[str]]) -> Profile:
        """Forget answers given inside the sub-graphs of goals no longer selected."""
        kept = set(selected_goals or ())
        still_asked = {q_id for goal_id in kept for q_id in self.goal_subgraphs.get(goal_id, ())}
        dropped = [
            q_id
            for goal_id, question_ids in self.goal_subgraphs.items() if goal_id not in kept
            for q_id in question_ids if q_id not in still_asked
        ]
        cleared = clear_answers(self.graph, profile, dropped)
        if cleared is not profile:
            logger.debug("Discarded answers for unselected goal sub-graphs: %s", dropped)
        return cleared

    # ------------------------------------------------------------------
    # Pain-trigger chain
    # ------------------------------------------------------------------

    def dynamic_id(self, area_id: str) -> str:
        return f"{self.graph.dynamic_prefix}{area_id}"

    def area_for(self, question_id: str) -> Optional[str]:
        """Injury area a synthesized question id belongs to."""
        if not self.graph.is_dynamic_id(question_id):
            return None
        return question_id[len(self.graph.dynamic_prefix):]

    def build_chain(self, injury_areas: Iterable[str]) -> dict[str, Question]:
        """
        Synthesize one pain-trigger question per profiled area, chained in
        selection order. The last question routes to the post-injury node.
        Areas without a knowledge-base profile are skipped.
        """
        profiled = []
        for area_id in _ordered_unique(injury_areas):
            profile = self.knowledge_base.get(area_id)
            if profile is None:
                logger.warning("No injury profile for '%s'; no pain-trigger question generated", area_id)
                continue
            profiled.append(profile)

        chain: dict[str, Question] = {}
        for idx, profile in enumerate(profiled):
            if idx + 1 < len(profiled):
                next_id = self.dynamic_id(profiled[idx + 1].id)
            else:
                next_id = self.graph.post_injury_id
            question_id = self.dynamic_id(profile.id)
            chain[question_id] = Question(
                id=question_id,
                category=self._injury_category(),
                title=f"{profile.label}: what triggers pain?",
                subtitle="Select all that apply. Skip if none.",
                type=QuestionType.MULTI_SELECT,
                options=tuple(
                    QuestionOption(id=t.id, label=t.label, description=t.technical_note)
                    for t in profile.pain_triggers
                ),
                required=False,
                default_next=LiteralEdge(next_id),
            )
        return chain

    def injury_chain(self, state: EngineState, injury_areas: Iterable[str]) -> InjuryChain:
        """
        Chain for the current selection.

        An unchanged selection reuses the questions already synthesized this
        session. A changed selection rebuilds the chain from scratch and
        discards answers that belonged to questions no longer in it.
        """
        selection = _ordered_unique(injury_areas)
        if selection == state.injury_selection:
            return InjuryChain(state.dynamic_questions, selection, state.profile)

        questions = self.build_chain(selection)
        profile = self._discard_stale(state.profile, state.dynamic_questions, questions)
        logger.debug("Rebuilt pain-trigger chain for %s: %s", list(selection), list(questions))
        return InjuryChain(questions, selection, profile, rebuilt=True)

    def discard_chain(self, state: EngineState) -> InjuryChain:
        """Drop the whole injury section: areas, triggers, notes, limitations and synthesized questions."""
        profile = self._discard_stale(state.profile, state.dynamic_questions, {})
        profile = clear_answers(self.graph, profile, self.injury_section)
        profile = replace(profile, injury_areas=None, pain_triggers={})
        return InjuryChain({}, (), profile, rebuilt=bool(state.dynamic_questions))

    def _discard_stale(
        self,
        profile: Profile,
        old_questions: dict[str, Question],
        new_questions: dict[str, Question],
    ) -> Profile:
        removed = [q_id for q_id in old_questions if q_id not in new_questions]
        stale_areas = [
            area for area in profile.pain_triggers
            if self.dynamic_id(area) not in new_questions
        ]
        if not removed and not stale_areas:
            return profile

        answers = {k: v for k, v in profile.answers.items() if k not in removed}
        pain_triggers = {k: v for k, v in profile.pain_triggers.items() if k not in stale_areas}
        return replace(profile, answers=answers, pain_triggers=pain_triggers)

    def _injury_category(self) -> str:
        question = self.graph.get(self.graph.injury_question_id)
        return question.category if question else "constraints"

    def _map_injury_section(self) -> tuple[str, ...]:
        """Static questions between the injury gate and the gate's "no injuries" target."""
        gate = self.graph.get(self.graph.injury_gate_id)
        exit_id = gate.default_next.target if gate and isinstance(gate.default_next, LiteralEdge) else None
        starts = [q_id for q_id in (self.graph.injury_question_id, self.graph.post_injury_id) if q_id]
        return tuple(self._reachable(starts, stop=exit_id))

    def _reachable(self, starts: list[str], stop: Optional[str] = None) -> list[str]:
        """Static questions reachable from `starts` over branch rules and literal edges."""
        found: list[str] = []
        stack = list(starts)
        while stack:
            question_id = stack.pop()
            question = self.graph.get(question_id)
            if question is None or question_id == stop or question_id in found:
                continue
            found.append(question_id)
            stack.extend(rule.next_question_id for rule in question.branches)
            if isinstance(question.default_next, LiteralEdge):
                stack.append(question.default_next.target)
        return found
