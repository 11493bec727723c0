"""
Transition Resolver - decides which question comes next.

Order of evaluation for an answered question:
1. Branch rules, matched against the primary answer (first selection for
   multi-select); first match wins
2. Literal default edge
3. Goal-branch edge: next queued goal's entry node, else the post-goals node
4. Injury-chain edge: first synthesized pain-trigger question, or the
   post-injury node when no area needs one
5. Terminal edge: the questionnaire ends

Resolution is a pure function of (question, answer, state): the routing
tables that change along the way come back in the Transition instead of
being written into the state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Optional

from ..errors import GraphIntegrityError, UnresolvableSentinelError
from ..schemas.profile import Profile
from ..schemas.questionnaire import (
    FlowGraph,
    GoalBranchEdge,
    InjuryChainEdge,
    LiteralEdge,
    Question,
    TerminalEdge,
)
from .state import EngineState
from .synthesizer import DynamicNodeSynthesizer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transition:
    """Where to go next, plus the routing tables as they stand afterwards."""
    next_id: Optional[str]
    pending_goal_branches: tuple[str, ...]
    dynamic_questions: dict[str, Question]
    injury_selection: tuple[str, ...]
    profile: Profile

    @property
    def is_terminal(self) -> bool:
        return self.next_id is None


def primary_answer(value: Any) -> Any:
    """The value branch rules are matched against."""
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    if isinstance(value, dict):
        return None
    return value


class TransitionResolver:
    """Computes the next question id from the current question, answer and state."""

    def __init__(self, graph: FlowGraph, synthesizer: DynamicNodeSynthesizer):
        self.graph = graph
        self.synthesizer = synthesizer

    def resolve_next(self, node: Question, answer_value: Any, state: EngineState) -> Transition:
        """
        Resolve the next question for `node` answered with `answer_value`.

        `state` must already carry the projected profile for this answer.

        Raises:
            GraphIntegrityError: the resolved id is in neither the static graph
                nor the dynamic question table
            UnresolvableSentinelError: a runtime edge cannot be resolved
        """
        transition = Transition(
            next_id=None,
            pending_goal_branches=state.pending_goal_branches,
            dynamic_questions=state.dynamic_questions,
            injury_selection=state.injury_selection,
            profile=state.profile,
        )

        # Answering the goal question (re)starts the goal-branch queue and
        # forgets sub-graph answers for goals no longer selected
        if node.id == self.graph.goal_question_id:
            transition = replace(
                transition,
                pending_goal_branches=self.synthesizer.start_goal_branches(state.profile.goals),
                profile=self.synthesizer.discard_unselected_goals(state.profile, state.profile.goals),
            )

        # "No injuries" drops anything left over from an earlier pass
        if node.id == self.graph.injury_gate_id and state.profile.has_injuries is False:
            chain = self.synthesizer.discard_chain(state)
            transition = replace(
                transition,
                dynamic_questions=chain.questions,
                injury_selection=chain.selection,
                profile=chain.profile,
            )

        primary = primary_answer(answer_value)
        for rule in node.branches:
            if rule.matches(primary):
                logger.debug("%s: branch '%s' -> %s", node.id, primary, rule.next_question_id)
                return self._to(transition, rule.next_question_id)

        edge = node.default_next

        if isinstance(edge, LiteralEdge):
            return self._to(transition, edge.target)

        if isinstance(edge, GoalBranchEdge):
            target, remaining = self.synthesizer.next_goal_branch(transition.pending_goal_branches)
            return self._to(replace(transition, pending_goal_branches=remaining), target)

        if isinstance(edge, InjuryChainEdge):
            chain = self.synthesizer.injury_chain(
                replace(state, profile=transition.profile),
                transition.profile.injury_areas or [],
            )
            transition = replace(
                transition,
                dynamic_questions=chain.questions,
                injury_selection=chain.selection,
                profile=chain.profile,
            )
            target = chain.first_id or self.graph.post_injury_id
            if target is None:
                raise UnresolvableSentinelError(f"{node.id}: no post-injury question configured", node.id)
            return self._to(transition, target)

        if isinstance(edge, TerminalEdge):
            logger.debug("%s: terminal", node.id)
            return transition

        raise UnresolvableSentinelError(f"{node.id}: unknown edge {edge!r}", node.id)

    def _to(self, transition: Transition, target: str) -> Transition:
        if target not in self.graph and target not in transition.dynamic_questions:
            raise GraphIntegrityError(
                f"Resolved question '{target}' is not in the flow or the dynamic question table",
                target,
            )
        return replace(transition, next_id=target)
