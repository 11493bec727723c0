"""
Questionnaire Engine - drives a session through the question graph.

The engine itself holds no per-session data: every operation takes an
EngineState and returns a new one. QuestionnaireSession wraps a state for
hosts that want a mutable handle (web, CLI) and serializes access to it.

Flow of one advance():
1. Validate + project the answer into the profile (AnswerProjector)
2. Record the answered question and its goal queue in history
3. Resolve the next question (TransitionResolver, which may synthesize
   pain-trigger questions or pop the goal-branch queue)
4. Recompute progress
"""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import Any, Optional

from ..errors import GraphIntegrityError, ValidationError
from ..injury_kb import InjuryKnowledgeBase, load_default_knowledge_base
from ..schemas.profile import Profile
from ..schemas.question_flow import QUESTION_FLOW
from ..schemas.questionnaire import (
    FlowGraph,
    GoalBranchEdge,
    InjuryChainEdge,
    LiteralEdge,
    Question,
    QuestionType,
)
from .projector import AnswerProjector, ResolvedSubField, resolve_subfield
from .resolver import TransitionResolver, primary_answer
from .state import EngineState, HistoryEntry
from .synthesizer import DynamicNodeSynthesizer

logger = logging.getLogger(__name__)


class QuestionnaireEngine:
    """Stateless driver: (state, answer) -> new state."""

    def __init__(
        self,
        graph: Optional[FlowGraph] = None,
        knowledge_base: Optional[InjuryKnowledgeBase] = None,
    ):
        self.graph = graph or QUESTION_FLOW
        self.knowledge_base = knowledge_base or load_default_knowledge_base()
        self.synthesizer = DynamicNodeSynthesizer(self.graph, self.knowledge_base)
        self.resolver = TransitionResolver(self.graph, self.synthesizer)
        self.projector = AnswerProjector(self.graph)
        self._goal_owner = self._map_goal_subgraphs()

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def initial_state(self) -> EngineState:
        return EngineState(current_question_id=self.graph.start_id)

    def reset(self, state: Optional[EngineState] = None) -> EngineState:
        """Fresh state at the start question. Dynamic tables and queues are dropped."""
        return self.initial_state()

    def advance(self, state: EngineState, value: Any) -> EngineState:
        """
        Answer the current question and move on.

        Raises:
            ValidationError: the answer breaks the question's rules, or the
                questionnaire is already complete. The state is unchanged.
            GraphIntegrityError: routing reached a question that does not exist
        """
        if state.is_complete:
            raise ValidationError(state.current_question_id, {"_": "Questionnaire is already complete"})

        node = self.get_question(state, state.current_question_id)
        projection = self.projector.project(node, value, state.profile)
        if not projection.ok:
            logger.debug("Rejected answer for %s: %s", node.id, projection.errors)
            raise ValidationError(node.id, projection.errors)

        projected = replace(state, profile=projection.profile)
        transition = self.resolver.resolve_next(node, projection.value, projected)

        next_state = replace(
            projected,
            history=state.history + (HistoryEntry(node.id, state.pending_goal_branches),),
            profile=transition.profile,
            dynamic_questions=transition.dynamic_questions,
            injury_selection=transition.injury_selection,
            pending_goal_branches=transition.pending_goal_branches,
        )

        if transition.is_terminal:
            logger.info("Questionnaire complete after %d answers", len(next_state.history))
            return replace(next_state, is_complete=True, progress=1.0)

        next_state = replace(next_state, current_question_id=transition.next_id)
        logger.debug("%s -> %s", node.id, transition.next_id)
        return replace(next_state, progress=max(state.progress, self.estimate_progress(next_state)))

    def back(self, state: EngineState) -> EngineState:
        """Return to the previous question. No-op at the start."""
        if not state.history:
            return state

        entry = state.history[-1]
        restored = replace(
            state,
            current_question_id=entry.question_id,
            history=state.history[:-1],
            pending_goal_branches=entry.pending_goal_branches,
            is_complete=False,
        )
        logger.debug("back: %s -> %s", state.current_question_id, entry.question_id)
        return replace(restored, progress=self.estimate_progress(restored))

    # =========================================================================
    # QUERIES
    # =========================================================================

    def get_question(self, state: EngineState, question_id: str) -> Question:
        question = self.graph.get(question_id) or state.dynamic_questions.get(question_id)
        if question is None:
            raise GraphIntegrityError(f"Question '{question_id}' not found", question_id)
        return question

    def current_node(self, state: EngineState) -> Question:
        return self.get_question(state, state.current_question_id)

    def current_answer(self, state: EngineState) -> Any:
        """Previously recorded answer for the current question, if any."""
        return state.profile.answers.get(state.current_question_id)

    def current_fields(self, state: EngineState) -> list[ResolvedSubField]:
        node = self.current_node(state)
        if node.type != QuestionType.MULTI_FIELD:
            return []
        return [resolve_subfield(sub, state.profile) for sub in node.fields]

    # =========================================================================
    # PROGRESS
    # =========================================================================

    def estimate_progress(self, state: EngineState) -> float:
        """
        Completed segments / segments on the path still reachable.

        A segment is a run of consecutive questions in one category. Each goal
        sub-graph and each pain-trigger question is a segment of its own.
        """
        if state.is_complete:
            return 1.0

        visited = state.history_ids
        current = state.current_question_id
        path = visited + [current] + self._remaining_path(state)

        total = self._count_segments(path)
        done = self._count_segments(visited)
        if visited and self._segment_key(visited[-1]) == self._segment_key(current):
            done -= 1
        if total == 0:
            return 0.0
        return min(1.0, done / total)

    def _segment_key(self, question_id: str) -> tuple[str, str]:
        if self.graph.is_dynamic_id(question_id):
            return ("dynamic", question_id)
        goal = self._goal_owner.get(question_id)
        if goal is not None:
            return ("goal", goal)
        question = self.graph.get(question_id)
        return ("category", question.category if question else question_id)

    def _count_segments(self, question_ids: list[str]) -> int:
        count = 0
        previous = None
        for question_id in question_ids:
            key = self._segment_key(question_id)
            if key != previous:
                count += 1
            previous = key
        return count

    def _map_goal_subgraphs(self) -> dict[str, str]:
        """question id -> goal id, for every node reachable inside a goal sub-graph."""
        owners: dict[str, str] = {}
        for goal_id, question_ids in self.synthesizer.goal_subgraphs.items():
            for question_id in question_ids:
                owners.setdefault(question_id, goal_id)
        return owners

    def _remaining_path(self, state: EngineState) -> list[str]:
        """
        Walk forward from the current question using the answers held so far.
        Unanswered routing falls back to the default edge; unanswered goals
        assume a single goal.
        """
        graph = self.graph
        profile: Profile = state.profile
        pending = state.pending_goal_branches
        dynamic = dict(state.dynamic_questions)

        path: list[str] = []
        question_id = state.current_question_id
        for _ in range(len(graph.questions) * 2 + len(dynamic) + 10):
            question = graph.get(question_id) or dynamic.get(question_id)
            if question is None:
                break

            if question.id == graph.goal_question_id:
                pending = tuple(profile.goals or list(graph.goal_entries)[:1])

            next_id = None
            primary = primary_answer(profile.answers.get(question.id))
            for rule in question.branches:
                if rule.matches(primary):
                    next_id = rule.next_question_id
                    break
            else:
                edge = question.default_next
                if isinstance(edge, LiteralEdge):
                    next_id = edge.target
                elif isinstance(edge, GoalBranchEdge):
                    if pending:
                        next_id, pending = graph.goal_entries.get(pending[0]), pending[1:]
                    else:
                        next_id = graph.post_goals_id
                elif isinstance(edge, InjuryChainEdge):
                    areas = tuple(profile.injury_areas or ())
                    if areas != state.injury_selection:
                        dynamic = self.synthesizer.build_chain(areas)
                    next_id = next(iter(dynamic), None) or graph.post_injury_id

            if next_id is None:
                break
            path.append(next_id)
            question_id = next_id
        return path


class QuestionnaireSession:
    """
    Mutable per-session handle around an immutable EngineState.

    All operations take the session lock, so concurrent requests against
    one session are applied one at a time.
    """

    def __init__(self, engine: Optional[QuestionnaireEngine] = None, session_id: str = ""):
        self.engine = engine or QuestionnaireEngine()
        self.session_id = session_id
        self._lock = threading.Lock()
        self._state = self.engine.initial_state()

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def profile(self) -> Profile:
        return self._state.profile

    @property
    def is_complete(self) -> bool:
        return self._state.is_complete

    @property
    def progress(self) -> float:
        return self._state.progress

    def advance(self, value: Any) -> EngineState:
        with self._lock:
            self._state = self.engine.advance(self._state, value)
            return self._state

    def back(self) -> EngineState:
        with self._lock:
            self._state = self.engine.back(self._state)
            return self._state

    def reset(self) -> EngineState:
        with self._lock:
            self._state = self.engine.reset(self._state)
            return self._state

    def current_node(self) -> Question:
        return self.engine.current_node(self._state)

    def current_answer(self) -> Any:
        return self.engine.current_answer(self._state)

    def current_fields(self) -> list[ResolvedSubField]:
        return self.engine.current_fields(self._state)

    def to_dict(self) -> dict[str, Any]:
        """Current question payload for hosts."""
        with self._lock:
            return self.describe(self._state)

    def describe(self, state: EngineState) -> dict[str, Any]:
        """
        Payload for one specific state, e.g. the one advance() returned.
        A completed state also carries the profile.
        """
        node = self.engine.current_node(state)
        question = node.to_dict()
        if node.type == QuestionType.MULTI_FIELD:
            question["fields"] = [f.to_dict() for f in self.engine.current_fields(state)]
        category = next((c for c in self.engine.graph.categories if c.id == node.category), None)
        payload = {
            "sessionId": self.session_id,
            "question": question,
            "categoryLabel": category.label if category else node.category,
            "answer": self.engine.current_answer(state),
            "progress": round(state.progress, 3),
            "isComplete": state.is_complete,
            "canGoBack": state.can_go_back(),
        }
        if state.is_complete:
            payload["profile"] = state.profile.to_dict()
        return payload
