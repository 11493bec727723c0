"""Errors raised by the questionnaire engine."""

from __future__ import annotations

from typing import Optional


class ValidationError(Exception):
    """An answer violates the required/range/cardinality rules of its question.

    The engine state is left unchanged; the caller may resubmit.
    """

    def __init__(self, question_id: str, errors: dict[str, str]):
        self.question_id = question_id
        self.errors = dict(errors)
        detail = "; ".join(f"{k}: {v}" for k, v in self.errors.items())
        super().__init__(f"Invalid answer for '{question_id}': {detail}")


class GraphIntegrityError(Exception):
    """A resolved or declared question id does not exist in the flow."""

    def __init__(self, message: str, question_id: Optional[str] = None):
        self.question_id = question_id
        super().__init__(message)


class UnresolvableSentinelError(GraphIntegrityError):
    """A runtime-routed edge could not be resolved to a question."""
