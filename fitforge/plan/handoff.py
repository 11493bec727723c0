"""
Plan hand-off - runs a plan generator once the questionnaire is complete.

The primary generator (typically remote / LLM-backed) is raced against a
timeout on a worker thread. On timeout or any failure the deterministic
fallback generator is used instead.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from typing import Optional

from ..schemas.profile import Profile
from .base import PlanGenerator, WorkoutPlan

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


def generate_plan(
    profile: Profile,
    generator: PlanGenerator,
    fallback: Optional[PlanGenerator] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> WorkoutPlan:
    """
    Generate a plan, falling back when the primary generator is slow or fails.

    Raises:
        Whatever the primary generator raised, when no fallback is given
        FutureTimeout: primary timed out and no fallback is given
    """
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="plan-gen")
    future = executor.submit(generator.generate, profile)
    try:
        plan = future.result(timeout=timeout)
        plan.generator = plan.generator or generator.name
        logger.info("Plan generated by %s", generator.name)
        return plan
    except FutureTimeout:
        logger.warning("%s timed out after %.1fs", generator.name, timeout)
        if fallback is None:
            raise
    except Exception as exc:
        logger.warning("%s failed: %s", generator.name, exc)
        if fallback is None:
            raise
    finally:
        # A timed-out generator keeps running; don't block on it
        executor.shutdown(wait=False)

    plan = fallback.generate(profile)
    plan.generator = plan.generator or fallback.name
    logger.info("Plan generated by fallback %s", fallback.name)
    return plan
