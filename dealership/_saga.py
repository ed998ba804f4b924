"""
Saga — sequential steps with compensation.

    saga = step(decrement, restore).then(lambda r: step(append_sale(r)))
    result = await run(saga)

On failure, compensators recorded so far run in reverse.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from kungfu import Result, Ok, Error, LazyCoroResult

logger = logging.getLogger("dealership.saga")

# ═══════════════════════════════════════════════════════════════════════════════
# Types
# ═══════════════════════════════════════════════════════════════════════════════

type Compensator[T] = Callable[[T], Awaitable[None]]
"""Receives the action result and undoes it."""

type RecordedCompensator = tuple[object, Compensator[object]]


@dataclass(frozen=True, slots=True)
class SagaStep[T, E]:
    """
    A single saga step: action + compensator.

    When action succeeds, compensator is recorded.
    If later step fails, compensators run in reverse.
    """

    action: LazyCoroResult[T, E]
    compensate: Compensator[T] | None

    def then[U, E2](self, f: Callable[[T], SagaStep[U, E2]]) -> Then[T, U]:
        """Chain another saga step after this one."""
        return Then(self, f)


@dataclass(frozen=True, slots=True)
class Then[T, U]:
    """Sequential composition (monadic bind)."""

    inner: SagaStep[T, object] | Then[object, T]
    f: Callable[[T], SagaStep[U, object]]

    def then[V](self, f: Callable[[U], SagaStep[V, object]]) -> Then[U, V]:
        return Then(self, f)


type Saga = SagaStep[object, object] | Then[object, object]


@dataclass(frozen=True, slots=True)
class SagaResult[T]:
    """Successful saga result with metadata."""

    value: T
    steps_executed: int


@dataclass(frozen=True, slots=True)
class SagaError[E]:
    """Saga error with rollback status."""

    error: E
    step_failed: int
    compensators_run: int
    compensators_failed: int

    @property
    def rollback_complete(self) -> bool:
        return self.compensators_failed == 0


# ═══════════════════════════════════════════════════════════════════════════════
# step() — Primary Constructor
# ═══════════════════════════════════════════════════════════════════════════════


def step[T, E](
    action: LazyCoroResult[T, E],
    compensate: Compensator[T] | None = None,
) -> SagaStep[T, E]:
    """Create a compensated saga step."""
    return SagaStep(action=action, compensate=compensate)


# ═══════════════════════════════════════════════════════════════════════════════
# Execution
# ═══════════════════════════════════════════════════════════════════════════════


async def _run_step(
    saga_step: SagaStep[object, object],
    compensators: list[RecordedCompensator],
) -> Result[object, object]:
    result = await saga_step.action
    match result:
        case Ok(value):
            if saga_step.compensate is not None:
                compensators.append((value, saga_step.compensate))
            return Ok(value)
        case Error(e):
            return Error(e)


async def _run_expr(
    expr: Saga,
    compensators: list[RecordedCompensator],
) -> tuple[Result[object, object], int]:
    match expr:
        case SagaStep():
            return await _run_step(expr, compensators), 1
        case Then(inner=inner, f=f):
            inner_result, steps = await _run_expr(inner, compensators)
            match inner_result:
                case Ok(value):
                    return await _run_step(f(value), compensators), steps + 1
                case _:
                    return inner_result, steps


async def _run_compensators(compensators: list[RecordedCompensator]) -> tuple[int, int]:
    """Run compensators in reverse. Returns (run, failed)."""
    comp_run = 0
    comp_failed = 0

    for value, comp in reversed(compensators):
        try:
            await comp(value)
            comp_run += 1
        except Exception:
            logger.exception("Compensator failed for %r", value)
            comp_failed += 1

    return comp_run, comp_failed


async def run[T, E](saga: Saga) -> Result[SagaResult[T], SagaError[E]]:
    """
    Execute saga with automatic rollback on failure.

    On success: returns SagaResult with the last step's value.
    On failure: runs compensators in reverse, returns SagaError.

    Note: If a step raises or the task is cancelled mid-saga, recorded
    compensators still run before the exception propagates.
    """
    compensators: list[RecordedCompensator] = []
    try:
        result, steps = await _run_expr(saga, compensators)
    except BaseException:
        if compensators:
            comp_run, comp_failed = await _run_compensators(compensators)
            logger.warning(
                "Saga interrupted: %d compensators run, %d failed", comp_run, comp_failed
            )
        raise

    match result:
        case Ok(value):
            return Ok(SagaResult(value=value, steps_executed=steps))  # type: ignore[arg-type]
        case Error(error):
            comp_run, comp_failed = await _run_compensators(compensators)
            return Error(SagaError(
                error=error,  # type: ignore[arg-type]
                step_failed=steps,
                compensators_run=comp_run,
                compensators_failed=comp_failed,
            ))


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "Compensator",
    "SagaStep",
    "Then",
    "SagaResult",
    "SagaError",
    "step",
    "run",
)
