"""
Test-drive session manager.

One active session per requester, globally. Every terminal transition goes
through _finish(), which is synchronous: whichever of end() or the expiry
timer reaches it first wins, and the other sees no matching session.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone

from kungfu import Result, Ok, Error

from dealership._errors import Failure, Failures
from dealership._types import Clock
from dealership.config import EngineConfig
from dealership.events import EventKind, Notifier
from dealership.testdrive._timer import AsyncioScheduler, Scheduler, TimerHandle
from dealership.testdrive._types import SessionState, TestDriveSession

logger = logging.getLogger("dealership.testdrive")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class _Armed:
    session: TestDriveSession
    timer: TimerHandle


class TestDriveManager:
    """
    Example:
        manager = TestDriveManager(notifier)
        result = await manager.start("adder", "player:7", timedelta(minutes=2))
        ...
        await manager.end("player:7")
    """

    __test__ = False  # not a pytest test class

    def __init__(
        self,
        notifier: Notifier,
        scheduler: Scheduler | None = None,
        *,
        clock: Clock | None = None,
        config: EngineConfig | None = None,
    ) -> None:
        self._notifier = notifier
        self._scheduler = scheduler or AsyncioScheduler()
        self._clock = clock or _utcnow
        self._config = config or EngineConfig()
        self._active: dict[str, _Armed] = {}
        self._closed: dict[str, datetime] = {}  # token -> deadline

    # ── Queries ────────────────────────────────────────────────

    def active(self, requester_id: str) -> TestDriveSession | None:
        armed = self._active.get(requester_id)
        return armed.session if armed is not None else None

    def active_sessions(self) -> tuple[TestDriveSession, ...]:
        return tuple(armed.session for armed in self._active.values())

    # ── Transitions ────────────────────────────────────────────

    async def start(
        self,
        item_id: str,
        requester_id: str,
        duration: timedelta | None = None,
    ) -> Result[TestDriveSession, Failure]:
        """Idle → Active. Fails ALREADY_ACTIVE if requester has a session."""
        duration = duration if duration is not None else self._config.default_test_drive
        if duration <= timedelta(0):
            return Error(Failures.invalid_input("test drive duration must be positive"))
        if duration > self._config.max_test_drive:
            return Error(Failures.invalid_input(
                f"test drive duration exceeds {self._config.max_test_drive}"
            ))
        if requester_id in self._active:
            return Error(Failures.already_active(requester_id))

        session = TestDriveSession(
            item_id=item_id,
            requester_id=requester_id,
            started_at=self._clock(),
            duration_limit=duration,
            token=uuid.uuid4().hex,
        )
        self._arm(session, duration.total_seconds())
        logger.info("Test drive started: %s in %s for %s", requester_id, item_id, duration)

        await self._notifier.publish(EventKind.SESSION_STARTED, _payload(session))
        return Ok(session)

    async def end(self, requester_id: str) -> Result[TestDriveSession, Failure]:
        """Active → EndedEarly. Cancels the pending expiry."""
        armed = self._active.get(requester_id)
        if armed is None:
            return Error(Failures.not_active(requester_id))

        finished = self._finish(requester_id, armed.session.token, SessionState.ENDED_EARLY)
        if finished is None:
            return Error(Failures.not_active(requester_id))
        armed.timer.cancel()
        logger.info("Test drive ended early: %s", requester_id)

        await self._notifier.publish(EventKind.SESSION_ENDED, _payload(finished))
        return Ok(finished)

    async def extend(
        self, requester_id: str, extra: timedelta
    ) -> Result[TestDriveSession, Failure]:
        """Push the deadline back. The old timer is cancelled and becomes stale."""
        if extra <= timedelta(0):
            return Error(Failures.invalid_input("extension must be positive"))
        armed = self._active.get(requester_id)
        if armed is None:
            return Error(Failures.not_active(requester_id))

        limit = armed.session.duration_limit + extra
        if limit > self._config.max_test_drive:
            return Error(Failures.invalid_input(
                f"test drive duration exceeds {self._config.max_test_drive}"
            ))

        armed.timer.cancel()
        session = replace(armed.session, duration_limit=limit, token=uuid.uuid4().hex)
        remaining = (session.deadline - self._clock()).total_seconds()
        self._arm(session, remaining)
        return Ok(session)

    async def restore(self, sessions: Iterable[TestDriveSession]) -> int:
        """
        Re-arm sessions persisted before a restart.

        Overdue sessions expire immediately. Sessions whose token already
        reached a terminal state, or whose requester is already active,
        are skipped. Closed tokens are remembered until their deadline is
        max_test_drive in the past. Returns the number re-armed or expired.
        """
        restored = 0
        for session in sessions:
            if not session.is_active:
                continue
            if session.token in self._closed or session.requester_id in self._active:
                continue

            remaining = (session.deadline - self._clock()).total_seconds()
            self._arm(session, max(remaining, 0.0))
            if remaining <= 0:
                timer = self._active[session.requester_id].timer
                await self._expire(session.requester_id, session.token)
                timer.cancel()
            restored += 1
        return restored

    # ── Internals ──────────────────────────────────────────────

    def _arm(self, session: TestDriveSession, delay: float) -> None:
        requester_id, token = session.requester_id, session.token
        timer = self._scheduler.call_later(
            delay, lambda: self._expire(requester_id, token)
        )
        self._active[requester_id] = _Armed(session, timer)

    def _finish(
        self, requester_id: str, token: str, state: SessionState
    ) -> TestDriveSession | None:
        armed = self._active.get(requester_id)
        if armed is None or armed.session.token != token:
            return None
        del self._active[requester_id]
        self._closed[token] = armed.session.deadline
        self._prune_closed()
        return replace(armed.session, state=state)

    def _prune_closed(self) -> None:
        """Forget closed tokens whose deadline is more than max_test_drive past."""
        horizon = self._clock() - self._config.max_test_drive
        for token in [t for t, deadline in self._closed.items() if deadline < horizon]:
            del self._closed[token]

    async def _expire(self, requester_id: str, token: str) -> None:
        finished = self._finish(requester_id, token, SessionState.EXPIRED)
        if finished is None:
            logger.debug("Stale expiry ignored: %s (%s)", requester_id, token)
            return

        logger.info("Test drive expired: %s in %s", requester_id, finished.item_id)
        await self._notifier.publish(EventKind.SESSION_EXPIRED, _payload(finished))


def _payload(session: TestDriveSession) -> dict[str, object]:
    return {
        "item_id": session.item_id,
        "requester_id": session.requester_id,
        "started_at": session.started_at,
        "duration_limit": session.duration_limit,
        "state": session.state.name,
    }


__all__ = ("TestDriveManager",)
