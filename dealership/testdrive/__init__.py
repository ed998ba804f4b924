"""
Test drive — time-bounded exclusive loans.

    from dealership import testdrive as T

    manager = T.TestDriveManager(notifier, T.AsyncioScheduler())
    await manager.start("adder", "player:7", timedelta(minutes=2))
"""

from dealership.testdrive._types import SessionState, TestDriveSession
from dealership.testdrive._timer import (
    TimerCallback,
    TimerHandle,
    Scheduler,
    AsyncioScheduler,
)
from dealership.testdrive._manager import TestDriveManager

__all__ = (
    "SessionState",
    "TestDriveSession",
    "TimerCallback",
    "TimerHandle",
    "Scheduler",
    "AsyncioScheduler",
    "TestDriveManager",
)
