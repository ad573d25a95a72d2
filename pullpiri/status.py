"""Workload states exchanged with the state manager."""

from __future__ import annotations

from enum import IntEnum


class Status(IntEnum):
    """State of a scenario's workloads."""

    NONE = 0
    INIT = 1
    READY = 2
    RUNNING = 3
    DONE = 4
    FAILED = 5
    UNKNOWN = 6


_KNOWN = {
    0: Status.NONE,
    1: Status.INIT,
    2: Status.READY,
    3: Status.RUNNING,
    4: Status.DONE,
    5: Status.FAILED,
}


def i32_to_status(value: int) -> Status:
    """Map a wire value to a :class:`Status`; anything unrecognised is ``UNKNOWN``."""
    return _KNOWN.get(value, Status.UNKNOWN)