"""Handling of trigger and reconcile requests addressed to the action controller."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum

from pullpiri.manager import ActionControllerManager, ManagerError
from pullpiri.status import i32_to_status

log = logging.getLogger(__name__)

SUCCESS = 0


class GrpcCode(IntEnum):
    """Status codes reported to callers when a request fails."""

    OK = 0
    UNKNOWN = 2
    INVALID_ARGUMENT = 3
    NOT_FOUND = 5
    INTERNAL = 13


class RpcError(Exception):
    """A request failed; carries the status code and message for the caller."""

    def __init__(self, code: GrpcCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __repr__(self) -> str:
        return f"RpcError({self.code.name}, {self.message!r})"


@dataclass(frozen=True)
class TriggerActionResponse:
    """Reply to a trigger request."""

    status: int
    desc: str


@dataclass(frozen=True)
class ReconcileResponse:
    """Reply to a reconcile request."""

    status: int
    desc: str


def _trigger_error_code(message: str) -> GrpcCode:
    if "Invalid scenario name" in message:
        return GrpcCode.INVALID_ARGUMENT
    if "not found" in message:
        return GrpcCode.NOT_FOUND
    if "Failed to parse" in message:
        return GrpcCode.INVALID_ARGUMENT
    if "Failed to start workload" in message or "Failed to stop workload" in message:
        return GrpcCode.INTERNAL
    return GrpcCode.UNKNOWN


class ActionControllerReceiver:
    """Serves trigger requests from the filter gateway and reconcile requests from the state manager."""

    def __init__(self, manager: ActionControllerManager) -> None:
        self.manager = manager

    async def trigger_action(self, scenario_name: str) -> TriggerActionResponse:
        """Trigger the named scenario; raise :class:`RpcError` if it fails."""
        log.info("trigger_action scenario: %s", scenario_name)
        try:
            await self.manager.trigger_manager_action(scenario_name)
        except (ManagerError, OSError) as exc:
            message = str(exc)
            raise RpcError(_trigger_error_code(message), message) from exc
        return TriggerActionResponse(status=SUCCESS, desc="Action triggered successfully")

    async def reconcile(self, scenario_name: str, current: int, desired: int) -> ReconcileResponse:
        """Reconcile the scenario from the ``current`` to the ``desired`` wire state."""
        current_status = i32_to_status(current)
        desired_status = i32_to_status(desired)

        if current_status == desired_status:
            return ReconcileResponse(status=SUCCESS, desc="Current and desired states are equal")

        try:
            await self.manager.reconcile_do(scenario_name, current_status, desired_status)
        except (ManagerError, OSError) as exc:
            log.error("Reconciliation failed: %s", exc)
            raise RpcError(GrpcCode.INTERNAL, f"Failed to reconcile: {exc}") from exc
        return ReconcileResponse(status=SUCCESS, desc="Reconciliation completed successfully")