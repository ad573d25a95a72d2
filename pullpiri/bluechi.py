"""Workload control through the bluechi controller on the system message bus."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

log = logging.getLogger(__name__)

DEST = "org.eclipse.bluechi"
PATH = "/org/eclipse/bluechi"
DEST_CONTROLLER = "org.eclipse.bluechi.Controller"
DEST_NODE = "org.eclipse.bluechi.Node"
CALL_TIMEOUT = 5.0
UNIT_JOB_MODE = "replace"


class BusProxy(Protocol):
    """A remote object on the message bus."""

    def method_call(self, interface: str, method: str, *args: Any) -> tuple[Any, ...]:
        """Call ``interface.method`` with ``args`` and return the reply values."""
        ...


class BusConnection(Protocol):
    """A connection to the message bus that hands out proxies for remote objects."""

    def with_proxy(self, destination: str, path: str, timeout: float) -> BusProxy:
        """Return a proxy for the object at ``path`` owned by ``destination``."""
        ...


class Command(Enum):
    """Operations the bluechi controller can perform."""

    CONTROLLER_RELOAD_ALL_NODES = "ReloadAllNodes"
    UNIT_START = "StartUnit"
    UNIT_STOP = "StopUnit"
    UNIT_RESTART = "RestartUnit"
    UNIT_RELOAD = "ReloadUnit"

    def to_method_name(self) -> str:
        """Return the bus method name for this command."""
        return self.value


@dataclass(frozen=True)
class BluechiCmd:
    """A command to send to bluechi."""

    command: Command


async def handle_bluechi_cmd(
    scenario_name: str,
    node: str,
    bluechi_cmd: BluechiCmd,
    connection: BusConnection,
) -> None:
    """Run one bluechi command; failures of the bus calls are logged and not raised."""
    bluechi = connection.with_proxy(DEST, PATH, CALL_TIMEOUT)
    command = bluechi_cmd.command
    log.debug("handle_bluechi_cmd %s for %s on %s", command.name, scenario_name, node)
    try:
        if command is Command.CONTROLLER_RELOAD_ALL_NODES:
            reload_all_nodes(bluechi, connection)
        else:
            workload_run(connection, command.to_method_name(), node, bluechi, scenario_name)
    except Exception as exc:  # the command's outcome is not reported to the caller
        log.warning("bluechi command %s failed: %s", command.name, exc)


def workload_run(
    conn: BusConnection,
    method: str,
    node_name: str,
    proxy: BusProxy,
    unit_name: str,
) -> str:
    """Call ``method`` for ``unit_name`` on the named node and describe the resulting job."""
    (node_path,) = proxy.method_call(DEST_CONTROLLER, "GetNode", node_name)
    node_proxy = conn.with_proxy(DEST, node_path, CALL_TIMEOUT)
    (job_path,) = node_proxy.method_call(DEST_NODE, method, unit_name, UNIT_JOB_MODE)
    return f"{method} '{unit_name}' : {job_path}\n"


def reload_all_nodes(proxy: BusProxy, conn: BusConnection) -> str:
    """Reload every node known to the controller and report each one."""
    (nodes,) = proxy.method_call(DEST_CONTROLLER, "ListNodes")
    reports = []
    for node_name, _path, _state in nodes:
        (node_path,) = proxy.method_call(DEST_CONTROLLER, "GetNode", node_name)
        node_proxy = conn.with_proxy(DEST, node_path, CALL_TIMEOUT)
        node_proxy.method_call(DEST_NODE, "Reload")
        reports.append(f"Node - {node_name} is reloaded.\n")
    return "".join(reports)