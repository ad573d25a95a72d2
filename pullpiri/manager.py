"""Coordination of scenario actions and the workloads they control."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

import yaml

from pullpiri.bluechi import BluechiCmd, BusConnection, Command, handle_bluechi_cmd
from pullpiri.status import Status

log = logging.getLogger(__name__)

SYSTEMD_PATH = "/etc/containers/systemd/"
BLUECHI = "bluechi"
NODEAGENT = "nodeagent"

_UNRECONCILABLE = (Status.NONE, Status.FAILED, Status.UNKNOWN)
_STORE_ERRORS = (KeyError, OSError)


class ManagerError(Exception):
    """A scenario action or reconciliation could not be carried out."""


class KeyValueStore(Protocol):
    """Store holding scenario and package documents by key."""

    async def get(self, key: str) -> str:
        """Return the value stored under ``key``; raise :class:`KeyError` if absent."""
        ...


@dataclass(frozen=True)
class _Scenario:
    action: str
    target: str


@dataclass(frozen=True)
class _Model:
    name: str
    node: str


def _spec(text: str) -> Mapping[str, Any]:
    document = yaml.safe_load(text)
    if not isinstance(document, Mapping):
        raise ValueError("document is not a mapping")
    spec = document.get("spec")
    if not isinstance(spec, Mapping):
        raise ValueError("missing field `spec`")
    return spec


def _required_str(mapping: Mapping[str, Any], key: str) -> str:
    value = mapping.get(key)
    if not isinstance(value, str):
        raise ValueError(f"missing field `{key}`")
    return value


def _parse_scenario(text: str) -> _Scenario:
    spec = _spec(text)
    return _Scenario(action=_required_str(spec, "action"), target=_required_str(spec, "target"))


def _parse_models(text: str) -> list[_Model]:
    spec = _spec(text)
    models = spec.get("models")
    if not isinstance(models, list):
        raise ValueError("missing field `models`")
    result = []
    for model in models:
        if not isinstance(model, Mapping):
            raise ValueError("model is not a mapping")
        result.append(_Model(name=_required_str(model, "name"), node=_required_str(model, "node")))
    return result


def nodes_from_settings(settings: Mapping[str, Any]) -> tuple[list[str], list[str]]:
    """Split the host and guest nodes of ``settings`` into bluechi and node agent nodes."""
    bluechi_nodes: list[str] = []
    nodeagent_nodes: list[str] = []
    entries = [settings.get("host") or {}, *(settings.get("guest") or [])]
    for entry in entries:
        node_type = entry.get("type")
        if node_type == BLUECHI:
            bluechi_nodes.append(entry["name"])
        elif node_type == NODEAGENT:
            nodeagent_nodes.append(entry["name"])
    return bluechi_nodes, nodeagent_nodes


@dataclass
class ActionControllerManager:
    """Turns scenario requests into workload operations on the nodes that run them."""

    store: KeyValueStore
    connection: BusConnection
    bluechi_nodes: list[str] = field(default_factory=list)
    nodeagent_nodes: list[str] = field(default_factory=list)
    host_name: str = ""
    yaml_storage: str = ""
    systemd_path: str = SYSTEMD_PATH
    reload_delay: float = 0.1

    def _node_type(self, node: str) -> str | None:
        if node in self.bluechi_nodes:
            return BLUECHI
        if node in self.nodeagent_nodes:
            return NODEAGENT
        return None

    async def trigger_manager_action(self, scenario_name: str) -> None:
        """Carry out the action of the named scenario on every model of its target package."""
        log.info("trigger_manager_action %r", scenario_name)
        if not scenario_name.strip():
            raise ManagerError(f"Scenario '{scenario_name}' is invalid: cannot be empty")

        try:
            scenario_text = await self.store.get(f"Scenario/{scenario_name}")
        except _STORE_ERRORS as exc:
            raise ManagerError(f"Scenario '{scenario_name}' not found: {exc}") from exc
        try:
            scenario = _parse_scenario(scenario_text)
        except (yaml.YAMLError, ValueError) as exc:
            raise ManagerError(f"Failed to parse scenario '{scenario_name}': {exc}") from exc

        package_key = f"Package/{scenario.target}"
        try:
            package_text = await self.store.get(package_key)
        except _STORE_ERRORS as exc:
            raise ManagerError(f"Package key '{package_key}' not found: {exc}") from exc
        try:
            models = _parse_models(package_text)
        except (yaml.YAMLError, ValueError) as exc:
            raise ManagerError(f"Failed to parse package '{scenario.target}': {exc}") from exc

        for model in models:
            node_type = self._node_type(model.node)
            if node_type is None:
                continue
            unit = f"{model.name}.service"
            if scenario.action == "launch":
                await self._start(unit, model.node, node_type)
            elif scenario.action == "terminate":
                await self._stop(unit, model.node, node_type)
            elif scenario.action in ("update", "rollback"):
                await self._stop(unit, model.node, node_type)
                try:
                    await self.delete_symlink_and_reload(model.name, model.node)
                except (ManagerError, OSError) as exc:
                    raise ManagerError(f"Failed to delete symlink for '{model.name}': {exc}") from exc
                try:
                    await self.make_symlink_and_reload(model.node, model.name, scenario.target)
                except (ManagerError, OSError) as exc:
                    raise ManagerError(f"Failed to create symlink for '{model.name}': {exc}") from exc
                await self._start(unit, model.node, node_type)

    async def _start(self, unit: str, node: str, node_type: str) -> None:
        try:
            await self.start_workload(unit, node, node_type)
        except ManagerError as exc:
            raise ManagerError(f"Failed to start workload '{unit}': {exc}") from exc

    async def _stop(self, unit: str, node: str, node_type: str) -> None:
        try:
            await self.stop_workload(unit, node, node_type)
        except ManagerError as exc:
            raise ManagerError(f"Failed to stop workload '{unit}': {exc}") from exc

    async def reconcile_do(self, scenario_name: str, current: Status, desired: Status) -> None:
        """Bring the scenario's workloads from ``current`` to ``desired``."""
        if current == desired:
            return
        if current in _UNRECONCILABLE:
            raise ManagerError(
                f"Invalid current status: {current.name}. Cannot reconcile from this state"
            )
        if desired in _UNRECONCILABLE:
            raise ManagerError(
                f"Invalid desired status: {desired.name}. Cannot set this as target state"
            )

        scenario_key = f"scenario/{scenario_name}"
        try:
            scenario = _parse_scenario(await self.store.get(scenario_key))
            package_key = f"package/{scenario.target}"
            models = _parse_models(await self.store.get(package_key))
        except (*_STORE_ERRORS, yaml.YAMLError, ValueError) as exc:
            raise ManagerError(f"Failed to reconcile '{scenario_name}': {exc}") from exc

        for model in models:
            node_type = self._node_type(model.node)
            if node_type is None:
                continue
            if desired == Status.RUNNING:
                await self.start_workload(f"{model.name}.service", model.node, node_type)

    async def _run_unit_command(
        self, command: Command, model_name: str, node_name: str, node_type: str
    ) -> None:
        if node_type == BLUECHI:
            await handle_bluechi_cmd(model_name, node_name, BluechiCmd(command), self.connection)
        elif node_type == NODEAGENT:
            return
        else:
            raise ManagerError(
                f"Unsupported node type '{node_type}' for workload '{model_name}' "
                f"on node '{node_name}'"
            )

    async def start_workload(self, model_name: str, node_name: str, node_type: str) -> None:
        """Start the unit ``model_name`` on ``node_name``."""
        await self._run_unit_command(Command.UNIT_START, model_name, node_name, node_type)

    async def stop_workload(self, model_name: str, node_name: str, node_type: str) -> None:
        """Stop the unit ``model_name`` on ``node_name``."""
        await self._run_unit_command(Command.UNIT_STOP, model_name, node_name, node_type)

    def _kube_link(self, model_name: str) -> str:
        return f"{self.systemd_path}{model_name}.kube"

    async def make_symlink_and_reload(
        self, node_name: str, model_name: str, target_name: str
    ) -> None:
        """Link the target's kube file into the systemd directory on the host, then reload."""
        log.info("make_symlink_and_reload %r on node %r", model_name, node_name)
        original = f"{self.yaml_storage}/{target_name}.kube"
        if node_name == self.host_name:
            os.symlink(original, self._kube_link(model_name))
        await self.reload_all_node(model_name, node_name)

    async def delete_symlink_and_reload(self, model_name: str, node_name: str) -> None:
        """Remove the model's kube link if present, then reload."""
        with contextlib.suppress(OSError):
            Path(self._kube_link(model_name)).unlink()
        await self.reload_all_node(model_name, node_name)

    async def reload_all_node(self, model_name: str, model_node: str) -> None:
        """Ask the controller to reload every node, then pause briefly."""
        await handle_bluechi_cmd(
            model_name, model_node, BluechiCmd(Command.CONTROLLER_RELOAD_ALL_NODES), self.connection
        )
        await asyncio.sleep(self.reload_delay)