"""Pytest fixtures for vNIC provisioner tests."""

import os
from collections.abc import Callable, Iterator
from typing import Any
from unittest.mock import MagicMock

import pytest
import structlog
from pyVmomi import vim  # type: ignore[import-untyped]

from vnic_provisioner.config import Settings
from vnic_provisioner.inventory import ConnectionContext, InventoryClient


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep VNIC_* variables and a developer .env file out of the tests."""
    for key in list(os.environ):
        if key.upper().startswith("VNIC_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setitem(Settings.model_config, "env_file", None)
    yield
    structlog.reset_defaults()


@pytest.fixture
def settings() -> Settings:
    """Create test settings."""
    return Settings(
        url="https://vcenter.example.com/sdk",
        username="administrator@vsphere.local",
        password="secret",
        verify_ssl=False,
        empty_host_policy="no_match",
    )


@pytest.fixture
def connection_context() -> ConnectionContext:
    """Create a connection context backed by mocks."""
    content = MagicMock()
    content.rootFolder = MagicMock(name="rootFolder")
    return ConnectionContext(service_instance=MagicMock(), content=content)


def make_host(name: str) -> MagicMock:
    """Create a mock HostSystem with its own network system."""
    host = MagicMock(name=f"host-{name}")
    host.configManager.networkSystem = MagicMock(name=f"networkSystem-{name}")
    return host


InventoryFactory = Callable[..., MagicMock]


@pytest.fixture
def make_inventory(connection_context: ConnectionContext) -> InventoryFactory:
    """Build a mock InventoryClient over a small in-memory inventory.

    ``datacenters`` maps datacenter name to the host names in its host
    folder; ``standalone_hosts`` are only reachable from the root folder.
    """

    def _make(
        datacenters: dict[str, list[str]] | None = None,
        standalone_hosts: list[str] | None = None,
        nic_id: str = "vmk1",
    ) -> MagicMock:
        root = connection_context.root_folder
        dc_refs: dict[str, MagicMock] = {}
        folder_hosts: dict[int, dict[str, MagicMock]] = {}
        all_hosts: dict[str, MagicMock] = {}
        host_folders: dict[int, MagicMock] = {}

        for dc_name, host_names in (datacenters or {}).items():
            dc = MagicMock(name=f"dc-{dc_name}")
            folder = MagicMock(name=f"hostFolder-{dc_name}")
            hosts = {host_name: make_host(host_name) for host_name in host_names}
            dc_refs[dc_name] = dc
            host_folders[id(dc)] = folder
            folder_hosts[id(folder)] = hosts
            all_hosts.update(hosts)

        for host_name in standalone_hosts or []:
            all_hosts[host_name] = make_host(host_name)

        def find_by_type(folder: Any, vimtype: type) -> dict[str, Any]:
            if folder is root and vimtype is vim.Datacenter:
                return dict(dc_refs)
            if folder is root and vimtype is vim.HostSystem:
                return dict(all_hosts)
            if vimtype is vim.HostSystem:
                return dict(folder_hosts.get(id(folder), {}))
            return {}

        def find_by_name(folder: Any, vimtype: type, name: str | None) -> Any:
            if not name:
                return None
            return find_by_type(folder, vimtype).get(name)

        def entity_props(ref: Any, properties: list[str]) -> dict[str, Any]:
            values: dict[str, Any] = {}
            if "hostFolder" in properties and id(ref) in host_folders:
                values["hostFolder"] = host_folders[id(ref)]
            if "configManager" in properties:
                values["configManager"] = ref.configManager
            return values

        inventory = MagicMock(spec=InventoryClient)
        inventory.context = connection_context
        inventory.find_by_type.side_effect = find_by_type
        inventory.find_by_name.side_effect = find_by_name
        inventory.entity_props.side_effect = entity_props
        inventory.add_virtual_nic.return_value = nic_id
        inventory.hosts = all_hosts
        return inventory

    return _make
