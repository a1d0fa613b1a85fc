"""vSphere session and inventory access for the vNIC provisioner."""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

import structlog
from pyVim.connect import Disconnect, SmartConnect  # type: ignore[import-untyped]
from pyVmomi import vim, vmodl  # type: ignore[import-untyped]

from .config import Settings

logger = structlog.get_logger()


@dataclass
class ConnectionContext:
    """Authenticated session with a vCenter or ESXi endpoint."""

    service_instance: Any
    content: Any

    @property
    def root_folder(self) -> Any:
        return self.content.rootFolder

    @property
    def property_collector(self) -> Any:
        return self.content.propertyCollector

    @property
    def view_manager(self) -> Any:
        return self.content.viewManager


@contextmanager
def connect(settings: Settings) -> Iterator[ConnectionContext]:
    """Open a session for the configured endpoint and disconnect on exit.

    Raises:
        InvalidEndpointError: If the configured URL is unusable.
        vim.fault.InvalidLogin: If the credentials are rejected.
    """
    endpoint = settings.endpoint()
    password = settings.password.get_secret_value() if settings.password else ""

    logger.info(
        "Connecting to vSphere",
        host=endpoint.host,
        port=endpoint.port,
        path=endpoint.path,
        user=settings.username,
        verify_ssl=settings.verify_ssl,
    )
    si = SmartConnect(
        host=endpoint.host,
        port=endpoint.port,
        path=endpoint.path,
        user=settings.username,
        pwd=password,
        disableSslCertValidation=not settings.verify_ssl,
    )
    try:
        yield ConnectionContext(service_instance=si, content=si.RetrieveContent())
    finally:
        Disconnect(si)
        logger.info("Disconnected from vSphere", host=endpoint.host)


class InventoryClient:
    """Lookups and network-system calls against a vSphere inventory."""

    def __init__(self, context: ConnectionContext) -> None:
        self.context = context

    def find_by_type(self, folder: Any, vimtype: type) -> dict[str, Any]:
        """Map object name to reference for every object of a type under a folder."""
        view = self.context.view_manager.CreateContainerView(folder, [vimtype], True)
        try:
            obj_spec = vmodl.query.PropertyCollector.ObjectSpec(
                obj=view,
                skip=True,
                selectSet=[
                    vmodl.query.PropertyCollector.TraversalSpec(
                        name="traverseView", path="view", skip=False, type=vim.view.ContainerView
                    )
                ],
            )
            prop_spec = vmodl.query.PropertyCollector.PropertySpec(
                type=vimtype, all=False, pathSet=["name"]
            )
            filter_spec = vmodl.query.PropertyCollector.FilterSpec(
                objectSet=[obj_spec], propSet=[prop_spec]
            )

            found: dict[str, Any] = {}
            for obj_content in self._retrieve(filter_spec):
                for prop in obj_content.propSet or []:
                    if prop.name == "name":
                        found[prop.val] = obj_content.obj
            logger.debug(
                "Inventory lookup",
                type=getattr(vimtype, "__name__", str(vimtype)),
                count=len(found),
            )
            return found
        finally:
            view.Destroy()

    def find_by_name(self, folder: Any, vimtype: type, name: str | None) -> Any | None:
        """Find one object of a type by name under a folder."""
        if not name:
            return None
        return self.find_by_type(folder, vimtype).get(name)

    def entity_props(self, ref: Any, properties: list[str]) -> dict[str, Any]:
        """Retrieve named properties of a single managed object."""
        obj_spec = vmodl.query.PropertyCollector.ObjectSpec(obj=ref, skip=False)
        prop_spec = vmodl.query.PropertyCollector.PropertySpec(
            type=type(ref), all=False, pathSet=properties
        )
        filter_spec = vmodl.query.PropertyCollector.FilterSpec(
            objectSet=[obj_spec], propSet=[prop_spec]
        )

        values: dict[str, Any] = {}
        for obj_content in self._retrieve(filter_spec):
            for prop in obj_content.propSet or []:
                values[prop.name] = prop.val
        return values

    def add_virtual_nic(self, network_system: Any, port_group_name: str, spec: Any) -> str:
        """Add a virtual NIC to a port group and return its device name.

        Faults raised by the host (HostConfigFault, AlreadyExists,
        InvalidState, RuntimeFault) propagate unchanged.
        """
        logger.info("Adding virtual NIC", port_group=port_group_name)
        device = network_system.AddVirtualNic(portgroup=port_group_name, nic=spec)
        return str(device)

    def _retrieve(self, filter_spec: Any) -> Iterator[Any]:
        """Yield object contents for a filter, following continuation tokens."""
        collector = self.context.property_collector
        result = collector.RetrievePropertiesEx(
            specSet=[filter_spec], options=vmodl.query.PropertyCollector.RetrieveOptions()
        )
        while result:
            yield from result.objects or []
            token = getattr(result, "token", None)
            if not token:
                break
            result = collector.ContinueRetrievePropertiesEx(token=token)
