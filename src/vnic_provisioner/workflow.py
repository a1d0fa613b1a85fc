"""Add a virtual NIC to a host port group."""

from typing import Any

import structlog
from pyVmomi import vim  # type: ignore[import-untyped]

from .config import Settings
from .inventory import InventoryClient
from .models import (
    HostLookup,
    NicConfig,
    ProvisionOutcome,
    ProvisionRequest,
    ProvisionResult,
)

logger = structlog.get_logger()


def build_nic_config(ip_address: str | None) -> NicConfig:
    """Static config for a non-empty address, DHCP otherwise."""
    return NicConfig.for_address(ip_address)


def to_vim_spec(nic_config: NicConfig) -> Any:
    """Translate a NicConfig into a vim.host.VirtualNic.Specification."""
    if nic_config.is_dhcp:
        ip_config = vim.host.IpConfig(dhcp=True)
    else:
        ip_config = vim.host.IpConfig(
            dhcp=False,
            ipAddress=nic_config.address,
            subnetMask=nic_config.subnet_mask,
        )
    return vim.host.VirtualNic.Specification(ip=ip_config)


class NicProvisioningWorkflow:
    """Resolves a host and attaches a new virtual NIC to one of its port groups."""

    def __init__(self, settings: Settings, inventory: InventoryClient) -> None:
        self.settings = settings
        self.inventory = inventory

    def resolve_host(self, datacenter_name: str | None, host_name: str | None) -> HostLookup:
        """Find the target host, optionally scoped to a datacenter.

        With a datacenter name the host is looked up in that datacenter's host
        folder; without one, across the whole inventory. Neither name means no
        host.
        """
        root = self.inventory.context.root_folder

        if datacenter_name:
            datacenter = self.inventory.find_by_name(root, vim.Datacenter, datacenter_name)
            if datacenter is None:
                logger.warning("Datacenter not found", datacenter=datacenter_name)
                return HostLookup(datacenter_found=False)

            host_folder = self.inventory.entity_props(datacenter, ["hostFolder"]).get("hostFolder")
            hosts = self.inventory.find_by_type(host_folder, vim.HostSystem)
            if host_name:
                return HostLookup(host=hosts.get(host_name), name=host_name)
            if self.settings.empty_host_policy == "any_host" and hosts:
                chosen = sorted(hosts)[0]
                logger.info("No host name given, using first host in datacenter", host=chosen)
                return HostLookup(host=hosts[chosen], name=chosen)
            return HostLookup()

        if host_name:
            host = self.inventory.find_by_name(root, vim.HostSystem, host_name)
            return HostLookup(host=host, name=host_name)

        return HostLookup()

    def run(self, request: ProvisionRequest) -> ProvisionResult:
        """Resolve the host and add the NIC.

        Remote faults from the add call propagate unmodified.
        """
        log = logger.bind(
            port_group=request.port_group_name,
            host=request.host_name,
            datacenter=request.datacenter_name,
        )

        lookup = self.resolve_host(request.datacenter_name, request.host_name)
        if not lookup.datacenter_found:
            return ProvisionResult(
                outcome=ProvisionOutcome.DATACENTER_NOT_FOUND,
                port_group_name=request.port_group_name,
            )
        if not lookup.found:
            log.warning("Host not found")
            return ProvisionResult(
                outcome=ProvisionOutcome.HOST_NOT_FOUND,
                port_group_name=request.port_group_name,
            )

        props = self.inventory.entity_props(lookup.host, ["configManager"])
        config_manager = props.get("configManager")
        network_system = config_manager.networkSystem

        nic_config = build_nic_config(request.ip_address)
        log.info("Built NIC specification", mode=nic_config.mode.value, address=nic_config.address)

        nic_id = self.inventory.add_virtual_nic(
            network_system, request.port_group_name, to_vim_spec(nic_config)
        )
        log.info("Virtual NIC created", nic=nic_id)

        return ProvisionResult(
            outcome=ProvisionOutcome.CREATED,
            port_group_name=request.port_group_name,
            nic_id=nic_id,
            nic_config=nic_config,
            host_name=lookup.name,
        )
