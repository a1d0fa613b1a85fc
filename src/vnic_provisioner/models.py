"""Data models for the vNIC provisioner."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

DEFAULT_SUBNET_MASK = "255.255.255.0"


class IpMode(Enum):
    """How the new virtual NIC gets its address."""

    DHCP = "dhcp"
    STATIC = "static"


@dataclass(frozen=True)
class NicConfig:
    """Desired IP configuration for a new virtual NIC."""

    mode: IpMode
    address: str | None = None
    subnet_mask: str | None = None

    def __post_init__(self) -> None:
        if self.mode is IpMode.STATIC:
            if not self.address:
                raise ValueError("Static NIC configuration requires an IP address")
            if self.subnet_mask != DEFAULT_SUBNET_MASK:
                raise ValueError(f"Static NIC configuration uses subnet mask {DEFAULT_SUBNET_MASK}")
        elif self.address or self.subnet_mask:
            raise ValueError("DHCP NIC configuration cannot carry an address or subnet mask")

    @classmethod
    def dhcp(cls) -> "NicConfig":
        return cls(mode=IpMode.DHCP)

    @classmethod
    def static(cls, address: str) -> "NicConfig":
        return cls(mode=IpMode.STATIC, address=address, subnet_mask=DEFAULT_SUBNET_MASK)

    @classmethod
    def for_address(cls, ip_address: str | None) -> "NicConfig":
        """Static config for a non-empty address, DHCP otherwise."""
        if ip_address:
            return cls.static(ip_address)
        return cls.dhcp()

    @property
    def is_dhcp(self) -> bool:
        return self.mode is IpMode.DHCP


@dataclass(frozen=True)
class ProvisionRequest:
    """Parameters for one provisioning run."""

    port_group_name: str
    ip_address: str | None = None
    host_name: str | None = None
    datacenter_name: str | None = None

    def __post_init__(self) -> None:
        if not self.port_group_name or not self.port_group_name.strip():
            raise ValueError("Port group name must not be empty")


class ProvisionOutcome(Enum):
    """Terminal states of a provisioning run."""

    CREATED = "created"
    DATACENTER_NOT_FOUND = "datacenter_not_found"
    HOST_NOT_FOUND = "host_not_found"


@dataclass
class HostLookup:
    """Result of resolving the target host."""

    host: Any | None = None
    name: str | None = None
    datacenter_found: bool = True

    @property
    def found(self) -> bool:
        return self.host is not None


@dataclass
class ProvisionResult:
    """Result of a provisioning run."""

    outcome: ProvisionOutcome
    port_group_name: str
    nic_id: str | None = None
    nic_config: NicConfig | None = None
    host_name: str | None = None

    @property
    def created(self) -> bool:
        """Check if a NIC was added."""
        return self.outcome is ProvisionOutcome.CREATED

    @property
    def message(self) -> str:
        """Human-readable status line for this result."""
        if self.outcome is ProvisionOutcome.DATACENTER_NOT_FOUND:
            return "Datacenter not found"
        if self.outcome is ProvisionOutcome.HOST_NOT_FOUND:
            return "Host not found"
        return f"Successful in creating nic : {self.nic_id} with PortGroup :{self.port_group_name}"
