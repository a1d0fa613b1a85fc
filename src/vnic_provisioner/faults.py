"""Classification of vSphere faults raised by the management API."""

from enum import Enum

from pyVmomi import vim, vmodl  # type: ignore[import-untyped]


class FaultKind(Enum):
    """Fault kinds the add-virtual-NIC workflow can surface."""

    CONFIG_FAULT = "config_fault"
    ALREADY_EXISTS = "already_exists"
    INVALID_STATE = "invalid_state"
    INVALID_PROPERTY = "invalid_property"
    NOT_FOUND = "not_found"
    RUNTIME_FAULT = "runtime_fault"
    OTHER = "other"


# Most specific first: several of these share base classes.
_FAULT_TYPES: list[tuple[type, FaultKind]] = [
    (vim.fault.HostConfigFault, FaultKind.CONFIG_FAULT),
    (vim.fault.AlreadyExists, FaultKind.ALREADY_EXISTS),
    (vim.fault.InvalidState, FaultKind.INVALID_STATE),
    (vmodl.query.InvalidProperty, FaultKind.INVALID_PROPERTY),
    (vim.fault.NotFound, FaultKind.NOT_FOUND),
    (vmodl.RuntimeFault, FaultKind.RUNTIME_FAULT),
]


def classify_fault(fault: BaseException) -> FaultKind:
    """Map a pyVmomi fault onto a FaultKind."""
    for fault_type, kind in _FAULT_TYPES:
        if isinstance(fault, fault_type):
            return kind
    return FaultKind.OTHER


def fault_message(fault: BaseException) -> str:
    """Best-effort human readable message for a fault."""
    msg = getattr(fault, "msg", None)
    if msg:
        return str(msg)
    if isinstance(fault, vmodl.query.InvalidProperty) and getattr(fault, "name", None):
        return f"Invalid property: {fault.name}"
    return type(fault).__name__
