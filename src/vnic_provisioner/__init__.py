"""Attach virtual NICs to host port groups in a vSphere inventory."""

__version__ = "0.1.0"
