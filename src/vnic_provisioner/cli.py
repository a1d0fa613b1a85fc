"""
Command-line interface for adding a virtual NIC to a host port group.

    vnic-provisioner --url https://vc.example.com/sdk --username admin \\
        --password secret --hostname esx1 --datacentername DC1 \\
        --portgroupname PG1 --ipaddress 10.0.0.5

Without --ipaddress the new NIC uses DHCP.
"""

import logging
import sys
from typing import Optional

import structlog
import typer
from pyVmomi import vmodl  # type: ignore[import-untyped]
from pydantic import ValidationError
from rich.console import Console

from .config import InvalidEndpointError, Settings, get_settings
from .faults import classify_fault, fault_message
from .inventory import InventoryClient, connect
from .models import ProvisionRequest
from .workflow import NicProvisioningWorkflow

app = typer.Typer(
    name="vnic-provisioner",
    help="Add a virtual NIC to a port group on a vSphere host",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)

logger = structlog.get_logger()


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """Configure structlog to write to stderr at the given level."""
    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelNamesMapping().get(level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


@app.command()
def add_virtual_nic(
    portgroupname: str = typer.Option(..., "--portgroupname", help="Name of the port group"),
    url: Optional[str] = typer.Option(None, "--url", help="URL of the web service"),
    username: Optional[str] = typer.Option(
        None, "--username", help="Username for the authentication"
    ),
    password: Optional[str] = typer.Option(
        None, "--password", help="Password for the authentication"
    ),
    ipaddress: Optional[str] = typer.Option(
        None, "--ipaddress", help="IP address for the nic, if not set DHCP will be in effect"
    ),
    hostname: Optional[str] = typer.Option(None, "--hostname", help="Name of the host"),
    datacentername: Optional[str] = typer.Option(
        None, "--datacentername", help="Name of the datacenter"
    ),
    verify_ssl: Optional[bool] = typer.Option(
        None, "--verify-ssl/--insecure", help="Verify the server certificate"
    ),
    any_host: bool = typer.Option(
        False,
        "--any-host-in-datacenter",
        help="With --datacentername and no --hostname, use the first host in the datacenter",
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Log level for stderr output"
    ),
    log_json: Optional[bool] = typer.Option(
        None, "--log-json/--log-console", help="Render logs as JSON"
    ),
) -> None:
    """Add a virtual NIC to a port group on a virtual switch."""
    try:
        settings = get_settings(
            url=url,
            username=username,
            password=password,
            verify_ssl=verify_ssl,
            empty_host_policy="any_host" if any_host else None,
            log_level=log_level,
            log_json=log_json,
        )
        request = ProvisionRequest(
            port_group_name=portgroupname,
            ip_address=ipaddress or None,
            host_name=hostname or None,
            datacenter_name=datacentername or None,
        )
    except (ValidationError, ValueError) as e:
        err_console.print(f"❌ Invalid arguments: {e}", markup=False, soft_wrap=True)
        raise typer.Exit(2)

    configure_logging(settings.log_level, settings.log_json)

    missing = settings.missing_credentials()
    if missing:
        options = ", ".join(f"--{name}" for name in missing)
        err_console.print(f"❌ Missing required option(s): {options}", markup=False)
        raise typer.Exit(2)

    try:
        settings.endpoint()
    except InvalidEndpointError as e:
        err_console.print(f"❌ {e}", markup=False)
        raise typer.Exit(2)

    raise typer.Exit(provision(settings, request))


def provision(settings: Settings, request: ProvisionRequest) -> int:
    """Run the workflow against a live session and print the outcome."""
    try:
        with connect(settings) as context:
            workflow = NicProvisioningWorkflow(settings, InventoryClient(context))
            result = workflow.run(request)
    except vmodl.MethodFault as e:
        kind = classify_fault(e)
        logger.error("vSphere fault", fault=kind.value, error=fault_message(e))
        console.print(
            f"Operation failed ({kind.value}): {fault_message(e)}",
            markup=False,
            highlight=False,
            soft_wrap=True,
        )
        return 1

    console.print(result.message, markup=False, highlight=False, soft_wrap=True)
    return 0


if __name__ == "__main__":
    app()
