"""Command-line entry point and workflow step wiring."""

from __future__ import annotations

import asyncio
import sys
from typing import Annotated

import structlog
import typer

from gke_credentials import actions
from gke_credentials.config import ActionInputs, parse_boolean_input, presence
from gke_credentials.runner import get_credentials

# Configure structlog for JSON output to stderr
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer() if sys.stderr.isatty() else structlog.processors.JSONRenderer(),
    ],
    logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
)

log = structlog.get_logger()

TOOL_NAME = "get-gke-credentials"

CREDENTIALS_DEPRECATION = (
    'The "credentials" input is deprecated. Authenticate in an earlier step with '
    "Workload Identity Federation or a JSON key and rely on Application Default Credentials."
)

app = typer.Typer(add_completion=False, help="Generate a kubeconfig for a GKE cluster.")


# Note 1: Workflow runners pass step inputs as INPUT_<NAME> environment variables, so
# every option declares that variable as its envvar. The same command therefore works
# as a workflow step (no arguments) and from a shell (explicit flags).
def _input(name: str, help_text: str):
    return typer.Option(f"--{name.replace('_', '-')}", envvar=f"INPUT_{name.upper()}", help=help_text)


@app.command()
def run(
    cluster_name: Annotated[
        str | None, _input("cluster_name", "Cluster name or projects/P/locations/L/clusters/C.")
    ] = None,
    location: Annotated[str | None, _input("location", "Cluster region or zone.")] = None,
    project_id: Annotated[str | None, _input("project_id", "Project that owns the cluster.")] = None,
    quota_project_id: Annotated[str | None, _input("quota_project_id", "Project billed for API quota.")] = None,
    context_name: Annotated[str | None, _input("context_name", "kubectl context name.")] = None,
    namespace: Annotated[str | None, _input("namespace", "Namespace set on the context.")] = None,
    use_auth_provider: Annotated[
        str | None, _input("use_auth_provider", "Use the gcp auth-provider instead of a token.")
    ] = None,
    use_internal_ip: Annotated[str | None, _input("use_internal_ip", "Use the private endpoint.")] = None,
    use_connect_gateway: Annotated[
        str | None, _input("use_connect_gateway", "Connect through Connect Gateway.")
    ] = None,
    use_dns_based_endpoint: Annotated[
        str | None, _input("use_dns_based_endpoint", "Use the DNS-based endpoint.")
    ] = None,
    fleet_membership_name: Annotated[
        str | None, _input("fleet_membership_name", "Fleet membership for Connect Gateway.")
    ] = None,
    credentials: Annotated[str | None, _input("credentials", "Deprecated JSON credentials.")] = None,
    workspace: Annotated[
        str | None,
        typer.Option("--workspace", envvar="GITHUB_WORKSPACE", help="Directory for the kubeconfig file."),
    ] = None,
) -> None:
    """Resolve a GKE cluster, write a kubeconfig, and export KUBECONFIG."""
    try:
        inputs = ActionInputs(
            cluster_name=cluster_name or "",
            location=presence(location),
            project_id=presence(project_id),
            quota_project_id=presence(quota_project_id),
            context_name=presence(context_name),
            namespace=presence(namespace),
            use_auth_provider=parse_boolean_input("use_auth_provider", use_auth_provider),
            use_internal_ip=parse_boolean_input("use_internal_ip", use_internal_ip),
            use_connect_gateway=parse_boolean_input("use_connect_gateway", use_connect_gateway),
            use_dns_based_endpoint=parse_boolean_input("use_dns_based_endpoint", use_dns_based_endpoint),
            fleet_membership_name=presence(fleet_membership_name),
            credentials=presence(credentials),
        )
        if inputs.credentials:
            actions.warning(CREDENTIALS_DEPRECATION)

        result = asyncio.run(get_credentials(inputs, workspace=workspace))

        path = str(result.kubeconfig_path)
        actions.export_variable("KUBECONFIG", path)
        actions.export_variable("KUBE_CONFIG_PATH", path)
        actions.set_output("kubeconfig_path", path)
        log.info("kubeconfig_exported", path=path)
    except Exception as e:
        log.error("run_failed", error=str(e))
        actions.set_failed(f"{TOOL_NAME} failed with: {e}")
        raise typer.Exit(code=1) from None


def main() -> None:
    app()


if __name__ == "__main__":
    main()
