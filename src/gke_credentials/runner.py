"""Resolve one cluster and write its kubeconfig."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import structlog

from gke_credentials.clients import CredentialSource, load_credential_source
from gke_credentials.clients.gke import ClusterClient
from gke_credentials.config import ActionInputs, presence, resolve_target
from gke_credentials.fleet import discover_cluster_membership, get_connect_gw_endpoint
from gke_credentials.kubeconfig import KubeConfigOptions, create_kubeconfig
from gke_credentials.models import KubeConfig
from gke_credentials.resource_names import parse_membership_name
from gke_credentials.utils import write_secure_file

log = structlog.get_logger()


@dataclass(frozen=True)
class CredentialsResult:
    kubeconfig_path: Path
    kubeconfig: KubeConfig


async def resolve_connect_gateway(client: ClusterClient, inputs: ActionInputs) -> str:
    """Return the Connect Gateway endpoint for the explicit or discovered membership."""
    membership_name = presence(inputs.fleet_membership_name)
    if membership_name:
        # Validate the shape before spending an API call on it.
        parse_membership_name(membership_name)
    else:
        membership_name = await discover_cluster_membership(client, inputs.cluster_name)
    return await get_connect_gw_endpoint(client, membership_name)


async def get_credentials(
    inputs: ActionInputs,
    *,
    workspace: str | os.PathLike[str] | None,
    environ: Mapping[str, str] | None = None,
    credential_source: CredentialSource | None = None,
) -> CredentialsResult:
    """Run every step for one cluster and write the kubeconfig.

    Each step depends on the previous one; any failure propagates and nothing is
    written. Exporting the result into the environment is left to the caller.
    """
    inputs.validate()
    target = resolve_target(inputs, environ)
    log.info(
        "resolving_cluster",
        cluster=target.cluster.id,
        project=target.project_id,
        location=target.location,
    )

    if credential_source is None:
        credential_source = load_credential_source(inputs.credentials)

    client = ClusterClient(
        credential_source,
        project_id=target.project_id,
        location=target.location,
        quota_project_id=presence(inputs.quota_project_id),
    )

    cluster_data = await client.get_cluster(inputs.cluster_name)

    connect_gw_endpoint = None
    if inputs.use_connect_gateway:
        connect_gw_endpoint = await resolve_connect_gateway(client, inputs)
        log.info("using_connect_gateway", endpoint=connect_gw_endpoint)

    kubeconfig = await create_kubeconfig(
        client,
        KubeConfigOptions(
            use_auth_provider=inputs.use_auth_provider,
            use_internal_ip=inputs.use_internal_ip,
            use_dns_based_endpoint=inputs.use_dns_based_endpoint,
            cluster_data=cluster_data,
            context_name=target.context_name,
            connect_gw_endpoint=connect_gw_endpoint,
            namespace=presence(inputs.namespace),
        ),
    )

    path = write_secure_file(workspace, kubeconfig.to_yaml())
    log.info("kubeconfig_written", path=str(path), context=target.context_name)
    return CredentialsResult(kubeconfig_path=path, kubeconfig=kubeconfig)
