"""Endpoint selection and kubeconfig synthesis for a single GKE cluster."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import structlog

from gke_credentials.errors import ConfigurationError
from gke_credentials.models import (
    AuthProvider,
    ClusterInfo,
    ClusterResponse,
    ContextInfo,
    KubeConfig,
    NamedCluster,
    NamedContext,
    NamedUser,
    UserInfo,
)

log = structlog.get_logger()

# DNS-based control plane endpoints are never validated against the cluster CA.
DNS_ENDPOINT_SUFFIX = "gke.goog"


class TokenProvider(Protocol):
    async def get_token(self) -> str: ...


@dataclass(frozen=True)
class KubeConfigOptions:
    """Inputs for building a kubeconfig.

    At most one of ``connect_gw_endpoint``, ``use_internal_ip`` and
    ``use_dns_based_endpoint`` is expected; callers validate that combination.
    """

    use_auth_provider: bool
    use_internal_ip: bool
    use_dns_based_endpoint: bool
    cluster_data: ClusterResponse
    context_name: str
    connect_gw_endpoint: str | None = None
    namespace: str | None = None


@dataclass(frozen=True)
class EndpointSelection:
    endpoint: str
    use_ca_cert: bool
    mode: str


def select_endpoint(opts: KubeConfigOptions) -> EndpointSelection:
    """Pick the control plane address and whether to embed the cluster CA.

    Priority: Connect Gateway, internal IP, DNS-based endpoint, public endpoint.

    Raises:
        ConfigurationError: If the cluster has no address for the selected mode.
    """
    cluster = opts.cluster_data
    gateway = (opts.connect_gw_endpoint or "").strip()

    if gateway:
        mode, endpoint = "connect_gateway", gateway
    elif opts.use_internal_ip:
        mode, endpoint = "internal_ip", cluster.private_endpoint
    elif opts.use_dns_based_endpoint:
        mode, endpoint = "dns_based", cluster.dns_endpoint
    else:
        mode, endpoint = "public", cluster.endpoint

    if not endpoint:
        msg = f"Cluster {cluster.name!r} has no endpoint for {mode.replace('_', ' ')} connectivity"
        raise ConfigurationError(msg)

    # Note 1: The gateway terminates TLS with Google's own certificate, and DNS-based
    # endpoints (`*.gke.goog`) present a publicly trusted certificate, so the cluster CA
    # is not the trust root in either case. The suffix check also covers a DNS endpoint
    # reached through the public `endpoint` field.
    use_ca_cert = not (
        mode in ("connect_gateway", "dns_based") or endpoint.endswith(DNS_ENDPOINT_SUFFIX)
    )
    return EndpointSelection(endpoint=endpoint, use_ca_cert=use_ca_cert, mode=mode)


async def create_kubeconfig(client: TokenProvider, opts: KubeConfigOptions) -> KubeConfig:
    """Build the kubeconfig document for ``opts.cluster_data``.

    With ``use_auth_provider`` the user entry defers to the ``gcp`` auth plugin and no
    token is minted; otherwise a short-lived access token is embedded.
    """
    cluster = opts.cluster_data
    selection = select_endpoint(opts)
    log.debug(
        "creating_kubeconfig",
        cluster=cluster.name,
        mode=selection.mode,
        use_ca_cert=selection.use_ca_cert,
        use_auth_provider=opts.use_auth_provider,
    )

    if opts.use_auth_provider:
        user = UserInfo(auth_provider=AuthProvider())
    else:
        user = UserInfo(token=await client.get_token())

    namespace = (opts.namespace or "").strip() or None

    return KubeConfig(
        clusters=[
            NamedCluster(
                name=cluster.name,
                cluster=ClusterInfo(
                    server=f"https://{selection.endpoint}",
                    certificate_authority_data=cluster.ca_certificate if selection.use_ca_cert else None,
                ),
            )
        ],
        contexts=[
            NamedContext(
                name=opts.context_name,
                context=ContextInfo(cluster=cluster.name, user=cluster.name, namespace=namespace),
            )
        ],
        current_context=opts.context_name,
        users=[NamedUser(name=cluster.name, user=user)],
    )
