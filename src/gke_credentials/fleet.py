"""Fleet membership discovery and Connect Gateway endpoint construction."""

from __future__ import annotations

import structlog

from gke_credentials.clients.gke import CONNECT_GATEWAY_HOST_PATH, ClusterClient
from gke_credentials.errors import ConfigurationError, DiscoveryAmbiguityError
from gke_credentials.resource_names import parse_membership_name

log = structlog.get_logger()

# Note 1: Connect Gateway addresses memberships that front a GKE cluster under the
# `gkeMemberships` collection, while the Hub API itself (and non-GKE registrations)
# use `memberships`. The key is whether the membership endpoint names a GKE cluster.
MEMBERSHIP_COLLECTIONS: dict[bool, str] = {
    True: "gkeMemberships",
    False: "memberships",
}


async def discover_cluster_membership(client: ClusterClient, cluster_name: str) -> str:
    """Find the single fleet membership registered for ``cluster_name``.

    Returns the membership's full resource name.

    Raises:
        ConfigurationError: If the client has no project ID to search in.
        DiscoveryAmbiguityError: If zero or more than one membership matches.
    """
    log.debug("discovering_membership", cluster=cluster_name)
    resource_link = f"//container.googleapis.com/{client.get_resource(cluster_name)}"

    project_id = client.project_id
    if not project_id:
        msg = 'Failed to get project ID for cluster membership discovery. Try setting "project_id".'
        raise ConfigurationError(msg)

    memberships = await client.list_memberships(project_id, resource_link)
    if not memberships:
        msg = (
            f"Expected one membership for {cluster_name} in {project_id}. Found none. "
            f"Verify membership by running `gcloud container fleet memberships list --project {project_id}`"
        )
        raise DiscoveryAmbiguityError(msg)

    if len(memberships) > 1:
        names = ",".join(m.name for m in memberships)
        msg = (
            f"Expected one membership for {cluster_name} in {project_id}. Found multiple memberships {names}. "
            "Provide an explicit membership via `fleet_membership_name` input."
        )
        raise DiscoveryAmbiguityError(msg)

    membership = memberships[0].name
    log.info("membership_discovered", cluster=cluster_name, membership=membership)
    return membership


async def get_connect_gw_endpoint(client: ClusterClient, membership_name: str) -> str:
    """Build the Connect Gateway host path for a fleet membership.

    The gateway addresses projects by number, so the membership's project ID is
    resolved through Resource Manager.
    """
    log.debug("getting_connect_gateway_endpoint", membership=membership_name)
    membership = await client.get_membership(membership_name)

    collection = MEMBERSHIP_COLLECTIONS[membership.is_gke_cluster]
    parsed = parse_membership_name(membership.name)
    project_number = await client.project_id_to_num(parsed.project_id)

    return (
        f"{CONNECT_GATEWAY_HOST_PATH}/projects/{project_number}"
        f"/locations/{parsed.location}/{collection}/{parsed.membership_name}"
    )
