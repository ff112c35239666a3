"""Pydantic v2 models for Google Cloud API records and the kubeconfig document."""

from __future__ import annotations

from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

# --- Google Cloud API records ---


# Note 1: The Google REST APIs return camelCase JSON. `alias_generator=to_camel` maps
# each snake_case field to its wire name (e.g. `master_auth` <-> `masterAuth`), and
# `populate_by_name=True` still lets Python code construct models with field names.
# Unknown response fields are ignored, so new API fields never break parsing.
class _ApiRecord(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class MasterAuth(_ApiRecord):
    cluster_ca_certificate: str | None = None


class PrivateClusterConfig(_ApiRecord):
    private_endpoint: str | None = None


class DnsEndpointConfig(_ApiRecord):
    endpoint: str | None = None


class ControlPlaneEndpointsConfig(_ApiRecord):
    dns_endpoint_config: DnsEndpointConfig | None = None


class ClusterResponse(_ApiRecord):
    """Subset of the container.googleapis.com Cluster resource used to build a kubeconfig."""

    name: str
    endpoint: str | None = None
    master_auth: MasterAuth | None = None
    private_cluster_config: PrivateClusterConfig | None = None
    control_plane_endpoints_config: ControlPlaneEndpointsConfig | None = None

    @property
    def ca_certificate(self) -> str | None:
        return self.master_auth.cluster_ca_certificate if self.master_auth else None

    @property
    def private_endpoint(self) -> str | None:
        return self.private_cluster_config.private_endpoint if self.private_cluster_config else None

    @property
    def dns_endpoint(self) -> str | None:
        config = self.control_plane_endpoints_config
        if config is None or config.dns_endpoint_config is None:
            return None
        return config.dns_endpoint_config.endpoint


class GkeCluster(_ApiRecord):
    resource_link: str | None = None


class MembershipEndpoint(_ApiRecord):
    gke_cluster: GkeCluster | None = None


class HubMembership(_ApiRecord):
    """A gkehub.googleapis.com fleet Membership."""

    name: str
    description: str | None = None
    unique_id: str | None = None
    endpoint: MembershipEndpoint | None = None

    @property
    def is_gke_cluster(self) -> bool:
        return self.endpoint is not None and self.endpoint.gke_cluster is not None


class HubMembershipList(_ApiRecord):
    # Note 2: The Hub API omits `resources` entirely when the filter matches nothing,
    # so the field defaults to an empty list rather than being required.
    resources: list[HubMembership] = Field(default_factory=list)


class ProjectResponse(_ApiRecord):
    # `projects/<number>` for cloudresourcemanager v3.
    name: str = ""


# --- KubeConfig document ---


# Note 3: kubeconfig keys are kebab-case (`certificate-authority-data`,
# `current-context`), which are not valid Python identifiers. Each such field
# declares an explicit alias and the document is always dumped with `by_alias=True`.
class _KubeConfigEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ClusterInfo(_KubeConfigEntry):
    server: str
    certificate_authority_data: str | None = Field(default=None, alias="certificate-authority-data")


class NamedCluster(_KubeConfigEntry):
    name: str
    cluster: ClusterInfo


class ContextInfo(_KubeConfigEntry):
    cluster: str
    user: str
    namespace: str | None = None


class NamedContext(_KubeConfigEntry):
    name: str
    context: ContextInfo


class AuthProvider(_KubeConfigEntry):
    name: Literal["gcp"] = "gcp"


class UserInfo(_KubeConfigEntry):
    """Credential stanza: a bearer token or the gcp auth-provider marker, never both."""

    token: str | None = None
    auth_provider: AuthProvider | None = Field(default=None, alias="auth-provider")

    @model_validator(mode="after")
    def _exactly_one_credential(self) -> UserInfo:
        if (self.token is None) == (self.auth_provider is None):
            msg = "user entry must set exactly one of 'token' or 'auth-provider'"
            raise ValueError(msg)
        return self


class NamedUser(_KubeConfigEntry):
    name: str
    user: UserInfo


class KubeConfig(_KubeConfigEntry):
    """A single-cluster kubeconfig document."""

    api_version: str = Field(default="v1", alias="apiVersion")
    kind: str = "Config"
    clusters: list[NamedCluster]
    contexts: list[NamedContext]
    current_context: str = Field(alias="current-context")
    users: list[NamedUser]

    def to_dict(self) -> dict:
        # Note 4: exclude_none drops optional keys (CA data, namespace, the unused
        # credential stanza) entirely instead of emitting `null` values.
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_yaml(self) -> str:
        # sort_keys=False keeps the declared field order so output is stable.
        return yaml.safe_dump(self.to_dict(), sort_keys=False, default_flow_style=False)
