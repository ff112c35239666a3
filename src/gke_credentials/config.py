"""Invocation inputs, validation, and derived defaults."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from gke_credentials.errors import ConfigurationError
from gke_credentials.resource_names import ResourceName, parse_resource_name

# Checked in order when neither the input nor the cluster resource name has a project.
PROJECT_ENV_VARS = (
    "CLOUDSDK_CORE_PROJECT",
    "CLOUDSDK_PROJECT",
    "GCLOUD_PROJECT",
    "GCP_PROJECT",
    "GOOGLE_CLOUD_PROJECT",
)

_TRUE_VALUES = ("true", "True", "TRUE")
_FALSE_VALUES = ("false", "False", "FALSE")


def presence(value: str | None) -> str | None:
    """Strip ``value`` and return None when nothing is left."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def parse_boolean_input(name: str, value: str | None, default: bool = False) -> bool:
    """Parse a workflow boolean input using the YAML 1.2 core schema.

    A blank value yields ``default``.
    """
    value = presence(value)
    if value is None:
        return default
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    msg = (
        f"Input does not meet YAML 1.2 \"Core Schema\" specification: {name}. "
        "Support boolean input list: `true | True | TRUE | false | False | FALSE`"
    )
    raise ConfigurationError(msg)


@dataclass(frozen=True)
class ActionInputs:
    """Raw inputs for one run."""

    cluster_name: str
    location: str | None = None
    project_id: str | None = None
    quota_project_id: str | None = None
    context_name: str | None = None
    namespace: str | None = None
    use_auth_provider: bool = False
    use_internal_ip: bool = False
    use_connect_gateway: bool = False
    use_dns_based_endpoint: bool = False
    fleet_membership_name: str | None = None
    credentials: str | None = None

    def validate(self) -> None:
        """Reject conflicting connectivity modes before any network call."""
        if not presence(self.cluster_name):
            msg = 'Missing required input "cluster_name"'
            raise ConfigurationError(msg)

        if self.use_internal_ip and self.use_connect_gateway:
            msg = "Cannot enable both use_internal_ip and use_connect_gateway"
            raise ConfigurationError(msg)

        if self.use_dns_based_endpoint and (self.use_internal_ip or self.use_connect_gateway):
            other = "use_internal_ip" if self.use_internal_ip else "use_connect_gateway"
            msg = f"Cannot enable both use_dns_based_endpoint and {other}"
            raise ConfigurationError(msg)


@dataclass(frozen=True)
class ResolvedTarget:
    """The cluster to resolve with every derived default filled in."""

    cluster: ResourceName
    project_id: str
    location: str
    context_name: str


def project_id_from_env(environ: Mapping[str, str] | None = None) -> str | None:
    environ = os.environ if environ is None else environ
    for key in PROJECT_ENV_VARS:
        value = presence(environ.get(key))
        if value:
            return value
    return None


def resolve_target(inputs: ActionInputs, environ: Mapping[str, str] | None = None) -> ResolvedTarget:
    """Parse the cluster name and derive the project, location, and context name.

    Raises:
        ParseError: If ``cluster_name`` is malformed.
        ConfigurationError: If the project or location cannot be determined.
    """
    cluster = parse_resource_name(inputs.cluster_name)

    project_id = presence(inputs.project_id) or cluster.project_id or project_id_from_env(environ)
    if not project_id:
        msg = (
            'Failed to extract project ID, please set the "project_id" input, '
            "set $CLOUDSDK_CORE_PROJECT, or specify the cluster name as a full resource name."
        )
        raise ConfigurationError(msg)

    location = presence(inputs.location) or cluster.location
    if not location:
        msg = (
            'Failed to extract location, please set the "location" input or specify '
            "the cluster name as a full resource name."
        )
        raise ConfigurationError(msg)

    context_name = presence(inputs.context_name) or f"gke_{project_id}_{location}_{cluster.id}"

    return ResolvedTarget(cluster=cluster, project_id=project_id, location=location, context_name=context_name)
