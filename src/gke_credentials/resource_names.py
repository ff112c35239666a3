"""Parsing helpers for GKE cluster and fleet membership resource names."""

from __future__ import annotations

import re
from dataclasses import dataclass

from gke_credentials.errors import ParseError

# Note 1: Google Cloud resource names are case-insensitive in their collection
# segments ("projects", "locations", ...), so both patterns compile with IGNORECASE.
# The captured groups are greedy `.+` so any project, location or cluster value
# that the API itself would accept is passed through untouched.
_CLUSTER_RE = re.compile(r"^projects/(.+)/locations/(.+)/clusters/(.+)$", re.IGNORECASE)

# Note 2: Fleet memberships live under two collections. Registrations created for
# GKE clusters are addressed as `gkeMemberships` by Connect Gateway while the Hub API
# returns them as `memberships`; both spellings parse to the same shape.
_MEMBERSHIP_RE = re.compile(
    r"^projects/(.+)/locations/(.+)/(?:gkeMemberships|memberships)/(.+)$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ResourceName:
    """A cluster reference. Bare names only populate ``id``."""

    project_id: str
    location: str
    id: str


@dataclass(frozen=True)
class MembershipName:
    """A fully-qualified fleet membership reference."""

    project_id: str
    location: str
    membership_name: str


def parse_resource_name(name: str | None) -> ResourceName:
    """Parse a cluster name or ``projects/P/locations/L/clusters/C`` path.

    Any string without a ``/`` is accepted verbatim as the cluster short name.
    Strings containing ``/`` must match the full resource pattern.

    Raises:
        ParseError: If the value is blank or is a malformed resource path.
    """
    name = (name or "").strip()
    if not name:
        msg = "Failed to parse cluster name: value is the empty string"
        raise ParseError(msg)

    if "/" not in name:
        return ResourceName(project_id="", location="", id=name)

    match = _CLUSTER_RE.match(name)
    if not match:
        msg = f"Failed to parse cluster name {name!r}: invalid pattern"
        raise ParseError(msg)

    return ResourceName(project_id=match.group(1), location=match.group(2), id=match.group(3))


def parse_membership_name(name: str | None) -> MembershipName:
    """Parse a ``projects/P/locations/L/memberships/M`` (or ``gkeMemberships``) path.

    Raises:
        ParseError: If the value is blank, a bare name, or any other shape.
    """
    name = (name or "").strip()
    if not name:
        msg = "Failed to parse membership name: membership name cannot be empty"
        raise ParseError(msg)

    match = _MEMBERSHIP_RE.match(name)
    if not match:
        msg = (
            f"Failed to parse membership name {name!r}: invalid pattern. Should be of form "
            "projects/PROJECT_ID/locations/LOCATION/gkeMemberships/MEMBERSHIP_NAME or "
            "projects/PROJECT_ID/locations/LOCATION/memberships/MEMBERSHIP_NAME"
        )
        raise ParseError(msg)

    return MembershipName(
        project_id=match.group(1),
        location=match.group(2),
        membership_name=match.group(3),
    )


def is_cluster_resource_path(name: str) -> bool:
    """Return True if ``name`` is a full cluster resource path."""
    return _CLUSTER_RE.match(name) is not None
