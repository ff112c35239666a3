"""Error types raised while resolving a cluster and writing its kubeconfig."""

from __future__ import annotations


class GKECredentialsError(Exception):
    """Base class for every failure reported as the run's terminal error."""


class ConfigurationError(GKECredentialsError):
    """Missing, conflicting, or unresolvable invocation inputs."""


# Note 1: ParseError also derives from ValueError so callers that only know the
# standard library contract ("bad value") can catch it without importing this module.
class ParseError(GKECredentialsError, ValueError):
    """A cluster, membership, or project reference did not have the expected shape."""


class DiscoveryAmbiguityError(GKECredentialsError):
    """Fleet membership discovery found zero or several candidates."""


class UpstreamAPIError(GKECredentialsError):
    """A Google Cloud API call or token exchange failed."""


class FileWriteError(GKECredentialsError):
    """The kubeconfig file could not be created."""
