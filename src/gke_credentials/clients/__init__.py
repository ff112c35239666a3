"""Client wrappers for the Google Cloud APIs and credential selection."""

from __future__ import annotations

import json

from gke_credentials.clients.credentials import (
    ApplicationDefaultSource,
    CredentialSource,
    ExternalAccountSource,
    ServiceAccountKeySource,
)
from gke_credentials.errors import ConfigurationError

_SOURCES_BY_TYPE: dict[str, type[ServiceAccountKeySource] | type[ExternalAccountSource]] = {
    "service_account": ServiceAccountKeySource,
    "external_account": ExternalAccountSource,
}


# Note 1: A factory function picks the credential variant exactly once, at startup,
# from the inputs that are present. The rest of the run only sees the CredentialSource
# interface and never re-evaluates which variant is in use.
def load_credential_source(credentials_json: str | None = None) -> CredentialSource:
    """Select the credential source for this run.

    Explicit JSON key material wins; its ``type`` field decides between a service
    account key and a workload identity federation config. Without it, Application
    Default Credentials are used.

    Raises:
        ConfigurationError: If the JSON cannot be parsed or has an unsupported type.
    """
    if not credentials_json or not credentials_json.strip():
        return ApplicationDefaultSource()

    try:
        info = json.loads(credentials_json)
    except json.JSONDecodeError as e:
        msg = f"Failed to parse credentials as JSON: {e.msg} (line {e.lineno})"
        raise ConfigurationError(msg) from None

    if not isinstance(info, dict):
        msg = "Credentials JSON must be an object"
        raise ConfigurationError(msg)

    cred_type = info.get("type")
    source_cls = _SOURCES_BY_TYPE.get(cred_type) if isinstance(cred_type, str) else None
    if source_cls is None:
        valid = ", ".join(sorted(_SOURCES_BY_TYPE))
        msg = f"Unsupported credentials type {cred_type!r}. Must be one of: {valid}"
        raise ConfigurationError(msg)
    return source_cls(info)


__all__ = [
    "ApplicationDefaultSource",
    "CredentialSource",
    "ExternalAccountSource",
    "ServiceAccountKeySource",
    "load_credential_source",
]
