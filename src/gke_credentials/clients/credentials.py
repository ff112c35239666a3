"""Credential sources for the ambient Google Cloud discovery chain."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import google.auth
import structlog
from google.auth import credentials as ga_credentials
from google.auth.transport.requests import Request
from google.oauth2 import service_account

log = structlog.get_logger()

SCOPES = (
    "https://www.googleapis.com/auth/cloud-platform",
    "https://www.googleapis.com/auth/userinfo.email",
)


class CredentialSource(ABC):
    """One way of obtaining Google credentials, chosen once per run."""

    kind: str = "unknown"

    def __init__(self) -> None:
        self._credentials: ga_credentials.Credentials | None = None

    @abstractmethod
    def _load(self) -> ga_credentials.Credentials:
        """Build the underlying google-auth credentials object."""

    def credentials(self) -> ga_credentials.Credentials:
        # Note 1: google-auth credentials objects cache their access token and know when it
        # expires, so building them once per source lets the authorized session and
        # acquire_token() share a single token instead of minting two.
        if self._credentials is None:
            self._credentials = self._load()
            log.debug("credentials_loaded", source=self.kind)
        return self._credentials

    def acquire_token(self) -> str | None:
        """Return a valid access token, refreshing the credentials if needed."""
        creds = self.credentials()
        if not creds.valid:
            # Note 2: refresh() performs a blocking HTTP exchange against the token endpoint
            # (OAuth2 for service accounts, STS for workload identity federation).
            creds.refresh(Request())
        return creds.token


class ServiceAccountKeySource(CredentialSource):
    """Explicit service account JSON key material."""

    kind = "service_account"

    def __init__(self, info: dict[str, Any]) -> None:
        super().__init__()
        self._info = info

    def _load(self) -> ga_credentials.Credentials:
        return service_account.Credentials.from_service_account_info(self._info, scopes=SCOPES)


class ExternalAccountSource(CredentialSource):
    """Workload identity federation config (``type: external_account``)."""

    kind = "external_account"

    def __init__(self, info: dict[str, Any]) -> None:
        super().__init__()
        self._info = info

    def _load(self) -> ga_credentials.Credentials:
        creds, _ = google.auth.load_credentials_from_dict(self._info, scopes=SCOPES)
        return creds


class ApplicationDefaultSource(CredentialSource):
    """Application Default Credentials from the environment.

    Covers ``GOOGLE_APPLICATION_CREDENTIALS`` files written by an earlier auth step,
    gcloud user credentials, and the metadata server on Google-hosted runners.
    """

    kind = "application_default"

    def _load(self) -> ga_credentials.Credentials:
        creds, _ = google.auth.default(scopes=SCOPES)
        return creds
