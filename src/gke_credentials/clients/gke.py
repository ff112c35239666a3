"""GKE, Fleet (GKE Hub) and Resource Manager REST API wrapper."""

from __future__ import annotations

import asyncio
from typing import Any, TypeVar

import requests
import structlog
from google.auth import exceptions as ga_exceptions
from google.auth.transport.requests import AuthorizedSession
from pydantic import BaseModel, ValidationError

from gke_credentials import __version__
from gke_credentials.clients.credentials import CredentialSource
from gke_credentials.errors import ConfigurationError, ParseError, UpstreamAPIError
from gke_credentials.models import ClusterResponse, HubMembership, HubMembershipList, ProjectResponse
from gke_credentials.resource_names import is_cluster_resource_path

log = structlog.get_logger()

USER_AGENT = f"get-gke-credentials/{__version__}"

CONTAINER_ENDPOINT = "https://container.googleapis.com/v1"
HUB_ENDPOINT = "https://gkehub.googleapis.com/v1"
RESOURCE_MANAGER_ENDPOINT = "https://cloudresourcemanager.googleapis.com/v3"
CONNECT_GATEWAY_HOST_PATH = "connectgateway.googleapis.com/v1"

_PROJECT_PREFIX = "projects/"

_RecordT = TypeVar("_RecordT", bound=BaseModel)


class ClusterClient:
    """Authenticated client for the cluster metadata, fleet, and project APIs.

    ``project_id`` and ``location`` are hints used only when a cluster is given by
    its short name; a full ``projects/P/locations/L/clusters/C`` path is used as is.
    """

    def __init__(
        self,
        credential_source: CredentialSource,
        project_id: str | None = None,
        location: str | None = None,
        quota_project_id: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._credential_source = credential_source
        self._project_id = project_id
        self._location = location
        self._timeout = timeout
        # Note 1: The session is created lazily on the first request. Constructing the
        # client therefore never touches credentials, which keeps input validation
        # failures fast and lets unit tests swap `_get_session` for a mock.
        self._session: AuthorizedSession | None = None

        self._headers = {"User-Agent": USER_AGENT}
        if quota_project_id:
            # Note 2: X-Goog-User-Project bills API quota to the given project instead of
            # the project that owns the credentials. The caller needs
            # serviceusage.services.use on that project.
            self._headers["X-Goog-User-Project"] = quota_project_id

    @property
    def project_id(self) -> str | None:
        return self._project_id

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._headers)

    def _get_session(self) -> AuthorizedSession:
        if self._session is None:
            self._session = AuthorizedSession(self._credential_source.credentials())
        return self._session

    async def get_token(self) -> str:
        """Mint an access token from the run's credential source."""
        log.debug("getting_token", source=self._credential_source.kind)
        try:
            token = await asyncio.to_thread(self._credential_source.acquire_token)
        except ga_exceptions.GoogleAuthError as e:
            log.error("failed_to_get_token", source=self._credential_source.kind)
            msg = f"Failed to generate token: {e}"
            raise UpstreamAPIError(msg) from e

        if not token:
            msg = "Failed to generate token."
            raise UpstreamAPIError(msg)
        return token

    async def _get_json(self, url: str, operation: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        log.debug("request_started", operation=operation, url=url)
        try:
            # Note 3: Building the session loads credentials, which can probe the metadata
            # server, and AuthorizedSession is a blocking requests.Session. Both run through
            # asyncio.to_thread, and both fail inside this block so credential problems are
            # reported against the call that needed them.
            session = await asyncio.to_thread(self._get_session)
            resp = await asyncio.to_thread(
                session.get,
                url,
                params=params,
                headers=self._headers,
                timeout=self._timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ga_exceptions.GoogleAuthError, ValueError) as e:
            log.error("request_failed", operation=operation, url=url)
            msg = f"Failed to {operation}: {e}"
            raise UpstreamAPIError(msg) from e

        if not isinstance(data, dict):
            msg = f"Failed to {operation}: expected a JSON object, got {type(data).__name__}"
            raise UpstreamAPIError(msg)
        return data

    async def _get_record(
        self,
        url: str,
        operation: str,
        model: type[_RecordT],
        params: dict[str, str] | None = None,
    ) -> _RecordT:
        data = await self._get_json(url, operation, params=params)
        try:
            return model.model_validate(data)
        except ValidationError as e:
            log.error("unexpected_response", operation=operation, url=url)
            msg = f"Failed to {operation}: unexpected response: {e.error_count()} validation error(s)"
            raise UpstreamAPIError(msg) from e

    def get_resource(self, name: str | None) -> str:
        """Return the full cluster resource name for ``name``.

        Raises:
            ParseError: If the name is blank or a malformed resource path.
            ConfigurationError: If a short name is given without a project ID or location.
        """
        name = (name or "").strip()
        if not name:
            msg = "Failed to parse cluster name: name cannot be empty"
            raise ParseError(msg)

        if "/" in name:
            if is_cluster_resource_path(name):
                return name
            msg = f"Invalid cluster name {name!r}"
            raise ParseError(msg)

        if not self._project_id:
            msg = 'Failed to get project ID to build cluster name. Try setting "project_id".'
            raise ConfigurationError(msg)
        if not self._location:
            msg = 'Failed to get location (region/zone) to build cluster name. Try setting "location".'
            raise ConfigurationError(msg)

        return f"projects/{self._project_id}/locations/{self._location}/clusters/{name}"

    async def get_cluster(self, cluster_name: str) -> ClusterResponse:
        """Fetch the cluster record from the GKE API."""
        log.debug("getting_cluster", cluster=cluster_name)
        resource = self.get_resource(cluster_name)
        return await self._get_record(
            f"{CONTAINER_ENDPOINT}/{resource}",
            operation=f"get cluster {resource}",
            model=ClusterResponse,
        )

    async def list_memberships(self, project_id: str, resource_link: str) -> list[HubMembership]:
        """List global fleet memberships in ``project_id`` bound to ``resource_link``."""
        listing = await self._get_record(
            f"{HUB_ENDPOINT}/projects/{project_id}/locations/global/memberships",
            operation=f"list fleet memberships in {project_id}",
            model=HubMembershipList,
            params={"filter": f'endpoint.gkeCluster.resourceLink="{resource_link}"'},
        )
        return listing.resources

    async def get_membership(self, name: str) -> HubMembership:
        """Fetch a single fleet membership by its full resource name."""
        return await self._get_record(
            f"{HUB_ENDPOINT}/{name}",
            operation=f"lookup membership {name}",
            model=HubMembership,
        )

    async def project_id_to_num(self, project_id: str) -> str:
        """Convert a project ID to its project number.

        Raises:
            ParseError: If the response name is not of the form ``projects/<number>``.
        """
        log.debug("converting_project_id", project=project_id)
        project = await self._get_record(
            f"{RESOURCE_MANAGER_ENDPOINT}/projects/{project_id}",
            operation=f"get project {project_id}",
            model=ProjectResponse,
        )
        project_ref = project.name
        project_num = project_ref.removeprefix(_PROJECT_PREFIX)
        if not project_ref.startswith(_PROJECT_PREFIX) or not project_num:
            msg = f"Failed to parse project number: expected format projects/PROJECT_NUMBER. Got {project_ref}"
            raise ParseError(msg)
        return project_num
