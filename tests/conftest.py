"""Shared test fixtures for all test modules."""

# Note 1: conftest.py is loaded by pytest before any test in this directory or its
# subdirectories runs. Fixtures defined here are injected by parameter name.
from __future__ import annotations

import base64
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from gke_credentials.clients.gke import ClusterClient
from gke_credentials.models import ClusterResponse

CA_CERT = base64.b64encode(b"-----BEGIN CERTIFICATE-----\ntest\n-----END CERTIFICATE-----\n").decode()
DNS_ENDPOINT = "gke-123456789.us-central1.gke.goog"


# Note 2: `make_cluster` is a plain builder function, not a fixture, so tests can call
# it with different arguments to build the exact cluster record a scenario needs.
def make_cluster(
    name: str = "my-cluster",
    endpoint: str | None = "public-endpoint",
    ca_cert: str | None = CA_CERT,
    private_endpoint: str | None = "private-endpoint",
    dns_endpoint: str | None = DNS_ENDPOINT,
) -> ClusterResponse:
    """Build a ClusterResponse the way container.googleapis.com returns it (camelCase JSON)."""
    data: dict[str, Any] = {"name": name}
    if endpoint is not None:
        data["endpoint"] = endpoint
    if ca_cert is not None:
        data["masterAuth"] = {"clusterCaCertificate": ca_cert}
    if private_endpoint is not None:
        data["privateClusterConfig"] = {"privateEndpoint": private_endpoint}
    if dns_endpoint is not None:
        data["controlPlaneEndpointsConfig"] = {"dnsEndpointConfig": {"endpoint": dns_endpoint}}
    return ClusterResponse.model_validate(data)


@pytest.fixture
def public_cluster() -> ClusterResponse:
    return make_cluster(name="public-cluster", private_endpoint="")


@pytest.fixture
def private_cluster() -> ClusterResponse:
    return make_cluster(name="private-cluster", endpoint="")


@pytest.fixture
def mock_credential_source() -> MagicMock:
    """A CredentialSource stand-in that never talks to Google."""
    source = MagicMock()
    source.kind = "test"
    source.acquire_token.return_value = "test-token"
    return source


@pytest.fixture
def token_client() -> MagicMock:
    """Anything with an async get_token(), as create_kubeconfig expects."""
    # Note 3: AsyncMock returns a coroutine when called, so `await client.get_token()`
    # yields the configured return_value exactly like the real async method.
    client = MagicMock()
    client.get_token = AsyncMock(return_value="test-token")
    return client


@pytest.fixture
def cluster_client(mock_credential_source: MagicMock) -> ClusterClient:
    return ClusterClient(mock_credential_source, project_id="my-project", location="us-central1")


@pytest.fixture
def cluster_factory():
    """Expose ``make_cluster`` to tests that build several cluster records."""
    return make_cluster
