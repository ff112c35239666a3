"""End-to-end tests for get_credentials with the network layer patched out."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import yaml

from gke_credentials.clients.gke import ClusterClient
from gke_credentials.config import ActionInputs
from gke_credentials.errors import ConfigurationError, DiscoveryAmbiguityError, ParseError, UpstreamAPIError
from gke_credentials.models import ClusterResponse, HubMembership
from gke_credentials.runner import get_credentials


# Note 1: Patching the methods on the ClusterClient class (not an instance) covers the
# client that get_credentials constructs internally.
@contextmanager
def _patch_client(**methods):
    mocks = {name: AsyncMock(**kwargs) for name, kwargs in methods.items()}
    with patch.multiple(ClusterClient, **mocks):
        yield mocks


class TestGetCredentials:
    async def test_full_path_writes_kubeconfig(
        self, tmp_path: Path, public_cluster: ClusterResponse, mock_credential_source: MagicMock
    ) -> None:
        inputs = ActionInputs(cluster_name="projects/p/locations/us-central1/clusters/public-cluster")
        with _patch_client(get_cluster={"return_value": public_cluster}):
            result = await get_credentials(
                inputs, workspace=tmp_path, environ={}, credential_source=mock_credential_source
            )

        assert result.kubeconfig_path.parent == tmp_path.resolve()
        doc = yaml.safe_load(result.kubeconfig_path.read_text())
        assert doc["current-context"] == "gke_p_us-central1_public-cluster"
        assert doc["clusters"][0]["cluster"]["server"] == "https://public-endpoint"
        assert doc["users"][0]["user"] == {"token": "test-token"}

    async def test_short_name_with_env_project(
        self, tmp_path: Path, public_cluster: ClusterResponse, mock_credential_source: MagicMock
    ) -> None:
        inputs = ActionInputs(cluster_name="public-cluster", location="us-east1", context_name="dev")
        with _patch_client(get_cluster={"return_value": public_cluster}) as mocks:
            result = await get_credentials(
                inputs,
                workspace=tmp_path,
                environ={"GCLOUD_PROJECT": "env-project"},
                credential_source=mock_credential_source,
            )

        mocks["get_cluster"].assert_awaited_once()
        assert result.kubeconfig.current_context == "dev"

    async def test_connect_gateway_with_discovery(
        self, tmp_path: Path, public_cluster: ClusterResponse, mock_credential_source: MagicMock
    ) -> None:
        membership = HubMembership.model_validate(
            {
                "name": "projects/p/locations/global/memberships/m",
                "endpoint": {"gkeCluster": {"resourceLink": "//container.googleapis.com/x"}},
            }
        )
        inputs = ActionInputs(
            cluster_name="projects/p/locations/us-central1/clusters/public-cluster",
            use_connect_gateway=True,
        )
        with _patch_client(
            get_cluster={"return_value": public_cluster},
            list_memberships={"return_value": [membership]},
            get_membership={"return_value": membership},
            project_id_to_num={"return_value": "42"},
        ):
            result = await get_credentials(
                inputs, workspace=tmp_path, environ={}, credential_source=mock_credential_source
            )

        cluster = result.kubeconfig.to_dict()["clusters"][0]["cluster"]
        assert cluster == {
            "server": "https://connectgateway.googleapis.com/v1/projects/42/locations/global/gkeMemberships/m"
        }

    async def test_explicit_membership_skips_discovery(
        self, tmp_path: Path, public_cluster: ClusterResponse, mock_credential_source: MagicMock
    ) -> None:
        name = "projects/p/locations/global/memberships/chosen"
        inputs = ActionInputs(
            cluster_name="projects/p/locations/us-central1/clusters/public-cluster",
            use_connect_gateway=True,
            fleet_membership_name=name,
        )
        with _patch_client(
            get_cluster={"return_value": public_cluster},
            list_memberships={},
            get_membership={"return_value": HubMembership(name=name)},
            project_id_to_num={"return_value": "42"},
        ) as mocks:
            await get_credentials(inputs, workspace=tmp_path, environ={}, credential_source=mock_credential_source)

        mocks["list_memberships"].assert_not_awaited()
        mocks["get_membership"].assert_awaited_once_with(name)

    async def test_malformed_explicit_membership(
        self, tmp_path: Path, public_cluster: ClusterResponse, mock_credential_source: MagicMock
    ) -> None:
        inputs = ActionInputs(
            cluster_name="projects/p/locations/l/clusters/c",
            use_connect_gateway=True,
            fleet_membership_name="not-a-membership",
        )
        with (
            _patch_client(get_cluster={"return_value": public_cluster}, get_membership={}) as mocks,
            pytest.raises(ParseError, match="Failed to parse membership name"),
        ):
            await get_credentials(inputs, workspace=tmp_path, environ={}, credential_source=mock_credential_source)
        mocks["get_membership"].assert_not_awaited()

    async def test_conflicting_modes_fail_before_network(
        self, tmp_path: Path, mock_credential_source: MagicMock
    ) -> None:
        inputs = ActionInputs(
            cluster_name="projects/p/locations/l/clusters/c", use_internal_ip=True, use_connect_gateway=True
        )
        with (
            _patch_client(get_cluster={}) as mocks,
            pytest.raises(ConfigurationError, match="Cannot enable both"),
        ):
            await get_credentials(inputs, workspace=tmp_path, environ={}, credential_source=mock_credential_source)
        mocks["get_cluster"].assert_not_awaited()

    async def test_api_failure_writes_nothing(self, tmp_path: Path, mock_credential_source: MagicMock) -> None:
        inputs = ActionInputs(cluster_name="projects/p/locations/l/clusters/c")
        with (
            _patch_client(get_cluster={"side_effect": UpstreamAPIError("Failed to get cluster")}),
            pytest.raises(UpstreamAPIError),
        ):
            await get_credentials(inputs, workspace=tmp_path, environ={}, credential_source=mock_credential_source)
        assert list(tmp_path.iterdir()) == []

    async def test_discovery_failure_writes_nothing(
        self, tmp_path: Path, public_cluster: ClusterResponse, mock_credential_source: MagicMock
    ) -> None:
        inputs = ActionInputs(cluster_name="projects/p/locations/l/clusters/c", use_connect_gateway=True)
        with (
            _patch_client(get_cluster={"return_value": public_cluster}, list_memberships={"return_value": []}),
            pytest.raises(DiscoveryAmbiguityError, match="Found none"),
        ):
            await get_credentials(inputs, workspace=tmp_path, environ={}, credential_source=mock_credential_source)
        assert list(tmp_path.iterdir()) == []

    async def test_loads_credential_source_from_inputs(
        self, tmp_path: Path, public_cluster: ClusterResponse, mock_credential_source: MagicMock
    ) -> None:
        inputs = ActionInputs(cluster_name="projects/p/locations/l/clusters/c", credentials='{"type": "x"}')
        with (
            patch(
                "gke_credentials.runner.load_credential_source", return_value=mock_credential_source
            ) as mock_load,
            _patch_client(get_cluster={"return_value": public_cluster}),
        ):
            await get_credentials(inputs, workspace=tmp_path, environ={})
        mock_load.assert_called_once_with('{"type": "x"}')
