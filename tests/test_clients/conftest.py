"""Client-specific test fixtures: fake HTTP responses and authorized sessions."""

# Note 1: These fixtures live beside the client tests because only the client layer
# talks HTTP. Higher-level tests patch ClusterClient methods directly instead.
from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest
import requests


def make_response(payload: Any = None, status_code: int = 200) -> MagicMock:
    """Build a stand-in for ``requests.Response``."""
    # Note 2: spec=requests.Response keeps the mock honest: accessing an attribute the
    # real Response does not have raises AttributeError instead of returning a MagicMock.
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Client Error")
    return response


@pytest.fixture
def mock_session() -> MagicMock:
    """An AuthorizedSession whose GET returns an empty JSON object until told otherwise."""
    session = MagicMock()
    session.get.return_value = make_response({})
    return session


@pytest.fixture
def response_factory():
    return make_response
