"""Pytest shared fixtures for connector tests."""
import os
import pathlib
import sys
from types import SimpleNamespace
from unittest.mock import MagicMock

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from gitlab_connector.config.settings import GitlabConfiguration
from gitlab_connector.core.connector import GitlabConnector


def rest(**attributes):
    """Fake python-gitlab RESTObject exposing ``attributes`` and ``id``."""
    return SimpleNamespace(attributes=dict(attributes), id=attributes.get("id"))


@pytest.fixture(autouse=True)
def _clean_gitlab_env(monkeypatch):
    """Keep the developer's GITLAB_* variables out of unit tests."""
    for name in list(os.environ):
        if name.startswith("GITLAB_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config():
    return GitlabConfiguration(host_url="https://gitlab.example.com", api_token="glpat-test")


@pytest.fixture
def gl():
    """MagicMock standing in for ``gitlab.Gitlab``."""
    return MagicMock(name="gitlab")


@pytest.fixture
def connector(monkeypatch, config, gl):
    """Initialized connector whose GitLab client is the ``gl`` mock."""
    monkeypatch.setattr(
        "gitlab_connector.core.connector.create_gitlab_client",
        lambda cfg: gl,
    )
    conn = GitlabConnector()
    conn.init(config)
    yield conn
    conn.dispose()
