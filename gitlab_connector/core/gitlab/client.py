"""GitLab API client construction and error translation.

Handles client setup and maps python-gitlab / requests failures onto the
connector's error buckets.
"""
from __future__ import annotations
import logging
from contextlib import contextmanager
from typing import Iterator

import gitlab
import requests
from gitlab.exceptions import GitlabError

from gitlab_connector.config.settings import GitlabConfiguration
from gitlab_connector.core.exceptions import ConnectorIOError, UnknownUidError

logger = logging.getLogger(__name__)


def create_gitlab_client(config: GitlabConfiguration) -> gitlab.Gitlab:
    """Build a python-gitlab client for the configured host.

    No request is sent; call ``auth()`` to check the credentials.

    Args:
        config: Validated connector configuration

    Returns:
        Unauthenticated ``gitlab.Gitlab`` instance
    """
    if config.ignore_certificate_errors:
        logger.warning(f"SSL verification disabled for {config.host_url}")
    return gitlab.Gitlab(
        url=config.host_url.rstrip("/"),
        private_token=config.api_token,
        ssl_verify=not config.ignore_certificate_errors,
        timeout=config.request_timeout,
    )


@contextmanager
def gitlab_errors(action: str) -> Iterator[None]:
    """Translate remote failures raised inside the block.

    * 404 from GitLab -> UnknownUidError
    * any other GitLab error -> ConnectorIOError
    * transport failures (requests) -> ConnectorIOError

    Args:
        action: Human readable description used in error messages
            (e.g. ``"get user 42"``)
    """
    try:
        yield
    except GitlabError as e:
        if e.response_code == 404:
            raise UnknownUidError(f"{action}: not found") from e
        logger.error(f"GitLab error during {action}: [{e.response_code}] {e.error_message}")
        raise ConnectorIOError(f"{action} failed: {e.error_message}", e.response_code) from e
    except requests.RequestException as e:
        logger.error(f"Connection error during {action}: {e}")
        raise ConnectorIOError(f"{action} failed: {e}") from e
