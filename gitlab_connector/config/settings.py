"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from gitlab.const import AccessLevel

from gitlab_connector.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10
DEFAULT_PAGE_SIZE = 100


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = Path("/run/secrets") / secret_name

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                logger.info(f"Loaded {secret_name} from /run/secrets")
                return secret_value
        except OSError as e:
            logger.warning(f"Failed to read /run/secrets/{secret_name}: {e}")

    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            logger.info(f"Loaded {env_var} from environment (fallback)")
            return secret_value

    return None


# Levels GitLab accepts for group and project members
MEMBER_ACCESS_LEVELS = frozenset(
    int(level) for level in AccessLevel
    if AccessLevel.MINIMAL_ACCESS <= level <= AccessLevel.OWNER
)


def parse_access_level(raw: str | int) -> int:
    """Parse a member access level given as a number or a name.

    Only Minimal access (5) through Owner (50) are member levels; No access
    and Admin are rejected.

    >>> parse_access_level("developer")
    30
    >>> parse_access_level("40")
    40
    """
    if isinstance(raw, int):
        value = raw
    else:
        text = raw.strip()
        try:
            value = int(text)
        except ValueError:
            try:
                value = int(AccessLevel[text.upper()])
            except KeyError:
                raise ConfigurationError("accessLevel.invalid") from None
    if value not in MEMBER_ACCESS_LEVELS:
        raise ConfigurationError("accessLevel.invalid")
    return value


@dataclass
class GitlabConfiguration:
    """Connector configuration container."""
    host_url: str = ""
    api_token: str = ""
    ignore_certificate_errors: bool = False

    # Access level given to members added through the member attribute
    default_access_level: int = int(AccessLevel.DEVELOPER)

    request_timeout: int = REQUEST_TIMEOUT
    page_size: int = DEFAULT_PAGE_SIZE

    def validate(self) -> None:
        """Check the configuration before the connector uses it.

        Raises:
            ConfigurationError: With a short message key describing the problem
        """
        if not self.host_url or not self.host_url.strip():
            raise ConfigurationError("host.blank")
        if not self.api_token or not self.api_token.strip():
            raise ConfigurationError("token.blank")
        parse_access_level(self.default_access_level)
        if self.request_timeout <= 0:
            raise ConfigurationError("timeout.invalid")
        if self.page_size <= 0:
            raise ConfigurationError("pageSize.invalid")

    def __repr__(self) -> str:
        return (
            f"GitlabConfiguration(host_url={self.host_url!r}, api_token='***', "
            f"ignore_certificate_errors={self.ignore_certificate_errors}, "
            f"default_access_level={self.default_access_level}, "
            f"request_timeout={self.request_timeout}, page_size={self.page_size})"
        )


def _int_from_env(var_name: str, default: int) -> int:
    raw = os.environ.get(var_name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{var_name} must be an integer") from None


def load_settings() -> GitlabConfiguration:
    """Load connector settings from environment and /run/secrets."""
    host_url = os.environ.get("GITLAB_HOST_URL", "").strip()
    api_token = _load_secret_from_file("gitlab_api_token", "GITLAB_API_TOKEN") or ""
    ignore_certificate_errors = (
        os.environ.get("GITLAB_IGNORE_CERTIFICATE_ERRORS", "false").lower() == "true"
    )

    access_level_raw = os.environ.get("GITLAB_DEFAULT_ACCESS_LEVEL", "").strip()
    default_access_level = (
        parse_access_level(access_level_raw) if access_level_raw else int(AccessLevel.DEVELOPER)
    )

    config = GitlabConfiguration(
        host_url=host_url,
        api_token=api_token,
        ignore_certificate_errors=ignore_certificate_errors,
        default_access_level=default_access_level,
        request_timeout=_int_from_env("GITLAB_REQUEST_TIMEOUT", REQUEST_TIMEOUT),
        page_size=_int_from_env("GITLAB_PAGE_SIZE", DEFAULT_PAGE_SIZE),
    )
    logger.info(
        f"Settings loaded: host={host_url or '<unset>'}, "
        f"token={'***' if api_token else 'EMPTY'}, access_level={default_access_level}"
    )
    return config
