"""GitLab identity connector.

Maps an identity-governance host's account/group/project model onto the
GitLab REST API through python-gitlab.
"""
from .config import GitlabConfiguration, load_settings
from .core.connector import GitlabConnector
from .core.exceptions import (
    ConfigurationError,
    ConnectorError,
    ConnectorIOError,
    InvalidAttributeValueError,
    UnknownUidError,
    UnsupportedObjectClassError,
)
from .core.objects import (
    Attribute,
    ConnectorObject,
    EqualsFilter,
    GuardedString,
    ObjectClass,
    OperationOptions,
    Uid,
)

__version__ = "0.1.0"

__all__ = [
    "GitlabConfiguration",
    "load_settings",
    "GitlabConnector",
    "ConfigurationError",
    "ConnectorError",
    "ConnectorIOError",
    "InvalidAttributeValueError",
    "UnknownUidError",
    "UnsupportedObjectClassError",
    "Attribute",
    "ConnectorObject",
    "EqualsFilter",
    "GuardedString",
    "ObjectClass",
    "OperationOptions",
    "Uid",
]
