"""Connector schema: attribute names and object class descriptors."""
from __future__ import annotations

from .objects import (
    AttributeInfo,
    ENABLE,
    NAME,
    ObjectClass,
    ObjectClassInfo,
    PASSWORD,
    Schema,
)

# Account
ATTR_EMAIL = "email"
ATTR_FULL_NAME = "fullName"
ATTR_SKYPE_ID = "skypeId"
ATTR_LINKED_ID = "linkedId"
ATTR_TWITTER = "twitter"
ATTR_WEBSITE_URL = "websiteUrl"
ATTR_PROJECTS_LIMIT = "projectsLimit"
ATTR_EXTERN_UID = "externUid"
ATTR_EXTERN_PROVIDER_NAME = "externProviderName"
ATTR_BIO = "bio"
ATTR_IS_ADMIN = "isAdmin"
ATTR_CAN_CREATE_GROUP = "canCreateGroup"
ATTR_SKIP_CONFIRMATION = "skipConfirmation"

# Group / project
ATTR_PATH = "path"
ATTR_MEMBER = "member"
ATTR_DESCRIPTION = "description"
ATTR_DEFAULT_BRANCH = "defaultBranch"
ATTR_HTTP_URL = "httpUrl"
ATTR_NAMESPACE = "namespace"
ATTR_OWNER = "owner"
ATTR_SSH_URL = "sshUrl"
ATTR_VISIBILITY_LEVEL = "visibilityLevel"
ATTR_WEB_URL = "webUrl"
ATTR_ISSUES_ENABLED = "issuesEnabled"
ATTR_MERGE_REQUESTS_ENABLED = "requestsEnabled"
ATTR_WIKI_ENABLED = "wikiEnabled"
ATTR_SNIPPETS_ENABLED = "snippetsEnabled"
ATTR_PUBLIC = "public"
ATTR_IMPORT_URL = "importUrl"

# Group membership
ATTR_USER = "user"
ATTR_GROUP = "group"
ATTR_ACCESS_LEVEL = "accessLevel"

# GitLab visibility levels as exposed by the legacy API
VISIBILITY_LEVELS = {0: "private", 10: "internal", 20: "public"}


def _account_info() -> ObjectClassInfo:
    return ObjectClassInfo(
        type=ObjectClass.ACCOUNT.name,
        attributes=[
            AttributeInfo(NAME, required=True),
            AttributeInfo(ATTR_EMAIL, required=True),
            AttributeInfo(ATTR_FULL_NAME),
            AttributeInfo(ATTR_SKYPE_ID),
            AttributeInfo(ATTR_LINKED_ID),
            AttributeInfo(ATTR_TWITTER),
            AttributeInfo(ATTR_WEBSITE_URL),
            AttributeInfo(ATTR_PROJECTS_LIMIT, int),
            AttributeInfo(ATTR_EXTERN_UID),
            AttributeInfo(ATTR_EXTERN_PROVIDER_NAME),
            AttributeInfo(ATTR_BIO),
            AttributeInfo(ATTR_IS_ADMIN, bool),
            AttributeInfo(ATTR_CAN_CREATE_GROUP, bool),
            AttributeInfo(ATTR_SKIP_CONFIRMATION, bool, readable=False, returned_by_default=False),
            AttributeInfo(PASSWORD, readable=False, returned_by_default=False),
            AttributeInfo(ENABLE, bool),
        ],
    )


def _group_info() -> ObjectClassInfo:
    return ObjectClassInfo(
        type=ObjectClass.GROUP.name,
        attributes=[
            AttributeInfo(NAME, required=True, updateable=False),
            AttributeInfo(ATTR_PATH, required=True, updateable=False),
            AttributeInfo(ATTR_DESCRIPTION),
            AttributeInfo(ATTR_MEMBER, int, multi_valued=True),
        ],
    )


def _project_info() -> ObjectClassInfo:
    return ObjectClassInfo(
        type=ObjectClass.PROJECT.name,
        attributes=[
            AttributeInfo(NAME, required=True, updateable=False),
            AttributeInfo(ATTR_NAMESPACE, int, required=True, updateable=False),
            AttributeInfo(ATTR_PATH, updateable=False),
            AttributeInfo(ATTR_DEFAULT_BRANCH),
            AttributeInfo(ATTR_DESCRIPTION),
            AttributeInfo(ATTR_HTTP_URL, creatable=False, updateable=False),
            AttributeInfo(ATTR_OWNER, int, creatable=False, updateable=False),
            AttributeInfo(ATTR_SSH_URL, creatable=False, updateable=False),
            AttributeInfo(ATTR_VISIBILITY_LEVEL, int),
            AttributeInfo(ATTR_WEB_URL, creatable=False, updateable=False),
            AttributeInfo(ATTR_ISSUES_ENABLED, bool),
            AttributeInfo(ATTR_MERGE_REQUESTS_ENABLED, bool),
            AttributeInfo(ATTR_WIKI_ENABLED, bool),
            AttributeInfo(ATTR_SNIPPETS_ENABLED, bool),
            AttributeInfo(ATTR_PUBLIC, bool),
            AttributeInfo(ATTR_IMPORT_URL, updateable=False, readable=False, returned_by_default=False),
            AttributeInfo(ATTR_MEMBER, int, multi_valued=True),
        ],
    )


def _group_membership_info() -> ObjectClassInfo:
    return ObjectClassInfo(
        type=ObjectClass.GROUP_MEMBERSHIP.name,
        attributes=[
            AttributeInfo(ATTR_USER, int, required=True, updateable=False),
            AttributeInfo(ATTR_GROUP, int, required=True, updateable=False),
            AttributeInfo(ATTR_ACCESS_LEVEL, int, updateable=False),
        ],
    )


def build_schema() -> Schema:
    """Describe every object class the connector supports."""
    return Schema(
        object_classes=[
            _account_info(),
            _group_info(),
            _project_info(),
            _group_membership_info(),
        ]
    )
