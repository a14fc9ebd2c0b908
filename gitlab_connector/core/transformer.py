"""GitLab ↔ connector object transformations.

This module maps GitLab user, group and project representations onto
connector objects, and connector attribute sets onto GitLab API payloads.

Usage:
    # GitLab → connector
    obj = GitlabTransformer.user_to_object(gl_user)

    # connector → GitLab (update: unspecified fields keep their current value)
    payload = GitlabTransformer.user_payload(attributes, current=gl_user)
"""
from __future__ import annotations
from typing import Any, Dict, Iterable, List, Optional

from .attributes import get_attr, get_password, get_string_attr, require_attr
from .exceptions import InvalidAttributeValueError
from .membership import assemble_member_of_uid
from .objects import Attribute, ConnectorObject, ENABLE, NAME, ObjectClass
from .schema import (
    ATTR_ACCESS_LEVEL,
    ATTR_BIO,
    ATTR_CAN_CREATE_GROUP,
    ATTR_DEFAULT_BRANCH,
    ATTR_DESCRIPTION,
    ATTR_EMAIL,
    ATTR_EXTERN_PROVIDER_NAME,
    ATTR_EXTERN_UID,
    ATTR_FULL_NAME,
    ATTR_GROUP,
    ATTR_HTTP_URL,
    ATTR_IMPORT_URL,
    ATTR_IS_ADMIN,
    ATTR_ISSUES_ENABLED,
    ATTR_LINKED_ID,
    ATTR_MEMBER,
    ATTR_MERGE_REQUESTS_ENABLED,
    ATTR_NAMESPACE,
    ATTR_OWNER,
    ATTR_PATH,
    ATTR_PROJECTS_LIMIT,
    ATTR_PUBLIC,
    ATTR_SKIP_CONFIRMATION,
    ATTR_SKYPE_ID,
    ATTR_SNIPPETS_ENABLED,
    ATTR_SSH_URL,
    ATTR_TWITTER,
    ATTR_USER,
    ATTR_VISIBILITY_LEVEL,
    ATTR_WEB_URL,
    ATTR_WEBSITE_URL,
    ATTR_WIKI_ENABLED,
    VISIBILITY_LEVELS,
)

# connector attribute -> GitLab project field, for plain boolean flags
_PROJECT_FLAGS = {
    ATTR_ISSUES_ENABLED: "issues_enabled",
    ATTR_MERGE_REQUESTS_ENABLED: "merge_requests_enabled",
    ATTR_WIKI_ENABLED: "wiki_enabled",
    ATTR_SNIPPETS_ENABLED: "snippets_enabled",
}


def _without_none(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in payload.items() if value is not None}


def _identity(gl_user: Dict[str, Any]) -> Dict[str, Any]:
    """Return extern_uid/provider, from top level or the first identity."""
    if gl_user.get("extern_uid"):
        return {"extern_uid": gl_user.get("extern_uid"), "provider": gl_user.get("provider")}
    identities = gl_user.get("identities") or []
    if identities:
        return {"extern_uid": identities[0].get("extern_uid"), "provider": identities[0].get("provider")}
    return {"extern_uid": None, "provider": None}


def _visibility(attributes: Iterable[Attribute]) -> Optional[str]:
    """Resolve GitLab visibility from visibilityLevel, falling back to public."""
    level = get_attr(attributes, ATTR_VISIBILITY_LEVEL, int)
    if level is not None:
        if level not in VISIBILITY_LEVELS:
            raise InvalidAttributeValueError(
                f"Invalid {ATTR_VISIBILITY_LEVEL} {level}, expected one of {sorted(VISIBILITY_LEVELS)}"
            )
        return VISIBILITY_LEVELS[level]
    public = get_attr(attributes, ATTR_PUBLIC, bool)
    if public is not None:
        return "public" if public else "private"
    return None


def _visibility_level(visibility: Optional[str]) -> Optional[int]:
    for level, name in VISIBILITY_LEVELS.items():
        if name == visibility:
            return level
    return None


class GitlabTransformer:
    """Bidirectional transformer for GitLab/connector representations."""

    # ── GitLab → connector ──────────────────────────────────────────────────

    @staticmethod
    def user_to_object(gl_user: Dict[str, Any]) -> ConnectorObject:
        """Convert a GitLab user to an account object.

        Example:
            >>> obj = GitlabTransformer.user_to_object(
            ...     {"id": 36, "username": "alice", "email": "alice@example.com", "state": "active"}
            ... )
            >>> obj.uid, obj.name, obj.get_single("__ENABLE__")
            ('36', 'alice', True)
        """
        obj = ConnectorObject(ObjectClass.ACCOUNT, str(gl_user["id"]), gl_user.get("username"))
        identity = _identity(gl_user)
        obj.add(ATTR_EMAIL, gl_user.get("email"))
        obj.add(ATTR_FULL_NAME, gl_user.get("name"))
        obj.add(ATTR_SKYPE_ID, gl_user.get("skype"))
        obj.add(ATTR_LINKED_ID, gl_user.get("linkedin"))
        obj.add(ATTR_TWITTER, gl_user.get("twitter"))
        obj.add(ATTR_WEBSITE_URL, gl_user.get("website_url"))
        obj.add(ATTR_PROJECTS_LIMIT, gl_user.get("projects_limit"))
        obj.add(ATTR_EXTERN_UID, identity["extern_uid"])
        obj.add(ATTR_EXTERN_PROVIDER_NAME, identity["provider"])
        obj.add(ATTR_BIO, gl_user.get("bio"))
        obj.add(ATTR_IS_ADMIN, gl_user.get("is_admin"))
        obj.add(ATTR_CAN_CREATE_GROUP, gl_user.get("can_create_group"))
        if gl_user.get("state") is not None:
            obj.add(ENABLE, gl_user["state"] == "active")
        return obj

    @staticmethod
    def group_to_object(gl_group: Dict[str, Any], member_ids: Optional[List[int]] = None) -> ConnectorObject:
        obj = ConnectorObject(ObjectClass.GROUP, str(gl_group["id"]), gl_group.get("name"))
        obj.add(ATTR_PATH, gl_group.get("path"))
        obj.add(ATTR_DESCRIPTION, gl_group.get("description") or None)
        if member_ids:
            obj.add(ATTR_MEMBER, *member_ids)
        return obj

    @staticmethod
    def project_to_object(gl_project: Dict[str, Any], member_ids: Optional[List[int]] = None) -> ConnectorObject:
        obj = ConnectorObject(ObjectClass.PROJECT, str(gl_project["id"]), gl_project.get("name"))
        namespace = gl_project.get("namespace") or {}
        owner = gl_project.get("owner") or {}
        visibility = gl_project.get("visibility")
        obj.add(ATTR_PATH, gl_project.get("path"))
        obj.add(ATTR_DEFAULT_BRANCH, gl_project.get("default_branch"))
        obj.add(ATTR_DESCRIPTION, gl_project.get("description") or None)
        obj.add(ATTR_HTTP_URL, gl_project.get("http_url_to_repo"))
        obj.add(ATTR_NAMESPACE, namespace.get("id"))
        obj.add(ATTR_OWNER, owner.get("id"))
        obj.add(ATTR_SSH_URL, gl_project.get("ssh_url_to_repo"))
        obj.add(ATTR_VISIBILITY_LEVEL, _visibility_level(visibility))
        obj.add(ATTR_WEB_URL, gl_project.get("web_url"))
        for attr_name, field_name in _PROJECT_FLAGS.items():
            obj.add(attr_name, gl_project.get(field_name))
        if visibility is not None:
            obj.add(ATTR_PUBLIC, visibility == "public")
        if member_ids:
            obj.add(ATTR_MEMBER, *member_ids)
        return obj

    @staticmethod
    def membership_to_object(group_id: int, gl_member: Dict[str, Any]) -> ConnectorObject:
        uid = assemble_member_of_uid(gl_member["id"], group_id)
        obj = ConnectorObject(ObjectClass.GROUP_MEMBERSHIP, uid, uid)
        obj.add(ATTR_USER, gl_member["id"])
        obj.add(ATTR_GROUP, group_id)
        obj.add(ATTR_ACCESS_LEVEL, gl_member.get("access_level"))
        return obj

    # ── connector → GitLab ──────────────────────────────────────────────────

    @staticmethod
    def user_payload(attributes: List[Attribute], current: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Build a create (``current`` is None) or update payload for a user.

        On update every attribute that is not supplied falls back to the
        current GitLab value, except projectsLimit which is left out.
        skipConfirmation defaults to True in both cases and is sent as
        ``skip_confirmation`` on create, ``skip_reconfirmation`` on update.
        """
        current = current or {}
        identity = _identity(current) if current else {"extern_uid": None, "provider": None}

        skip_confirmation = get_attr(attributes, ATTR_SKIP_CONFIRMATION, bool)
        if skip_confirmation is None:
            skip_confirmation = True

        payload = {
            "email": get_string_attr(attributes, ATTR_EMAIL, current.get("email")),
            "password": get_password(attributes),
            "username": get_string_attr(attributes, NAME, current.get("username")),
            "name": get_string_attr(attributes, ATTR_FULL_NAME, current.get("name")),
            "skype": get_string_attr(attributes, ATTR_SKYPE_ID, current.get("skype")),
            "linkedin": get_string_attr(attributes, ATTR_LINKED_ID, current.get("linkedin")),
            "twitter": get_string_attr(attributes, ATTR_TWITTER, current.get("twitter")),
            "website_url": get_string_attr(attributes, ATTR_WEBSITE_URL, current.get("website_url")),
            "projects_limit": get_attr(attributes, ATTR_PROJECTS_LIMIT, int),
            "extern_uid": get_string_attr(attributes, ATTR_EXTERN_UID, identity["extern_uid"]),
            "provider": get_string_attr(attributes, ATTR_EXTERN_PROVIDER_NAME, identity["provider"]),
            "bio": get_string_attr(attributes, ATTR_BIO, current.get("bio")),
            "admin": get_attr(attributes, ATTR_IS_ADMIN, bool, current.get("is_admin")),
            "can_create_group": get_attr(attributes, ATTR_CAN_CREATE_GROUP, bool, current.get("can_create_group")),
        }
        # GitLab names the flag differently on create and on update
        payload["skip_reconfirmation" if current else "skip_confirmation"] = skip_confirmation
        return _without_none(payload)

    @staticmethod
    def group_payload(attributes: List[Attribute]) -> Dict[str, Any]:
        path = require_attr(attributes, ATTR_PATH, str)
        return _without_none({
            "name": get_string_attr(attributes, NAME, path),
            "path": path,
            "description": get_string_attr(attributes, ATTR_DESCRIPTION),
        })

    @staticmethod
    def group_update_payload(attributes: List[Attribute]) -> Dict[str, Any]:
        return _without_none({"description": get_string_attr(attributes, ATTR_DESCRIPTION)})

    @staticmethod
    def project_payload(attributes: List[Attribute]) -> Dict[str, Any]:
        payload = {
            "name": get_string_attr(attributes, NAME),
            "namespace_id": require_attr(attributes, ATTR_NAMESPACE, int),
            "path": get_string_attr(attributes, ATTR_PATH),
            "import_url": get_string_attr(attributes, ATTR_IMPORT_URL),
        }
        payload.update(GitlabTransformer.project_update_payload(attributes))
        if not payload["name"] and not payload["path"]:
            raise InvalidAttributeValueError(f"Missing mandatory attribute {NAME}")
        return _without_none(payload)

    @staticmethod
    def project_update_payload(attributes: List[Attribute]) -> Dict[str, Any]:
        payload = {
            "description": get_string_attr(attributes, ATTR_DESCRIPTION),
            "default_branch": get_string_attr(attributes, ATTR_DEFAULT_BRANCH),
            "visibility": _visibility(attributes),
        }
        for attr_name, field_name in _PROJECT_FLAGS.items():
            payload[field_name] = get_attr(attributes, attr_name, bool)
        return _without_none(payload)
