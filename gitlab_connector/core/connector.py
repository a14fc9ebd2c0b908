"""GitLab connector: CRUD, search and membership reconciliation.

Entry point called by the identity-governance host. Each public operation
fetches fresh remote state and issues its remote calls one at a time; the
first failure aborts the operation and is raised to the caller.

Usage:
    connector = GitlabConnector()
    connector.init(GitlabConfiguration(host_url="https://gitlab.example.com", api_token="..."))
    connector.update(ObjectClass.GROUP, Uid("61"), [Attribute.of("member", 36, 37)])
"""
from __future__ import annotations
import logging
from typing import Any, Dict, Iterator, List, Optional

import gitlab

from gitlab_connector.config.settings import GitlabConfiguration

from .attributes import find_attr, get_attr, get_member_ids, require_attr
from .exceptions import (
    ConfigurationError,
    InvalidAttributeValueError,
    UnknownUidError,
    UnsupportedObjectClassError,
)
from .gitlab import (
    GroupService,
    ProjectService,
    UserService,
    create_gitlab_client,
    gitlab_errors,
)
from .gitlab.members import MembershipMixin
from .membership import (
    assemble_member_of_uid,
    group_id_from_member_of_uid,
    reconcile,
    user_id_from_member_of_uid,
)
from .objects import (
    Attribute,
    ConnectorObject,
    ENABLE,
    EqualsFilter,
    NAME,
    ObjectClass,
    OperationOptions,
    ResultsHandler,
    Schema,
    UID,
    Uid,
)
from .schema import (
    ATTR_ACCESS_LEVEL,
    ATTR_GROUP,
    ATTR_MEMBER,
    ATTR_NAMESPACE,
    ATTR_PATH,
    ATTR_USER,
    build_schema,
)
from .transformer import GitlabTransformer

logger = logging.getLogger(__name__)


def _to_id(uid: Uid) -> int:
    try:
        return int(uid.value)
    except (TypeError, ValueError):
        raise InvalidAttributeValueError(f"Invalid UID '{uid.value}': expected a numeric GitLab ID") from None


def _parse_member_of_uid(uid: Uid) -> tuple[int, int]:
    try:
        return user_id_from_member_of_uid(uid.value), group_id_from_member_of_uid(uid.value)
    except ValueError as e:
        raise InvalidAttributeValueError(str(e)) from None


def _check_immutable(kind: str, attributes: List[Attribute], name: str, expected: type, current: Any) -> None:
    """Reject a value for ``name`` that differs from the current one."""
    value = get_attr(attributes, name, expected)
    if value is not None and value != current:
        raise InvalidAttributeValueError(f"{kind} {name} cannot be changed")


def _desired_member_ids(attributes: List[Attribute]) -> Optional[List[int]]:
    """Parse the ``member`` attribute; None when it was not supplied."""
    member_attr = find_attr(attributes, ATTR_MEMBER)
    if member_attr is None:
        return None
    return get_member_ids(member_attr)


class GitlabConnector:
    """Connector mapping accounts, groups and projects onto GitLab."""

    def __init__(self):
        self._configuration: Optional[GitlabConfiguration] = None
        self._gl: Optional[gitlab.Gitlab] = None
        self._users: Optional[UserService] = None
        self._groups: Optional[GroupService] = None
        self._projects: Optional[ProjectService] = None

    # ── lifecycle ───────────────────────────────────────────────────────────

    @property
    def configuration(self) -> Optional[GitlabConfiguration]:
        return self._configuration

    def init(self, configuration: GitlabConfiguration) -> None:
        """Validate the configuration and build the GitLab client.

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        configuration.validate()
        self._configuration = configuration
        self._gl = create_gitlab_client(configuration)
        self._users = UserService(self._gl)
        self._groups = GroupService(self._gl)
        self._projects = ProjectService(self._gl)
        logger.info(f"Connector initialized for {configuration.host_url}")

    def dispose(self) -> None:
        # python-gitlab keeps a requests session open
        if self._gl is not None:
            self._gl.session.close()
        self._configuration = None
        self._gl = None
        self._users = self._groups = self._projects = None

    def _ensure_initialized(self) -> None:
        if self._gl is None:
            raise ConfigurationError("connector.not_initialized")

    # ── schema & test ───────────────────────────────────────────────────────

    def schema(self) -> Schema:
        return build_schema()

    def test(self) -> None:
        """Check connectivity and credentials.

        Raises:
            ConnectorIOError: If GitLab is unreachable or rejects the token
        """
        self._ensure_initialized()
        with gitlab_errors("test connection"):
            self._gl.auth()
        logger.info(f"Connection to {self._configuration.host_url} OK")

    # ── create ──────────────────────────────────────────────────────────────

    def create(
        self,
        object_class: ObjectClass,
        attributes: List[Attribute],
        options: Optional[OperationOptions] = None,
    ) -> Uid:
        self._ensure_initialized()
        if object_class.is_(ObjectClass.ACCOUNT.name):
            return self._create_user(attributes)
        elif object_class.is_(ObjectClass.GROUP.name):
            return self._create_group(attributes)
        elif object_class.is_(ObjectClass.PROJECT.name):
            return self._create_project(attributes)
        elif object_class.is_(ObjectClass.GROUP_MEMBERSHIP.name):
            return self._create_group_membership(attributes)
        raise UnsupportedObjectClassError(f"Unsupported object class {object_class}")

    def _create_user(self, attributes: List[Attribute]) -> Uid:
        payload = GitlabTransformer.user_payload(attributes)
        if not payload.get("email"):
            raise InvalidAttributeValueError("Missing mandatory attribute email")
        if not payload.get("username"):
            raise InvalidAttributeValueError(f"Missing mandatory attribute {NAME}")
        payload.setdefault("name", payload["username"])
        if "password" not in payload:
            payload["reset_password"] = True

        enable = get_attr(attributes, ENABLE, bool)

        user_id = self._users.create_user(payload)
        if enable is False:
            self._users.block_user(user_id)
        return Uid(str(user_id))

    def _create_group(self, attributes: List[Attribute]) -> Uid:
        payload = GitlabTransformer.group_payload(attributes)
        member_ids = _desired_member_ids(attributes)
        group_id = self._groups.create_group(payload)
        self._add_initial_members(self._groups, group_id, member_ids)
        return Uid(str(group_id))

    def _create_project(self, attributes: List[Attribute]) -> Uid:
        payload = GitlabTransformer.project_payload(attributes)
        member_ids = _desired_member_ids(attributes)
        project_id = self._projects.create_project(payload)
        self._add_initial_members(self._projects, project_id, member_ids)
        return Uid(str(project_id))

    def _create_group_membership(self, attributes: List[Attribute]) -> Uid:
        user_id = require_attr(attributes, ATTR_USER, int)
        group_id = require_attr(attributes, ATTR_GROUP, int)
        access_level = get_attr(attributes, ATTR_ACCESS_LEVEL, int, self._configuration.default_access_level)
        self._groups.add_member(group_id, user_id, access_level)
        return Uid(assemble_member_of_uid(user_id, group_id))

    def _add_initial_members(self, service: MembershipMixin, owner_id: int, member_ids: Optional[List[int]]) -> None:
        if member_ids is None:
            return
        delta = reconcile(member_ids, [])
        for user_id in sorted(delta.to_add):
            service.add_member(owner_id, user_id, self._configuration.default_access_level)

    # ── update ──────────────────────────────────────────────────────────────

    def update(
        self,
        object_class: ObjectClass,
        uid: Uid,
        attributes: List[Attribute],
        options: Optional[OperationOptions] = None,
    ) -> Uid:
        self._ensure_initialized()
        if object_class.is_(ObjectClass.ACCOUNT.name):
            return self._update_user(uid, attributes)
        elif object_class.is_(ObjectClass.GROUP.name):
            return self._update_group(uid, attributes)
        elif object_class.is_(ObjectClass.PROJECT.name):
            return self._update_project(uid, attributes)
        elif object_class.is_(ObjectClass.GROUP_MEMBERSHIP.name):
            raise InvalidAttributeValueError("Group membership cannot be updated, delete and re-create it")
        raise UnsupportedObjectClassError(f"Unsupported object class {object_class}")

    def _update_user(self, uid: Uid, attributes: List[Attribute]) -> Uid:
        user_id = _to_id(uid)
        enable = get_attr(attributes, ENABLE, bool)
        current = self._users.get_user(user_id)

        self._users.update_user(user_id, GitlabTransformer.user_payload(attributes, current))

        active = current.get("state") == "active"
        if enable is True and not active:
            self._users.unblock_user(user_id)
        elif enable is False and active:
            self._users.block_user(user_id)
        return uid

    def _update_group(self, uid: Uid, attributes: List[Attribute]) -> Uid:
        group_id = _to_id(uid)
        current = self._groups.get_group(group_id)

        _check_immutable("Group", attributes, ATTR_PATH, str, current.get("path"))
        _check_immutable("Group", attributes, NAME, str, current.get("name"))
        member_ids = _desired_member_ids(attributes)

        payload = GitlabTransformer.group_update_payload(attributes)
        if payload:
            self._groups.update_group(group_id, payload)
        self._sync_members(self._groups, group_id, member_ids)
        return uid

    def _update_project(self, uid: Uid, attributes: List[Attribute]) -> Uid:
        project_id = _to_id(uid)
        current = self._projects.get_project(project_id)

        _check_immutable("Project", attributes, ATTR_PATH, str, current.get("path"))
        _check_immutable("Project", attributes, NAME, str, current.get("name"))
        _check_immutable("Project", attributes, ATTR_NAMESPACE, int, (current.get("namespace") or {}).get("id"))
        member_ids = _desired_member_ids(attributes)

        payload = GitlabTransformer.project_update_payload(attributes)
        if payload:
            self._projects.update_project(project_id, payload)
        self._sync_members(self._projects, project_id, member_ids)
        return uid

    def _sync_members(self, service: MembershipMixin, owner_id: int, desired: Optional[List[int]]) -> None:
        """Converge direct members to ``desired``; None leaves them untouched."""
        if desired is None:
            return
        current = service.member_ids(owner_id)
        delta = reconcile(desired, current)
        logger.debug(
            f"Members of {service.kind} {owner_id}: desired={sorted(set(desired))} "
            f"current={sorted(set(current))} add={sorted(delta.to_add)} remove={sorted(delta.to_remove)}"
        )
        for user_id in sorted(delta.to_add):
            service.add_member(owner_id, user_id, self._configuration.default_access_level)
        for user_id in sorted(delta.to_remove):
            service.remove_member(owner_id, user_id)

    # ── delete ──────────────────────────────────────────────────────────────

    def delete(self, object_class: ObjectClass, uid: Uid, options: Optional[OperationOptions] = None) -> None:
        self._ensure_initialized()
        if object_class.is_(ObjectClass.ACCOUNT.name):
            self._users.delete_user(_to_id(uid))
        elif object_class.is_(ObjectClass.GROUP.name):
            self._groups.delete_group(_to_id(uid))
        elif object_class.is_(ObjectClass.PROJECT.name):
            self._projects.delete_project(_to_id(uid))
        elif object_class.is_(ObjectClass.GROUP_MEMBERSHIP.name):
            user_id, group_id = _parse_member_of_uid(uid)
            self._groups.remove_member(group_id, user_id)
        else:
            raise UnsupportedObjectClassError(f"Unsupported object class {object_class}")

    # ── search ──────────────────────────────────────────────────────────────

    def execute_query(
        self,
        object_class: ObjectClass,
        query: Optional[EqualsFilter],
        handler: ResultsHandler,
        options: Optional[OperationOptions] = None,
    ) -> None:
        """Pass every matching object to ``handler`` until it returns False.

        Args:
            object_class: Object class to search
            query: None for all objects, or an EqualsFilter on __UID__/__NAME__
            handler: Callback receiving each ConnectorObject
            options: Paging and attributes-to-get
        """
        self._ensure_initialized()
        options = options or OperationOptions()
        if query is not None and query.name not in (UID, NAME):
            raise InvalidAttributeValueError(f"Unsupported filter attribute {query.name}")

        if object_class.is_(ObjectClass.ACCOUNT.name):
            results = self._query_users(query, options)
        elif object_class.is_(ObjectClass.GROUP.name):
            results = self._query_groups(query, options)
        elif object_class.is_(ObjectClass.PROJECT.name):
            results = self._query_projects(query, options)
        elif object_class.is_(ObjectClass.GROUP_MEMBERSHIP.name):
            results = self._query_group_memberships(query, options)
        else:
            raise UnsupportedObjectClassError(f"Unsupported object class {object_class}")

        for obj in results:
            if handler(obj) is False:
                break

    def search(
        self,
        object_class: ObjectClass,
        query: Optional[EqualsFilter] = None,
        options: Optional[OperationOptions] = None,
    ) -> List[ConnectorObject]:
        """Collect execute_query results into a list."""
        found: List[ConnectorObject] = []
        self.execute_query(object_class, query, found.append, options)
        return found

    def _per_page(self, options: OperationOptions) -> int:
        return options.page_size or self._configuration.page_size

    def _fetch_by_uid(self, fetch, value: Any) -> Optional[Dict[str, Any]]:
        """Fetch by numeric UID; an unknown or non-numeric UID yields None."""
        try:
            object_id = int(str(value).strip())
        except ValueError:
            return None
        if object_id < 0:
            return None
        try:
            return fetch(object_id)
        except UnknownUidError:
            return None

    def _query_users(self, query: Optional[EqualsFilter], options: OperationOptions) -> Iterator[ConnectorObject]:
        if query is None:
            gl_users = self._users.list_users(self._per_page(options))
        elif query.name == UID:
            gl_user = self._fetch_by_uid(self._users.get_user, query.value)
            gl_users = [gl_user] if gl_user else []
        else:
            gl_user = self._users.find_by_username(query.value)
            gl_users = [gl_user] if gl_user else []
        for gl_user in gl_users:
            yield GitlabTransformer.user_to_object(gl_user)

    def _query_groups(self, query: Optional[EqualsFilter], options: OperationOptions) -> Iterator[ConnectorObject]:
        if query is None:
            gl_groups = self._groups.list_groups(self._per_page(options))
        elif query.name == UID:
            gl_group = self._fetch_by_uid(self._groups.get_group, query.value)
            gl_groups = [gl_group] if gl_group else []
        else:
            gl_groups = self._groups.find_by_name(query.value)
        for gl_group in gl_groups:
            member_ids = self._groups.member_ids(gl_group["id"]) if options.wants(ATTR_MEMBER) else None
            yield GitlabTransformer.group_to_object(gl_group, member_ids)

    def _query_projects(self, query: Optional[EqualsFilter], options: OperationOptions) -> Iterator[ConnectorObject]:
        if query is None:
            gl_projects = self._projects.list_projects(self._per_page(options))
        elif query.name == UID:
            gl_project = self._fetch_by_uid(self._projects.get_project, query.value)
            gl_projects = [gl_project] if gl_project else []
        else:
            gl_projects = self._projects.find_by_name(query.value)
        for gl_project in gl_projects:
            member_ids = self._projects.member_ids(gl_project["id"]) if options.wants(ATTR_MEMBER) else None
            yield GitlabTransformer.project_to_object(gl_project, member_ids)

    def _query_group_memberships(
        self, query: Optional[EqualsFilter], options: OperationOptions
    ) -> Iterator[ConnectorObject]:
        if query is None:
            for gl_group in self._groups.list_groups(self._per_page(options)):
                for gl_member in self._groups.list_members(gl_group["id"]):
                    yield GitlabTransformer.membership_to_object(gl_group["id"], gl_member)
            return

        # membership name and UID are the same composite value
        try:
            user_id, group_id = _parse_member_of_uid(Uid(str(query.value)))
        except InvalidAttributeValueError:
            return
        try:
            members = self._groups.list_members(group_id)
        except UnknownUidError:
            return
        for gl_member in members:
            if gl_member["id"] == user_id:
                yield GitlabTransformer.membership_to_object(group_id, gl_member)
