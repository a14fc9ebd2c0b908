"""GitLab group management operations."""
from __future__ import annotations
import logging
from typing import Any, Dict, Iterator, List

import gitlab

from .client import gitlab_errors
from .members import MembershipMixin

logger = logging.getLogger(__name__)


class GroupService(MembershipMixin):
    """Service for managing GitLab groups and their direct members."""

    kind = "group"

    def __init__(self, gl: gitlab.Gitlab):
        """Initialize group service.

        Args:
            gl: python-gitlab client authenticated with an admin token
        """
        self.gl = gl

    def _lazy(self, owner_id: int) -> Any:
        return self.gl.groups.get(owner_id, lazy=True)

    def get_group(self, group_id: int) -> Dict[str, Any]:
        """Return the group representation.

        Raises:
            UnknownUidError: If the group does not exist
        """
        with gitlab_errors(f"get group {group_id}"):
            return self.gl.groups.get(group_id).attributes

    def list_groups(self, per_page: int) -> Iterator[Dict[str, Any]]:
        with gitlab_errors("list groups"):
            for group in self.gl.groups.list(iterator=True, per_page=per_page, all_available=True):
                yield group.attributes

    def find_by_name(self, name: str) -> List[Dict[str, Any]]:
        """Return the groups whose name matches exactly.

        GitLab's ``search`` is a substring match, so results are filtered here.
        """
        with gitlab_errors(f"find group {name}"):
            groups = self.gl.groups.list(search=name, iterator=True, all_available=True)
            return [g.attributes for g in groups if g.attributes.get("name") == name]

    def create_group(self, payload: Dict[str, Any]) -> int:
        with gitlab_errors(f"create group {payload.get('path')}"):
            group = self.gl.groups.create(payload)
        logger.info(f"Group '{payload.get('path')}' created (id={group.id})")
        return group.id

    def update_group(self, group_id: int, payload: Dict[str, Any]) -> None:
        with gitlab_errors(f"update group {group_id}"):
            self.gl.groups.update(group_id, payload)
        logger.info(f"Group {group_id} updated")

    def delete_group(self, group_id: int) -> None:
        with gitlab_errors(f"delete group {group_id}"):
            self.gl.groups.delete(group_id)
        logger.info(f"Group {group_id} deleted")
