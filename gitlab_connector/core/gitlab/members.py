"""Direct membership operations shared by groups and projects."""
from __future__ import annotations
import logging
from typing import Any, Dict, List

from .client import gitlab_errors

logger = logging.getLogger(__name__)


class MembershipMixin:
    """Member listing and add/remove for a GitLab manager with ``members``.

    Subclasses set ``kind`` (used in messages) and implement ``_lazy``.
    """

    kind = "object"

    def _lazy(self, owner_id: int) -> Any:
        """Return a lazy GitLab object (no request) exposing ``members``."""
        raise NotImplementedError

    def list_members(self, owner_id: int) -> List[Dict[str, Any]]:
        """Return the direct members (inherited members excluded)."""
        with gitlab_errors(f"list members of {self.kind} {owner_id}"):
            return [m.attributes for m in self._lazy(owner_id).members.list(iterator=True)]

    def member_ids(self, owner_id: int) -> List[int]:
        return [member["id"] for member in self.list_members(owner_id)]

    def add_member(self, owner_id: int, user_id: int, access_level: int) -> None:
        with gitlab_errors(f"add user {user_id} to {self.kind} {owner_id}"):
            self._lazy(owner_id).members.create({"user_id": user_id, "access_level": access_level})
        logger.info(f"Added user {user_id} to {self.kind} {owner_id} (access_level={access_level})")

    def remove_member(self, owner_id: int, user_id: int) -> None:
        with gitlab_errors(f"remove user {user_id} from {self.kind} {owner_id}"):
            self._lazy(owner_id).members.delete(user_id)
        logger.info(f"Removed user {user_id} from {self.kind} {owner_id}")
