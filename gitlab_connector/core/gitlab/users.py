"""GitLab user management operations."""
from __future__ import annotations
import logging
from typing import Any, Dict, Iterator, Optional

import gitlab

from .client import gitlab_errors

logger = logging.getLogger(__name__)


class UserService:
    """Service for managing GitLab users."""

    def __init__(self, gl: gitlab.Gitlab):
        """Initialize user service.

        Args:
            gl: python-gitlab client authenticated with an admin token
        """
        self.gl = gl

    def get_user(self, user_id: int) -> Dict[str, Any]:
        """Return the user representation.

        Raises:
            UnknownUidError: If the user does not exist
        """
        with gitlab_errors(f"get user {user_id}"):
            return self.gl.users.get(user_id).attributes

    def list_users(self, per_page: int) -> Iterator[Dict[str, Any]]:
        """Lazily iterate over all users, one page at a time."""
        with gitlab_errors("list users"):
            for user in self.gl.users.list(iterator=True, per_page=per_page):
                yield user.attributes

    def find_by_username(self, username: str) -> Optional[Dict[str, Any]]:
        """Return the user whose username matches exactly, or None."""
        with gitlab_errors(f"find user {username}"):
            for user in self.gl.users.list(username=username, get_all=False):
                if user.attributes.get("username") == username:
                    return user.attributes
        return None

    def create_user(self, payload: Dict[str, Any]) -> int:
        """Create a user and return its ID."""
        with gitlab_errors(f"create user {payload.get('username')}"):
            user = self.gl.users.create(payload)
        logger.info(f"User '{payload.get('username')}' created (id={user.id})")
        return user.id

    def update_user(self, user_id: int, payload: Dict[str, Any]) -> None:
        with gitlab_errors(f"update user {user_id}"):
            self.gl.users.update(user_id, payload)
        logger.info(f"User {user_id} updated")

    def delete_user(self, user_id: int) -> None:
        with gitlab_errors(f"delete user {user_id}"):
            self.gl.users.delete(user_id)
        logger.info(f"User {user_id} deleted")

    def block_user(self, user_id: int) -> None:
        with gitlab_errors(f"block user {user_id}"):
            self.gl.users.get(user_id, lazy=True).block()
        logger.info(f"User {user_id} blocked")

    def unblock_user(self, user_id: int) -> None:
        with gitlab_errors(f"unblock user {user_id}"):
            self.gl.users.get(user_id, lazy=True).unblock()
        logger.info(f"User {user_id} unblocked")
