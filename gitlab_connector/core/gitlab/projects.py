"""GitLab project management operations."""
from __future__ import annotations
import logging
from typing import Any, Dict, Iterator, List

import gitlab

from .client import gitlab_errors
from .members import MembershipMixin

logger = logging.getLogger(__name__)


class ProjectService(MembershipMixin):
    """Service for managing GitLab projects and their direct members."""

    kind = "project"

    def __init__(self, gl: gitlab.Gitlab):
        self.gl = gl

    def _lazy(self, owner_id: int) -> Any:
        return self.gl.projects.get(owner_id, lazy=True)

    def get_project(self, project_id: int) -> Dict[str, Any]:
        """Return the project representation.

        Raises:
            UnknownUidError: If the project does not exist
        """
        with gitlab_errors(f"get project {project_id}"):
            return self.gl.projects.get(project_id).attributes

    def list_projects(self, per_page: int) -> Iterator[Dict[str, Any]]:
        with gitlab_errors("list projects"):
            for project in self.gl.projects.list(iterator=True, per_page=per_page):
                yield project.attributes

    def find_by_name(self, name: str) -> List[Dict[str, Any]]:
        with gitlab_errors(f"find project {name}"):
            projects = self.gl.projects.list(search=name, iterator=True)
            return [p.attributes for p in projects if p.attributes.get("name") == name]

    def create_project(self, payload: Dict[str, Any]) -> int:
        with gitlab_errors(f"create project {payload.get('name')}"):
            project = self.gl.projects.create(payload)
        logger.info(f"Project '{payload.get('name')}' created (id={project.id})")
        return project.id

    def update_project(self, project_id: int, payload: Dict[str, Any]) -> None:
        with gitlab_errors(f"update project {project_id}"):
            self.gl.projects.update(project_id, payload)
        logger.info(f"Project {project_id} updated")

    def delete_project(self, project_id: int) -> None:
        with gitlab_errors(f"delete project {project_id}"):
            self.gl.projects.delete(project_id)
        logger.info(f"Project {project_id} deleted")
