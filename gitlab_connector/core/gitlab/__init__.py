"""GitLab API access layer.

Thin services over python-gitlab that return plain attribute dicts and
raise connector exceptions.

Architecture:
- client.py: client construction and error translation
- users.py: user lifecycle (create, update, block, delete)
- groups.py: groups and direct group membership
- projects.py: projects and direct project membership
- members.py: membership operations shared by groups and projects

Usage:
    from gitlab_connector.core.gitlab import create_gitlab_client, GroupService

    gl = create_gitlab_client(config)
    groups = GroupService(gl)
    groups.add_member(61, 36, access_level=30)
"""
from .client import create_gitlab_client, gitlab_errors
from .users import UserService
from .groups import GroupService
from .projects import ProjectService

__all__ = [
    "create_gitlab_client",
    "gitlab_errors",
    "UserService",
    "GroupService",
    "ProjectService",
]
