from unittest.mock import MagicMock

import gitlab
import pytest
import requests
from gitlab.exceptions import GitlabAuthenticationError, GitlabCreateError, GitlabGetError, GitlabListError

from conftest import rest
from gitlab_connector.config.settings import GitlabConfiguration
from gitlab_connector.core.exceptions import ConnectorIOError, UnknownUidError
from gitlab_connector.core.gitlab import (
    GroupService,
    ProjectService,
    UserService,
    create_gitlab_client,
    gitlab_errors,
)


class TestGitlabErrors:
    def test_not_found_becomes_unknown_uid(self):
        with pytest.raises(UnknownUidError, match="get user 42: not found") as excinfo:
            with gitlab_errors("get user 42"):
                raise GitlabGetError("404 User Not Found", response_code=404)
        assert isinstance(excinfo.value.__cause__, GitlabGetError)

    def test_other_gitlab_errors_become_io_errors(self):
        with pytest.raises(ConnectorIOError) as excinfo:
            with gitlab_errors("test connection"):
                raise GitlabAuthenticationError("401 Unauthorized", response_code=401)
        assert excinfo.value.response_code == 401

    def test_validation_errors_from_gitlab_are_io_errors(self):
        with pytest.raises(ConnectorIOError, match="has already been taken"):
            with gitlab_errors("create group dev"):
                raise GitlabCreateError("path has already been taken", response_code=400)

    def test_transport_errors_become_io_errors(self):
        with pytest.raises(ConnectorIOError, match="list users failed"):
            with gitlab_errors("list users"):
                raise requests.ConnectionError("connection refused")

    def test_unrelated_errors_propagate(self):
        with pytest.raises(KeyError):
            with gitlab_errors("anything"):
                raise KeyError("id")


def test_create_gitlab_client_passes_configuration(monkeypatch):
    factory = MagicMock()
    monkeypatch.setattr(gitlab, "Gitlab", factory)
    config = GitlabConfiguration(
        host_url="https://gitlab.example.com/",
        api_token="glpat-test",
        ignore_certificate_errors=True,
        request_timeout=7,
    )

    client = create_gitlab_client(config)

    assert client is factory.return_value
    factory.assert_called_once_with(
        url="https://gitlab.example.com",
        private_token="glpat-test",
        ssl_verify=False,
        timeout=7,
    )


class TestUserService:
    def test_get_user_returns_attributes(self):
        gl = MagicMock()
        gl.users.get.return_value = rest(id=36, username="alice")
        assert UserService(gl).get_user(36) == {"id": 36, "username": "alice"}
        gl.users.get.assert_called_once_with(36)

    def test_get_missing_user(self):
        gl = MagicMock()
        gl.users.get.side_effect = GitlabGetError("404 Not found", response_code=404)
        with pytest.raises(UnknownUidError):
            UserService(gl).get_user(99)

    def test_list_users_is_lazy_and_paged(self):
        gl = MagicMock()
        gl.users.list.return_value = iter([rest(id=1), rest(id=2)])
        users = UserService(gl).list_users(per_page=25)
        gl.users.list.assert_not_called()
        assert [u["id"] for u in users] == [1, 2]
        gl.users.list.assert_called_once_with(iterator=True, per_page=25)

    def test_list_users_failure_while_iterating(self):
        gl = MagicMock()
        gl.users.list.side_effect = GitlabListError("500 Internal Server Error", response_code=500)
        with pytest.raises(ConnectorIOError):
            list(UserService(gl).list_users(per_page=10))

    def test_find_by_username_exact_match(self):
        gl = MagicMock()
        gl.users.list.return_value = [rest(id=1, username="alice2"), rest(id=2, username="alice")]
        assert UserService(gl).find_by_username("alice")["id"] == 2
        gl.users.list.return_value = []
        assert UserService(gl).find_by_username("nobody") is None

    def test_create_update_delete(self):
        gl = MagicMock()
        gl.users.create.return_value = rest(id=40)
        service = UserService(gl)

        assert service.create_user({"username": "bob"}) == 40
        service.update_user(40, {"bio": "x"})
        service.delete_user(40)

        gl.users.create.assert_called_once_with({"username": "bob"})
        gl.users.update.assert_called_once_with(40, {"bio": "x"})
        gl.users.delete.assert_called_once_with(40)

    def test_block_and_unblock_use_lazy_objects(self):
        gl = MagicMock()
        service = UserService(gl)
        service.block_user(5)
        service.unblock_user(5)
        gl.users.get.assert_called_with(5, lazy=True)
        gl.users.get.return_value.block.assert_called_once_with()
        gl.users.get.return_value.unblock.assert_called_once_with()


class TestMembership:
    @pytest.mark.parametrize("service_cls, manager", [(GroupService, "groups"), (ProjectService, "projects")])
    def test_member_ids(self, service_cls, manager):
        gl = MagicMock()
        lazy = getattr(gl, manager).get.return_value
        lazy.members.list.return_value = iter([rest(id=36, access_level=30), rest(id=37, access_level=40)])

        assert service_cls(gl).member_ids(61) == [36, 37]
        getattr(gl, manager).get.assert_called_once_with(61, lazy=True)

    @pytest.mark.parametrize("service_cls, manager", [(GroupService, "groups"), (ProjectService, "projects")])
    def test_add_and_remove_member(self, service_cls, manager):
        gl = MagicMock()
        members = getattr(gl, manager).get.return_value.members
        service = service_cls(gl)

        service.add_member(61, 36, 30)
        service.remove_member(61, 37)

        members.create.assert_called_once_with({"user_id": 36, "access_level": 30})
        members.delete.assert_called_once_with(37)

    def test_member_listing_of_missing_group(self):
        gl = MagicMock()
        gl.groups.get.return_value.members.list.side_effect = GitlabListError("404 Group Not Found", response_code=404)
        with pytest.raises(UnknownUidError, match="list members of group 61"):
            GroupService(gl).member_ids(61)


def test_group_find_by_name_filters_substring_matches():
    gl = MagicMock()
    gl.groups.list.return_value = iter([rest(id=1, name="dev"), rest(id=2, name="devops")])
    assert [g["id"] for g in GroupService(gl).find_by_name("dev")] == [1]


def test_project_create_returns_id():
    gl = MagicMock()
    gl.projects.create.return_value = rest(id=7)
    assert ProjectService(gl).create_project({"name": "api", "namespace_id": 61}) == 7
