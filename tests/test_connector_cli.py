import json
from unittest.mock import MagicMock

import pytest
from gitlab.exceptions import GitlabAuthenticationError

import scripts.connector_cli as cli
from conftest import rest
from gitlab_connector.core.objects import GuardedString, ObjectClass, PASSWORD
from gitlab_connector.core.schema import build_schema


@pytest.fixture
def gl(monkeypatch, config):
    """Route the CLI's connector to a mocked GitLab client."""
    client = MagicMock(name="gitlab")
    monkeypatch.setattr(cli, "load_settings", lambda: config)
    monkeypatch.setattr("gitlab_connector.core.connector.create_gitlab_client", lambda cfg: client)
    return client


def test_parse_attributes_uses_schema_types():
    info = build_schema().find(ObjectClass.GROUP)
    attrs = cli.parse_attributes(["path=dev", "member=36", "member=37"], info)
    assert [(a.name, a.values) for a in attrs] == [("path", ["dev"]), ("member", [36, 37])]


def test_parse_attributes_booleans_and_password():
    info = build_schema().find(ObjectClass.ACCOUNT)
    attrs = cli.parse_attributes(["isAdmin=TRUE", f"{PASSWORD}=s3cret"], info)
    assert attrs[0].values == [True]
    assert attrs[1].values == [GuardedString("s3cret")]


@pytest.mark.parametrize("pair", ["path", "isAdmin=maybe", "projectsLimit=ten"])
def test_parse_attributes_rejects_bad_input(pair):
    info = build_schema().find(ObjectClass.ACCOUNT)
    with pytest.raises(ValueError):
        cli.parse_attributes([pair], info)


def test_schema_does_not_need_gitlab(capsys):
    assert cli.main(["schema"]) == 0
    printed = json.loads(capsys.readouterr().out)
    assert [oc["type"] for oc in printed] == ["__ACCOUNT__", "__GROUP__", "Project", "GroupMembership"]


def test_test_command(gl, capsys):
    assert cli.main(["test"]) == 0
    gl.auth.assert_called_once_with()
    gl.session.close.assert_called_once_with()
    assert capsys.readouterr().out.strip() == "OK"


def test_test_command_reports_failure(gl, capsys):
    gl.auth.side_effect = GitlabAuthenticationError("401 Unauthorized", response_code=401)
    assert cli.main(["test"]) == 1
    assert "401 Unauthorized" in capsys.readouterr().err


def test_list_prints_objects(gl, capsys):
    gl.users.list.return_value = iter([rest(id=36, username="alice", email="alice@example.com", state="active")])

    assert cli.main(["list", "__ACCOUNT__", "--page-size", "5"]) == 0

    gl.users.list.assert_called_once_with(iterator=True, per_page=5)
    printed = json.loads(capsys.readouterr().out)
    assert printed[0]["uid"] == "36"
    assert printed[0]["attributes"]["email"] == ["alice@example.com"]


def test_list_without_members(gl, capsys):
    gl.groups.list.return_value = iter([rest(id=61, name="dev", path="dev")])
    assert cli.main(["list", "__GROUP__", "--no-members"]) == 0
    gl.groups.get.assert_not_called()


def test_get_missing_object(gl, capsys):
    assert cli.main(["get", "__ACCOUNT__", "abc"]) == 1
    assert "not found" in capsys.readouterr().err


def test_update_group_members(gl, capsys):
    handle = MagicMock()
    handle.members.list.return_value = [rest(id=99, access_level=30)]
    gl.groups.get.side_effect = lambda group_id, lazy=False: handle if lazy else rest(id=61, name="dev", path="dev")

    assert cli.main(["update", "__GROUP__", "61", "--attr", "member=36"]) == 0

    handle.members.create.assert_called_once_with({"user_id": 36, "access_level": 30})
    handle.members.delete.assert_called_once_with(99)
    assert capsys.readouterr().out.strip() == "61"


def test_malformed_attribute_exits(gl):
    with pytest.raises(SystemExit):
        cli.main(["create", "__GROUP__", "--attr", "path"])
