import pytest

from gitlab_connector.core.exceptions import InvalidAttributeValueError
from gitlab_connector.core.objects import Attribute, ENABLE, GuardedString, NAME, PASSWORD
from gitlab_connector.core.transformer import GitlabTransformer


GL_USER = {
    "id": 36,
    "username": "alice",
    "name": "Alice Smith",
    "email": "alice@example.com",
    "skype": "",
    "linkedin": "alice-in",
    "twitter": None,
    "website_url": "https://alice.example.com",
    "projects_limit": 100000,
    "bio": "Engineer",
    "is_admin": False,
    "can_create_group": True,
    "state": "active",
    "identities": [{"provider": "ldapmain", "extern_uid": "uid=alice,ou=people"}],
}


class TestUserToObject:
    def test_maps_fields(self):
        obj = GitlabTransformer.user_to_object(GL_USER)
        assert obj.uid == "36"
        assert obj.name == "alice"
        assert obj.get_single("email") == "alice@example.com"
        assert obj.get_single("fullName") == "Alice Smith"
        assert obj.get_single("linkedId") == "alice-in"
        assert obj.get_single("websiteUrl") == "https://alice.example.com"
        assert obj.get_single("projectsLimit") == 100000
        assert obj.get_single("isAdmin") is False
        assert obj.get_single("canCreateGroup") is True
        assert obj.get_single(ENABLE) is True

    def test_none_values_are_not_emitted(self):
        obj = GitlabTransformer.user_to_object(GL_USER)
        assert obj.get("twitter") is None

    def test_identity_from_identities_list(self):
        obj = GitlabTransformer.user_to_object(GL_USER)
        assert obj.get_single("externUid") == "uid=alice,ou=people"
        assert obj.get_single("externProviderName") == "ldapmain"

    def test_blocked_user_is_disabled(self):
        obj = GitlabTransformer.user_to_object({**GL_USER, "state": "blocked"})
        assert obj.get_single(ENABLE) is False


class TestUserPayload:
    def test_create_payload_defaults_skip_confirmation(self):
        attrs = [
            Attribute.of(NAME, "bob"),
            Attribute.of("email", "bob@example.com"),
            Attribute.of(PASSWORD, GuardedString("Passw0rd!")),
            Attribute.of("projectsLimit", 10),
        ]
        payload = GitlabTransformer.user_payload(attrs)
        assert payload == {
            "email": "bob@example.com",
            "password": "Passw0rd!",
            "username": "bob",
            "projects_limit": 10,
            "skip_confirmation": True,
        }

    def test_update_payload_falls_back_to_current_values(self):
        payload = GitlabTransformer.user_payload([Attribute.of("bio", "Manager")], current=GL_USER)
        assert payload["bio"] == "Manager"
        assert payload["email"] == "alice@example.com"
        assert payload["username"] == "alice"
        assert payload["name"] == "Alice Smith"
        assert payload["admin"] is False
        assert payload["extern_uid"] == "uid=alice,ou=people"
        assert payload["provider"] == "ldapmain"
        assert payload["skip_reconfirmation"] is True
        assert "skip_confirmation" not in payload
        assert "projects_limit" not in payload
        assert "password" not in payload

    def test_update_payload_honours_explicit_skip_confirmation(self):
        attrs = [Attribute.of("skipConfirmation", False)]
        payload = GitlabTransformer.user_payload(attrs, current=GL_USER)
        assert payload["skip_reconfirmation"] is False


class TestGroupPayloads:
    def test_path_is_mandatory(self):
        with pytest.raises(InvalidAttributeValueError, match="Missing mandatory attribute path"):
            GitlabTransformer.group_payload([Attribute.of(NAME, "Dev")])

    def test_name_defaults_to_path(self):
        payload = GitlabTransformer.group_payload([Attribute.of("path", "dev-team")])
        assert payload == {"name": "dev-team", "path": "dev-team"}

    def test_group_to_object_with_members(self):
        obj = GitlabTransformer.group_to_object({"id": 61, "name": "Dev", "path": "dev", "description": ""}, [36, 37])
        assert obj.uid == "61"
        assert obj.get("member") == [36, 37]
        assert obj.get("description") is None

    def test_group_without_members_has_no_member_attribute(self):
        obj = GitlabTransformer.group_to_object({"id": 61, "name": "Dev", "path": "dev"}, [])
        assert obj.get("member") is None


class TestProjects:
    GL_PROJECT = {
        "id": 7,
        "name": "api",
        "path": "api",
        "default_branch": "main",
        "description": "Backend",
        "http_url_to_repo": "https://gitlab.example.com/dev/api.git",
        "ssh_url_to_repo": "git@gitlab.example.com:dev/api.git",
        "web_url": "https://gitlab.example.com/dev/api",
        "namespace": {"id": 61, "path": "dev"},
        "visibility": "internal",
        "issues_enabled": True,
        "merge_requests_enabled": True,
        "wiki_enabled": False,
        "snippets_enabled": True,
    }

    def test_project_to_object(self):
        obj = GitlabTransformer.project_to_object(self.GL_PROJECT, [36])
        assert obj.name == "api"
        assert obj.get_single("namespace") == 61
        assert obj.get_single("owner") is None
        assert obj.get_single("visibilityLevel") == 10
        assert obj.get_single("public") is False
        assert obj.get_single("wikiEnabled") is False
        assert obj.get_single("requestsEnabled") is True
        assert obj.get_single("sshUrl") == "git@gitlab.example.com:dev/api.git"
        assert obj.get("member") == [36]

    def test_project_payload_requires_namespace(self):
        with pytest.raises(InvalidAttributeValueError, match="namespace"):
            GitlabTransformer.project_payload([Attribute.of(NAME, "api")])

    def test_project_payload_maps_visibility_and_flags(self):
        attrs = [
            Attribute.of(NAME, "api"),
            Attribute.of("namespace", 61),
            Attribute.of("visibilityLevel", 20),
            Attribute.of("issuesEnabled", False),
            Attribute.of("importUrl", "https://github.com/org/api.git"),
        ]
        payload = GitlabTransformer.project_payload(attrs)
        assert payload == {
            "name": "api",
            "namespace_id": 61,
            "import_url": "https://github.com/org/api.git",
            "visibility": "public",
            "issues_enabled": False,
        }

    def test_public_flag_used_when_no_visibility_level(self):
        payload = GitlabTransformer.project_update_payload([Attribute.of("public", True)])
        assert payload == {"visibility": "public"}

    def test_visibility_level_wins_over_public(self):
        attrs = [Attribute.of("public", True), Attribute.of("visibilityLevel", 0)]
        assert GitlabTransformer.project_update_payload(attrs)["visibility"] == "private"

    def test_unknown_visibility_level_rejected(self):
        with pytest.raises(InvalidAttributeValueError, match="visibilityLevel"):
            GitlabTransformer.project_update_payload([Attribute.of("visibilityLevel", 5)])


def test_membership_to_object():
    obj = GitlabTransformer.membership_to_object(61, {"id": 36, "username": "alice", "access_level": 30})
    assert obj.uid == "36|61"
    assert obj.get_single("user") == 36
    assert obj.get_single("group") == 61
    assert obj.get_single("accessLevel") == 30
