"""Tests for the Key handler."""

from __future__ import annotations

from unittest.mock import patch

import kopf
import pytest

from radosgw_operator.handlers.key import KeyHandler, credentials_secret_name
from radosgw_operator.services.rgw.models import Key, KeySpec, User

META = {"name": "alice-key", "namespace": "default", "uid": "uid-3", "generation": 1}
SPEC = {"providerRef": {"name": "rgw"}, "user": "alice", "subuser": "backup"}
CREATED = {
    "created": True,
    "user": "alice",
    "subuser": "backup",
    "accessKey": "AK1",
    "secretName": "alice-key-credentials",
}


def reasons(mock_event) -> list[str]:
    return [c[1]["reason"] for c in mock_event.call_args_list]


@pytest.fixture
def secrets():
    """Patch the secret helpers used by the key handler."""
    with patch("radosgw_operator.handlers.key.get_core_client") as core, \
            patch("radosgw_operator.handlers.key.read_secret_data") as read, \
            patch("radosgw_operator.handlers.key.write_credentials_secret") as write, \
            patch("radosgw_operator.handlers.key.delete_secret") as delete:
        yield {"core": core, "read": read, "write": write, "delete": delete}


@pytest.fixture
def handler(admin_api):
    handler = KeyHandler()
    with patch.object(handler, "resolve_admin_client", return_value=admin_api):
        yield handler


def test_credentials_secret_name():
    assert credentials_secret_name("alice-key") == "alice-key-credentials"


class TestKeyReconcile:
    """Test cases for KeyHandler.reconcile."""

    def test_generates_key_and_writes_secret(self, handler, admin_api, secrets, kopf_event):
        admin_api.get_user.return_value = User("alice", "Alice", keys=[Key("alice", "AK0", "SK0")])
        admin_api.create_key.return_value = [Key("alice", "AK0", "SK0"), Key("alice:backup", "AK1", "SK1")]
        patch_obj = kopf.Patch()

        handler.reconcile(SPEC, META, {}, patch_obj)

        assert admin_api.create_key.call_args[0][0].generate_key is True
        args, kwargs = secrets["write"].call_args
        assert args[1:] == ("default", "alice-key-credentials", "AK1", "SK1")
        assert kwargs["owner_references"][0]["kind"] == "Key"
        assert patch_obj.status["accessKey"] == "AK1"
        assert patch_obj.status["subuser"] == "backup"
        assert "SK1" not in str(dict(patch_obj.status))
        assert "KeyCreated" in reasons(kopf_event)

    def test_supplied_credentials(self, handler, admin_api, secrets, kopf_event):
        """Test that credentials from a referenced secret are sent as-is."""
        secrets["read"].return_value = {"access-key-id": "MYAK", "secret-access-key": "MYSK"}
        admin_api.get_user.return_value = User("alice", "Alice")
        admin_api.create_key.return_value = [Key("alice:backup", "MYAK", "MYSK")]
        spec = {**SPEC, "credentialsSecretRef": {"name": "byo-key"}}

        handler.reconcile(spec, META, {}, kopf.Patch())

        assert secrets["read"].call_args[0][1:] == ("default", "byo-key")
        assert admin_api.create_key.call_args[0][0] == KeySpec(
            uid="alice", subuser="backup", access_key="MYAK", secret_key="MYSK"
        )

    def test_missing_credentials_secret(self, handler, admin_api, secrets, kopf_event):
        secrets["read"].side_effect = ValueError("Secret 'byo-key' not found in namespace 'default'")

        with pytest.raises(kopf.TemporaryError):
            handler.reconcile({**SPEC, "credentialsSecretRef": {"name": "byo-key"}}, META, {}, kopf.Patch())

        admin_api.create_key.assert_not_called()

    def test_adopt_existing_key(self, handler, admin_api, secrets, kopf_event):
        admin_api.list_users.return_value = ["alice"]
        admin_api.get_user.return_value = User("alice", "Alice", keys=[Key("alice:backup", "AK7", "SK7")])

        handler.reconcile({**SPEC, "adoptAccessKey": "AK7"}, META, {}, kopf.Patch())

        admin_api.create_key.assert_not_called()
        assert secrets["write"].call_args[0][3:5] == ("AK7", "SK7")

    def test_adopt_key_of_other_owner(self, handler, admin_api, secrets, kopf_event):
        """Test that adopting a key held by a different owner is permanent."""
        admin_api.list_users.return_value = ["bob"]
        admin_api.get_user.return_value = User("bob", "Bob", keys=[Key("bob", "AK7", "SK7")])

        with pytest.raises(kopf.PermanentError, match="cannot be updated in place"):
            handler.reconcile({**SPEC, "adoptAccessKey": "AK7"}, META, {}, kopf.Patch())

        secrets["write"].assert_not_called()

    def test_owner_change_is_permanent(self, handler, admin_api, secrets, kopf_event):
        with pytest.raises(kopf.PermanentError):
            handler.reconcile({**SPEC, "subuser": "other"}, META, CREATED, kopf.Patch())

        admin_api.remove_key.assert_not_called()

    def test_existing_key_in_sync(self, handler, admin_api, secrets, kopf_event):
        secrets["read"].return_value = {"access-key-id": "AK1", "secret-access-key": "SK1"}
        admin_api.get_user.return_value = User("alice", "Alice", keys=[Key("alice:backup", "AK1", "SK1")])

        handler.reconcile(SPEC, META, CREATED, kopf.Patch())

        admin_api.create_key.assert_not_called()
        assert secrets["read"].call_args[0][1:] == ("default", "alice-key-credentials")

    def test_missing_key_recreated(self, handler, admin_api, secrets, kopf_event):
        secrets["read"].return_value = {"access-key-id": "AK1", "secret-access-key": "SK1"}
        admin_api.get_user.return_value = User("alice", "Alice")
        admin_api.create_key.return_value = [Key("alice:backup", "AK2", "SK2")]
        patch_obj = kopf.Patch()

        handler.reconcile(SPEC, META, CREATED, patch_obj)

        assert patch_obj.status["accessKey"] == "AK2"
        assert "DriftDetected" in reasons(kopf_event)

    def test_supplied_credentials_changed_rotates_key(self, handler, admin_api, secrets, kopf_event):
        """Test that new credentials in the referenced secret replace the old key."""
        secrets["read"].return_value = {"access-key-id": "AK2", "secret-access-key": "SK2"}
        admin_api.get_user.return_value = User("alice", "Alice", keys=[Key("alice:backup", "AK1", "SK1")])
        admin_api.create_key.return_value = [Key("alice:backup", "AK2", "SK2")]
        spec = {**SPEC, "credentialsSecretRef": {"name": "byo-key"}}
        patch_obj = kopf.Patch()

        handler.reconcile(spec, META, CREATED, patch_obj)

        admin_api.remove_key.assert_called_once_with(
            KeySpec(uid="alice", subuser="backup", access_key="AK1")
        )
        assert admin_api.create_key.call_args[0][0] == KeySpec(
            uid="alice", subuser="backup", access_key="AK2", secret_key="SK2"
        )
        assert secrets["write"].call_args[0][3:5] == ("AK2", "SK2")
        assert patch_obj.status["accessKey"] == "AK2"
        assert "DriftDetected" in reasons(kopf_event)
        assert "KeyDeleted" in reasons(kopf_event)

    def test_supplied_credentials_unchanged(self, handler, admin_api, secrets, kopf_event):
        secrets["read"].return_value = {"access-key-id": "AK1", "secret-access-key": "SK1"}
        admin_api.get_user.return_value = User("alice", "Alice", keys=[Key("alice:backup", "AK1", "SK1")])

        handler.reconcile({**SPEC, "credentialsSecretRef": {"name": "byo-key"}}, META, CREATED, kopf.Patch())

        admin_api.remove_key.assert_not_called()
        admin_api.create_key.assert_not_called()
        assert "DriftDetected" not in reasons(kopf_event)

    def test_missing_credentials_secret_recaptured(self, handler, admin_api, secrets, kopf_event):
        """Test that a deleted credentials secret is rewritten from the gateway."""
        secrets["read"].side_effect = ValueError(
            "Secret 'alice-key-credentials' not found in namespace 'default'"
        )
        admin_api.list_users.return_value = ["alice"]
        admin_api.get_user.return_value = User("alice", "Alice", keys=[Key("alice:backup", "AK1", "SK1")])
        patch_obj = kopf.Patch()

        handler.reconcile(SPEC, META, CREATED, patch_obj)

        admin_api.create_key.assert_not_called()
        assert secrets["write"].call_args[0][2:5] == ("alice-key-credentials", "AK1", "SK1")
        assert patch_obj.status["accessKey"] == "AK1"
        assert patch_obj.status["conditions"][0]["status"] == "True"
        assert "DriftDetected" in reasons(kopf_event)

    def test_missing_credentials_secret_and_key(self, handler, admin_api, secrets, kopf_event):
        secrets["read"].side_effect = ValueError(
            "Secret 'alice-key-credentials' not found in namespace 'default'"
        )
        admin_api.list_users.return_value = ["alice"]
        admin_api.get_user.return_value = User("alice", "Alice")
        admin_api.create_key.return_value = [Key("alice:backup", "AK2", "SK2")]
        patch_obj = kopf.Patch()

        handler.reconcile(SPEC, META, CREATED, patch_obj)

        assert secrets["write"].call_args[0][3:5] == ("AK2", "SK2")
        assert patch_obj.status["accessKey"] == "AK2"


class TestKeyDelete:
    """Test cases for KeyHandler.delete."""

    def test_deletes_key_and_secret(self, handler, admin_api, secrets, kopf_event):
        handler.delete(SPEC, META, CREATED, kopf.Patch())

        admin_api.remove_key.assert_called_once_with(
            KeySpec(uid="alice", subuser="backup", access_key="AK1")
        )
        assert secrets["delete"].call_args[0][1:] == ("default", "alice-key-credentials")
        assert "KeyDeleted" in reasons(kopf_event)

    def test_never_created(self, handler, admin_api, secrets, kopf_event):
        handler.delete(SPEC, META, {}, kopf.Patch())

        admin_api.remove_key.assert_not_called()
        secrets["delete"].assert_not_called()
