"""Tests for credential storage."""

import json

from samsung_tv.config.storage import CredentialStore
from samsung_tv.models import Credential

from .conftest import MOCK_DEVICE_ID


def test_save_and_load_round_trip(store: CredentialStore) -> None:
    """Test a saved token is loaded back for the same device."""
    assert store.save(MOCK_DEVICE_ID, Credential(token="12345678")) is True

    credential = store.load(MOCK_DEVICE_ID)

    assert credential == Credential(token="12345678", version=1)


def test_load_unknown_device(store: CredentialStore) -> None:
    """Test loading a device that was never paired."""
    assert store.load("uuid:never-seen") is None


def test_credential_file_format(store: CredentialStore) -> None:
    """Test the file holds a version and the token."""
    store.save(MOCK_DEVICE_ID, Credential(token="abc"))

    data = json.loads(store.path_for(MOCK_DEVICE_ID).read_text())

    assert data == {"version": 1, "token": "abc"}


def test_path_sanitizes_device_id(store: CredentialStore) -> None:
    """Test characters outside [A-Za-z0-9._-] are replaced in the filename."""
    path = store.path_for("uuid:ab/cd ef")

    assert path.name == "samsung-tv-uuid_ab_cd_ef.json"
    assert path.parent == store.storage_dir


def test_other_version_is_ignored(store: CredentialStore) -> None:
    """Test a record with an unknown version yields no credential."""
    path = store.path_for(MOCK_DEVICE_ID)
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps({"version": 2, "token": "abc"}))

    assert store.load(MOCK_DEVICE_ID) is None
    assert path.exists()


def test_malformed_file_is_discarded(store: CredentialStore) -> None:
    """Test an unreadable record is treated as absent and removed."""
    path = store.path_for(MOCK_DEVICE_ID)
    path.parent.mkdir(parents=True)
    path.write_text("{not json")

    assert store.load(MOCK_DEVICE_ID) is None
    assert not path.exists()


def test_record_without_token_is_discarded(store: CredentialStore) -> None:
    """Test a JSON record missing the token is removed."""
    path = store.path_for(MOCK_DEVICE_ID)
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps({"version": 1}))

    assert store.load(MOCK_DEVICE_ID) is None
    assert not path.exists()


def test_last_write_wins(store: CredentialStore) -> None:
    """Test saving again replaces the stored token."""
    store.save(MOCK_DEVICE_ID, Credential(token="old"))
    store.save(MOCK_DEVICE_ID, Credential(token="new"))

    assert store.load(MOCK_DEVICE_ID).token == "new"
    assert not list(store.storage_dir.glob("*.tmp"))


def test_save_failure_returns_false(tmp_path) -> None:
    """Test an I/O failure is reported, not raised."""
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("")
    store = CredentialStore(blocker)

    assert store.save(MOCK_DEVICE_ID, Credential(token="abc")) is False


def test_delete_and_list(store: CredentialStore) -> None:
    """Test listing and deleting stored credentials."""
    assert store.list_devices() == []

    store.save("tv-one", Credential(token="a"))
    store.save("tv-two", Credential(token="b"))

    assert store.list_devices() == ["tv-one", "tv-two"]
    assert store.delete("tv-one") is True
    assert store.delete("tv-one") is False
    assert store.list_devices() == ["tv-two"]
