"""Tests for configuration loading and validation."""

from pathlib import Path

import yaml
import pytest

from samsung_tv.config import loader
from samsung_tv.config import (
    DEFAULT_CONFIG,
    add_tv,
    find_tv,
    get_credential_store,
    get_options,
    get_tv_config,
    list_tvs,
    load_config,
    select_tv,
    set_default_tv,
    validate_config,
)
from samsung_tv.config.schema import deep_merge
from samsung_tv.models import DeviceDescriptor
from samsung_tv.power import PowerTiming

from .conftest import MOCK_DEVICE_ID, MOCK_HOST, MOCK_MAC


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Keep config loading away from real files and environment."""
    monkeypatch.setattr(loader, "CONFIG_SEARCH_PATHS", [])
    monkeypatch.setattr(loader, "_cached_config", None)
    for env_var in loader.ENV_MAPPINGS:
        monkeypatch.delenv(env_var, raising=False)


@pytest.fixture
def config_file(tmp_path):
    """Write a config file with one TV."""
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({
        "mqtt": {"host": "broker.local"},
        "tvs": {MOCK_DEVICE_ID: {"host": MOCK_HOST, "mac": MOCK_MAC, "alias": "living_room"}},
        "default_tv": "living_room",
        "options": {"power_timeout": 30, "storage_dir": str(tmp_path / "tokens")},
    }))
    return path


def test_defaults_without_file() -> None:
    """Test defaults are used when no file exists."""
    config = load_config()

    assert config["mqtt"]["port"] == 1883
    assert config["options"]["poll_interval"] == 0.4
    assert config["options"]["power_timeout"] == 20.0
    assert config["_loaded_from"] is None


def test_load_is_cached(config_file) -> None:
    """Test the first load is reused until use_cache=False."""
    config = load_config(str(config_file))

    assert load_config() is config
    assert load_config(use_cache=False) is not config


def test_load_merges_file(config_file) -> None:
    """Test file values override defaults and keep the rest."""
    config = load_config(str(config_file))

    assert config["_loaded_from"] == str(config_file)
    assert config["mqtt"]["host"] == "broker.local"
    assert config["mqtt"]["port"] == 1883
    assert config["options"]["power_timeout"] == 30
    assert config["options"]["cooldown"] == 1.0


def test_env_overrides(config_file, monkeypatch) -> None:
    """Test environment variables override the file."""
    monkeypatch.setenv("MQTT_PORT", "8883")
    monkeypatch.setenv("TV_MAC", "11:22:33:44:55:66")
    monkeypatch.setenv("STATUS_INTERVAL", "2.5")
    monkeypatch.setenv("COOLDOWN", "0")
    monkeypatch.setenv("POLL_INTERVAL", "0.25")

    config = load_config(str(config_file))

    assert config["mqtt"]["port"] == 8883
    assert config["tvs"][MOCK_DEVICE_ID]["mac"] == "11:22:33:44:55:66"
    assert config["options"]["status_interval"] == 2.5
    assert config["options"]["cooldown"] == 0.0
    assert config["options"]["poll_interval"] == 0.25


def test_env_tv_host_without_file(monkeypatch) -> None:
    """Test TV_HOST alone creates a default TV."""
    monkeypatch.setenv("TV_HOST", "10.0.0.5")

    config = load_config()

    assert config["default_tv"] == "10.0.0.5"
    assert config["tvs"]["10.0.0.5"]["host"] == "10.0.0.5"


def test_invalid_env_value_is_ignored(monkeypatch) -> None:
    """Test an unconvertible value keeps the default."""
    monkeypatch.setenv("MQTT_PORT", "not-a-port")
    monkeypatch.setenv("POWER_TIMEOUT", "soon")

    config = load_config()

    assert config["mqtt"]["port"] == 1883
    assert config["options"]["power_timeout"] == 20.0


def test_options_flow_into_timing_and_storage(config_file, tmp_path) -> None:
    """Test options fill unset timing keys and locate the credential store."""
    config = load_config(str(config_file))
    config["options"]["wake_interval"] = None

    options = get_options()
    timing = PowerTiming.from_options(options)

    assert options["wake_interval"] == 1.0
    assert timing.change_timeout == 30.0
    assert timing.poll_interval == 0.4
    assert get_credential_store().storage_dir == tmp_path / "tokens"
    assert get_credential_store({"options": {}}).storage_dir == get_credential_store().DEFAULT_STORAGE_DIR


def test_storage_dir_expands_home() -> None:
    """Test ~ in storage_dir is expanded."""
    store = get_credential_store({"options": {"storage_dir": "~/tokens"}})

    assert store.storage_dir == Path.home() / "tokens"


def test_tv_selection(config_file) -> None:
    """Test TVs are selected by alias, id, host and default."""
    load_config(str(config_file))

    assert select_tv() == (MOCK_DEVICE_ID, get_tv_config())
    assert select_tv("living_room")[0] == MOCK_DEVICE_ID
    assert select_tv(MOCK_HOST)[0] == MOCK_DEVICE_ID
    assert select_tv("missing") is None
    assert get_tv_config("living_room")["host"] == MOCK_HOST
    assert get_tv_config("missing") is None
    assert list_tvs()[0]["device_id"] == MOCK_DEVICE_ID
    assert list_tvs()[0]["is_default"] is True


def test_select_first_tv_without_default() -> None:
    """Test the first TV is used when no default is set."""
    config = deep_merge(DEFAULT_CONFIG, {"tvs": {"uuid:a": {"host": "h1"}, "uuid:b": {"host": "h2"}}})

    assert select_tv(config=config)[0] == "uuid:a"
    assert select_tv(config=deep_merge(DEFAULT_CONFIG, {})) is None


def test_descriptor_from_config(config_file) -> None:
    """Test a config entry becomes a device descriptor."""
    load_config(str(config_file))
    device_id, tv_config = select_tv()

    device = DeviceDescriptor.from_config(device_id, tv_config)

    assert device.device_id == MOCK_DEVICE_ID
    assert device.host == MOCK_HOST
    assert device.mac == MOCK_MAC
    assert device.name == "living_room"
    assert DeviceDescriptor.from_config(device_id, tv_config, mac="aa:aa:aa:aa:aa:aa").mac == "aa:aa:aa:aa:aa:aa"


def test_add_tv_and_set_default(config_file) -> None:
    """Test adding a TV persists it to the loaded file."""
    load_config(str(config_file))

    assert add_tv("uuid:bedroom", "192.168.1.61", alias="bedroom", mac=None, model="UE43") is True
    assert set_default_tv("bedroom") is True
    assert set_default_tv("nowhere") is False

    saved = yaml.safe_load(config_file.read_text())
    assert saved["tvs"]["uuid:bedroom"]["host"] == "192.168.1.61"
    assert saved["tvs"]["uuid:bedroom"]["model"] == "UE43"
    assert saved["default_tv"] == "bedroom"
    assert "_loaded_from" not in saved
    assert select_tv()[0] == "uuid:bedroom"


def test_first_added_tv_becomes_default(tmp_path, monkeypatch) -> None:
    """Test add_tv on an empty config makes the TV the default."""
    monkeypatch.chdir(tmp_path)
    load_config()

    assert add_tv("uuid:den", "192.168.1.62") is True

    saved = yaml.safe_load((tmp_path / "config.yaml").read_text())
    assert saved["default_tv"] == "uuid:den"


def test_validate_ok(config_file) -> None:
    """Test a complete config has no errors."""
    config = load_config(str(config_file))

    assert validate_config(config) == []
    assert validate_config(config, for_bridge=True) == []


def test_validate_errors() -> None:
    """Test missing TVs, hosts, broker and bad timings are reported."""
    config = deep_merge(DEFAULT_CONFIG, {
        "tvs": {"tv": {"host": None, "mac": "not-a-mac"}},
        "options": {"poll_interval": 0, "power_timeout": "soon", "cooldown": -1},
        "mqtt": {"port": "1883"},
    })

    errors = validate_config(config, for_bridge=True)

    assert "tvs.tv.host is required" in errors
    assert "tvs.tv.mac is not a valid MAC address: not-a-mac" in errors
    assert "mqtt.host is required for bridge mode" in errors
    assert "mqtt.port must be a port number: 1883" in errors
    assert "options.poll_interval must be a positive number" in errors
    assert "options.power_timeout must be a positive number" in errors
    assert "options.cooldown must be a positive number" in errors
    assert validate_config(DEFAULT_CONFIG) == ["No TVs configured in 'tvs' section"]


def test_validate_cross_checks() -> None:
    """Test alias clashes, a dangling default and a poll slower than the ceiling."""
    config = deep_merge(DEFAULT_CONFIG, {
        "tvs": {
            "uuid:a": {"host": "h1", "alias": "tv", "mac": "AA-BB-CC-DD-EE-FF"},
            "uuid:b": {"host": "h2", "alias": "tv"},
        },
        "default_tv": "attic",
        "options": {"poll_interval": 30, "cooldown": 0},
    })

    errors = validate_config(config)

    assert "Alias 'tv' is used by both uuid:a and uuid:b" in errors
    assert "default_tv 'attic' does not match any configured TV" in errors
    assert "options.poll_interval must be shorter than options.power_timeout" in errors
    assert len(errors) == 3


def test_deep_merge_ignores_none() -> None:
    """Test None values do not override."""
    merged = deep_merge({"a": {"b": 1, "c": 2}}, {"a": {"b": None, "c": 3}})

    assert merged == {"a": {"b": 1, "c": 3}}


def test_find_tv() -> None:
    """Test lookup by id, alias and host on a config dict."""
    config = {"tvs": {"id-1": {"host": "h", "alias": "den"}}}

    assert find_tv(config, "den") == ("id-1", {"host": "h", "alias": "den"})
    assert find_tv(config, "id-1")[1]["host"] == "h"
    assert find_tv(config, "h")[0] == "id-1"
    assert find_tv(config, "attic") is None
