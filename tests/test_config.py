from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from core.config import BridgeConfig, build_config, load_config
from core.errors import ConfigError, TemplateError
from core.naming import format_username
from core.templates import DEFAULT_USERNAME_TEMPLATE

EXAMPLE_CONFIG = Path(__file__).resolve().parent.parent / "example-config.yaml"


def _raw(**bridge) -> dict:
    bridge.setdefault("permissions", {"*": "relay", "@real:user.com": "admin"})
    return {"discord": {"token": "abc"}, "bridge": bridge}


def _write(tmp_path: Path, raw: dict) -> str:
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(raw), encoding="utf-8")
    return str(path)


def test_load_config_compiles_templates(tmp_path: Path) -> None:
    path = _write(tmp_path, _raw(username_template="dc_{{ userid }}", command_prefix="!dc"))
    config = load_config(path)
    assert config.discord.token == "abc"
    assert config.bridge.command_prefix == "!dc"
    assert config.templates.username_source == "dc_{{ userid }}"
    assert format_username(config.templates, "42") == "dc_42"


def test_defaults_are_applied() -> None:
    config = build_config(_raw())
    bridge = config.bridge
    assert bridge.username_template == DEFAULT_USERNAME_TEMPLATE
    assert bridge.message_error_notices is True
    assert bridge.restricted_rooms is True
    assert bridge.federate_rooms is True
    assert bridge.delivery_receipts is False
    assert bridge.portal_message_buffer == 128
    assert bridge.provisioning.prefix == "/_matrix/provision"


def test_passthrough_sections_are_kept() -> None:
    config = build_config(
        _raw(
            encryption={"allow": True, "rotation": {"messages": 100}},
            management_room_text={"welcome": "hi"},
            provisioning={"prefix": "/prov", "shared_secret": "s3cret"},
            double_puppet_server_map={"example.org": "https://example.org"},
        )
    )
    assert config.bridge.encryption == {"allow": True, "rotation": {"messages": 100}}
    assert config.bridge.management_room_text == {"welcome": "hi"}
    assert config.bridge.provisioning.shared_secret == "s3cret"
    assert config.bridge.double_puppet_server_map == {"example.org": "https://example.org"}


def test_config_is_immutable() -> None:
    config = build_config(_raw())
    with pytest.raises(AttributeError):
        config.bridge.command_prefix = "!other"  # type: ignore[misc]
    assert isinstance(config.bridge, BridgeConfig)


def test_bad_username_template_fails_load(tmp_path: Path) -> None:
    path = _write(tmp_path, _raw(username_template="discord_user"))
    with pytest.raises(TemplateError, match="missing user ID placeholder"):
        load_config(path)


def test_example_permissions_fail_load() -> None:
    with pytest.raises(ConfigError, match="permissions not configured"):
        build_config(_raw(permissions={"*": "relay", "example.com": "user"}))


def test_missing_permissions_fail_load() -> None:
    with pytest.raises(ConfigError):
        build_config({"bridge": {}})


def test_shipped_example_config_is_rejected() -> None:
    with pytest.raises(ConfigError, match="permissions not configured"):
        load_config(str(EXAMPLE_CONFIG))


def test_missing_file_is_config_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="failed to read config"):
        load_config(str(tmp_path / "nope.yaml"))


def test_invalid_yaml_is_config_error(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("bridge: [unterminated", encoding="utf-8")
    with pytest.raises(ConfigError, match="failed to parse config"):
        load_config(str(path))


def test_non_mapping_document_is_config_error(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="must contain a mapping"):
        load_config(str(path))


def test_json_config_is_accepted(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text('{"bridge": {"permissions": {"@me:matrix.org": "admin"}}}', encoding="utf-8")
    config = load_config(str(path))
    assert config.bridge.permissions == {"@me:matrix.org": "admin"}


@pytest.mark.parametrize(
    "raw",
    [
        {"discord": "tok", "bridge": {"permissions": {"@me:matrix.org": "admin"}}},
        {"bridge": "oops"},
        {"bridge": {"permissions": ["@a:b.c"]}},
        {"bridge": {"permissions": {"@me:matrix.org": "admin"}, "provisioning": "x"}},
        {"bridge": {"permissions": {"@me:matrix.org": "admin"}, "encryption": ["allow"]}},
        {"bridge": {"permissions": {"@me:matrix.org": "admin"}, "double_puppet_server_map": "example.com"}},
    ],
)
def test_non_mapping_sections_are_config_errors(raw: dict) -> None:
    with pytest.raises(ConfigError, match="must be a mapping"):
        build_config(raw)


@pytest.mark.parametrize("value", ["abc", [1], None])
def test_bad_portal_message_buffer_is_config_error(value) -> None:
    with pytest.raises(ConfigError, match="portal_message_buffer must be an integer"):
        build_config(_raw(portal_message_buffer=value))


def test_bad_values_in_yaml_fail_load_with_config_error(tmp_path: Path) -> None:
    path = _write(tmp_path, _raw(portal_message_buffer="many"))
    with pytest.raises(ConfigError):
        load_config(path)


def test_loaded_mappings_are_read_only() -> None:
    config = build_config(_raw(encryption={"allow": True}, management_room_text={"welcome": "hi"}))
    bridge = config.bridge
    with pytest.raises(TypeError):
        bridge.permissions["@evil:example.org"] = "admin"  # type: ignore[index]
    with pytest.raises(TypeError):
        bridge.encryption["allow"] = False  # type: ignore[index]
    with pytest.raises(TypeError):
        bridge.management_room_text["welcome"] = "bye"  # type: ignore[index]
    assert dict(bridge.permissions) == {"*": "relay", "@real:user.com": "admin"}
