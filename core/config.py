from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping

import yaml

from core.errors import ConfigError
from core.permissions import validate_permissions
from core.templates import (
    DEFAULT_CHANNELNAME_TEMPLATE,
    DEFAULT_DISPLAYNAME_TEMPLATE,
    DEFAULT_USERNAME_TEMPLATE,
    CompiledTemplates,
    compile_templates,
)

logger = logging.getLogger("DiscordBridge.Config")


@dataclass(frozen=True)
class DiscordConfig:
    token: str


@dataclass(frozen=True)
class ProvisioningConfig:
    prefix: str
    shared_secret: str


@dataclass(frozen=True)
class BridgeConfig:
    username_template: str
    displayname_template: str
    channelname_template: str
    permissions: Mapping[str, str]
    delivery_receipts: bool = False
    message_status_events: bool = False
    message_error_notices: bool = True
    restricted_rooms: bool = True
    command_prefix: str = "!discord"
    # Passed through untouched
    management_room_text: Mapping[str, Any] = field(default_factory=dict)
    portal_message_buffer: int = 128
    sync_direct_chat_list: bool = False
    resend_bridge_info: bool = False
    federate_rooms: bool = True
    double_puppet_server_map: Mapping[str, str] = field(default_factory=dict)
    double_puppet_allow_discovery: bool = False
    login_shared_secret_map: Mapping[str, str] = field(default_factory=dict)
    encryption: Mapping[str, Any] = field(default_factory=dict)
    provisioning: ProvisioningConfig = ProvisioningConfig(prefix="/_matrix/provision", shared_secret="disable")


@dataclass(frozen=True)
class AppConfig:
    discord: DiscordConfig
    bridge: BridgeConfig
    templates: CompiledTemplates


def _section(raw: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"{key} must be a mapping, got {type(value).__name__}")
    return value


def _frozen(raw: Dict[str, Any], key: str) -> Mapping[str, Any]:
    return MappingProxyType(dict(_section(raw, key)))


def _string_map(raw: Dict[str, Any], key: str) -> Mapping[str, str]:
    return MappingProxyType({str(name): str(value) for name, value in _section(raw, key).items()})


def _int(raw: Dict[str, Any], key: str, default: int) -> int:
    try:
        return int(raw.get(key, default))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{key} must be an integer: {exc}") from exc


def parse_bridge_config(raw: Dict[str, Any]) -> BridgeConfig:
    provisioning_raw = _section(raw, "provisioning")
    return BridgeConfig(
        username_template=str(raw.get("username_template") or DEFAULT_USERNAME_TEMPLATE),
        displayname_template=str(raw.get("displayname_template") or DEFAULT_DISPLAYNAME_TEMPLATE),
        channelname_template=str(raw.get("channelname_template") or DEFAULT_CHANNELNAME_TEMPLATE),
        permissions=_string_map(raw, "permissions"),
        delivery_receipts=bool(raw.get("delivery_receipts", False)),
        message_status_events=bool(raw.get("message_status_events", False)),
        message_error_notices=bool(raw.get("message_error_notices", True)),
        restricted_rooms=bool(raw.get("restricted_rooms", True)),
        command_prefix=str(raw.get("command_prefix", "!discord")),
        management_room_text=_frozen(raw, "management_room_text"),
        portal_message_buffer=_int(raw, "portal_message_buffer", 128),
        sync_direct_chat_list=bool(raw.get("sync_direct_chat_list", False)),
        resend_bridge_info=bool(raw.get("resend_bridge_info", False)),
        federate_rooms=bool(raw.get("federate_rooms", True)),
        double_puppet_server_map=_string_map(raw, "double_puppet_server_map"),
        double_puppet_allow_discovery=bool(raw.get("double_puppet_allow_discovery", False)),
        login_shared_secret_map=_string_map(raw, "login_shared_secret_map"),
        encryption=_frozen(raw, "encryption"),
        provisioning=ProvisioningConfig(
            prefix=str(provisioning_raw.get("prefix", "/_matrix/provision")),
            shared_secret=str(provisioning_raw.get("shared_secret", "disable")),
        ),
    )


def build_config(raw: Dict[str, Any]) -> AppConfig:
    """Turn a parsed config document into an AppConfig, or raise BridgeConfigError."""

    discord_raw = _section(raw, "discord")
    bridge_raw = _section(raw, "bridge")

    discord = DiscordConfig(token=str(discord_raw.get("token", "")))
    bridge = parse_bridge_config(bridge_raw)

    templates = compile_templates(
        bridge.username_template,
        bridge.displayname_template,
        bridge.channelname_template,
    )
    validate_permissions(bridge.permissions)

    return AppConfig(discord=discord, bridge=bridge, templates=templates)


def load_config(path: str) -> AppConfig:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle)
    except OSError as exc:
        raise ConfigError(f"failed to read config {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"failed to parse config {path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"config {path} must contain a mapping")

    config = build_config(raw)
    logger.info(
        f"Loaded config from {path}: {len(config.bridge.permissions)} permission entries, "
        f"command prefix {config.bridge.command_prefix}"
    )
    return config
