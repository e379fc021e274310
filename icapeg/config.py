"""Application configuration read from a TOML file."""

from __future__ import annotations

import tomllib
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .consts import ANY

_TRUE_WORDS = frozenset({"1", "t", "true"})


class ConfigError(Exception):
    """The configuration is missing something or is inconsistent."""


@dataclass
class ServiceInfo:
    """ICAP settings of one configured service."""

    vendor: str = ""
    service_caption: str = ""
    service_tag: str = ""
    req_mode: bool = False
    resp_mode: bool = False
    shadow_service: bool = False
    preview_enabled: bool = False
    preview_bytes: str = ""


@dataclass
class AppConfig:
    """The whole application configuration."""

    port: int = 0
    log_level: str = ""
    write_logs_to_console: bool = False
    bypass_extensions: list[str] = field(default_factory=list)
    process_extensions: list[str] = field(default_factory=list)
    preview_bytes: str = ""
    preview_enabled: bool = False
    debugging_headers: bool = False
    services: list[str] = field(default_factory=list)
    services_instances: dict[str, ServiceInfo] = field(default_factory=dict)


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return 0
    return 0


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_WORDS
    return False


def _as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return value.split()
    if isinstance(value, Sequence):
        return [_as_str(item) for item in value]
    return []


_MULTI_ASTERISK = (
    '{} array has one asterisk "*" and other extensions but asterisk should be the only '
    "element in the array otherwise add extensions as you want"
)
_BYPASS_DUPLICATE = (
    'This extension "{}" was stored in multiple arrays (bypass_extensions or reject_extensions)'
)
_OTHER_DUPLICATE = 'This extension "{}" is stored in multiple arrays'


def validate_extensions(
    service_name: str,
    bypass: Sequence[str],
    process: Sequence[str],
    reject: Sequence[str],
) -> None:
    """Check that exactly one array is "*" alone and no extension appears twice."""
    seen: set[str] = set()
    asterisks = 0
    for list_name, values, duplicate in (
        ("bypass_extensions", bypass, _BYPASS_DUPLICATE),
        ("process_extensions", process, _OTHER_DUPLICATE),
        ("reject_extensions", reject, _OTHER_DUPLICATE),
    ):
        for ext in values:
            if ext == ANY and len(values) != 1:
                raise ConfigError(f"{service_name}: " + _MULTI_ASTERISK.format(list_name))
            if ext == ANY:
                asterisks += 1
            if ext in seen:
                raise ConfigError(f"{service_name}: " + duplicate.format(ext))
            seen.add(ext)
    if asterisks != 1:
        raise ConfigError(f'{service_name}: There is no "*" stored in any extension arrays')


def _service_info(name: str, section: Mapping[str, Any]) -> ServiceInfo:
    req_mode = _as_bool(section.get("req_mode"))
    resp_mode = _as_bool(section.get("resp_mode"))
    if not req_mode and not resp_mode:
        raise ConfigError(f"Request mode and response mode are disabled together in {name} service")
    if _as_int(section.get("max_filesize")) < 0:
        raise ConfigError("max_filesize value in config.toml file is not valid")
    validate_extensions(
        name,
        _as_list(section.get("bypass_extensions")),
        _as_list(section.get("process_extensions")),
        _as_list(section.get("reject_extensions")),
    )
    return ServiceInfo(
        vendor=_as_str(section.get("vendor")),
        service_caption=_as_str(section.get("service_caption")),
        service_tag=_as_str(section.get("service_tag")),
        req_mode=req_mode,
        resp_mode=resp_mode,
        shadow_service=_as_bool(section.get("shadow_service")),
        preview_enabled=_as_bool(section.get("preview_enabled")),
        preview_bytes=_as_str(section.get("preview_bytes")),
    )


def parse_config(data: str | bytes | Mapping[str, Any]) -> AppConfig:
    """Build the configuration from TOML text or an already parsed mapping."""
    if isinstance(data, Mapping):
        document = data
    else:
        text = data.decode("utf-8") if isinstance(data, bytes) else data
        try:
            document = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"invalid configuration: {exc}") from exc

    app = document.get("app")
    app = app if isinstance(app, Mapping) else {}
    config = AppConfig(
        port=_as_int(app.get("port")),
        log_level=_as_str(app.get("log_level")),
        write_logs_to_console=_as_bool(app.get("write_logs_to_console")),
        debugging_headers=_as_bool(app.get("debugging_headers")),
        services=_as_list(app.get("services")),
    )

    for name in config.services:
        section = document.get(name)
        if not isinstance(section, Mapping):
            raise ConfigError(f"{name} section doesn't exist")
        config.services_instances[name] = _service_info(name, section)
    return config


def load_config(path: str | Path = "config.toml") -> AppConfig:
    """Read and validate the configuration file."""
    return parse_config(Path(path).read_bytes())