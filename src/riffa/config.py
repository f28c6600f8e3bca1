"""
Configuration loader merging defaults, config files, environment, and CLI args.
"""

from __future__ import annotations

import argparse
import os
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Callable, Mapping, MutableMapping, Tuple

DEFAULT_CONFIG_FILENAME = "riffa.toml"


@dataclass
class AppConfig:
    """High-level application configuration container."""

    log_format: str = "human"
    json_log: bool = False
    preview_bytes: int = 16
    http_timeout_ms: int = 10_000
    http_chunk_size: int = 64 * 1024
    playback_device: str | None = None
    playback_blocksize: int = 0
    default_sample_rate: int = 44_100
    default_channels: int = 2
    default_bits_per_sample: int = 16
    extra: dict[str, Any] = field(default_factory=dict)


def load_default_config() -> AppConfig:
    """Return default configuration for the CLI."""

    return AppConfig()


def load_config(
    args: argparse.Namespace | None = None,
    *,
    env: Mapping[str, str] | None = None,
    config_file: str | Path | None = None,
) -> AppConfig:
    """
    Load configuration merging defaults, config file, environment, then CLI.

    Precedence: CLI args > environment variables > config file > defaults.
    """

    defaults = load_default_config()
    config_data: dict[str, Any] = {
        key: getattr(defaults, key) for key in _known_fields()
    }
    extras: dict[str, Any] = {}

    resolved_config_path = _resolve_config_path(args, config_file)
    if resolved_config_path is not None:
        file_config, file_extras = _load_from_file(resolved_config_path)
        config_data.update(file_config)
        extras.update(file_extras)

    config_data.update(_load_from_env(env))
    config_data.update(_load_from_cli(args))

    if config_data.get("json_log"):
        config_data["log_format"] = "json"

    validated = _validate_config(config_data)
    if extras:
        validated["extra"] = extras

    return AppConfig(**validated)


def _known_fields() -> set[str]:
    return {f.name for f in fields(AppConfig) if f.init and f.name != "extra"}


def _resolve_config_path(
    args: argparse.Namespace | None, config_file: str | Path | None
) -> Path | None:
    candidate: str | Path | None = None
    if args is not None and getattr(args, "config", None):
        candidate = getattr(args, "config")
    elif config_file is not None:
        candidate = config_file

    if candidate is None:
        default_path = Path(DEFAULT_CONFIG_FILENAME)
        return default_path if default_path.exists() else None

    path = Path(candidate).expanduser()
    return path if path.exists() else None


def _load_from_file(path: Path) -> Tuple[dict[str, Any], dict[str, Any]]:
    try:
        with path.open("rb") as fh:
            data = tomllib.load(fh)
    except FileNotFoundError:
        return {}, {}

    return _partition_known(data)


def _as_bool(value: Any) -> bool:
    return str(value).lower() in {"1", "true", "yes"}


ENV_KEY_MAP: dict[str, Tuple[str, Callable[[Any], Any]]] = {
    "RIFFA_LOG_FORMAT": ("log_format", str),
    "RIFFA_JSON_LOG": ("json_log", _as_bool),
    "RIFFA_PREVIEW_BYTES": ("preview_bytes", int),
    "RIFFA_HTTP_TIMEOUT_MS": ("http_timeout_ms", int),
    "RIFFA_HTTP_CHUNK_SIZE": ("http_chunk_size", int),
    "RIFFA_PLAYBACK_DEVICE": ("playback_device", str),
    "RIFFA_PLAYBACK_BLOCKSIZE": ("playback_blocksize", int),
    "RIFFA_SAMPLE_RATE": ("default_sample_rate", int),
    "RIFFA_CHANNELS": ("default_channels", int),
    "RIFFA_BITS_PER_SAMPLE": ("default_bits_per_sample", int),
}


def _load_from_env(env: Mapping[str, str] | None) -> dict[str, Any]:
    source = env if env is not None else os.environ
    result: dict[str, Any] = {}
    for env_key, (config_key, caster) in ENV_KEY_MAP.items():
        if env_key in source and source[env_key] != "":
            result[config_key] = caster(source[env_key])
    return result


CLI_ATTR_MAP: dict[str, Tuple[str, Callable[[Any], Any]]] = {
    "log_format": ("log_format", str),
    "json_log": ("json_log", bool),
    "preview_bytes": ("preview_bytes", int),
    "timeout": ("http_timeout_ms", int),
    "http_timeout_ms": ("http_timeout_ms", int),
    "device": ("playback_device", str),
    "blocksize": ("playback_blocksize", int),
    "rate": ("default_sample_rate", int),
    "channels": ("default_channels", int),
    "bits": ("default_bits_per_sample", int),
}


def _load_from_cli(args: argparse.Namespace | None) -> dict[str, Any]:
    if args is None:
        return {}

    result: dict[str, Any] = {}
    for attr_name, (config_key, caster) in CLI_ATTR_MAP.items():
        if hasattr(args, attr_name):
            value = getattr(args, attr_name)
            if value is None:
                continue
            if isinstance(value, bool) and caster is bool:
                # store_true flags left at False must not override lower layers.
                if value:
                    result[config_key] = value
            else:
                result[config_key] = caster(value)
    return result


def _partition_known(data: Mapping[str, Any]) -> Tuple[dict[str, Any], dict[str, Any]]:
    known: dict[str, Any] = {}
    extras: dict[str, Any] = {}
    known_keys = _known_fields()
    for key, value in data.items():
        if key in known_keys:
            known[key] = value
        else:
            extras[key] = value
    return known, extras


def _validate_config(data: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    log_format = data.get("log_format")
    if log_format is not None and log_format not in {"human", "json"}:
        raise ValueError("log_format must be 'human' or 'json'")

    preview_bytes = data.get("preview_bytes")
    if preview_bytes is not None and int(preview_bytes) < 0:
        raise ValueError("preview_bytes must be non-negative")

    http_timeout_ms = data.get("http_timeout_ms")
    if http_timeout_ms is not None and int(http_timeout_ms) <= 0:
        raise ValueError("http_timeout_ms must be positive")

    http_chunk_size = data.get("http_chunk_size")
    if http_chunk_size is not None and int(http_chunk_size) <= 0:
        raise ValueError("http_chunk_size must be positive")

    playback_blocksize = data.get("playback_blocksize")
    if playback_blocksize is not None and int(playback_blocksize) < 0:
        raise ValueError("playback_blocksize must be non-negative")

    for key in ("default_sample_rate", "default_channels", "default_bits_per_sample"):
        value = data.get(key)
        if value is not None and int(value) <= 0:
            raise ValueError(f"{key} must be positive")

    return data
