"""Configuration loading for storybox (.storybox.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .discovery.scanner import DEFAULT_STORY_EXTENSIONS, DEFAULT_TEMPLATE_EXTENSION

CONFIG_FILENAME = ".storybox.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ServerConfig:
    """Listen address for ``storybox serve``."""

    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class SandboxConfig:
    """Represents the settings defined in .storybox.yml."""

    root: Path
    components_dir: Path
    static_dir: Path
    story_extensions: List[str] = field(default_factory=lambda: list(DEFAULT_STORY_EXTENSIONS))
    template_extension: str = DEFAULT_TEMPLATE_EXTENSION
    programmatic_header: str = "X-Mach-Request"
    title_header: str = "X-Mach-Title"
    enrich_templates: bool = False
    strict_templates: bool = False
    server: ServerConfig = field(default_factory=ServerConfig)


def default_config(root: Path) -> SandboxConfig:
    root = root.resolve()
    return SandboxConfig(
        root=root,
        components_dir=root / "static" / "components",
        static_dir=root / "static",
    )


def load_config(config_path: Path) -> SandboxConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()
    config = default_config(root)

    if not config_file.exists():
        return config

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    components_dir = _as_str(data.get("components_dir"))
    if components_dir:
        config.components_dir = (root / components_dir).resolve()
    static_dir = _as_str(data.get("static_dir"))
    if static_dir:
        config.static_dir = (root / static_dir).resolve()

    extensions = _as_str_list(data.get("story_extensions"))
    if extensions:
        config.story_extensions = [ext.lstrip(".") for ext in extensions]
    template_extension = _as_str(data.get("template_extension"))
    if template_extension:
        config.template_extension = template_extension.lstrip(".")

    header = _as_str(data.get("programmatic_header"))
    if header:
        config.programmatic_header = header
    title_header = _as_str(data.get("title_header"))
    if title_header:
        config.title_header = title_header

    enrich = _as_bool(data.get("enrich_templates"))
    if enrich is not None:
        config.enrich_templates = enrich
    strict = _as_bool(data.get("strict_templates"))
    if strict is not None:
        config.strict_templates = strict

    server_data = _as_dict(data.get("server"))
    if server_data:
        host = _as_str(server_data.get("host"))
        port = _as_int(server_data.get("port"))
        if host:
            config.server.host = host
        if port is not None:
            if not 0 < port < 65536:
                raise ConfigError(f"server.port out of range: {port}")
            config.server.port = port

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = ["CONFIG_FILENAME", "ConfigError", "SandboxConfig", "ServerConfig", "default_config", "load_config"]
