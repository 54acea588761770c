"""Configuration loading for componentizer (.componentize.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

from .models import ComponentizeOptions

CONFIG_FILENAME = ".componentize.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ComponentizeSettings:
    """Settings for turning the JavaScript source into a component."""

    backend: str = "componentize-js"
    source: str = "main.js"
    output: str = "out/cool_function.wasm"
    wit_path: str = "wit"
    world_name: str = "function-world"
    enable_stdout: bool = True
    preview2_adapter: Optional[str] = "../wasi_snapshot_preview1.reactor.wasm.dev"
    debug: bool = True
    check_reproducible: bool = False


@dataclass
class ToolchainConfig:
    """Executables used to drive the external toolchain."""

    node: Optional[str] = None
    jco: Optional[str] = None
    cargo: Optional[str] = None
    wasm_tools: Optional[str] = None

    _ENV_KEYS = {
        "node": "NODE",
        "jco": "JCO",
        "cargo": "CARGO",
        "wasm_tools": "WASM_TOOLS",
    }
    _DEFAULTS = {
        "node": "node",
        "jco": "jco",
        "cargo": "cargo",
        "wasm_tools": "wasm-tools",
    }

    def executable(self, tool: str, env: Mapping[str, str] | None = None) -> str:
        """Resolve a tool: explicit config first, then its env variable, then the bare name."""
        if tool not in self._DEFAULTS:
            raise KeyError(f"Unknown tool '{tool}'")
        configured = getattr(self, tool)
        if configured:
            return configured
        environ = os.environ if env is None else env
        from_env = environ.get(self._ENV_KEYS[tool])
        if from_env:
            return from_env
        return self._DEFAULTS[tool]


@dataclass
class GuestsConfig:
    """Layout and ordering of the Rust guest crates."""

    dir: str = "guests"
    target_dir: str = "target"
    components_dir: str = "components"
    adapter: str = "wasi_snapshot_preview1.reactor.wasm.dev"
    target: str = "wasm32-wasip1"
    name_map: Dict[str, str] = field(
        default_factory=lambda: {"function": "mycelia_guest_function"}
    )
    priority: List[str] = field(default_factory=lambda: ["*", "function"])
    build_workspace: bool = True


@dataclass
class ComponentizerConfig:
    """Represents the settings defined in .componentize.yml."""

    root: Path
    componentize: ComponentizeSettings = field(default_factory=ComponentizeSettings)
    toolchain: ToolchainConfig = field(default_factory=ToolchainConfig)
    guests: GuestsConfig = field(default_factory=GuestsConfig)

    def resolve(self, relative: str) -> Path:
        """Return a configured path anchored at the project root."""
        path = Path(relative).expanduser()
        if path.is_absolute():
            return path
        return (self.root / path).resolve()

    @property
    def source_path(self) -> Path:
        return self.resolve(self.componentize.source)

    @property
    def output_path(self) -> Path:
        return self.resolve(self.componentize.output)

    def componentize_options(self) -> ComponentizeOptions:
        settings = self.componentize
        adapter = self.resolve(settings.preview2_adapter) if settings.preview2_adapter else None
        return ComponentizeOptions(
            wit_path=self.resolve(settings.wit_path),
            world_name=settings.world_name,
            enable_stdout=settings.enable_stdout,
            preview2_adapter=adapter,
            debug=settings.debug,
        )


def load_config(config_path: Path) -> ComponentizerConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(Path(config_path))
    root = config_file.parent.resolve()

    if not config_file.exists():
        return ComponentizerConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    componentize = ComponentizeSettings()
    componentize_data = _as_dict(data.get("componentize"))
    if componentize_data:
        componentize.backend = _as_str(componentize_data.get("backend")) or componentize.backend
        componentize.source = _as_str(componentize_data.get("source")) or componentize.source
        componentize.output = _as_str(componentize_data.get("output")) or componentize.output
        componentize.wit_path = _as_str(componentize_data.get("wit_path")) or componentize.wit_path
        componentize.world_name = (
            _as_str(componentize_data.get("world_name")) or componentize.world_name
        )
        componentize.enable_stdout = _bool_or(
            componentize_data, "enable_stdout", componentize.enable_stdout
        )
        componentize.debug = _bool_or(componentize_data, "debug", componentize.debug)
        componentize.check_reproducible = _bool_or(
            componentize_data, "check_reproducible", componentize.check_reproducible
        )
        if "preview2_adapter" in componentize_data:
            # An explicit null disables the adapter.
            componentize.preview2_adapter = _as_str(componentize_data.get("preview2_adapter"))

    toolchain_data = _as_dict(data.get("toolchain"))
    toolchain = ToolchainConfig(
        node=_as_str(toolchain_data.get("node")),
        jco=_as_str(toolchain_data.get("jco")),
        cargo=_as_str(toolchain_data.get("cargo")),
        wasm_tools=_as_str(toolchain_data.get("wasm_tools")),
    )

    guests = GuestsConfig()
    guests_data = _as_dict(data.get("guests"))
    if guests_data:
        guests.dir = _as_str(guests_data.get("dir")) or guests.dir
        guests.target_dir = _as_str(guests_data.get("target_dir")) or guests.target_dir
        guests.components_dir = (
            _as_str(guests_data.get("components_dir")) or guests.components_dir
        )
        guests.adapter = _as_str(guests_data.get("adapter")) or guests.adapter
        guests.target = _as_str(guests_data.get("target")) or guests.target
        if "name_map" in guests_data:
            name_map = guests_data.get("name_map")
            if name_map is not None and not isinstance(name_map, dict):
                raise ConfigError("guests.name_map must be a mapping of guest name to package")
            guests.name_map = _as_str_dict(name_map)
        if "priority" in guests_data:
            guests.priority = _as_str_list(guests_data.get("priority"))
        guests.build_workspace = _bool_or(guests_data, "build_workspace", guests.build_workspace)

    return ComponentizerConfig(
        root=root,
        componentize=componentize,
        toolchain=toolchain,
        guests=guests,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if not config_path.exists():
        raise FileNotFoundError(f"Project path '{config_path}' does not exist")
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.suffix not in {".yml", ".yaml"}:
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


def _bool_or(data: Mapping[str, Any], key: str, default: bool) -> bool:
    if key not in data:
        return default
    value = _as_bool(data.get(key))
    if value is None:
        raise ConfigError(f"Expected a boolean for '{key}', got {data.get(key)!r}")
    return value


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    return str(value) if isinstance(value, (str, int, float)) else None


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
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


def _as_str_dict(value: Any) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(key): str(item) for key, item in value.items() if item is not None}


__all__ = [
    "CONFIG_FILENAME",
    "ComponentizeSettings",
    "ComponentizerConfig",
    "ConfigError",
    "GuestsConfig",
    "ToolchainConfig",
    "load_config",
]
