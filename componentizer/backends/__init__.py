"""Componentization backends and discovery utilities."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Dict, Iterable, List, Sequence, Set

from ..config import ToolchainConfig
from .base import ComponentizeError, Componentizer, NonReproducibleBuildError
from .jco import JcoBackend
from .node import ComponentizeJsBackend

_ENTRY_POINT_GROUP = "componentizer.backends"

BackendFactory = Callable[[ToolchainConfig], Componentizer]

_BUILTIN_FACTORIES: Dict[str, BackendFactory] = {
    "componentize-js": lambda toolchain: ComponentizeJsBackend(node=toolchain.executable("node")),
    "jco": lambda toolchain: JcoBackend(jco=toolchain.executable("jco")),
}


def discover_backends(
    toolchain: ToolchainConfig | None = None,
    enabled: Sequence[str] | None = None,
) -> List[Componentizer]:
    """Return instantiated backends, honoring optional enabled names."""
    toolchain = toolchain or ToolchainConfig()
    factories = _available_factories()

    if enabled is None:
        names = list(factories)
    else:
        names = []
        seen: Set[str] = set()
        for name in enabled:
            key = name.lower()
            if key not in seen:
                names.append(key)
                seen.add(key)
        missing = [name for name in names if name not in factories]
        if missing:
            raise ValueError(f"Unknown backends requested: {', '.join(sorted(missing))}")

    return [_instantiate(name, factories[name], toolchain) for name in names]


def get_backend(name: str, toolchain: ToolchainConfig | None = None) -> Componentizer:
    """Return the backend registered under ``name``."""
    return discover_backends(toolchain, enabled=[name])[0]


def _available_factories() -> Dict[str, BackendFactory]:
    factories: Dict[str, BackendFactory] = dict(_BUILTIN_FACTORIES)
    for entry in _iter_entry_points():
        key = entry.name.lower()
        if key in factories:
            continue
        try:
            loaded = entry.load()
        except Exception as exc:  # pragma: no cover - plugin import failure
            raise RuntimeError(f"Failed to load backend entry point '{entry.name}': {exc}") from exc
        factories[key] = _plugin_factory(loaded)
    return factories


def _plugin_factory(obj: object) -> BackendFactory:
    def _factory(toolchain: ToolchainConfig) -> Componentizer:
        if isinstance(obj, Componentizer):
            return obj
        if isinstance(obj, type) and issubclass(obj, Componentizer):
            return obj()
        if callable(obj):
            instance = obj(toolchain)
            if isinstance(instance, Componentizer):
                return instance
        raise TypeError("Backend entry point must be a Componentizer subclass or factory")

    return _factory


def _instantiate(name: str, factory: BackendFactory, toolchain: ToolchainConfig) -> Componentizer:
    instance = factory(toolchain)
    if not isinstance(instance, Componentizer):
        raise TypeError(f"Backend factory for '{name}' did not return a Componentizer instance")
    return instance


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "ComponentizeError",
    "ComponentizeJsBackend",
    "Componentizer",
    "JcoBackend",
    "NonReproducibleBuildError",
    "discover_backends",
    "get_backend",
]
