"""Rust guest pipeline: cargo build followed by ``wasm-tools component new``."""

from __future__ import annotations

from .builder import (
    AdapterMissingError,
    ComponentEncodeError,
    ComponentsDirMissingError,
    GuestArtifactMissingError,
    GuestBuildError,
    GuestBuilder,
    GuestCompileError,
    WorkspaceBuildError,
)
from .discovery import discover_guests

__all__ = [
    "AdapterMissingError",
    "ComponentEncodeError",
    "ComponentsDirMissingError",
    "GuestArtifactMissingError",
    "GuestBuildError",
    "GuestBuilder",
    "GuestCompileError",
    "WorkspaceBuildError",
    "discover_guests",
]
