"""Base interface for componentization backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from ..models import ComponentizeOptions
from ..toolchain import CommandResult, ToolchainError


class ComponentizeError(ToolchainError):
    """Raised when the componentization library rejects the input."""

    def __init__(self, message: str, *, status: int | None = None, stderr: str = "") -> None:
        detail = message
        if status is not None:
            detail += f"\nStatus code: {status}"
        if stderr:
            detail += f"\n{stderr}"
        super().__init__(detail)
        self.status = status
        self.stderr = stderr

    @classmethod
    def from_result(cls, backend: str, result: CommandResult) -> "ComponentizeError":
        return cls(
            f"{backend} failed.\n\nCommand: `{result.command_line}`",
            status=result.returncode,
            stderr=result.stderr_text(),
        )


class NonReproducibleBuildError(ComponentizeError):
    """Raised when identical inputs produced different component bytes."""


class Componentizer(ABC):
    """Turns source text into a WebAssembly component binary."""

    name: str = "componentizer"

    @abstractmethod
    def componentize(
        self, source: str, options: ComponentizeOptions, *, cwd: Path
    ) -> bytes:
        """Return the component bytes for ``source`` or raise ComponentizeError."""

    def describe(self) -> str:
        return self.name
