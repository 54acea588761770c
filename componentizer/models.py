"""Core data models shared across componentizer components."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ComponentizeOptions:
    """Configuration bag handed to the componentization backend."""

    wit_path: Path
    world_name: str
    enable_stdout: bool = True
    preview2_adapter: Optional[Path] = None
    debug: bool = False

    def to_payload(self) -> Dict[str, Any]:
        """Return the options keyed the way componentize-js expects them."""
        payload: Dict[str, Any] = {
            "witPath": str(self.wit_path),
            "worldName": self.world_name,
            "enableStdout": self.enable_stdout,
            "debug": self.debug,
        }
        if self.preview2_adapter is not None:
            payload["preview2Adapter"] = str(self.preview2_adapter)
        return payload


@dataclass
class BuildResult:
    """Outcome of a single componentize run."""

    path: Path
    size: int
    sha256: str
    backend: str
    reproducible: Optional[bool] = None


@dataclass(frozen=True)
class Guest:
    """A Rust crate under the guests directory that builds into a component."""

    path: Path
    name: str
    name_output: str

    @classmethod
    def from_path(cls, path: Path, name_output: Optional[str] = None) -> "Guest":
        name = path.name
        return cls(path=path, name=name, name_output=name_output or name)

    @property
    def component_file(self) -> str:
        return f"{self.name}-component.wasm"
