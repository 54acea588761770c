"""Build orchestration: read the source, componentize it, write the binary."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Callable, List, Optional

from .backends import ComponentizeError, Componentizer, NonReproducibleBuildError, get_backend
from .config import ComponentizerConfig, load_config
from .guests import GuestBuilder
from .logging import get_logger
from .models import BuildResult, ComponentizeOptions

BackendResolver = Callable[[str, ComponentizerConfig], Componentizer]


def _default_backend_resolver(name: str, config: ComponentizerConfig) -> Componentizer:
    return get_backend(name, config.toolchain)


class BuildDriver:
    """Coordinates the componentize and guest pipelines for a project."""

    def __init__(
        self,
        backend: Componentizer | None = None,
        *,
        backend_resolver: BackendResolver | None = None,
        guest_builder: GuestBuilder | None = None,
    ) -> None:
        self._backend = backend
        self._backend_resolver = backend_resolver or _default_backend_resolver
        self.guest_builder = guest_builder or GuestBuilder()
        self.logger = get_logger("driver")

    def run_build(
        self,
        path: str | Path = ".",
        *,
        backend: str | None = None,
        check_reproducible: bool | None = None,
    ) -> BuildResult:
        """Componentize the project's source and write the component to disk.

        Nothing is written unless the read and the backend call both succeed.
        Read and write failures surface as ``OSError``; backend failures as
        ``ComponentizeError``.
        """
        config = self.load_config(path)
        settings = config.componentize
        componentizer = self._select_backend(backend or settings.backend, config)
        verify = settings.check_reproducible if check_reproducible is None else check_reproducible

        source_path = config.source_path
        self.logger.info("Reading %s", source_path)
        source = source_path.read_text(encoding="utf-8")

        options = config.componentize_options()
        self.logger.info(
            "Componentizing with %s (world '%s')", componentizer.describe(), options.world_name
        )
        component = self._componentize(componentizer, source, options, config)
        digest = hashlib.sha256(component).hexdigest()

        reproducible: Optional[bool] = None
        if verify:
            self.logger.debug("Re-running %s to confirm identical output", componentizer.describe())
            second = self._componentize(componentizer, source, options, config)
            second_digest = hashlib.sha256(second).hexdigest()
            if second_digest != digest:
                raise NonReproducibleBuildError(
                    "Componentizing the same source twice produced different output "
                    f"({digest[:12]} != {second_digest[:12]}). "
                    "Disable debug metadata or pin the toolchain version."
                )
            reproducible = True

        output_path = config.output_path
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(component)
        self.logger.info("Wrote %d bytes to %s", len(component), output_path)

        return BuildResult(
            path=output_path,
            size=len(component),
            sha256=digest,
            backend=componentizer.name,
            reproducible=reproducible,
        )

    def run_guests(
        self,
        path: str | Path = ".",
        *,
        target: str | None = None,
        build_workspace: bool | None = None,
    ) -> List[Path]:
        """Build every Rust guest into a component."""
        config = self.load_config(path)
        outputs = self.guest_builder.build_all(
            config, target=target, build_workspace=build_workspace
        )
        self.logger.info("Built %d component(s)", len(outputs))
        return outputs

    def load_config(self, path: str | Path) -> ComponentizerConfig:
        project_path = Path(path).expanduser().resolve()
        config = load_config(project_path)
        self.logger.debug("Project root: %s", config.root)
        return config

    @staticmethod
    def _componentize(
        componentizer: Componentizer,
        source: str,
        options: ComponentizeOptions,
        config: ComponentizerConfig,
    ) -> bytes:
        component = componentizer.componentize(source, options, cwd=config.root)
        if not component:
            raise ComponentizeError(f"{componentizer.name} produced an empty component.")
        return component

    def _select_backend(self, name: str, config: ComponentizerConfig) -> Componentizer:
        if self._backend is not None:
            return self._backend
        return self._backend_resolver(name, config)


__all__ = ["BuildDriver"]
