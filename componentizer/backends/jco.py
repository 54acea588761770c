"""jco CLI backend."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import List

from ..logging import get_logger, log_tool_output
from ..models import ComponentizeOptions
from ..toolchain import CommandRunner, run_command
from .base import ComponentizeError, Componentizer


class JcoBackend(Componentizer):
    """Runs ``jco componentize`` on a staged copy of the source."""

    name = "jco"

    def __init__(self, jco: str = "jco", *, runner: CommandRunner | None = None) -> None:
        self.jco = jco
        self._runner = runner or run_command
        self.logger = get_logger("backends.jco")

    def componentize(
        self, source: str, options: ComponentizeOptions, *, cwd: Path
    ) -> bytes:
        with tempfile.TemporaryDirectory(prefix="componentizer-") as staging:
            staging_dir = Path(staging)
            source_file = staging_dir / "main.js"
            output_file = staging_dir / "component.wasm"
            source_file.write_text(source, encoding="utf-8")

            args = self.build_args(source_file, output_file, options)
            self.logger.debug("Running %s", " ".join(args))
            result = self._runner(args, cwd=cwd)
            log_tool_output(self.logger, "jco", result)
            if not result.ok:
                raise ComponentizeError.from_result("jco componentize", result)
            if not output_file.exists():
                raise ComponentizeError(f"jco componentize did not write {output_file.name}.")
            component = output_file.read_bytes()

        if not component:
            raise ComponentizeError("jco componentize produced an empty component.")
        return component

    def build_args(
        self, source_file: Path, output_file: Path, options: ComponentizeOptions
    ) -> List[str]:
        args = [
            self.jco,
            "componentize",
            str(source_file),
            "--wit",
            str(options.wit_path),
            "--world-name",
            options.world_name,
            "--out",
            str(output_file),
        ]
        if options.preview2_adapter is not None:
            args.extend(["--preview2-adapter", str(options.preview2_adapter)])
        if not options.enable_stdout:
            args.extend(["--disable", "stdio"])
        if options.debug:
            args.append("--debug-bindings")
        return args
