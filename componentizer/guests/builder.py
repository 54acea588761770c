"""Compile Rust guests to core modules and wrap them into components."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from ..config import ComponentizerConfig
from ..logging import get_logger, log_tool_output
from ..models import Guest
from ..toolchain import CommandResult, CommandRunner, ToolchainError, run_command
from .discovery import discover_guests


class GuestBuildError(ToolchainError):
    """Base class for guest pipeline failures."""


class WorkspaceBuildError(GuestBuildError):
    def __init__(self, status: int) -> None:
        super().__init__(f"`cargo build --workspace` failed. Status code: {status}")
        self.status = status


class GuestCompileError(GuestBuildError):
    def __init__(self, guest: Guest, target: str, status: int, stderr: str = "") -> None:
        message = (
            f"Build wasm '{guest.name}' failed.\n\n"
            f"Command: `cargo build --target {target} --release --package {guest.name_output}`\n"
            f"Guest path: {guest.path}\n"
            f"Status code: {status}"
        )
        if stderr:
            message += f"\n{stderr}"
        super().__init__(message)
        self.guest = guest
        self.status = status


class GuestArtifactMissingError(GuestBuildError):
    def __init__(self, guest: Guest, artifact: Path) -> None:
        super().__init__(
            f"wasm guest file '{artifact}' for '{guest.name}' ({guest.path}) does not exist"
        )
        self.guest = guest
        self.artifact = artifact


class AdapterMissingError(GuestBuildError):
    def __init__(self, guest: Guest, adapter: Path) -> None:
        super().__init__(f"wasi adapter file '{adapter}' needed by '{guest.name}' does not exist")
        self.guest = guest
        self.adapter = adapter


class ComponentsDirMissingError(GuestBuildError):
    def __init__(self, guest: Guest, directory: Path) -> None:
        super().__init__(
            f"component output directory '{directory}' for '{guest.name}' does not exist"
        )
        self.guest = guest
        self.directory = directory


class ComponentEncodeError(GuestBuildError):
    def __init__(self, guest: Guest, result: CommandResult) -> None:
        message = (
            f"Build component '{guest.name}' failed.\n\n"
            f"Command: `{result.command_line}`\n"
            f"Guest path: '{guest.path}'\n"
            f"Status code: {result.returncode}"
        )
        stderr = result.stderr_text()
        if stderr:
            message += f"\n{stderr}"
        super().__init__(message)
        self.guest = guest
        self.status = result.returncode


class GuestBuilder:
    """Runs cargo and wasm-tools for every guest crate in a project."""

    def __init__(self, runner: CommandRunner | None = None) -> None:
        self._runner = runner or run_command
        self.logger = get_logger("guests")

    def build_all(
        self,
        config: ComponentizerConfig,
        *,
        target: Optional[str] = None,
        build_workspace: Optional[bool] = None,
    ) -> List[Path]:
        """Build every guest, then optionally the host workspace.

        ``target`` overrides the triple used for the final workspace build only;
        guests always compile for ``guests.target``.
        """
        settings = config.guests
        target_dir = config.resolve(settings.target_dir)
        components_dir = config.resolve(settings.components_dir)
        target_dir.mkdir(parents=True, exist_ok=True)
        components_dir.mkdir(parents=True, exist_ok=True)

        guests = discover_guests(
            config.resolve(settings.dir),
            name_map=settings.name_map,
            priority=settings.priority,
        )
        self.logger.info("Building %d guest(s) in %s", len(guests), config.root)

        outputs: List[Path] = []
        for guest in guests:
            self.compile(config, guest)
            outputs.append(self.encode(config, guest))

        if settings.build_workspace if build_workspace is None else build_workspace:
            self.workspace(config, target=target)

        return outputs

    def compile(self, config: ComponentizerConfig, guest: Guest) -> Path:
        """Compile ``guest`` to a core wasm module and return the artifact path."""
        triple = config.guests.target
        cargo = config.toolchain.executable("cargo")
        self.logger.info("Compiling guest '%s' (%s)", guest.name, triple)
        result = self._runner(
            [cargo, "build", f"--target={triple}", "--release", f"--package={guest.name_output}"],
            cwd=config.root,
        )
        log_tool_output(self.logger, "cargo", result)
        if not result.ok:
            raise GuestCompileError(guest, triple, result.returncode, result.stderr_text())
        return self.artifact_path(config, guest)

    def encode(self, config: ComponentizerConfig, guest: Guest) -> Path:
        """Wrap the compiled module of ``guest`` into a component with the WASI adapter."""
        artifact = self.artifact_path(config, guest)
        if not artifact.exists():
            raise GuestArtifactMissingError(guest, artifact)

        adapter = config.resolve(config.guests.adapter)
        if not adapter.exists():
            raise AdapterMissingError(guest, adapter)

        components_dir = config.resolve(config.guests.components_dir)
        if not components_dir.exists():
            raise ComponentsDirMissingError(guest, components_dir)

        output = components_dir / guest.component_file
        wasm_tools = config.toolchain.executable("wasm_tools")
        self.logger.info("Encoding component %s", output.name)
        result = self._runner(
            [
                wasm_tools,
                "component",
                "new",
                str(artifact),
                f"--adapt={adapter}",
                f"-o={output}",
            ],
            cwd=config.root,
        )
        log_tool_output(self.logger, "wasm-tools", result)
        if not result.ok:
            raise ComponentEncodeError(guest, result)
        return output

    def workspace(self, config: ComponentizerConfig, *, target: Optional[str] = None) -> None:
        cargo = config.toolchain.executable("cargo")
        args = [cargo, "build", "--workspace"]
        if target:
            args.extend(["--target", target])
        self.logger.info("Building workspace")
        result = self._runner(args, cwd=config.root)
        log_tool_output(self.logger, "cargo", result)
        if not result.ok:
            raise WorkspaceBuildError(result.returncode)

    @staticmethod
    def artifact_path(config: ComponentizerConfig, guest: Guest) -> Path:
        return (
            config.resolve(config.guests.target_dir)
            / config.guests.target
            / "release"
            / f"{guest.name_output}.wasm"
        )
