"""Tests for componentizer.driver."""

from __future__ import annotations

import hashlib
from pathlib import Path

import pytest

from componentizer.backends import ComponentizeError, Componentizer, NonReproducibleBuildError
from componentizer.driver import BuildDriver
from componentizer.models import ComponentizeOptions

COMPONENT = b"\x00asm\x0d\x00\x01\x00component-bytes"


class RecordingBackend(Componentizer):
    """Test double that returns canned component bytes."""

    name = "recording"

    def __init__(self, outputs: list[bytes] | None = None) -> None:
        self.calls: list[tuple[str, ComponentizeOptions, Path]] = []
        self._outputs = list(outputs or [COMPONENT])

    def componentize(self, source: str, options: ComponentizeOptions, *, cwd: Path) -> bytes:
        self.calls.append((source, options, cwd))
        if len(self._outputs) > 1:
            return self._outputs.pop(0)
        return self._outputs[0]


class RejectingBackend(Componentizer):
    name = "rejecting"

    def componentize(self, source: str, options: ComponentizeOptions, *, cwd: Path) -> bytes:
        raise ComponentizeError("SyntaxError: Unexpected token", status=1)


def test_build_writes_component_and_creates_output_dir(project) -> None:
    project.write({"main.js": "export function handleRequest(req) { return req; }\n"})
    backend = RecordingBackend()

    result = BuildDriver(backend).run_build(project.path())

    output = project.path() / "out" / "cool_function.wasm"
    assert result.path == output.resolve()
    assert output.read_bytes() == COMPONENT
    assert result.size == len(COMPONENT)
    assert result.sha256 == hashlib.sha256(COMPONENT).hexdigest()
    assert result.backend == "recording"
    assert result.reproducible is None
    assert [path.name for path in (project.path() / "out").iterdir()] == ["cool_function.wasm"]


def test_build_passes_source_and_options_to_backend(project) -> None:
    project.write({"main.js": "export const answer = 42;\n"})
    backend = RecordingBackend()

    BuildDriver(backend).run_build(project.path())

    source, options, cwd = backend.calls[0]
    assert source == "export const answer = 42;\n"
    assert options.world_name == "function-world"
    assert options.wit_path == project.path().resolve() / "wit"
    assert cwd == project.path().resolve()


def test_build_succeeds_when_output_dir_exists(project) -> None:
    project.write({"main.js": "export {};\n"})
    project.mkdir("out")
    project.write_bytes("out/cool_function.wasm", b"stale")

    BuildDriver(RecordingBackend()).run_build(project.path())

    assert (project.path() / "out" / "cool_function.wasm").read_bytes() == COMPONENT


def test_build_uses_configured_paths(project) -> None:
    project.write(
        {
            ".componentize.yml": """
            componentize:
              source: src/index.js
              output: dist/nested/app.wasm
            """,
            "src/index.js": "export {};\n",
        }
    )

    result = BuildDriver(RecordingBackend()).run_build(project.path())

    assert result.path == (project.path() / "dist" / "nested" / "app.wasm").resolve()
    assert result.path.read_bytes() == COMPONENT


def test_missing_source_fails_before_any_output(project) -> None:
    backend = RecordingBackend()

    with pytest.raises(FileNotFoundError):
        BuildDriver(backend).run_build(project.path())

    assert backend.calls == []
    assert not (project.path() / "out").exists()


def test_backend_failure_leaves_existing_output_untouched(project) -> None:
    project.write({"main.js": "export function (\n"})
    project.write_bytes("out/cool_function.wasm", b"previous build")

    with pytest.raises(ComponentizeError) as excinfo:
        BuildDriver(RejectingBackend()).run_build(project.path())

    assert "SyntaxError" in str(excinfo.value)
    assert excinfo.value.status == 1
    assert (project.path() / "out" / "cool_function.wasm").read_bytes() == b"previous build"


def test_backend_failure_does_not_create_output(project) -> None:
    project.write({"main.js": "export function (\n"})

    with pytest.raises(ComponentizeError):
        BuildDriver(RejectingBackend()).run_build(project.path())

    assert not (project.path() / "out").exists()


def test_repeated_builds_are_byte_identical(project) -> None:
    project.write({"main.js": "export {};\n"})
    driver = BuildDriver(RecordingBackend())

    first = driver.run_build(project.path())
    first_bytes = first.path.read_bytes()
    second = driver.run_build(project.path())

    assert first.sha256 == second.sha256
    assert second.path.read_bytes() == first_bytes


def test_reproducibility_check_runs_backend_twice(project) -> None:
    project.write({"main.js": "export {};\n"})
    backend = RecordingBackend()

    result = BuildDriver(backend).run_build(project.path(), check_reproducible=True)

    assert len(backend.calls) == 2
    assert result.reproducible is True


def test_reproducibility_check_rejects_differing_output(project) -> None:
    project.write({"main.js": "export {};\n"})
    backend = RecordingBackend([COMPONENT, COMPONENT + b"timestamp"])

    with pytest.raises(NonReproducibleBuildError):
        BuildDriver(backend).run_build(project.path(), check_reproducible=True)

    assert not (project.path() / "out").exists()


def test_reproducibility_check_can_come_from_config(project) -> None:
    project.write(
        {
            ".componentize.yml": "componentize:\n  check_reproducible: true\n",
            "main.js": "export {};\n",
        }
    )
    backend = RecordingBackend()

    BuildDriver(backend).run_build(project.path())

    assert len(backend.calls) == 2


def test_backend_is_resolved_by_name(project) -> None:
    project.write(
        {
            ".componentize.yml": "componentize:\n  backend: jco\n",
            "main.js": "export {};\n",
        }
    )
    requested: list[str] = []

    def resolver(name, config):  # type: ignore[no-untyped-def]
        requested.append(name)
        return RecordingBackend()

    driver = BuildDriver(backend_resolver=resolver)
    driver.run_build(project.path())
    driver.run_build(project.path(), backend="componentize-js")

    assert requested == ["jco", "componentize-js"]


def test_run_guests_delegates_to_guest_builder(project) -> None:
    calls = []

    class RecordingGuestBuilder:
        def build_all(self, config, *, target=None, build_workspace=None):  # type: ignore[no-untyped-def]
            calls.append((config.root, target, build_workspace))
            return [config.root / "components" / "echo-component.wasm"]

    driver = BuildDriver(RecordingBackend(), guest_builder=RecordingGuestBuilder())  # type: ignore[arg-type]
    outputs = driver.run_guests(project.path(), target="wasm32-wasip1", build_workspace=False)

    assert calls == [(project.path().resolve(), "wasm32-wasip1", False)]
    assert outputs[0].name == "echo-component.wasm"


class EmptyBackend(Componentizer):
    name = "empty"

    def componentize(self, source: str, options: ComponentizeOptions, *, cwd: Path) -> bytes:
        return b""


def test_empty_component_is_rejected_for_any_backend(project) -> None:
    project.write({"main.js": "export {};\n"})

    with pytest.raises(ComponentizeError, match="empty produced an empty component"):
        BuildDriver(EmptyBackend()).run_build(project.path())

    assert not (project.path() / "out").exists()


def test_empty_component_on_reproducibility_rerun_is_rejected(project) -> None:
    project.write({"main.js": "export {};\n"})
    backend = RecordingBackend([COMPONENT, b""])

    with pytest.raises(ComponentizeError, match="empty component"):
        BuildDriver(backend).run_build(project.path(), check_reproducible=True)

    assert not (project.path() / "out").exists()


def test_missing_project_path_fails_without_touching_cwd(project, monkeypatch) -> None:
    project.write({"main.js": "export {};\n"})
    monkeypatch.chdir(project.path())
    backend = RecordingBackend()

    with pytest.raises(FileNotFoundError):
        BuildDriver(backend).run_build(project.path() / "typo_project")

    assert backend.calls == []
    assert not (project.path() / "out").exists()


def test_output_write_failure_propagates_unwrapped(project) -> None:
    project.write(
        {
            ".componentize.yml": "componentize:\n  output: main.js/out.wasm\n",
            "main.js": "export {};\n",
        }
    )

    with pytest.raises(OSError) as excinfo:
        BuildDriver(RecordingBackend()).run_build(project.path())

    assert not isinstance(excinfo.value, ComponentizeError)
    assert (project.path() / "main.js").read_text(encoding="utf-8") == "export {};\n"
