"""Tests for project scaffolding."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from componentizer.config import load_config
from componentizer.scaffold import scaffold_project


def test_scaffold_writes_a_buildable_project(tmp_path: Path) -> None:
    root = tmp_path / "My Function"

    written = scaffold_project(root, world_name="function-world", package="mycelia:execution")

    assert {path.relative_to(root.resolve()).as_posix() for path in written} == {
        "main.js",
        "wit/function.wit",
        "package.json",
        ".componentize.yml",
    }
    wit = (root / "wit" / "function.wit").read_text(encoding="utf-8")
    assert wit.startswith("package mycelia:execution;")
    assert "world function-world {" in wit
    assert "export handle-request: func(req: http-request) -> http-response;" in wit
    assert "export function handleRequest(req)" in (root / "main.js").read_text(encoding="utf-8")

    package = json.loads((root / "package.json").read_text(encoding="utf-8"))
    assert package["name"] == "my-function"
    assert "@bytecodealliance/componentize-js" in package["devDependencies"]

    config = load_config(root)
    assert config.componentize.world_name == "function-world"
    assert config.output_path == root.resolve() / "out" / "my_function.wasm"
    assert config.componentize_options().preview2_adapter is not None


def test_scaffold_without_adapter_writes_null(tmp_path: Path) -> None:
    scaffold_project(tmp_path, adapter=None)

    data = yaml.safe_load((tmp_path / ".componentize.yml").read_text(encoding="utf-8"))
    assert data["componentize"]["preview2_adapter"] is None
    assert load_config(tmp_path).componentize_options().preview2_adapter is None


def test_scaffold_refuses_to_overwrite(tmp_path: Path) -> None:
    (tmp_path / "wit").mkdir()
    (tmp_path / "wit" / "function.wit").write_text("package a:b;\n", encoding="utf-8")

    with pytest.raises(FileExistsError):
        scaffold_project(tmp_path)

    assert not (tmp_path / "main.js").exists()
    assert (tmp_path / "wit" / "function.wit").read_text(encoding="utf-8") == "package a:b;\n"


@pytest.mark.parametrize(
    ("world", "package"),
    [("Function_World", "local:function"), ("function-world", "no-namespace")],
)
def test_scaffold_validates_wit_names(tmp_path: Path, world: str, package: str) -> None:
    with pytest.raises(ValueError):
        scaffold_project(tmp_path, world_name=world, package=package)
