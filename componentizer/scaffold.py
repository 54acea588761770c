"""Project scaffolding for new JavaScript function components."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, List

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .config import CONFIG_FILENAME
from .logging import get_logger

TEMPLATES_DIR = Path(__file__).parent / "templates"
COMPONENTIZE_JS_VERSION = "^0.18.0"

# Rendered file (relative to the project) -> template name.
_FILES: Dict[str, str] = {
    "main.js": "main.js.j2",
    "wit/function.wit": "wit/function.wit.j2",
    "package.json": "package.json.j2",
    CONFIG_FILENAME: "componentize.yml.j2",
}

_WIT_PACKAGE = re.compile(r"^[a-z][a-z0-9-]*:[a-z][a-z0-9-]*(@[0-9A-Za-z.+-]+)?$")
_WIT_IDENT = re.compile(r"^[a-z][a-z0-9]*(-[a-z][a-z0-9]*)*$")

logger = get_logger("scaffold")


def scaffold_project(
    path: str | Path,
    *,
    world_name: str = "function-world",
    package: str = "local:function",
    adapter: str | None = "../wasi_snapshot_preview1.reactor.wasm.dev",
) -> List[Path]:
    """Render a starter function project into ``path`` and return the files written."""
    if not _WIT_IDENT.match(world_name):
        raise ValueError(f"'{world_name}' is not a valid WIT world name")
    if not _WIT_PACKAGE.match(package):
        raise ValueError(f"'{package}' is not a valid WIT package name (expected 'namespace:name')")

    root = Path(path).expanduser().resolve()
    targets = {relative: root / relative for relative in _FILES}
    existing = [str(target) for target in targets.values() if target.exists()]
    if existing:
        raise FileExistsError(f"Refusing to overwrite existing files: {', '.join(existing)}")

    project_name = _npm_name(root.name)
    context = {
        "project_name": project_name,
        "output_name": project_name.replace("-", "_"),
        "world_name": world_name,
        "package": package,
        "adapter": adapter,
        "componentize_js_version": COMPONENTIZE_JS_VERSION,
    }

    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
    )
    rendered = {
        relative: env.get_template(template).render(**context)
        for relative, template in _FILES.items()
    }

    written: List[Path] = []
    for relative, content in rendered.items():
        target = targets[relative]
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        logger.debug("Wrote %s", target)
        written.append(target)
    return written


def _npm_name(name: str) -> str:
    cleaned = re.sub(r"[^a-z0-9-]+", "-", name.lower()).strip("-")
    return cleaned or "function"


__all__ = ["scaffold_project"]
