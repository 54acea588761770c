"""componentize-js backend driven through a Node.js bridge script."""

from __future__ import annotations

import json
import tempfile
from pathlib import Path

from ..logging import get_logger, log_tool_output
from ..models import ComponentizeOptions
from ..toolchain import CommandRunner, run_command
from .base import ComponentizeError, Componentizer

COMPONENTIZE_JS_MODULE = "@bytecodealliance/componentize-js"

# Reads {source, options, outPath} as JSON from stdin and writes the component to outPath.
# Stdout stays free for whatever the library or the user's module prints.
BRIDGE_SCRIPT = """\
import { writeFile } from 'node:fs/promises';
import { componentize } from '%(module)s';

const chunks = [];
for await (const chunk of process.stdin) {
  chunks.push(chunk);
}
const { source, options, outPath } = JSON.parse(Buffer.concat(chunks).toString('utf8'));
const { component } = await componentize(source, options);
await writeFile(outPath, component);
"""


class ComponentizeJsBackend(Componentizer):
    """Calls ``componentize()`` from componentize-js in a Node subprocess."""

    name = "componentize-js"

    def __init__(
        self,
        node: str = "node",
        *,
        module: str = COMPONENTIZE_JS_MODULE,
        runner: CommandRunner | None = None,
    ) -> None:
        self.node = node
        self.module = module
        self._runner = runner or run_command
        self.logger = get_logger("backends.node")

    def componentize(
        self, source: str, options: ComponentizeOptions, *, cwd: Path
    ) -> bytes:
        args = [
            self.node,
            "--input-type=module",
            "--eval",
            BRIDGE_SCRIPT % {"module": self.module},
        ]
        with tempfile.TemporaryDirectory(prefix="componentizer-") as staging:
            output_file = Path(staging) / "component.wasm"
            payload = json.dumps(
                {
                    "source": source,
                    "options": options.to_payload(),
                    "outPath": str(output_file),
                }
            )
            self.logger.debug(
                "Invoking %s via %s (world=%s, wit=%s)",
                self.module,
                self.node,
                options.world_name,
                options.wit_path,
            )
            result = self._runner(args, cwd=cwd, input=payload.encode("utf-8"))
            log_tool_output(self.logger, self.module, result)
            if not result.ok:
                raise ComponentizeError(
                    f"{self.module} failed to componentize the source.",
                    status=result.returncode,
                    stderr=result.stderr_text(),
                )
            if not output_file.exists():
                raise ComponentizeError(f"{self.module} did not write a component.")
            component = output_file.read_bytes()

        if not component:
            raise ComponentizeError(f"{self.module} produced an empty component.")
        return component
