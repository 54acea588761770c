"""Logging utilities for componentizer commands."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from .toolchain import CommandResult

_LOGGER_NAME = "componentizer"
_TOOL_OUTPUT_LIMIT = 200


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the componentizer hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure the componentizer logger.

    The console only shows componentizer's own messages unless ``verbose`` is
    set; the file sink, when given, always records everything including the
    relayed output of cargo, wasm-tools and Node.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG if log_file is not None else level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter("[componentizer] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


def log_tool_output(logger: logging.Logger, tool: str, result: "CommandResult") -> None:
    """Relay a finished tool's text output line by line at DEBUG.

    Binary payloads never pass through here; only stderr and, when it decodes
    as text, stdout. Long outputs are cut to the last lines.
    """
    if not logger.isEnabledFor(logging.DEBUG):
        return
    for stream, data in (("stdout", result.stdout), ("stderr", result.stderr)):
        if not data:
            continue
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            logger.debug("%s %s: <%d bytes of binary output>", tool, stream, len(data))
            continue
        lines = text.splitlines()
        if len(lines) > _TOOL_OUTPUT_LIMIT:
            logger.debug("%s %s: ... %d earlier lines omitted", tool, stream, len(lines) - _TOOL_OUTPUT_LIMIT)
            lines = lines[-_TOOL_OUTPUT_LIMIT:]
        for line in lines:
            logger.debug("%s %s: %s", tool, stream, line)
    logger.debug("%s exited with status %d", tool, result.returncode)


__all__ = ["configure_logging", "get_logger", "log_tool_output"]
