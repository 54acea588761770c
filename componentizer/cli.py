"""CLI entrypoints for componentizer commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError
from .driver import BuildDriver
from .logging import configure_logging
from .scaffold import scaffold_project
from .toolchain import ToolchainError


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="componentizer",
        description="Build WebAssembly components from JavaScript functions and Rust guests.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write full debug logs, including tool output, to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser(
        "build",
        help="Componentize the project's JavaScript source.",
    )
    _add_verbose_option(build_parser, suppress_default=True)
    _add_path_argument(build_parser)
    build_parser.add_argument(
        "--backend",
        default=None,
        help="Componentization backend to use (overrides .componentize.yml).",
    )
    build_parser.add_argument(
        "--check-reproducible",
        action="store_true",
        default=None,
        help="Componentize twice and fail if the outputs differ.",
    )

    guests_parser = subparsers.add_parser(
        "guests",
        help="Build every Rust guest into a component.",
    )
    _add_verbose_option(guests_parser, suppress_default=True)
    _add_path_argument(guests_parser)
    guests_parser.add_argument(
        "--target",
        default=None,
        help="Target triple for the final workspace build.",
    )
    guests_parser.add_argument(
        "--no-workspace",
        dest="build_workspace",
        action="store_false",
        default=None,
        help="Skip `cargo build --workspace` after the guests are built.",
    )

    init_parser = subparsers.add_parser(
        "init",
        help="Create a starter function project.",
    )
    _add_verbose_option(init_parser, suppress_default=True)
    _add_path_argument(init_parser)
    init_parser.add_argument(
        "--world",
        default="function-world",
        help="WIT world the function exports.",
    )
    init_parser.add_argument(
        "--package",
        default="local:function",
        help="WIT package name, as 'namespace:name'.",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for componentizer commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = Path(args.log_file) if args.log_file else None
    configure_logging(verbose=bool(args.verbose), log_file=log_file)

    driver = BuildDriver()

    if args.command == "build":
        try:
            result = driver.run_build(
                args.path,
                backend=args.backend,
                check_reproducible=args.check_reproducible,
            )
        except (FileNotFoundError, ConfigError) as exc:
            parser.exit(1, f"{exc}\n")
        except (ToolchainError, OSError, ValueError) as exc:
            parser.exit(1, f"componentizer build failed: {exc}\nRun with --verbose for more details.\n")
        suffix = " (reproducible)" if result.reproducible else ""
        print(f"Component written to {_relativize(result.path)} ({result.size} bytes){suffix}")
    elif args.command == "guests":
        try:
            outputs = driver.run_guests(
                args.path,
                target=args.target,
                build_workspace=args.build_workspace,
            )
        except (FileNotFoundError, ConfigError) as exc:
            parser.exit(1, f"{exc}\n")
        except (ToolchainError, OSError) as exc:
            parser.exit(1, f"componentizer guests failed: {exc}\nRun with --verbose for more details.\n")
        for output in outputs:
            print(f"Component written to {_relativize(output)}")
    elif args.command == "init":
        try:
            written = scaffold_project(args.path, world_name=args.world, package=args.package)
        except (OSError, ValueError) as exc:
            parser.exit(1, f"{exc}\n")
        for path in written:
            print(f"Created {_relativize(path)}")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
