"""CLI entrypoints for storybox commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .config import ConfigError, load_config
from .discovery import build_arg_type_index
from .errors import DirectoryWalkFailure
from .logging import configure_logging
from .sandbox import Sandbox, build_sandbox
from .service import run_service


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    kwargs["default"] = argparse.SUPPRESS if suppress_default else False
    parser.add_argument("-v", "--verbose", **kwargs)


def _add_log_file_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log records, with timestamps, to this file.",
    )


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Project root or .storybox.yml path (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="storybox",
        description="Preview component stories in a browser sandbox.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Discover stories and serve the sandbox.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    _add_log_file_option(serve_parser)
    _add_path_argument(serve_parser)
    serve_parser.add_argument("--host", default=None, help="Interface to bind (overrides server.host).")
    serve_parser.add_argument("--port", type=int, default=None, help="Port to bind (overrides server.port).")

    list_parser = subparsers.add_parser(
        "list",
        help="Print the discovered components and stories.",
    )
    _add_verbose_option(list_parser, suppress_default=True)
    _add_log_file_option(list_parser)
    _add_path_argument(list_parser)
    list_parser.add_argument(
        "--json",
        action="store_true",
        help="Emit the registry as JSON instead of a text listing.",
    )

    return parser


def _load(parser: argparse.ArgumentParser, path: str) -> Sandbox:
    try:
        config = load_config(Path(path))
        sandbox = build_sandbox(config)
    except (ConfigError, DirectoryWalkFailure) as exc:
        parser.exit(1, f"storybox: {exc}\n")
    return sandbox


def _print_listing(sandbox: Sandbox) -> None:
    for component in sandbox.registry:
        ssr = " [ssr]" if component.can_ssr else ""
        print(f"{component.name}: {component.title} ({component.path}){ssr}")
        for story in component.stories:
            args = ", ".join(f"{spec.name}={spec.default_text}" for spec in story.args.values())
            print(f"  {story.key}: {story.title}" + (f" ({args})" if args else ""))
    for warning in sandbox.warnings:
        print(f"warning: {warning.path}: {warning.message}", file=sys.stderr)


def _print_json(sandbox: Sandbox) -> None:
    payload = {
        "components": [
            {
                "name": component.name,
                "title": component.title,
                "path": component.path,
                "can_ssr": component.can_ssr,
                "stories": [
                    {
                        "key": story.key,
                        "title": story.title,
                        "has_ssr": story.has_ssr,
                        "args": {
                            name: {"type": spec.type.value, "default": spec.default_text}
                            for name, spec in story.args.items()
                        },
                    }
                    for story in component.stories
                ],
            }
            for component in sandbox.registry
        ],
        "server_templates": build_arg_type_index(sandbox.registry),
        "warnings": [
            {"path": warning.path, "kind": warning.kind, "message": warning.message}
            for warning in sandbox.warnings
        ],
    }
    print(json.dumps(payload, indent=2))


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for storybox commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    sandbox = _load(parser, args.path)

    if args.command == "serve":
        run_service(sandbox, host=args.host, port=args.port)
    elif args.command == "list":
        if args.json:
            _print_json(sandbox)
        else:
            _print_listing(sandbox)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])
