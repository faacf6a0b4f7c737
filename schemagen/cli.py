"""CLI entrypoints for schemagen commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError, load_config, parse_run_params
from .logging import configure_logging
from .orchestrator import AggregateRunError, Orchestrator
from .specs import CorpusResolutionError
from .stores.registry import RegistryLockError


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


def _add_params_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "params",
        nargs="?",
        default=None,
        help=(
            "JSON object with optional batchCount, batchIndex, localPath, "
            "readmeFiles and outputPath keys."
        ),
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schemagen",
        description="Generate resource schemas for every package in the API specs corpus.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to .schemagen.yml or its directory (defaults to $SCHEMAGEN_CONFIG or cwd).",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write detailed logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate-all",
        help="Generate schemas for all base paths, or one batch of them.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    _add_params_argument(generate_parser)

    list_parser = subparsers.add_parser(
        "list-units",
        help="Print the base paths selected by the given batch parameters.",
    )
    _add_verbose_option(list_parser, suppress_default=True)
    _add_params_argument(list_parser)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service exposing generate-all.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="0.0.0.0", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for schemagen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    if args.command == "serve":
        from .service.app import run_service

        run_service(host=args.host, port=args.port, config_path=args.config)
        return

    try:
        params = parse_run_params(getattr(args, "params", None))
        orchestrator = Orchestrator(load_config(args.config))
    except ConfigError as exc:
        parser.exit(2, f"schemagen: {exc}\n")

    if args.command == "generate-all":
        try:
            report = orchestrator.run(params)
        except AggregateRunError as exc:
            parser.exit(1, f"{exc}\n")
        except (ConfigError, CorpusResolutionError, RegistryLockError) as exc:
            parser.exit(1, f"schemagen generate-all failed: {exc}\n")
        failed = len(report.failed)
        print(f"Processed {len(report.packages)} packages ({failed} failed)")
    elif args.command == "list-units":
        try:
            units = orchestrator.resolve_units(params)
        except (ConfigError, CorpusResolutionError) as exc:
            parser.exit(1, f"schemagen list-units failed: {exc}\n")
        for base_path in units.base_paths:
            print(base_path)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])
