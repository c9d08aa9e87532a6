"""CLI entrypoints for umldoc commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError, UmlDocConfig, load_config
from .logging import configure_logging
from .orchestrator import Orchestrator
from .reflection import ModelError, load_project
from .render.dispatcher import RenderError

_FAILURES = (ConfigError, ModelError, RenderError, FileNotFoundError, LookupError)


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    kwargs["default"] = argparse.SUPPRESS if suppress_default else False
    parser.add_argument("-v", "--verbose", **kwargs)


def _add_model_arguments(parser: argparse.ArgumentParser, *, with_name: bool) -> None:
    parser.add_argument("model", help="Path to the TypeDoc JSON reflection model.")
    if with_name:
        parser.add_argument("name", help="Qualified or display name of the class or interface.")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to .umldoc.yml or its directory (defaults to the model's directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="umldoc",
        description="Generate UML class hierarchy diagrams for API documentation.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Render diagrams for every class and interface in a model.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    _add_model_arguments(generate_parser, with_name=False)
    generate_parser.add_argument(
        "--output",
        default="diagrams",
        help="Directory receiving images and diagrams.json (defaults to ./diagrams).",
    )

    markup_parser = subparsers.add_parser(
        "markup",
        help="Print the PlantUML markup for one type.",
    )
    _add_verbose_option(markup_parser, suppress_default=True)
    _add_model_arguments(markup_parser, with_name=True)

    url_parser = subparsers.add_parser(
        "url",
        help="Print the PlantUML server URL for one type.",
    )
    _add_verbose_option(url_parser, suppress_default=True)
    _add_model_arguments(url_parser, with_name=True)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP diagram service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for umldoc commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    orchestrator = Orchestrator()

    if args.command == "generate":
        try:
            config = _load_config(args)
            report = orchestrator.run(args.model, args.output, config=config)
        except _FAILURES as exc:
            parser.exit(1, f"umldoc generate failed: {exc}\nRun with --verbose for more details.\n")
        summary = f"{report.rendered} diagram(s) written to {_relativize(report.output_dir)}"
        if report.failed:
            summary += f" ({report.failed} failed)"
        print(summary)
    elif args.command in ("markup", "url"):
        try:
            config = _load_config(args)
            project = load_project(Path(args.model))
            if args.command == "markup":
                result = orchestrator.markup_for(project, args.name, config)
            else:
                result = orchestrator.url_for(project, args.name, config)
        except _FAILURES as exc:
            parser.exit(1, f"{_message(exc)}\n")
        if not result:
            parser.exit(1, f"'{args.name}' has no inheritance relations to draw\n")
        print(result)
    elif args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _load_config(args: argparse.Namespace) -> UmlDocConfig:
    if args.config:
        return load_config(Path(args.config))
    return load_config(Path(args.model).expanduser().resolve().parent)


def _message(exc: BaseException) -> str:
    # KeyError-style exceptions quote their message.
    return exc.args[0] if isinstance(exc, LookupError) and exc.args else str(exc)


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
