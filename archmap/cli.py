"""CLI entrypoints for archmap commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .errors import AnalysisError, ScanError
from .logging import configure_logging
from .orchestrator import Orchestrator
from .summaries import HeuristicSummarizer


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


def _positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from exc
    if parsed < 1:
        raise argparse.ArgumentTypeError("value must be at least 1")
    return parsed


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="archmap",
        description="Build a file-level dependency graph and architecture statistics for a source tree.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write timestamped log records to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan_parser = subparsers.add_parser(
        "scan",
        help="Scan a directory and emit the graph payload as JSON.",
    )
    _add_verbose_option(scan_parser, suppress_default=True)
    scan_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Directory to scan (defaults to current directory).",
    )
    scan_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Write the JSON payload to this file instead of stdout.",
    )
    scan_parser.add_argument(
        "--workers",
        type=_positive_int,
        default=None,
        help="Analyse files on this many threads (overrides .archmap.yml).",
    )
    scan_parser.add_argument(
        "--top",
        type=_positive_int,
        default=None,
        help="Number of complexity hotspots to report (overrides .archmap.yml).",
    )

    summarize_parser = subparsers.add_parser(
        "summarize",
        help="Print a heuristic summary for a single file.",
    )
    _add_verbose_option(summarize_parser, suppress_default=True)
    summarize_parser.add_argument("path", help="File or directory to summarize.")

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=_positive_int, default=8000, help="Port to bind.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for archmap commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    if args.command == "scan":
        orchestrator = Orchestrator(workers=args.workers, top_n=args.top)
        try:
            result = orchestrator.scan(args.path)
        except ScanError as exc:
            parser.exit(1, f"{exc}\n")
        except Exception as exc:  # pragma: no cover
            parser.exit(1, f"archmap scan failed: {exc}\nRun with --verbose for more details.\n")
        text = json.dumps(result.to_payload(), indent=2)
        if args.output is not None:
            args.output.write_text(text + "\n", encoding="utf-8")
            print(f"Graph written to {_relativize(args.output.resolve())}")
        else:
            print(text)
    elif args.command == "summarize":
        summarizer = HeuristicSummarizer()
        try:
            summary, _, content_hash = summarizer.summarize_path(args.path)
        except AnalysisError as exc:
            parser.exit(1, f"{exc}\n")
        payload = summary.to_payload()
        payload["hash"] = content_hash
        print(json.dumps(payload, indent=2))
    elif args.command == "serve":  # pragma: no cover - integration path
        from .service import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
