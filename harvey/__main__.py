"""harvey — compile a Markdown slide deck into resolved slide records."""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path

from .assembler import build_deck, extract_metadata, lint_deck, render_jobs
from .errors import HarveyError

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def _configure_logging(log_file: str | None, verbose: bool) -> list[logging.Handler]:
    """Attach the CLI handlers to the package logger and return them."""
    package_logger = logging.getLogger("harvey")
    package_logger.setLevel(logging.DEBUG)
    handlers: list[logging.Handler] = []
    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        handlers.append(file_handler)
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    handlers.append(console)
    for handler in handlers:
        package_logger.addHandler(handler)
    return handlers


def _remove_logging(handlers: list[logging.Handler], level: int) -> None:
    package_logger = logging.getLogger("harvey")
    for handler in handlers:
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.setLevel(level)


def _write_json(data, output: str | None) -> None:
    text = json.dumps(data, indent=2, default=str, ensure_ascii=False)
    if output:
        Path(output).write_text(text + "\n", encoding="utf-8")
        print(f"Output: {output}")
    else:
        print(text)


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="harvey",
        description="Compile a Markdown slide deck into resolved slide records.",
    )
    parser.add_argument("deck", help="Path to the deck file (YAML)")
    parser.add_argument("--output", "-o", help="Write JSON here instead of stdout")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--extract-meta", action="store_true",
                      help="Emit each slide's resolved metadata without render contexts")
    mode.add_argument("--lint", action="store_true",
                      help="Report every problem in the deck instead of stopping at the first")
    parser.add_argument("--log-file", help="Write a debug log to this file")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Print debug logging to stderr")

    args = parser.parse_args()

    deck_path = Path(args.deck)
    if not deck_path.exists():
        print(f"Error: {deck_path} not found.", file=sys.stderr)
        sys.exit(1)

    previous_level = logging.getLogger("harvey").level
    handlers = _configure_logging(args.log_file, args.verbose)
    try:
        _run(args, deck_path)
    finally:
        _remove_logging(handlers, previous_level)


def _run(args: argparse.Namespace, deck_path: Path) -> None:
    logger.info("CLI arguments: %s", vars(args))

    t0 = time.monotonic()
    if args.lint:
        problems = lint_deck(deck_path)
        for problem in problems:
            print(f"Error: {problem}", file=sys.stderr)
        logger.info("Lint completed in %.2fs", time.monotonic() - t0)
        if problems:
            print(f"{len(problems)} problem(s) found.", file=sys.stderr)
            sys.exit(1)
        print("No problems found.")
        return

    try:
        deck = build_deck(deck_path)
    except HarveyError as exc:
        logger.debug("Build failed", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    logger.info("Build completed in %.2fs, %d slides", time.monotonic() - t0, len(deck.slides))

    if args.extract_meta:
        _write_json(extract_metadata(deck), args.output)
    else:
        _write_json(
            {
                "styles": list(deck.styles),
                "scripts": list(deck.scripts),
                "template-path": list(deck.template_paths),
                "slides": render_jobs(deck),
            },
            args.output,
        )


if __name__ == "__main__":
    main()
