"""CLI entrypoint for bulk UK postcode enrichment."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TextIO

from postcode_enricher.app.container import build_container
from postcode_enricher.app.controller import Phase
from postcode_enricher.common.config_loader import load_config
from postcode_enricher.common.constants import EXIT_HARD_FAIL, EXIT_NOTHING_TO_DO, EXIT_SUCCESS
from postcode_enricher.common.errors import EnricherError
from postcode_enricher.common.fs import read_text
from postcode_enricher.common.ids import generate_run_id
from postcode_enricher.common.logging import build_logger
from postcode_enricher.pipeline.normalise import parse_postcodes
from postcode_enricher.pipeline.table import format_table

COMMANDS = ("enrich", "parse")


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("command", choices=COMMANDS)
    parser.add_argument("--input", default="-", help="file of postcodes, '-' for stdin")
    parser.add_argument("--output-dir", default=".")
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--log-dir", default=None)
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARN", "ERROR"])
    parser.add_argument("--no-preview", action="store_true")
    return parser.parse_args(argv)


def _read_input(path: str, stdin: TextIO) -> str:
    if path == "-":
        return stdin.read()
    return read_text(Path(path))


def run_command(args: argparse.Namespace, *, stdin: TextIO | None = None, stdout: TextIO | None = None) -> int:
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    raw = _read_input(args.input, stdin)

    if args.command == "parse":
        postcodes = parse_postcodes(raw)
        for postcode in postcodes:
            print(postcode, file=stdout)
        return EXIT_SUCCESS if postcodes else EXIT_NOTHING_TO_DO

    config = load_config(
        Path(args.config_dir),
        overlay_config_dir=Path(args.overlay_config_dir) if args.overlay_config_dir else None,
    )
    logger = build_logger(
        generate_run_id(),
        log_dir=Path(args.log_dir) if args.log_dir else None,
        level=args.log_level,
    )
    container = build_container(config, logger=logger, on_status=lambda message: print(message, file=stdout))
    try:
        state = container.controller.run(raw)
        if state.phase is Phase.IDLE:
            return EXIT_NOTHING_TO_DO
        if state.phase is not Phase.DONE:
            return EXIT_HARD_FAIL
        if not args.no_preview and state.table is not None:
            print(format_table(state.table), file=stdout)
        out_path = container.controller.download(Path(args.output_dir))
        print(f"Wrote {out_path}", file=stdout)
    finally:
        container.close()
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    try:
        return run_command(args)
    except EnricherError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_HARD_FAIL
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
