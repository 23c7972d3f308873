"""
ncdialect command line entry point.

    python main.py program.nc --dialect conversational --output program.h --report
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Ensure project root is on path when running as python main.py
_root = Path(__file__).resolve().parent
if str(_root) not in sys.path:
    sys.path.insert(0, str(_root))

from ncdialect.core.config import ConfigError, Dialect, MachineParameters
from ncdialect.engine import process

logger = logging.getLogger("ncdialect")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ncdialect",
        description="Translate a G-code program to a controller dialect and validate it.",
    )
    parser.add_argument("input", type=Path, help="Source G-code program")
    parser.add_argument(
        "--dialect",
        choices=[d.value for d in Dialect],
        default=None,
        help="Target dialect (overrides the parameter file)",
    )
    parser.add_argument("--params", type=Path, default=None, help="Machine parameters JSON file")
    parser.add_argument("--output", "-o", type=Path, default=None, help="Write program here instead of stdout")
    parser.add_argument("--report", action="store_true", help="Print the validation report as JSON to stderr")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser


def load_parameters(args: argparse.Namespace) -> MachineParameters:
    if args.params is not None:
        params = MachineParameters.from_json(args.params)
        if args.dialect is not None and args.dialect != params.dialect.value:
            params = params.with_changes(dialect=Dialect.parse(args.dialect))
        return params
    if args.dialect is not None:
        return MachineParameters.for_dialect(Dialect.parse(args.dialect))
    return MachineParameters.numeric_block()


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        params = load_parameters(args)
        source = args.input.read_text(encoding="utf-8")
    except (ConfigError, OSError) as e:
        logger.error("%s", e)
        return 2

    program, report = process(source, params)

    if args.output is not None:
        args.output.write_text(program.text, encoding="utf-8")
        logger.info("Wrote %d lines to %s", len(program.lines), args.output)
    else:
        sys.stdout.write(program.text)

    for diagnostic in report.errors:
        logger.error("%s", diagnostic)
    for diagnostic in report.warnings:
        logger.warning("%s", diagnostic)
    if args.report:
        json.dump(report.to_dict(), sys.stderr, indent=2)
        sys.stderr.write("\n")

    return 0 if report.is_valid else 1


if __name__ == "__main__":
    sys.exit(main())
