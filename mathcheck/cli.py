"""Command line interface for checking one answer against a reference."""

from __future__ import annotations

import argparse
import json
import random
import sys
from typing import Any

import yaml
from pydantic import ValidationError

from mathcheck.core.errors import MathCheckError
from mathcheck.core.logging import setup_logging
from mathcheck.math.compute import compute
from mathcheck.math.context import CONTEXT_NAMES, get_context

EXIT_CORRECT = 0
EXIT_INCORRECT = 1
EXIT_USAGE = 2


def _parse_flag(text: str) -> tuple[str, Any]:
    """Split ``key=value``; the value is read as YAML so 1, 0.01 and [0, 1] keep their types."""
    name, sep, value = text.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected key=value, got '{text}'")
    try:
        return name.strip(), yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise argparse.ArgumentTypeError(f"can't read the value of '{name}': {exc}") from exc


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mathcheck",
        description="Check a student's answer against a reference answer.",
    )
    parser.add_argument("correct", help="The reference answer, e.g. '(-inf, 3]'.")
    parser.add_argument("student", help="The student's answer as typed.")
    parser.add_argument(
        "--context",
        choices=CONTEXT_NAMES,
        default=None,
        help="Context to parse both answers in (default: MATHCHECK_DEFAULT_CONTEXT).",
    )
    parser.add_argument(
        "--flag",
        dest="flags",
        action="append",
        type=_parse_flag,
        default=[],
        metavar="KEY=VALUE",
        help="Checker flag, e.g. --flag ordered=1 (repeatable).",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for formula test points.")
    parser.add_argument("--preview", action="store_true", help="Check as a preview (no hints).")
    parser.add_argument("--json", action="store_true", help="Print the full answer record as JSON.")
    parser.add_argument("--log-level", default=None, help="Log level (default: MATHCHECK_LOG_LEVEL).")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    context = get_context(args.context)
    try:
        correct = compute(args.correct, context)
        checker = correct.cmp(**dict(args.flags))
    except (MathCheckError, ValidationError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_USAGE

    rng = random.Random(args.seed) if args.seed is not None else None
    ans = checker.evaluate(args.student, is_preview=args.preview, rng=rng)

    if args.json:
        print(json.dumps(ans.to_dict(), indent=2))
    else:
        print(f"score: {ans.score:g}")
        for message in ans.messages:
            print(message)

    return EXIT_CORRECT if ans.correct else EXIT_INCORRECT


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
