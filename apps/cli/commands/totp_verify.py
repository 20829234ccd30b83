from __future__ import annotations

import argparse
import os
import sys
from typing import Mapping, Sequence

from apps.cli.wiring.modules.totp import at_time_from_unix, build_totp_module


class TotpVerifyCli:
    def __init__(self, *, environ: Mapping[str, str] | None = None) -> None:
        self._environ = environ if environ is not None else os.environ

    def run(self, argv: Sequence[str]) -> int:
        parser = _build_parser()
        ns = parser.parse_args(list(argv))
        if ns.at is not None and ns.at < 0:
            parser.error("--at must be >= 0")

        module = build_totp_module(environ=self._environ)
        tolerance = ns.tolerance if ns.tolerance is not None else module.config.tolerance_steps
        if tolerance < 0:
            parser.error("--tolerance must be >= 0")

        matched = module.validator.validate(
            secret=ns.secret,
            submitted_code=ns.code,
            tolerance_steps=tolerance,
            at_time=at_time_from_unix(ns.at),
        )
        if matched.error is not None:
            print(f"rejected: {matched.error.code}", file=sys.stderr)
            return 1
        print(f"ok (offset {matched.unwrap().offset:+d})")
        return 0


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="verify")
    p.add_argument("--secret", required=True, help="Base32 secret")
    p.add_argument("--code", required=True, help="Code to check")
    p.add_argument("--at", type=int, default=None, help="Unix time in seconds (default: now)")
    p.add_argument(
        "--tolerance",
        type=int,
        default=None,
        help="Accepted drift in time steps (default: from config)",
    )
    return p
