from __future__ import annotations

import argparse
import os
import sys
from typing import Mapping, Sequence

from apps.cli.wiring.modules.totp import at_time_from_unix, build_totp_module


class TotpCodeCli:
    def __init__(self, *, environ: Mapping[str, str] | None = None) -> None:
        self._environ = environ if environ is not None else os.environ

    def run(self, argv: Sequence[str]) -> int:
        parser = _build_parser()
        ns = parser.parse_args(list(argv))
        if ns.at is not None and ns.at < 0:
            parser.error("--at must be >= 0")

        module = build_totp_module(environ=self._environ)
        parsed = module.secret_codec.parse_base32(ns.secret)
        if parsed.error is not None:
            print(f"error: {parsed.error}", file=sys.stderr)
            return 1

        at_time = at_time_from_unix(ns.at)
        code = module.validator.code_at(secret=parsed.unwrap(), at_time=at_time)
        clock = module.time_window_clock
        remaining = clock.remaining_seconds_in_step(clock.unix_time(at_time))
        print(f"{code} (valid for {remaining}s)")
        return 0


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="code")
    p.add_argument("--secret", required=True, help="Base32 secret")
    p.add_argument("--at", type=int, default=None, help="Unix time in seconds (default: now)")
    return p
