from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Mapping, Sequence

from apps.cli.wiring.modules.totp import build_totp_module
from otpgate.shared_kernel.primitives import AccountId

log = logging.getLogger(__name__)


class NewSecretCli:
    def __init__(self, *, environ: Mapping[str, str] | None = None) -> None:
        self._environ = environ if environ is not None else os.environ

    def run(self, argv: Sequence[str]) -> int:
        parser = _build_parser()
        ns = parser.parse_args(list(argv))
        if not ns.account.strip():
            parser.error("--account must be non-empty")

        module = build_totp_module(environ=self._environ)
        material = module.manager.begin_setup(
            account_id=AccountId(ns.account),
            account_label=ns.account,
        )
        if material.error is not None:
            print(f"error: {material.error}", file=sys.stderr)
            return 1
        setup = material.unwrap()

        qr_out: str | None = None
        if ns.qr_out:
            png = module.manager.render_setup_qr(
                material=setup,
                width=module.config.qr_width,
                height=module.config.qr_height,
            )
            if png.error is not None:
                print(f"error: {png.error}", file=sys.stderr)
                return 1
            target = Path(ns.qr_out)
            target.write_bytes(png.unwrap())
            qr_out = str(target)
            log.info("qr code written: path=%s", target)

        if ns.format == "json":
            payload = {
                "account": ns.account,
                "secret": setup.secret,
                "provisioning_uri": setup.provisioning_uri,
                "qr_out": qr_out,
            }
            print(json.dumps(payload, ensure_ascii=False))
        else:
            lines = [
                f"account: {ns.account}",
                f"secret: {setup.secret}",
                f"uri: {setup.provisioning_uri}",
            ]
            if qr_out is not None:
                lines.append(f"qr: {qr_out}")
            print("\n".join(lines))
        return 0


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="new-secret")
    p.add_argument(
        "--account",
        default="user@example.com",
        help="Account label shown in the authenticator app (default: user@example.com)",
    )
    p.add_argument("--qr-out", default=None, help="Write provisioning QR code PNG to this path")
    p.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Output format",
    )
    return p
