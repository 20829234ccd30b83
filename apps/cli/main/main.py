from __future__ import annotations

import logging
import sys

from apps.cli.commands.new_secret import NewSecretCli
from apps.cli.commands.totp_code import TotpCodeCli
from apps.cli.commands.totp_verify import TotpVerifyCli

_USAGE = (
    "Usage:\n"
    "  new-secret [--account LABEL] [--qr-out PATH] [--format text|json]\n"
    "  code --secret BASE32 [--at UNIX]\n"
    "  verify --secret BASE32 --code CODE [--at UNIX] [--tolerance N]"
)


def _configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def main(argv: list[str] | None = None) -> int:
    _configure_logging()
    args = argv if argv is not None else sys.argv[1:]

    if not args:
        print(_USAGE)
        return 2

    cmd = args[0]
    rest = args[1:]

    if cmd == "new-secret":
        return NewSecretCli().run(rest)
    if cmd == "code":
        return TotpCodeCli().run(rest)
    if cmd == "verify":
        return TotpVerifyCli().run(rest)

    print(f"unknown command: {cmd}\n{_USAGE}", file=sys.stderr)
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
