from .clock import TotpClock
from .privileged_account_policy import PrivilegedAccountPolicy
from .qr_code_renderer import QrCodeRenderer
from .totp_credential_store import TotpCredentialRecord, TotpCredentialStore
from .totp_replay_guard import TotpReplayGuard

__all__ = [
    "PrivilegedAccountPolicy",
    "QrCodeRenderer",
    "TotpClock",
    "TotpCredentialRecord",
    "TotpCredentialStore",
    "TotpReplayGuard",
]
