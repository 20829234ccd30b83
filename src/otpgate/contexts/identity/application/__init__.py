from .ports import (
    PrivilegedAccountPolicy,
    QrCodeRenderer,
    TotpClock,
    TotpCredentialRecord,
    TotpCredentialStore,
    TotpReplayGuard,
)
from .services import ProvisioningUriBuilder, TimeWindowClock, TotpMatch, TotpValidator
from .use_cases import SetupMaterial, TotpAccountWorkflow, TotpEnrollmentManager, TotpStatus

__all__ = [
    "PrivilegedAccountPolicy",
    "ProvisioningUriBuilder",
    "QrCodeRenderer",
    "SetupMaterial",
    "TimeWindowClock",
    "TotpAccountWorkflow",
    "TotpClock",
    "TotpCredentialRecord",
    "TotpCredentialStore",
    "TotpEnrollmentManager",
    "TotpMatch",
    "TotpReplayGuard",
    "TotpStatus",
    "TotpValidator",
]
