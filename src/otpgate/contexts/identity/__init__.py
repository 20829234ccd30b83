from .application import (
    PrivilegedAccountPolicy,
    ProvisioningUriBuilder,
    QrCodeRenderer,
    SetupMaterial,
    TimeWindowClock,
    TotpAccountWorkflow,
    TotpClock,
    TotpCredentialRecord,
    TotpCredentialStore,
    TotpEnrollmentManager,
    TotpMatch,
    TotpReplayGuard,
    TotpStatus,
    TotpValidator,
)
from .domain import (
    HashAlgorithm,
    SecretCodec,
    TotpAlgorithm,
    TotpCredential,
    TotpEnrollmentState,
    TotpError,
    TotpErrorKind,
    TotpResult,
    TotpSecret,
)

__all__ = [
    "HashAlgorithm",
    "PrivilegedAccountPolicy",
    "ProvisioningUriBuilder",
    "QrCodeRenderer",
    "SecretCodec",
    "SetupMaterial",
    "TimeWindowClock",
    "TotpAccountWorkflow",
    "TotpAlgorithm",
    "TotpClock",
    "TotpCredential",
    "TotpCredentialRecord",
    "TotpCredentialStore",
    "TotpEnrollmentManager",
    "TotpEnrollmentState",
    "TotpError",
    "TotpErrorKind",
    "TotpMatch",
    "TotpReplayGuard",
    "TotpResult",
    "TotpSecret",
    "TotpStatus",
    "TotpValidator",
]
