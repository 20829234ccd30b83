from .totp_account_workflow import TotpAccountWorkflow
from .totp_enrollment_manager import DEFAULT_ISSUER, TotpEnrollmentManager
from .totp_enrollment_models import SetupMaterial, TotpStatus

__all__ = [
    "DEFAULT_ISSUER",
    "SetupMaterial",
    "TotpAccountWorkflow",
    "TotpEnrollmentManager",
    "TotpStatus",
]
