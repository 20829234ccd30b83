"""
Shared Kernel primitives.

Re-exports the small set of primitives shared across contexts:

    from otpgate.shared_kernel.primitives import AccountId, ensure_utc_datetime
"""

from .account_id import AccountId
from .utc_datetime import ensure_utc_datetime

__all__ = [
    "AccountId",
    "ensure_utc_datetime",
]
