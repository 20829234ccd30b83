from .persistence import InMemoryTotpCredentialStore
from .policy import StaticPrivilegedAccountPolicy
from .security import InMemoryTotpReplayGuard, QrcodePngRenderer
from .time import SystemTotpClock

__all__ = [
    "InMemoryTotpCredentialStore",
    "InMemoryTotpReplayGuard",
    "QrcodePngRenderer",
    "StaticPrivilegedAccountPolicy",
    "SystemTotpClock",
]
