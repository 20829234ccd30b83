"""
Adapters package for identity bounded context.
"""

from .outbound import (
    InMemoryTotpCredentialStore,
    InMemoryTotpReplayGuard,
    QrcodePngRenderer,
    StaticPrivilegedAccountPolicy,
    SystemTotpClock,
)

__all__ = [
    "InMemoryTotpCredentialStore",
    "InMemoryTotpReplayGuard",
    "QrcodePngRenderer",
    "StaticPrivilegedAccountPolicy",
    "SystemTotpClock",
]
