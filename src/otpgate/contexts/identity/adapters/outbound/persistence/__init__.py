from .in_memory import InMemoryTotpCredentialStore

__all__ = ["InMemoryTotpCredentialStore"]
