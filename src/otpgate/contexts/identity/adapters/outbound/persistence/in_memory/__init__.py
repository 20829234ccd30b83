from .totp_credential_store import InMemoryTotpCredentialStore

__all__ = ["InMemoryTotpCredentialStore"]
