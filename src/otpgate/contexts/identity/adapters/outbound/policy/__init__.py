from .static_privileged_account_policy import StaticPrivilegedAccountPolicy

__all__ = ["StaticPrivilegedAccountPolicy"]
