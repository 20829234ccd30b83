from .totp_runtime_config import TotpRuntimeConfig, load_totp_runtime_config

__all__ = ["TotpRuntimeConfig", "load_totp_runtime_config"]
