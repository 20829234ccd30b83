"""
Runtime config loader for the TOTP second-factor engine.

Related: otpgate.contexts.identity.application.use_cases.totp_enrollment_manager,
  apps.cli.wiring.totp
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

_ENV_NAME_KEY = "OTPGATE_ENV"
_CONFIG_PATH_KEY = "OTPGATE_TOTP_CONFIG"
_ALLOWED_ENVS = ("dev", "prod", "test")

_ISSUER_ENV_KEY = "OTPGATE_TOTP_ISSUER"
_DIGITS_ENV_KEY = "OTPGATE_TOTP_DIGITS"
_STEP_ENV_KEY = "OTPGATE_TOTP_STEP_SECONDS"
_TOLERANCE_ENV_KEY = "OTPGATE_TOTP_TOLERANCE_STEPS"
_SECRET_BYTES_ENV_KEY = "OTPGATE_TOTP_SECRET_BYTES"
_QR_WIDTH_ENV_KEY = "OTPGATE_TOTP_QR_WIDTH"
_QR_HEIGHT_ENV_KEY = "OTPGATE_TOTP_QR_HEIGHT"
_PRIVILEGED_ENV_KEY = "OTPGATE_TOTP_PRIVILEGED_ACCOUNTS"

_DEFAULT_ISSUER = "Otpgate"
_DEFAULT_DIGITS = 6
_DEFAULT_STEP_SECONDS = 30
_DEFAULT_TOLERANCE_STEPS = 1
_DEFAULT_SECRET_BYTES = 20
_DEFAULT_QR_SIZE = 200

_SUPPORTED_DIGITS = (6, 7, 8)
_MIN_SECRET_BYTES = 20


@dataclass(frozen=True, slots=True)
class TotpRuntimeConfig:
    """
    Immutable runtime config for TOTP code profile, provisioning and policy.

    Related: otpgate.contexts.identity.application.services.totp_validator,
      otpgate.contexts.identity.adapters.outbound.policy.static_privileged_account_policy
    """

    issuer: str = _DEFAULT_ISSUER
    digits: int = _DEFAULT_DIGITS
    step_seconds: int = _DEFAULT_STEP_SECONDS
    tolerance_steps: int = _DEFAULT_TOLERANCE_STEPS
    secret_bytes: int = _DEFAULT_SECRET_BYTES
    qr_width: int = _DEFAULT_QR_SIZE
    qr_height: int = _DEFAULT_QR_SIZE
    privileged_accounts: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        """
        Validate TOTP runtime config invariants.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Authenticator apps only support 6 to 8 digit codes.
        Raises:
            ValueError: If any value violates required bounds.
        Side Effects:
            Normalizes issuer and privileged account ids.
        """
        normalized_issuer = self.issuer.strip()
        if not normalized_issuer:
            raise ValueError("issuer must be non-empty")
        if self.digits not in _SUPPORTED_DIGITS:
            raise ValueError(f"digits must be one of {_SUPPORTED_DIGITS}, got {self.digits}")
        if self.step_seconds <= 0:
            raise ValueError(f"step_seconds must be > 0, got {self.step_seconds}")
        if self.tolerance_steps < 0:
            raise ValueError(f"tolerance_steps must be >= 0, got {self.tolerance_steps}")
        if self.secret_bytes < _MIN_SECRET_BYTES:
            raise ValueError(
                f"secret_bytes must be >= {_MIN_SECRET_BYTES}, got {self.secret_bytes}"
            )
        if self.qr_width <= 0 or self.qr_height <= 0:
            raise ValueError(
                f"qr size must be positive, got {self.qr_width}x{self.qr_height}"
            )
        accounts = tuple(account.strip() for account in self.privileged_accounts)
        if any(not account for account in accounts):
            raise ValueError("privileged_accounts must not contain blank ids")
        object.__setattr__(self, "issuer", normalized_issuer)
        object.__setattr__(self, "privileged_accounts", accounts)

    def describe(self) -> str:
        """One-line non-secret summary for startup logs."""
        return (
            f"issuer={self.issuer} digits={self.digits} period={self.step_seconds}s "
            f"tolerance=±{self.tolerance_steps} secret_bits={self.secret_bytes * 8} "
            f"qr={self.qr_width}x{self.qr_height} "
            f"privileged_accounts={len(self.privileged_accounts)}"
        )


def load_totp_runtime_config(*, environ: Mapping[str, str]) -> TotpRuntimeConfig:
    """
    Load TOTP runtime config from YAML and env overrides.

    Args:
        environ: Environment mapping used to resolve env and override values.
    Returns:
        TotpRuntimeConfig: Validated runtime settings.
    Assumptions:
        Optional `totp` section lives in the TOTP YAML; precedence is env -> YAML -> default.
    Raises:
        FileNotFoundError: If TOTP YAML path does not exist.
        ValueError: If YAML or environment values are invalid.
    Side Effects:
        Reads one YAML file from disk.
    """
    config_path = _resolve_totp_config_path(environ=environ)
    payload = _load_totp_payload(path=config_path)

    return TotpRuntimeConfig(
        issuer=_resolve_str_setting(
            environ=environ,
            env_key=_ISSUER_ENV_KEY,
            payload=payload,
            payload_key="issuer",
            default=_DEFAULT_ISSUER,
        ),
        digits=_resolve_int_setting(
            environ=environ,
            env_key=_DIGITS_ENV_KEY,
            payload=payload,
            payload_key="digits",
            default=_DEFAULT_DIGITS,
        ),
        step_seconds=_resolve_int_setting(
            environ=environ,
            env_key=_STEP_ENV_KEY,
            payload=payload,
            payload_key="step_seconds",
            default=_DEFAULT_STEP_SECONDS,
        ),
        tolerance_steps=_resolve_int_setting(
            environ=environ,
            env_key=_TOLERANCE_ENV_KEY,
            payload=payload,
            payload_key="tolerance_steps",
            default=_DEFAULT_TOLERANCE_STEPS,
            allow_zero=True,
        ),
        secret_bytes=_resolve_int_setting(
            environ=environ,
            env_key=_SECRET_BYTES_ENV_KEY,
            payload=payload,
            payload_key="secret_bytes",
            default=_DEFAULT_SECRET_BYTES,
        ),
        qr_width=_resolve_int_setting(
            environ=environ,
            env_key=_QR_WIDTH_ENV_KEY,
            payload=payload,
            payload_key="qr_width",
            default=_DEFAULT_QR_SIZE,
        ),
        qr_height=_resolve_int_setting(
            environ=environ,
            env_key=_QR_HEIGHT_ENV_KEY,
            payload=payload,
            payload_key="qr_height",
            default=_DEFAULT_QR_SIZE,
        ),
        privileged_accounts=_resolve_accounts_setting(
            environ=environ,
            env_key=_PRIVILEGED_ENV_KEY,
            payload=payload,
            payload_key="privileged_accounts",
        ),
    )


def _resolve_totp_config_path(*, environ: Mapping[str, str]) -> Path:
    """
    Resolve TOTP YAML path using explicit override or `OTPGATE_ENV`.

    Args:
        environ: Environment mapping.
    Returns:
        Path: TOTP YAML path.
    Assumptions:
        `OTPGATE_TOTP_CONFIG` has priority over env-derived path.
    Raises:
        ValueError: If env value is invalid.
    Side Effects:
        None.
    """
    override = environ.get(_CONFIG_PATH_KEY, "").strip()
    if override:
        return Path(override)

    raw_env = environ.get(_ENV_NAME_KEY, "dev").strip().lower()
    if raw_env not in _ALLOWED_ENVS:
        raise ValueError(
            f"{_ENV_NAME_KEY} must be one of {_ALLOWED_ENVS}, got {raw_env!r}"
        )
    return Path("configs") / raw_env / "totp.yaml"


def _load_totp_payload(*, path: Path) -> Mapping[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"totp config not found: {path}")
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError("totp config must be a mapping at top-level")

    totp_map = raw.get("totp")
    if totp_map is None:
        return {}
    if not isinstance(totp_map, dict):
        raise ValueError("totp section must be a mapping")
    return totp_map


def _resolve_int_setting(
    *,
    environ: Mapping[str, str],
    env_key: str,
    payload: Mapping[str, Any],
    payload_key: str,
    default: int,
    allow_zero: bool = False,
) -> int:
    """
    Resolve integer setting from env -> payload -> default precedence.

    Args:
        environ: Environment mapping.
        env_key: Env variable name.
        payload: Parsed `totp` YAML section.
        payload_key: YAML key name.
        default: Fallback default value.
        allow_zero: Accept `0` (tolerance window).
    Returns:
        int: Resolved integer value.
    Assumptions:
        String env values use base-10 integer format.
    Raises:
        ValueError: If provided value is not an int within bounds.
    Side Effects:
        None.
    """
    lower_bound = 0 if allow_zero else 1
    raw = environ.get(env_key, "").strip()
    if raw:
        try:
            parsed = int(raw, 10)
        except ValueError as error:
            raise ValueError(f"{env_key} must be int, got {raw!r}") from error
        if parsed < lower_bound:
            raise ValueError(f"{env_key} must be >= {lower_bound}, got {parsed}")
        return parsed

    payload_value = payload.get(payload_key)
    if payload_value is None:
        return default
    if isinstance(payload_value, bool) or not isinstance(payload_value, int):
        raise ValueError(
            f"expected int for totp.{payload_key}, got {type(payload_value).__name__}"
        )
    if payload_value < lower_bound:
        raise ValueError(f"totp.{payload_key} must be >= {lower_bound}, got {payload_value}")
    return payload_value


def _resolve_str_setting(
    *,
    environ: Mapping[str, str],
    env_key: str,
    payload: Mapping[str, Any],
    payload_key: str,
    default: str,
) -> str:
    raw = environ.get(env_key, "").strip()
    if raw:
        return raw

    payload_value = payload.get(payload_key)
    if payload_value is None:
        return default
    if not isinstance(payload_value, str):
        raise ValueError(
            f"expected string for totp.{payload_key}, got {type(payload_value).__name__}"
        )
    normalized = payload_value.strip()
    if not normalized:
        raise ValueError(f"totp.{payload_key} must be non-empty")
    return normalized


def _resolve_accounts_setting(
    *,
    environ: Mapping[str, str],
    env_key: str,
    payload: Mapping[str, Any],
    payload_key: str,
) -> tuple[str, ...]:
    """
    Resolve privileged account ids from comma-separated env or YAML list.

    Args:
        environ: Environment mapping.
        env_key: Env variable name.
        payload: Parsed `totp` YAML section.
        payload_key: YAML key name.
    Returns:
        tuple[str, ...]: Account ids, order preserved, blanks in env dropped.
    Assumptions:
        Account ids never contain commas.
    Raises:
        ValueError: If YAML value is not a list of strings.
    Side Effects:
        None.
    """
    raw = environ.get(env_key, "").strip()
    if raw:
        return tuple(part.strip() for part in raw.split(",") if part.strip())

    payload_value = payload.get(payload_key)
    if payload_value is None:
        return ()
    if not isinstance(payload_value, list) or not all(
        isinstance(item, str) for item in payload_value
    ):
        raise ValueError(f"totp.{payload_key} must be a list of strings")
    return tuple(payload_value)


__all__ = [
    "TotpRuntimeConfig",
    "load_totp_runtime_config",
]
