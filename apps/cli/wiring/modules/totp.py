"""
Composition helpers for the TOTP operator CLI.

Related: apps.cli.commands.new_secret, apps.cli.commands.totp_code,
  apps.cli.commands.totp_verify
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Mapping

from otpgate.contexts.identity.adapters.outbound import (
    InMemoryTotpCredentialStore,
    InMemoryTotpReplayGuard,
    QrcodePngRenderer,
    StaticPrivilegedAccountPolicy,
    SystemTotpClock,
)
from otpgate.contexts.identity.application.ports import TotpClock
from otpgate.contexts.identity.application.services import (
    ProvisioningUriBuilder,
    TimeWindowClock,
    TotpValidator,
)
from otpgate.contexts.identity.application.use_cases import (
    TotpAccountWorkflow,
    TotpEnrollmentManager,
)
from otpgate.contexts.identity.domain.services import SecretCodec, TotpAlgorithm
from otpgate.platform.config import TotpRuntimeConfig, load_totp_runtime_config

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TotpCliModule:
    """
    TotpCliModule — wired TOTP engine components shared by CLI commands.
    """

    config: TotpRuntimeConfig
    secret_codec: SecretCodec
    time_window_clock: TimeWindowClock
    validator: TotpValidator
    uri_builder: ProvisioningUriBuilder
    manager: TotpEnrollmentManager
    workflow: TotpAccountWorkflow


def build_totp_module(
    *,
    environ: Mapping[str, str],
    clock: TotpClock | None = None,
) -> TotpCliModule:
    """
    Build fully wired TOTP engine from environment settings.

    Args:
        environ: Runtime environment mapping.
        clock: Optional UTC clock; system clock when omitted.
    Returns:
        TotpCliModule: Wired components.
    Assumptions:
        Config YAML is resolved by `load_totp_runtime_config`.
    Raises:
        FileNotFoundError: If config YAML is missing.
        ValueError: If config values are invalid.
    Side Effects:
        Reads one YAML file from disk and writes one startup log line.
    """
    config = load_totp_runtime_config(environ=environ)
    log.info("totp engine config: %s", config.describe())

    resolved_clock: TotpClock = clock if clock is not None else SystemTotpClock()
    secret_codec = SecretCodec(secret_bytes=config.secret_bytes)
    time_window_clock = TimeWindowClock(clock=resolved_clock, step_seconds=config.step_seconds)
    validator = TotpValidator(
        time_window_clock=time_window_clock,
        secret_codec=secret_codec,
        algorithm=TotpAlgorithm(),
        digits=config.digits,
    )
    uri_builder = ProvisioningUriBuilder(qr_renderer=QrcodePngRenderer())
    manager = TotpEnrollmentManager(
        secret_codec=secret_codec,
        validator=validator,
        uri_builder=uri_builder,
        clock=resolved_clock,
        privileged_policy=StaticPrivilegedAccountPolicy(account_ids=config.privileged_accounts),
        issuer=config.issuer,
        tolerance_steps=config.tolerance_steps,
        replay_guard=InMemoryTotpReplayGuard.for_window(
            clock=resolved_clock,
            step_seconds=config.step_seconds,
            tolerance_steps=config.tolerance_steps,
        ),
    )
    workflow = TotpAccountWorkflow(
        manager=manager,
        store=InMemoryTotpCredentialStore(),
        secret_codec=secret_codec,
    )
    return TotpCliModule(
        config=config,
        secret_codec=secret_codec,
        time_window_clock=time_window_clock,
        validator=validator,
        uri_builder=uri_builder,
        manager=manager,
        workflow=workflow,
    )


def at_time_from_unix(raw: int | None) -> datetime | None:
    """Convert optional `--at` Unix seconds into a UTC datetime."""
    if raw is None:
        return None
    if raw < 0:
        raise ValueError(f"--at must be >= 0, got {raw}")
    return datetime.fromtimestamp(raw, tz=timezone.utc)
