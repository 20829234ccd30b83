from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime

from otpgate.contexts.identity.application.ports import (
    PrivilegedAccountPolicy,
    TotpClock,
    TotpReplayGuard,
)
from otpgate.contexts.identity.application.services import (
    DEFAULT_QR_HEIGHT,
    DEFAULT_QR_WIDTH,
    DEFAULT_TOLERANCE_STEPS,
    ProvisioningUriBuilder,
    TotpMatch,
    TotpValidator,
)
from otpgate.contexts.identity.application.use_cases.totp_enrollment_models import (
    SetupMaterial,
    TotpStatus,
)
from otpgate.contexts.identity.domain.entities import TotpCredential
from otpgate.contexts.identity.domain.errors import TotpErrorKind, TotpResult
from otpgate.contexts.identity.domain.services import SecretCodec
from otpgate.contexts.identity.domain.value_objects import TotpSecret
from otpgate.shared_kernel.primitives import AccountId, ensure_utc_datetime

log = logging.getLogger(__name__)

DEFAULT_ISSUER = "Otpgate"


class TotpEnrollmentManager:
    """
    TotpEnrollmentManager — TOTP lifecycle: setup, enable, disable, reset, status, login verify.

    The manager never persists anything: it is handed the current credential and returns
    new immutable values; the caller (account store owner) decides what to write.

    Related:
      - src/otpgate/contexts/identity/application/services/totp_validator.py
      - src/otpgate/contexts/identity/application/services/provisioning_uri_builder.py
      - src/otpgate/contexts/identity/application/use_cases/totp_account_workflow.py
    """

    def __init__(
        self,
        *,
        secret_codec: SecretCodec,
        validator: TotpValidator,
        uri_builder: ProvisioningUriBuilder,
        clock: TotpClock,
        privileged_policy: PrivilegedAccountPolicy,
        issuer: str = DEFAULT_ISSUER,
        tolerance_steps: int = DEFAULT_TOLERANCE_STEPS,
        replay_guard: TotpReplayGuard | None = None,
    ) -> None:
        """
        Initialize manager dependencies and immutable issuer/tolerance policy.

        Args:
            secret_codec: Secret generation and Base32 conversion.
            validator: Code validator.
            uri_builder: Provisioning URI and QR builder.
            clock: UTC time source for credential timestamps.
            privileged_policy: Hook telling which accounts must keep TOTP enabled.
            issuer: Issuer label shown in authenticator apps.
            tolerance_steps: Accepted clock drift in time steps.
            replay_guard: Optional single-use guard applied by `verify`.
        Returns:
            None.
        Assumptions:
            Validator and URI builder share the same digits/period profile.
        Raises:
            ValueError: If dependencies are missing, issuer is blank, or tolerance is negative.
        Side Effects:
            None.
        """
        normalized_issuer = issuer.strip()
        if secret_codec is None:  # type: ignore[truthy-bool]
            raise ValueError("TotpEnrollmentManager requires secret_codec")
        if validator is None:  # type: ignore[truthy-bool]
            raise ValueError("TotpEnrollmentManager requires validator")
        if uri_builder is None:  # type: ignore[truthy-bool]
            raise ValueError("TotpEnrollmentManager requires uri_builder")
        if clock is None:  # type: ignore[truthy-bool]
            raise ValueError("TotpEnrollmentManager requires clock")
        if privileged_policy is None:  # type: ignore[truthy-bool]
            raise ValueError("TotpEnrollmentManager requires privileged_policy")
        if not normalized_issuer:
            raise ValueError("TotpEnrollmentManager requires non-empty issuer")
        if tolerance_steps < 0:
            raise ValueError(
                f"TotpEnrollmentManager tolerance_steps must be >= 0, got {tolerance_steps}"
            )

        self._secret_codec = secret_codec
        self._validator = validator
        self._uri_builder = uri_builder
        self._clock = clock
        self._privileged_policy = privileged_policy
        self._issuer = normalized_issuer
        self._tolerance_steps = tolerance_steps
        self._replay_guard = replay_guard

    def begin_setup(
        self,
        *,
        account_id: AccountId,
        account_label: str,
        existing_credential: TotpCredential | None = None,
    ) -> TotpResult[SetupMaterial]:
        """
        Produce provisioning material for a new or already enabled credential.

        Args:
            account_id: Account identifier.
            account_label: Label shown in the authenticator app (e.g. e-mail).
            existing_credential: Current stored credential, if any.
        Returns:
            TotpResult[SetupMaterial]: Material re-displaying the enabled secret, or a fresh
                pending secret; `EMPTY_LABEL` for a blank label.
        Assumptions:
            An enabled secret is never rotated silently; rotation goes through `reset`.
        Raises:
            ValueError: If credential belongs to another account.
        Side Effects:
            Consumes OS random source when a fresh secret is generated.
        """
        _ensure_same_account(account_id=account_id, credential=existing_credential)
        if (
            existing_credential is not None
            and existing_credential.enabled
            and existing_credential.secret is not None
        ):
            return self._build_material(
                account_id=account_id,
                account_label=account_label,
                secret=existing_credential.secret,
                enabled=True,
            )
        return self._build_material(
            account_id=account_id,
            account_label=account_label,
            secret=self._secret_codec.generate(),
            enabled=False,
        )

    def enable(
        self,
        *,
        account_id: AccountId,
        candidate_secret: TotpSecret | str | None,
        verification_code: str | None,
        existing_credential: TotpCredential | None = None,
    ) -> TotpResult[TotpCredential]:
        """
        Activate TOTP after the user proves possession of the candidate secret.

        Args:
            account_id: Account identifier.
            candidate_secret: Secret shown during setup (Base32 text or `TotpSecret`).
            verification_code: Code read from the authenticator app.
            existing_credential: Current stored credential, used to keep `created_at`.
        Returns:
            TotpResult[TotpCredential]: Enabled credential, the validator error unchanged,
                `POLICY_VIOLATION` when an enabled credential holds a different secret,
                or `INVALID_SECRET_FORMAT` for a secret weaker than 128 bits.
        Assumptions:
            Caller persists nothing on failure. Enabled secrets rotate only via `reset`.
        Raises:
            ValueError: If credential belongs to another account or clock returns non-UTC.
        Side Effects:
            Reads the injected clock.
        """
        _ensure_same_account(account_id=account_id, credential=existing_credential)
        now = self._now()
        matched = self._validator.validate(
            secret=candidate_secret,
            submitted_code=verification_code,
            tolerance_steps=self._tolerance_steps,
            at_time=now,
            account_id=account_id,
        )
        if matched.error is not None:
            return TotpResult.from_error(matched.error)

        secret = self._resolve_secret(candidate_secret)
        if (
            existing_credential is not None
            and existing_credential.enabled
            and existing_credential.secret != secret
        ):
            log.warning("totp enable refused: secret swap on enabled account=%s", account_id)
            return TotpResult.failure(
                TotpErrorKind.POLICY_VIOLATION,
                details={"reason": "already_enabled", "use": "reset"},
            )
        if not self._secret_codec.meets_enablement_strength(secret):
            log.info("totp enable rejected: weak secret account=%s", account_id)
            return TotpResult.failure(
                TotpErrorKind.INVALID_SECRET_FORMAT,
                details={"reason": "too_short", "min_bits": 128},
            )

        created_at = now
        if (
            existing_credential is not None
            and existing_credential.secret == secret
            and existing_credential.created_at is not None
            and existing_credential.created_at <= now
        ):
            created_at = existing_credential.created_at

        credential = TotpCredential(
            account_id=account_id,
            secret=secret,
            enabled=True,
            created_at=created_at,
            last_verified_at=now,
        )
        log.info("totp enabled: account=%s", account_id)
        return TotpResult.success(credential)

    def disable(
        self,
        *,
        credential: TotpCredential,
        verification_code: str | None,
        retain_secret: bool = False,
    ) -> TotpResult[TotpCredential]:
        """
        Turn TOTP off unless account policy requires it.

        Args:
            credential: Current stored credential.
            verification_code: Current code; required when credential is enabled.
            retain_secret: Keep secret and timestamps on the cleared credential.
        Returns:
            TotpResult[TotpCredential]: Cleared credential (`enabled=False`), or
                `POLICY_VIOLATION`, `NOT_CONFIGURED`, or a validator error.
        Assumptions:
            Policy check runs before code validation.
        Raises:
            None.
        Side Effects:
            Reads the injected clock when code validation runs.
        """
        account_id = credential.account_id
        if self._privileged_policy.is_privileged_account(account_id=account_id):
            log.warning("totp disable refused by policy: account=%s", account_id)
            return TotpResult.failure(TotpErrorKind.POLICY_VIOLATION)
        if credential.secret is None:
            return TotpResult.failure(TotpErrorKind.NOT_CONFIGURED)

        if credential.enabled:
            matched = self._validator.validate(
                secret=credential.secret,
                submitted_code=verification_code,
                tolerance_steps=self._tolerance_steps,
                at_time=self._now(),
                account_id=account_id,
            )
            if matched.error is not None:
                return TotpResult.from_error(matched.error)

        if retain_secret:
            cleared = replace(credential, enabled=False)
        else:
            cleared = TotpCredential.not_configured(account_id=account_id)
        log.info("totp disabled: account=%s retain_secret=%s", account_id, retain_secret)
        return TotpResult.success(cleared)

    def reset(
        self,
        *,
        credential: TotpCredential,
        current_verification_code: str | None,
        account_label: str,
    ) -> TotpResult[SetupMaterial]:
        """
        Rotate secret: new pending material that must be enabled again.

        Args:
            credential: Current stored credential.
            current_verification_code: Code of the current secret; required when enabled.
            account_label: Label shown in the authenticator app.
        Returns:
            TotpResult[SetupMaterial]: Fresh material with `enabled=False`, or a validator
                error / `EMPTY_LABEL`.
        Assumptions:
            New secret never equals the previous one.
        Raises:
            None.
        Side Effects:
            Consumes OS random source.
        """
        account_id = credential.account_id
        if credential.enabled:
            matched = self._validator.validate(
                secret=credential.secret,
                submitted_code=current_verification_code,
                tolerance_steps=self._tolerance_steps,
                at_time=self._now(),
                account_id=account_id,
            )
            if matched.error is not None:
                return TotpResult.from_error(matched.error)

        fresh = self._secret_codec.generate()
        while credential.secret is not None and fresh == credential.secret:
            fresh = self._secret_codec.generate()

        material = self._build_material(
            account_id=account_id,
            account_label=account_label,
            secret=fresh,
            enabled=False,
        )
        if material.ok:
            log.info("totp reset issued: account=%s", account_id)
        return material

    def status(
        self,
        *,
        account_id: AccountId,
        credential: TotpCredential | None = None,
        at_time: datetime | None = None,
    ) -> TotpStatus:
        """
        Report enablement and policy state with seconds left in the current step.

        Args:
            account_id: Account identifier.
            credential: Current stored credential, if any.
            at_time: Optional explicit UTC time.
        Returns:
            TotpStatus: Snapshot.
        Assumptions:
            Missing credential means not configured.
        Raises:
            ValueError: If credential belongs to another account or `at_time` is not UTC.
        Side Effects:
            Reads the injected clock when `at_time` is omitted.
        """
        _ensure_same_account(account_id=account_id, credential=credential)
        time_window_clock = self._validator.time_window_clock
        return TotpStatus(
            account_id=account_id,
            enabled=credential is not None and credential.enabled,
            configured=credential is not None and credential.configured,
            policy_required=self._privileged_policy.is_privileged_account(account_id=account_id),
            seconds_remaining_in_step=time_window_clock.remaining_seconds_in_step(
                time_window_clock.unix_time(at_time)
            ),
        )

    def verify(
        self,
        *,
        credential: TotpCredential,
        verification_code: str | None,
    ) -> TotpResult[TotpCredential]:
        """
        Login-time second-factor check for an enabled credential.

        Args:
            credential: Current stored credential.
            verification_code: Code read from the authenticator app.
        Returns:
            TotpResult[TotpCredential]: Credential with refreshed `last_verified_at`, or
                `NOT_CONFIGURED`, a validator error, or `CODE_REPLAYED`.
        Assumptions:
            Replay guard, when configured, remembers counters at least for the window span.
        Raises:
            ValueError: If clock returns non-UTC datetime.
        Side Effects:
            Marks the matched counter as used in the replay guard.
        """
        account_id = credential.account_id
        if not credential.enabled or credential.secret is None:
            return TotpResult.failure(TotpErrorKind.NOT_CONFIGURED)

        now = self._now()
        matched = self._validator.validate(
            secret=credential.secret,
            submitted_code=verification_code,
            tolerance_steps=self._tolerance_steps,
            at_time=now,
            account_id=account_id,
        )
        if matched.error is not None:
            return TotpResult.from_error(matched.error)

        if not self._consume(account_id=account_id, match=matched.unwrap()):
            log.warning("totp code replay rejected: account=%s", account_id)
            return TotpResult.failure(TotpErrorKind.CODE_REPLAYED)

        verified_at = now
        if credential.created_at is not None and verified_at < credential.created_at:
            verified_at = credential.created_at
        return TotpResult.success(credential.with_verification(verified_at=verified_at))

    def render_setup_qr(
        self,
        *,
        material: SetupMaterial,
        width: int = DEFAULT_QR_WIDTH,
        height: int = DEFAULT_QR_HEIGHT,
    ) -> TotpResult[bytes]:
        return self._uri_builder.render_qr(
            uri=material.provisioning_uri,
            width=width,
            height=height,
        )

    def _build_material(
        self,
        *,
        account_id: AccountId,
        account_label: str,
        secret: TotpSecret,
        enabled: bool,
    ) -> TotpResult[SetupMaterial]:
        secret_base32 = self._secret_codec.to_base32(secret)
        uri = self._uri_builder.build_uri(
            account_label=account_label,
            issuer=self._issuer,
            secret_base32=secret_base32,
            digits=self._validator.digits,
            step_seconds=self._validator.time_window_clock.step_seconds,
        )
        if uri.error is not None:
            return TotpResult.from_error(uri.error)
        return TotpResult.success(
            SetupMaterial(
                account_id=account_id,
                secret=secret_base32,
                provisioning_uri=uri.unwrap(),
                enabled=enabled,
                policy_required=self._privileged_policy.is_privileged_account(
                    account_id=account_id
                ),
            )
        )

    def _resolve_secret(self, secret: TotpSecret | str | None) -> TotpSecret:
        if isinstance(secret, TotpSecret):
            return secret
        return self._secret_codec.parse_base32(secret).unwrap()

    def _consume(self, *, account_id: AccountId, match: TotpMatch) -> bool:
        if self._replay_guard is None:
            return True
        return self._replay_guard.consume(account_id=account_id, counter=match.counter)

    def _now(self) -> datetime:
        return ensure_utc_datetime(value=self._clock.now(), field_name="clock.now")


def _ensure_same_account(*, account_id: AccountId, credential: TotpCredential | None) -> None:
    if credential is not None and credential.account_id != account_id:
        raise ValueError("credential account_id does not match requested account_id")
