from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from otpgate.contexts.identity.adapters.outbound.security.two_factor import (
    InMemoryTotpReplayGuard,
)
from otpgate.contexts.identity.application.ports import TotpClock
from otpgate.contexts.identity.application.services import (
    ProvisioningUriBuilder,
    TimeWindowClock,
    TotpValidator,
)
from otpgate.contexts.identity.application.use_cases import TotpEnrollmentManager
from otpgate.contexts.identity.domain.entities import TotpCredential, TotpEnrollmentState
from otpgate.contexts.identity.domain.errors import TotpErrorKind
from otpgate.contexts.identity.domain.services import SecretCodec, TotpAlgorithm
from otpgate.contexts.identity.domain.value_objects import TotpSecret
from otpgate.shared_kernel.primitives import AccountId, ensure_utc_datetime

_START = datetime(2026, 2, 14, 16, 0, 10, tzinfo=timezone.utc)
_ALICE = AccountId("alice")
_ADMIN = AccountId("admin")


class _MutableClock(TotpClock):
    """
    Mutable deterministic UTC clock for enrollment lifecycle tests.
    """

    def __init__(self, *, now_value: datetime) -> None:
        self._now_value = ensure_utc_datetime(value=now_value, field_name="now_value")

    def advance(self, *, seconds: int) -> None:
        self._now_value = self._now_value + timedelta(seconds=seconds)

    def now(self) -> datetime:
        return self._now_value


class _AdminOnlyPolicy:
    def is_privileged_account(self, *, account_id: AccountId) -> bool:
        return account_id == _ADMIN


class _FakeQrRenderer:
    def render_png(self, *, data: str, width: int, height: int) -> bytes:
        return f"{width}x{height}".encode("ascii")


class _ScriptedSecretCodec(SecretCodec):
    """
    Secret codec returning pre-scripted secrets before falling back to the CSPRNG.
    """

    def __init__(self, *, scripted: list[TotpSecret]) -> None:
        super().__init__()
        self._scripted = list(scripted)

    def generate(self) -> TotpSecret:
        if self._scripted:
            return self._scripted.pop(0)
        return super().generate()


def _manager(
    *,
    clock: _MutableClock,
    secret_codec: SecretCodec | None = None,
    with_replay_guard: bool = False,
) -> TotpEnrollmentManager:
    codec = secret_codec if secret_codec is not None else SecretCodec()
    time_window_clock = TimeWindowClock(clock=clock)
    return TotpEnrollmentManager(
        secret_codec=codec,
        validator=TotpValidator(time_window_clock=time_window_clock, secret_codec=codec),
        uri_builder=ProvisioningUriBuilder(qr_renderer=_FakeQrRenderer()),
        clock=clock,
        privileged_policy=_AdminOnlyPolicy(),
        issuer="MyService",
        replay_guard=(
            InMemoryTotpReplayGuard.for_window(clock=clock, step_seconds=30, tolerance_steps=1)
            if with_replay_guard
            else None
        ),
    )


def _current_code(secret: TotpSecret | str, *, clock: _MutableClock, offset: int = 0) -> str:
    raw = secret if isinstance(secret, TotpSecret) else SecretCodec().parse_base32(secret).unwrap()
    counter = int(clock.now().timestamp()) // 30 + offset
    return TotpAlgorithm().compute_code(raw, counter)


def _wrong_code(secret: TotpSecret | str, *, clock: _MutableClock) -> str:
    window = {_current_code(secret, clock=clock, offset=offset) for offset in (-1, 0, 1)}
    return next(candidate for candidate in ("000000", "111111", "222222") if candidate not in window)


def _enabled_credential(
    manager: TotpEnrollmentManager,
    *,
    clock: _MutableClock,
    account_id: AccountId = _ALICE,
) -> TotpCredential:
    material = manager.begin_setup(account_id=account_id, account_label="alice").unwrap()
    return manager.enable(
        account_id=account_id,
        candidate_secret=material.secret,
        verification_code=_current_code(material.secret, clock=clock),
    ).unwrap()


def test_begin_setup_without_credential_returns_fresh_pending_material() -> None:
    """
    Verify setup generates a new 160-bit secret and a matching provisioning URI.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Setup has no persistence side effect.
    Raises:
        AssertionError: If material fields are inconsistent.
    Side Effects:
        None.
    """
    manager = _manager(clock=_MutableClock(now_value=_START))

    material = manager.begin_setup(account_id=_ALICE, account_label="alice@example.com").unwrap()

    assert material.enabled is False
    assert material.policy_required is False
    assert len(material.secret) == 32
    assert material.provisioning_uri.startswith("otpauth://totp/MyService:alice%40example.com?")
    assert f"secret={material.secret}&issuer=MyService" in material.provisioning_uri
    assert material.secret not in repr(material)


def test_begin_setup_for_enabled_credential_redisplays_existing_secret() -> None:
    clock = _MutableClock(now_value=_START)
    manager = _manager(clock=clock)
    credential = _enabled_credential(manager, clock=clock)

    material = manager.begin_setup(
        account_id=_ALICE,
        account_label="alice",
        existing_credential=credential,
    ).unwrap()

    assert material.enabled is True
    assert credential.secret is not None
    assert material.secret == SecretCodec().to_base32(credential.secret)


def test_begin_setup_for_pending_credential_issues_new_secret() -> None:
    manager = _manager(clock=_MutableClock(now_value=_START))
    pending = TotpCredential(account_id=_ALICE, secret=TotpSecret(b"p" * 20))

    material = manager.begin_setup(
        account_id=_ALICE,
        account_label="alice",
        existing_credential=pending,
    ).unwrap()

    assert material.enabled is False
    assert material.secret != SecretCodec().to_base32(TotpSecret(b"p" * 20))


def test_begin_setup_rejects_blank_label() -> None:
    manager = _manager(clock=_MutableClock(now_value=_START))

    result = manager.begin_setup(account_id=_ALICE, account_label="  ")

    assert result.error_kind is TotpErrorKind.EMPTY_LABEL


def test_begin_setup_rejects_credential_of_other_account() -> None:
    manager = _manager(clock=_MutableClock(now_value=_START))

    with pytest.raises(ValueError):
        manager.begin_setup(
            account_id=_ALICE,
            account_label="alice",
            existing_credential=TotpCredential.not_configured(account_id=_ADMIN),
        )


def test_enable_with_valid_code_produces_enabled_credential_with_timestamps() -> None:
    """
    Verify enable activates the exact candidate secret and stamps both timestamps.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Clock is fixed so `now` equals the validation instant.
    Raises:
        AssertionError: If credential state or timestamps differ.
    Side Effects:
        None.
    """
    clock = _MutableClock(now_value=_START)
    manager = _manager(clock=clock)
    material = manager.begin_setup(account_id=_ALICE, account_label="alice").unwrap()

    credential = manager.enable(
        account_id=_ALICE,
        candidate_secret=material.secret,
        verification_code=_current_code(material.secret, clock=clock),
    ).unwrap()

    assert credential.state is TotpEnrollmentState.ENABLED
    assert credential.secret == SecretCodec().parse_base32(material.secret).unwrap()
    assert credential.created_at == _START
    assert credential.last_verified_at == _START


def test_enable_returns_validator_error_unchanged() -> None:
    clock = _MutableClock(now_value=_START)
    manager = _manager(clock=clock)
    material = manager.begin_setup(account_id=_ALICE, account_label="alice").unwrap()

    mismatch = manager.enable(
        account_id=_ALICE,
        candidate_secret=material.secret,
        verification_code=_wrong_code(material.secret, clock=clock),
    )
    malformed = manager.enable(
        account_id=_ALICE,
        candidate_secret=material.secret,
        verification_code="12ab56",
    )
    bad_secret = manager.enable(
        account_id=_ALICE,
        candidate_secret="JBSWY3DPEHPK3PX1",
        verification_code="123456",
    )

    assert mismatch.error_kind is TotpErrorKind.CODE_MISMATCH
    assert malformed.error_kind is TotpErrorKind.INVALID_CODE_FORMAT
    assert bad_secret.error_kind is TotpErrorKind.INVALID_SECRET_FORMAT


def test_enable_rejects_secret_weaker_than_128_bits_even_with_valid_code() -> None:
    clock = _MutableClock(now_value=_START)
    manager = _manager(clock=clock)

    result = manager.enable(
        account_id=_ALICE,
        candidate_secret="JBSWY3DPEHPK3PXP",
        verification_code=_current_code("JBSWY3DPEHPK3PXP", clock=clock),
    )

    assert result.error_kind is TotpErrorKind.INVALID_SECRET_FORMAT


def test_enable_keeps_created_at_when_reconfirming_same_secret() -> None:
    clock = _MutableClock(now_value=_START)
    manager = _manager(clock=clock)
    credential = _enabled_credential(manager, clock=clock)
    assert credential.secret is not None
    clock.advance(seconds=600)

    again = manager.enable(
        account_id=_ALICE,
        candidate_secret=credential.secret,
        verification_code=_current_code(credential.secret, clock=clock),
        existing_credential=credential,
    ).unwrap()

    assert again.created_at == _START
    assert again.last_verified_at == _START + timedelta(seconds=600)


def test_enable_refuses_to_swap_secret_of_enabled_credential() -> None:
    """
    Verify an enabled credential cannot be re-enabled with a different secret.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        The other secret comes with its own valid code but without the current one.
    Raises:
        AssertionError: If the enabled secret is replaced outside `reset`.
    Side Effects:
        None.
    """
    clock = _MutableClock(now_value=_START)
    manager = _manager(clock=clock)
    credential = _enabled_credential(manager, clock=clock)
    other_secret = TotpSecret(b"o" * 20)

    result = manager.enable(
        account_id=_ALICE,
        candidate_secret=other_secret,
        verification_code=_current_code(other_secret, clock=clock),
        existing_credential=credential,
    )

    assert result.error_kind is TotpErrorKind.POLICY_VIOLATION
    assert result.error is not None
    assert result.error.details == {"reason": "already_enabled", "use": "reset"}


def test_disable_privileged_account_is_policy_violation_even_with_valid_code() -> None:
    """
    Verify policy check wins over a correct code for privileged accounts.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        `admin` is privileged under the fake policy.
    Raises:
        AssertionError: If privileged account can disable TOTP.
    Side Effects:
        None.
    """
    clock = _MutableClock(now_value=_START)
    manager = _manager(clock=clock)
    credential = _enabled_credential(manager, clock=clock, account_id=_ADMIN)
    assert credential.secret is not None

    result = manager.disable(
        credential=credential,
        verification_code=_current_code(credential.secret, clock=clock),
    )

    assert result.error_kind is TotpErrorKind.POLICY_VIOLATION


def test_disable_with_valid_code_clears_credential() -> None:
    clock = _MutableClock(now_value=_START)
    manager = _manager(clock=clock)
    credential = _enabled_credential(manager, clock=clock)
    assert credential.secret is not None

    cleared = manager.disable(
        credential=credential,
        verification_code=_current_code(credential.secret, clock=clock),
    ).unwrap()

    assert cleared.state is TotpEnrollmentState.NOT_CONFIGURED
    assert cleared.secret is None
    assert cleared.account_id == _ALICE


def test_disable_with_retain_secret_keeps_secret_but_turns_off() -> None:
    clock = _MutableClock(now_value=_START)
    manager = _manager(clock=clock)
    credential = _enabled_credential(manager, clock=clock)
    assert credential.secret is not None

    cleared = manager.disable(
        credential=credential,
        verification_code=_current_code(credential.secret, clock=clock),
        retain_secret=True,
    ).unwrap()

    assert cleared.enabled is False
    assert cleared.secret == credential.secret


def test_disable_with_wrong_code_fails_and_reports_mismatch() -> None:
    clock = _MutableClock(now_value=_START)
    manager = _manager(clock=clock)
    credential = _enabled_credential(manager, clock=clock)
    assert credential.secret is not None

    result = manager.disable(
        credential=credential,
        verification_code=_wrong_code(credential.secret, clock=clock),
    )

    assert result.error_kind is TotpErrorKind.CODE_MISMATCH


def test_disable_without_secret_reports_not_configured() -> None:
    manager = _manager(clock=_MutableClock(now_value=_START))

    result = manager.disable(
        credential=TotpCredential.not_configured(account_id=_ALICE),
        verification_code="123456",
    )

    assert result.error_kind is TotpErrorKind.NOT_CONFIGURED


def test_disable_pending_credential_needs_no_code() -> None:
    manager = _manager(clock=_MutableClock(now_value=_START))
    pending = TotpCredential(account_id=_ALICE, secret=TotpSecret(b"p" * 20))

    result = manager.disable(credential=pending, verification_code=None)

    assert result.ok
    assert result.unwrap().secret is None


def test_reset_enabled_credential_requires_current_code() -> None:
    clock = _MutableClock(now_value=_START)
    manager = _manager(clock=clock)
    credential = _enabled_credential(manager, clock=clock)
    assert credential.secret is not None

    rejected = manager.reset(
        credential=credential,
        current_verification_code=_wrong_code(credential.secret, clock=clock),
        account_label="alice",
    )
    missing = manager.reset(
        credential=credential,
        current_verification_code=None,
        account_label="alice",
    )

    assert rejected.error_kind is TotpErrorKind.CODE_MISMATCH
    assert missing.error_kind is TotpErrorKind.EMPTY_CODE


def test_reset_always_issues_secret_different_from_current_one() -> None:
    """
    Verify reset retries generation until the new secret differs from the old one.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Scripted codec first returns the current secret again.
    Raises:
        AssertionError: If reset returns the old secret or an enabled material.
    Side Effects:
        None.
    """
    clock = _MutableClock(now_value=_START)
    old_secret = TotpSecret(b"o" * 20)
    new_secret = TotpSecret(b"n" * 20)
    codec = _ScriptedSecretCodec(scripted=[old_secret, old_secret, new_secret])
    manager = _manager(clock=clock, secret_codec=codec)
    credential = TotpCredential(
        account_id=_ALICE,
        secret=old_secret,
        enabled=True,
        created_at=_START,
        last_verified_at=_START,
    )

    material = manager.reset(
        credential=credential,
        current_verification_code=_current_code(old_secret, clock=clock),
        account_label="alice",
    ).unwrap()

    assert material.enabled is False
    assert material.secret == SecretCodec().to_base32(new_secret)


def test_reset_then_enable_activates_new_secret() -> None:
    clock = _MutableClock(now_value=_START)
    manager = _manager(clock=clock)
    credential = _enabled_credential(manager, clock=clock)
    assert credential.secret is not None

    material = manager.reset(
        credential=credential,
        current_verification_code=_current_code(credential.secret, clock=clock),
        account_label="alice",
    ).unwrap()
    pending = TotpCredential(
        account_id=_ALICE,
        secret=SecretCodec().parse_base32(material.secret).unwrap(),
    )
    renewed = manager.enable(
        account_id=_ALICE,
        candidate_secret=material.secret,
        verification_code=_current_code(material.secret, clock=clock),
        existing_credential=pending,
    ).unwrap()

    assert renewed.enabled is True
    assert renewed.secret != credential.secret


def test_status_reports_flags_and_seconds_remaining() -> None:
    clock = _MutableClock(now_value=_START)
    manager = _manager(clock=clock)
    credential = _enabled_credential(manager, clock=clock, account_id=_ADMIN)

    admin_status = manager.status(account_id=_ADMIN, credential=credential)
    alice_status = manager.status(account_id=_ALICE)

    assert admin_status.enabled is True
    assert admin_status.configured is True
    assert admin_status.policy_required is True
    assert admin_status.seconds_remaining_in_step == 20
    assert alice_status.enabled is False
    assert alice_status.configured is False
    assert alice_status.policy_required is False


def test_verify_refreshes_last_verified_at() -> None:
    clock = _MutableClock(now_value=_START)
    manager = _manager(clock=clock)
    credential = _enabled_credential(manager, clock=clock)
    assert credential.secret is not None
    clock.advance(seconds=90)

    verified = manager.verify(
        credential=credential,
        verification_code=_current_code(credential.secret, clock=clock),
    ).unwrap()

    assert verified.last_verified_at == _START + timedelta(seconds=90)
    assert verified.created_at == credential.created_at


def test_verify_requires_enabled_credential() -> None:
    manager = _manager(clock=_MutableClock(now_value=_START))
    pending = TotpCredential(account_id=_ALICE, secret=TotpSecret(b"p" * 20))

    result = manager.verify(credential=pending, verification_code="123456")

    assert result.error_kind is TotpErrorKind.NOT_CONFIGURED


def test_verify_with_replay_guard_rejects_second_use_of_same_code() -> None:
    clock = _MutableClock(now_value=_START)
    manager = _manager(clock=clock, with_replay_guard=True)
    credential = _enabled_credential(manager, clock=clock)
    assert credential.secret is not None
    code = _current_code(credential.secret, clock=clock)

    first = manager.verify(credential=credential, verification_code=code)
    second = manager.verify(credential=credential, verification_code=code)

    assert first.ok
    assert second.error_kind is TotpErrorKind.CODE_REPLAYED


def test_render_setup_qr_uses_requested_dimensions() -> None:
    manager = _manager(clock=_MutableClock(now_value=_START))
    material = manager.begin_setup(account_id=_ALICE, account_label="alice").unwrap()

    assert manager.render_setup_qr(material=material).unwrap() == b"200x200"
    assert manager.render_setup_qr(material=material, width=64, height=32).unwrap() == b"64x32"
    assert (
        manager.render_setup_qr(material=material, width=0, height=100).error_kind
        is TotpErrorKind.INVALID_DIMENSIONS
    )


def test_manager_rejects_blank_issuer() -> None:
    clock = _MutableClock(now_value=_START)
    codec = SecretCodec()

    with pytest.raises(ValueError):
        TotpEnrollmentManager(
            secret_codec=codec,
            validator=TotpValidator(
                time_window_clock=TimeWindowClock(clock=clock),
                secret_codec=codec,
            ),
            uri_builder=ProvisioningUriBuilder(qr_renderer=_FakeQrRenderer()),
            clock=clock,
            privileged_policy=_AdminOnlyPolicy(),
            issuer=" ",
        )
