from __future__ import annotations

import logging

from otpgate.contexts.identity.application.ports import TotpCredentialRecord, TotpCredentialStore
from otpgate.contexts.identity.application.services import DEFAULT_QR_HEIGHT, DEFAULT_QR_WIDTH
from otpgate.contexts.identity.application.use_cases.totp_enrollment_manager import (
    TotpEnrollmentManager,
)
from otpgate.contexts.identity.application.use_cases.totp_enrollment_models import (
    SetupMaterial,
    TotpStatus,
)
from otpgate.contexts.identity.domain.entities import TotpCredential
from otpgate.contexts.identity.domain.errors import TotpErrorKind, TotpResult
from otpgate.contexts.identity.domain.services import SecretCodec
from otpgate.shared_kernel.primitives import AccountId

log = logging.getLogger(__name__)


class TotpAccountWorkflow:
    """
    TotpAccountWorkflow — read / decide / write glue between the enrollment manager
    and the account-store collaborator.

    Every method loads the stored record, delegates the decision to
    `TotpEnrollmentManager`, and writes back only on success.

    Related:
      - src/otpgate/contexts/identity/application/use_cases/totp_enrollment_manager.py
      - src/otpgate/contexts/identity/application/ports/totp_credential_store.py
      - src/otpgate/contexts/identity/adapters/outbound/persistence/in_memory/
        totp_credential_store.py
    """

    def __init__(
        self,
        *,
        manager: TotpEnrollmentManager,
        store: TotpCredentialStore,
        secret_codec: SecretCodec,
    ) -> None:
        """
        Initialize workflow collaborators.

        Args:
            manager: Enrollment decisions.
            store: Credential persistence port.
            secret_codec: Base32 conversion between records and credentials.
        Returns:
            None.
        Assumptions:
            Store serializes concurrent writes for the same account.
        Raises:
            ValueError: If a collaborator is missing.
        Side Effects:
            None.
        """
        if manager is None:  # type: ignore[truthy-bool]
            raise ValueError("TotpAccountWorkflow requires manager")
        if store is None:  # type: ignore[truthy-bool]
            raise ValueError("TotpAccountWorkflow requires store")
        if secret_codec is None:  # type: ignore[truthy-bool]
            raise ValueError("TotpAccountWorkflow requires secret_codec")
        self._manager = manager
        self._store = store
        self._secret_codec = secret_codec

    def setup(self, *, account_id: AccountId, account_label: str) -> TotpResult[SetupMaterial]:
        """
        Start (or re-display) enrollment and persist a fresh pending secret.

        Args:
            account_id: Account identifier.
            account_label: Label shown in the authenticator app.
        Returns:
            TotpResult[SetupMaterial]: Manager result.
        Assumptions:
            An enabled credential is left untouched.
        Raises:
            ValueError: If stored record is inconsistent.
        Side Effects:
            Saves pending record when a new secret was issued.
        """
        loaded = self._load(account_id=account_id)
        if loaded.error is not None:
            return TotpResult.from_error(loaded.error)
        material = self._manager.begin_setup(
            account_id=account_id,
            account_label=account_label,
            existing_credential=loaded.value,
        )
        if material.ok and not material.unwrap().enabled:
            self._save_pending(material=material.unwrap())
        return material

    def confirm(
        self,
        *,
        account_id: AccountId,
        verification_code: str | None,
        candidate_secret: str | None = None,
    ) -> TotpResult[TotpCredential]:
        """
        Enable TOTP with the code for the candidate (or stored pending) secret.

        Args:
            account_id: Account identifier.
            verification_code: Code read from the authenticator app.
            candidate_secret: Base32 secret shown during setup; stored secret when omitted.
        Returns:
            TotpResult[TotpCredential]: Manager result; `NOT_CONFIGURED` when there is
                neither a candidate nor a stored secret.
        Assumptions:
            Nothing is written on failure.
        Raises:
            ValueError: If stored record is inconsistent.
        Side Effects:
            Saves enabled record on success.
        """
        loaded = self._load(account_id=account_id)
        if loaded.error is not None:
            return TotpResult.from_error(loaded.error)
        existing = loaded.value

        secret: str | None = candidate_secret
        if secret is None and existing is not None and existing.secret is not None:
            secret = self._secret_codec.to_base32(existing.secret)
        if secret is None:
            return TotpResult.failure(TotpErrorKind.NOT_CONFIGURED)

        enabled = self._manager.enable(
            account_id=account_id,
            candidate_secret=secret,
            verification_code=verification_code,
            existing_credential=existing,
        )
        if enabled.ok:
            self._save(credential=enabled.unwrap())
        return enabled

    def disable(
        self,
        *,
        account_id: AccountId,
        verification_code: str | None,
        retain_secret: bool = False,
    ) -> TotpResult[TotpCredential]:
        credential = self._load_or_empty(account_id=account_id)
        if credential.error is not None:
            return TotpResult.from_error(credential.error)
        cleared = self._manager.disable(
            credential=credential.unwrap(),
            verification_code=verification_code,
            retain_secret=retain_secret,
        )
        if cleared.ok:
            self._save(credential=cleared.unwrap())
        return cleared

    def reset(
        self,
        *,
        account_id: AccountId,
        verification_code: str | None,
        account_label: str,
    ) -> TotpResult[SetupMaterial]:
        """
        Rotate secret and persist it as pending; caller must `confirm` again.

        Args:
            account_id: Account identifier.
            verification_code: Code of the current secret (required when enabled).
            account_label: Label shown in the authenticator app.
        Returns:
            TotpResult[SetupMaterial]: Manager result.
        Assumptions:
            After a successful reset the account is no longer enabled.
        Raises:
            ValueError: If stored record is inconsistent.
        Side Effects:
            Saves pending record on success.
        """
        credential = self._load_or_empty(account_id=account_id)
        if credential.error is not None:
            return TotpResult.from_error(credential.error)
        material = self._manager.reset(
            credential=credential.unwrap(),
            current_verification_code=verification_code,
            account_label=account_label,
        )
        if material.ok:
            self._save_pending(material=material.unwrap())
        return material

    def verify_login(
        self,
        *,
        account_id: AccountId,
        verification_code: str | None,
    ) -> TotpResult[TotpCredential]:
        credential = self._load_or_empty(account_id=account_id)
        if credential.error is not None:
            return TotpResult.from_error(credential.error)
        verified = self._manager.verify(
            credential=credential.unwrap(),
            verification_code=verification_code,
        )
        if verified.ok:
            self._save(credential=verified.unwrap())
        return verified

    def status(self, *, account_id: AccountId) -> TotpResult[TotpStatus]:
        loaded = self._load(account_id=account_id)
        if loaded.error is not None:
            return TotpResult.from_error(loaded.error)
        return TotpResult.success(
            self._manager.status(account_id=account_id, credential=loaded.value)
        )

    def setup_qr(
        self,
        *,
        account_id: AccountId,
        account_label: str,
        width: int = DEFAULT_QR_WIDTH,
        height: int = DEFAULT_QR_HEIGHT,
    ) -> TotpResult[bytes]:
        material = self.setup(account_id=account_id, account_label=account_label)
        if material.error is not None:
            return TotpResult.from_error(material.error)
        return self._manager.render_setup_qr(
            material=material.unwrap(),
            width=width,
            height=height,
        )

    def _load(self, *, account_id: AccountId) -> TotpResult[TotpCredential | None]:
        record = self._store.find_by_account_id(account_id=account_id)
        if record is None:
            return TotpResult.success(None)
        if record.secret_base32 is None:
            return TotpResult.success(
                TotpCredential(
                    account_id=account_id,
                    created_at=record.created_at,
                    last_verified_at=record.last_verified_at,
                )
            )
        parsed = self._secret_codec.parse_base32(record.secret_base32)
        if parsed.error is not None:
            log.error("stored totp secret is unreadable: account=%s", account_id)
            return TotpResult.from_error(parsed.error)
        return TotpResult.success(
            TotpCredential(
                account_id=account_id,
                secret=parsed.unwrap(),
                enabled=record.enabled,
                created_at=record.created_at,
                last_verified_at=record.last_verified_at,
            )
        )

    def _load_or_empty(self, *, account_id: AccountId) -> TotpResult[TotpCredential]:
        loaded = self._load(account_id=account_id)
        if loaded.error is not None:
            return TotpResult.from_error(loaded.error)
        if loaded.value is None:
            return TotpResult.success(TotpCredential.not_configured(account_id=account_id))
        return TotpResult.success(loaded.value)

    def _save(self, *, credential: TotpCredential) -> None:
        secret_base32 = None
        if credential.secret is not None:
            secret_base32 = self._secret_codec.to_base32(credential.secret)
        self._store.save(
            record=TotpCredentialRecord(
                account_id=credential.account_id,
                secret_base32=secret_base32,
                enabled=credential.enabled,
                created_at=credential.created_at,
                last_verified_at=credential.last_verified_at,
            )
        )

    def _save_pending(self, *, material: SetupMaterial) -> None:
        self._store.save(
            record=TotpCredentialRecord(
                account_id=material.account_id,
                secret_base32=material.secret,
                enabled=False,
            )
        )

