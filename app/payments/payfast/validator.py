"""
ITN validation gates.

A notification is accepted only if every gate passes, checked in order:

1. Signature matches the fields
2. Source address is a PayFast network (or trusted)
3. merchant_id is ours
4. PayFast confirms the notification (production only)

The first failing gate decides the rejection reason. Validation never
writes to the database.
"""

from __future__ import annotations

import logging

from payments.payfast.client import RemoteAttestationClient
from payments.payfast.signature import SignatureCodec
from payments.payfast.source import SourceAuthenticator
from payments.payfast.types import ITNNotification, ITNRejectionReason, ValidationResult

logger = logging.getLogger(__name__)


class ITNValidator:
    """
    Runs the ITN gates against one notification.

    Usage:
        validator = ITNValidator(
            codec=SignatureCodec(passphrase),
            authenticator=SourceAuthenticator(trust_any_source=sandbox),
            remote_client=RemoteAttestationClient(validate_url),
            merchant_id="10000100",
            sandbox=sandbox,
        )
        result = validator.validate(notification, source_ip="197.97.145.150")
        if not result:
            print(result.reason)
    """

    def __init__(
        self,
        codec: SignatureCodec,
        authenticator: SourceAuthenticator,
        remote_client: RemoteAttestationClient,
        merchant_id: str,
        sandbox: bool = False,
    ):
        self.codec = codec
        self.authenticator = authenticator
        self.remote_client = remote_client
        self.merchant_id = merchant_id
        self.sandbox = sandbox

    def validate(self, notification: ITNNotification, source_ip: str | None) -> ValidationResult:
        log_context = {**notification.log_context(), "source_ip": source_ip}

        if not self.codec.verify(notification.fields):
            return self._reject(ITNRejectionReason.INVALID_SIGNATURE, log_context)

        if not self.authenticator.is_allowed(source_ip):
            return self._reject(ITNRejectionReason.INVALID_SOURCE, log_context)

        if notification.merchant_id != self.merchant_id:
            return self._reject(
                ITNRejectionReason.MERCHANT_MISMATCH,
                {**log_context, "received_merchant_id": notification.merchant_id},
            )

        if not self.sandbox and not self.remote_client.confirm(notification.as_dict()):
            return self._reject(ITNRejectionReason.REMOTE_VALIDATION_FAILED, log_context)

        return ValidationResult.accept()

    def _reject(self, reason: ITNRejectionReason, log_context: dict) -> ValidationResult:
        logger.warning(
            f"PayFast ITN rejected: {reason.label}",
            extra={**log_context, "reason": reason.value},
        )
        return ValidationResult.reject(reason)
