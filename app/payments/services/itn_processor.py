"""
End-to-end handling of one PayFast ITN.

validate -> reconcile -> settle (completed, first-time payments only)

Reconciliation and settlement are separate transactions. A crash
between them leaves a COMPLETED payment on an unpaid invoice; the
replay check means PayFast redelivery will not repair it, so such
cases surface in the logs for follow-up.

Usage:
    from payments.services import ITNProcessor

    result = ITNProcessor.from_settings().process(notification, source_ip)
    result.success  # False for rejected or unreconcilable notifications
"""

from __future__ import annotations

from core.services import BaseService

from payments.payfast import (
    ITNNotification,
    ITNValidator,
    PayFastPaymentStatus,
    PayFastSettings,
    ProcessedPayment,
    RemoteAttestationClient,
    SignatureCodec,
    SourceAuthenticator,
)
from payments.services.reconciler import PaymentReconciler
from payments.services.settlement import SettlementOrchestrator


class ITNProcessor(BaseService):
    """
    Wires the validator, reconciler and settlement together.

    Usage:
        processor = ITNProcessor(
            validator=ITNValidator(...),
            reconciler=PaymentReconciler(),
            settlement=SettlementOrchestrator(),
        )
    """

    def __init__(
        self,
        validator: ITNValidator,
        reconciler: PaymentReconciler,
        settlement: SettlementOrchestrator,
    ):
        self.validator = validator
        self.reconciler = reconciler
        self.settlement = settlement

    @classmethod
    def from_settings(cls, payfast_settings: PayFastSettings | None = None) -> ITNProcessor:
        """Build the default pipeline from the PAYFAST_* Django settings."""
        config = payfast_settings or PayFastSettings.from_django_settings()
        validator = ITNValidator(
            codec=SignatureCodec(passphrase=config.passphrase),
            authenticator=SourceAuthenticator(
                trust_any_source=config.trust_any_source,
                networks=config.source_networks,
            ),
            remote_client=RemoteAttestationClient(
                validate_url=config.validate_url,
                timeout=config.validate_timeout,
            ),
            merchant_id=config.merchant_id,
            sandbox=config.sandbox,
        )
        return cls(
            validator=validator,
            reconciler=PaymentReconciler(),
            settlement=SettlementOrchestrator(),
        )

    def process(self, notification: ITNNotification, source_ip: str | None) -> ProcessedPayment:
        logger = self.get_logger()
        log_context = {**notification.log_context(), "source_ip": source_ip}

        logger.info("Processing PayFast webhook", extra=log_context)

        # Step 1: Validate
        validation = self.validator.validate(notification, source_ip)
        if not validation:
            return ProcessedPayment(
                success=False,
                payment_id=notification.m_payment_id,
                gateway_payment_id=notification.pf_payment_id,
                status=notification.payment_status,
                message=validation.reason.label,
                reason=validation.reason.value,
            )

        # Step 2: Reconcile
        result = self.reconciler.reconcile(notification)
        if not result.success or result.duplicate:
            return result

        # Step 3: Settle completed payments
        if notification.payment_status == PayFastPaymentStatus.COMPLETE:
            settlement = self.settlement.settle(result.invoice_id, notification.user_reference)
            if not settlement.success:
                logger.error(
                    f"Settlement failed after payment was recorded: {settlement.error}",
                    extra={
                        **log_context,
                        "payment_id": result.payment_id,
                        "invoice_id": result.invoice_id,
                        "error_code": settlement.error_code,
                    },
                )
            elif settlement.data.failed:
                logger.error(
                    "Some courses could not be unlocked",
                    extra={
                        **log_context,
                        "invoice_id": result.invoice_id,
                        "failed_course_ids": settlement.data.failed,
                    },
                )

        return result
