"""
Payment reconciliation for accepted PayFast notifications.

Applies one validated ITN to the Payment it refers to:

1. pf_payment_id is required; it is the idempotency key
2. Idempotency gate: a Payment already carrying this pf_payment_id means
   the notification is a replay; nothing is written
3. The invoice reference (custom_str2) is required
4. Payment is looked up by m_payment_id, otherwise created under the
   referenced invoice for the notified gross amount
5. PayFast status is mapped onto the internal Payment status
6. Gateway fields and the raw payload are always written, whatever the
   status, so the audit trail is complete

Usage:
    from payments.services import PaymentReconciler

    result = PaymentReconciler().reconcile(notification)
    if result.success and not result.duplicate:
        print(f"Payment {result.payment_id} is now {result.status}")
"""

from __future__ import annotations

from django.db import IntegrityError
from django.utils import timezone

from billing.models import Invoice
from core.helpers import validate_uuid
from core.services import BaseService

from payments.exceptions import InvoiceNotFoundError
from payments.models import Payment
from payments.payfast.types import (
    ITNNotification,
    PayFastPaymentStatus,
    ProcessedPayment,
    ReconciliationFailureReason,
)


class PaymentReconciler(BaseService):
    """
    Records PayFast notifications on Payment rows.

    Never raises for expected failures; every outcome is a ProcessedPayment.
    """

    def __init__(self, payments=None, invoices=None):
        self.payments = payments if payments is not None else Payment.objects
        self.invoices = invoices if invoices is not None else Invoice.objects

    def reconcile(self, notification: ITNNotification) -> ProcessedPayment:
        logger = self.get_logger()
        log_context = notification.log_context()

        logger.info("Reconciling PayFast notification", extra=log_context)

        # Step 1: pf_payment_id is the idempotency key and must be present
        if not notification.pf_payment_id:
            logger.error("Missing pf_payment_id in notification", extra=log_context)
            return self._failure(notification, ReconciliationFailureReason.MISSING_GATEWAY_PAYMENT_ID)

        # Step 2: Replays of an already-recorded gateway payment are no-ops
        existing = self._find_by_gateway_id(notification.pf_payment_id)
        if existing is not None:
            logger.info(
                "Payment already processed, skipping",
                extra={**log_context, "payment_id": str(existing.id)},
            )
            return self._already_processed(notification, existing)

        # Step 3: Invoice reference is required
        invoice_reference = notification.invoice_reference
        if not invoice_reference:
            logger.error("Missing invoice reference in custom_str2", extra=log_context)
            return self._failure(notification, ReconciliationFailureReason.MISSING_INVOICE_REFERENCE)

        # Step 4: Resolve the payment, creating it under the invoice if needed
        payment = self._find_by_id(notification.m_payment_id)
        invoice = None
        amount = None
        if payment is None:
            try:
                invoice = self._get_invoice(invoice_reference)
            except InvoiceNotFoundError as e:
                logger.error(e.message, extra={**log_context, **e.details})
                return self._failure(notification, ReconciliationFailureReason.INVOICE_NOT_FOUND)

            amount = notification.gross_amount
            if amount is None:
                logger.error(
                    f"Cannot create payment from amount_gross {notification.amount_gross!r}",
                    extra={**log_context, "invoice_id": str(invoice.id)},
                )
                return self._failure(notification, ReconciliationFailureReason.INVALID_AMOUNT)

        # Steps 5-6: Map status and persist the gateway data
        try:
            with self.atomic():
                if payment is None:
                    payment = self.payments.create(invoice=invoice, amount=amount)
                    logger.info(
                        "Created payment from notification",
                        extra={
                            **log_context,
                            "payment_id": str(payment.id),
                            "invoice_id": str(invoice.id),
                        },
                    )
                self._apply(payment, notification)
        except IntegrityError:
            # A concurrent delivery of the same notification got there first
            existing = self._find_by_gateway_id(notification.pf_payment_id)
            if existing is None:
                raise
            logger.info(
                "Concurrent delivery already recorded this payment",
                extra={**log_context, "payment_id": str(existing.id)},
            )
            return self._already_processed(notification, existing)

        logger.info(
            "Payment record updated",
            extra={**log_context, "payment_id": str(payment.id), "internal_status": payment.status},
        )

        return ProcessedPayment(
            success=True,
            payment_id=str(payment.id),
            gateway_payment_id=notification.pf_payment_id,
            status=notification.payment_status,
            message="Payment processed successfully",
            invoice_id=str(payment.invoice_id),
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _find_by_gateway_id(self, gateway_payment_id: str | None) -> Payment | None:
        if not gateway_payment_id:
            return None
        return self.payments.filter(gateway_payment_id=gateway_payment_id).first()

    def _find_by_id(self, payment_id: str | None) -> Payment | None:
        if not validate_uuid(payment_id):
            return None
        return self.payments.filter(pk=payment_id).first()

    def _get_invoice(self, reference: str) -> Invoice:
        invoice = self.invoices.by_reference(reference).first()
        if invoice is None:
            raise InvoiceNotFoundError(
                f"Invoice {reference} not found",
                details={"invoice_reference": reference},
            )
        return invoice

    @staticmethod
    def _apply(payment: Payment, notification: ITNNotification) -> None:
        payment.status = PayFastPaymentStatus.to_payment_status(notification.payment_status)
        payment.gateway_payment_id = notification.pf_payment_id or None
        payment.gateway_reference = notification.gateway_reference
        payment.gateway_status = notification.payment_status or ""
        payment.raw_payload = notification.as_dict()
        payment.processed_at = timezone.now()
        payment.save(
            update_fields=[
                "status",
                "gateway_payment_id",
                "gateway_reference",
                "gateway_status",
                "raw_payload",
                "processed_at",
                "updated_at",
            ]
        )

    @staticmethod
    def _already_processed(notification: ITNNotification, payment: Payment) -> ProcessedPayment:
        return ProcessedPayment(
            success=True,
            payment_id=str(payment.id),
            gateway_payment_id=notification.pf_payment_id,
            status=notification.payment_status,
            message="Payment already processed",
            duplicate=True,
            invoice_id=str(payment.invoice_id),
        )

    @staticmethod
    def _failure(
        notification: ITNNotification, reason: ReconciliationFailureReason
    ) -> ProcessedPayment:
        return ProcessedPayment(
            success=False,
            payment_id=notification.m_payment_id,
            gateway_payment_id=notification.pf_payment_id,
            status=notification.payment_status,
            message=reason.label,
            reason=reason.value,
        )
