"""
Payment model recording what the gateway reported for an invoice.

A Payment is created ahead of checkout (its id travels to PayFast as
m_payment_id) or lazily by the reconciler on the first notification.
Every notification overwrites the gateway fields and keeps the raw
payload for audit. Payments are never deleted.

Usage:
    from payments.models import Payment
    from payments.state_machines import PaymentStatus

    payment = Payment.objects.create(invoice=invoice, amount=invoice.total)

    # Idempotency gate used by the reconciler
    Payment.objects.filter(gateway_payment_id="1089250").exists()
"""

from __future__ import annotations

from django.db import models

from core.models import BaseModel
from core.model_mixins import UUIDPrimaryKeyMixin

from payments.state_machines import PaymentMethod, PaymentStatus


class Payment(UUIDPrimaryKeyMixin, BaseModel):
    """
    One payment attempt against an invoice.

    Fields:
        invoice: Invoice being paid
        amount: Gross amount in ZAR
        payment_method: Gateway used (always payfast)
        status: Internal status mapped from the gateway status
        gateway_payment_id: PayFast's pf_payment_id (unique once set)
        gateway_reference: Item description/name echoed by PayFast
        gateway_status: Raw payment_status string from the last notification
        raw_payload: Last notification, verbatim
        processed_at: When the last notification was applied
    """

    # ==========================================================================
    # Relationships
    # ==========================================================================

    invoice = models.ForeignKey(
        "billing.Invoice",
        on_delete=models.PROTECT,
        related_name="payments",
        help_text="Invoice this payment settles",
    )

    # ==========================================================================
    # Amount & State
    # ==========================================================================

    amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text="Gross amount in ZAR",
    )

    payment_method = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
        default=PaymentMethod.PAYFAST,
    )

    status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
        db_index=True,
        help_text="Internal payment status",
    )

    # ==========================================================================
    # Gateway Data
    # ==========================================================================

    gateway_payment_id = models.CharField(
        max_length=100,
        unique=True,
        null=True,
        blank=True,
        help_text="PayFast pf_payment_id",
    )

    gateway_reference = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Item description or name echoed by PayFast",
    )

    gateway_status = models.CharField(
        max_length=50,
        blank=True,
        default="",
        help_text="Raw payment_status from the last notification",
    )

    raw_payload = models.JSONField(
        default=dict,
        blank=True,
        help_text="Last notification received, stored verbatim",
    )

    processed_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the last notification was applied",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Payment"
        verbose_name_plural = "Payments"
        indexes = [
            models.Index(fields=["invoice", "status"], name="payment_invoice_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Payment({self.id}, {self.status}, {self.amount} ZAR)"

    @property
    def is_completed(self) -> bool:
        return self.status == PaymentStatus.COMPLETED
