"""
Invoice and InvoiceItem models.

Invoice tracks what a user owes for one purchase and moves to PAID
exactly once when the gateway reports a completed payment. Each
InvoiceItem references the course it unlocks.

Usage:
    from billing.models import Invoice

    # Create an invoice with one course line (total = subtotal + tax)
    invoice = Invoice.objects.create_with_items(
        user=user,
        lines=[(course, 1, Decimal("499.99"))],
        tax=Decimal("75.00"),
    )

    # Look up by id or human-facing invoice number
    invoice = Invoice.objects.by_reference("INV-20260301-3F9A1C").first()

    # Settlement
    invoice.mark_paid()
    invoice.save()
"""

from __future__ import annotations

import secrets
from decimal import Decimal
from typing import TYPE_CHECKING

from django.conf import settings
from django.db import models, transaction
from django.utils import timezone

from django_fsm import FSMField, transition

from core.helpers import validate_uuid
from core.models import BaseModel
from core.model_mixins import UUIDPrimaryKeyMixin

from billing.constants import InvoiceStatus

if TYPE_CHECKING:
    from collections.abc import Iterable

    from courses.models import Course


def generate_invoice_number() -> str:
    """Return a human-facing invoice number such as INV-20260301-3F9A1C."""
    return f"INV-{timezone.now():%Y%m%d}-{secrets.token_hex(3).upper()}"


class InvoiceQuerySet(models.QuerySet):
    """QuerySet with the lookups the payment pipeline needs."""

    def by_reference(self, reference: str | None) -> InvoiceQuerySet:
        """
        Filter by invoice id or invoice number.

        PayFast echoes whatever we put in custom_str2; both the UUID
        and the invoice number are accepted.
        """
        if not reference:
            return self.none()
        if validate_uuid(reference):
            return self.filter(pk=reference)
        return self.filter(invoice_number=reference)

    def with_items(self) -> InvoiceQuerySet:
        """Load the owner and the ordered line items with their courses."""
        return self.select_related("user").prefetch_related("items__course")


class InvoiceManager(models.Manager.from_queryset(InvoiceQuerySet)):
    """Manager for Invoice creation."""

    def create_with_items(
        self,
        user,
        lines: Iterable[tuple[Course, int, Decimal]],
        tax: Decimal = Decimal("0.00"),
        invoice_number: str | None = None,
    ) -> Invoice:
        """
        Create an invoice and its line items in one transaction.

        Amounts are derived here: line_total = quantity * unit_price,
        subtotal = sum(line totals), total = subtotal + tax.

        Args:
            user: Invoice owner
            lines: (course, quantity, unit_price) tuples, in display order
            tax: Tax amount added on top of the subtotal
            invoice_number: Explicit number (generated when omitted)

        Returns:
            The created PENDING invoice
        """
        lines = list(lines)
        line_totals = [Decimal(quantity) * Decimal(unit_price) for _, quantity, unit_price in lines]
        subtotal = sum(line_totals, Decimal("0.00"))

        with transaction.atomic():
            invoice = self.create(
                user=user,
                invoice_number=invoice_number or generate_invoice_number(),
                subtotal=subtotal,
                tax=tax,
                total=subtotal + tax,
            )
            InvoiceItem.objects.bulk_create(
                [
                    InvoiceItem(
                        invoice=invoice,
                        course=course,
                        quantity=quantity,
                        unit_price=unit_price,
                        line_total=line_total,
                        position=position,
                    )
                    for position, ((course, quantity, unit_price), line_total) in enumerate(
                        zip(lines, line_totals)
                    )
                ]
            )
        return invoice


class Invoice(UUIDPrimaryKeyMixin, BaseModel):
    """
    What a user owes for one purchase.

    State Flow:
        PENDING -> PAID
        PAID -> PAID (re-applied settlement is harmless)
        CANCELLED -> PAID (money arrived after cancellation)

    Fields:
        invoice_number: Unique, human-facing number
        user: Invoice owner (receives the enrollments)
        status: Current FSM state
        subtotal / tax / total: Amounts in ZAR (total = subtotal + tax)
        paid_at: When the invoice was settled
    """

    invoice_number = models.CharField(
        max_length=32,
        unique=True,
        help_text="Human-facing invoice number",
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="invoices",
    )

    status = FSMField(
        default=InvoiceStatus.PENDING,
        choices=InvoiceStatus.choices,
        db_index=True,
        help_text="Current state of the invoice (managed by FSM)",
    )

    subtotal = models.DecimalField(max_digits=10, decimal_places=2)
    tax = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=10, decimal_places=2)

    paid_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the invoice was paid",
    )

    objects = InvoiceManager()

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Invoice"
        verbose_name_plural = "Invoices"
        indexes = [
            models.Index(fields=["user", "status"], name="invoice_user_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Invoice({self.invoice_number}, {self.status}, {self.total} ZAR)"

    @property
    def is_paid(self) -> bool:
        return self.status == InvoiceStatus.PAID

    @transition(
        field=status,
        source=[InvoiceStatus.PENDING, InvoiceStatus.PAID, InvoiceStatus.CANCELLED],
        target=InvoiceStatus.PAID,
    )
    def mark_paid(self):
        """
        Mark the invoice as paid.

        Transition: PENDING/PAID/CANCELLED -> PAID

        Called by settlement when the gateway reports COMPLETE.
        REFUNDED invoices raise TransitionNotAllowed.
        """
        self.paid_at = timezone.now()


class InvoiceItem(UUIDPrimaryKeyMixin, BaseModel):
    """
    One course on an invoice.

    Fields:
        invoice: Parent invoice
        course: Course unlocked when the invoice is paid
        quantity / unit_price / line_total: Line amounts in ZAR
        position: Display order on the invoice
    """

    invoice = models.ForeignKey(
        Invoice,
        on_delete=models.CASCADE,
        related_name="items",
    )

    course = models.ForeignKey(
        "courses.Course",
        on_delete=models.PROTECT,
        related_name="invoice_items",
    )

    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    line_total = models.DecimalField(max_digits=10, decimal_places=2)

    position = models.PositiveSmallIntegerField(default=0)

    class Meta:
        ordering = ["position", "created_at"]
        verbose_name = "Invoice Item"
        verbose_name_plural = "Invoice Items"

    def __str__(self) -> str:
        return f"InvoiceItem({self.invoice_id}, {self.course_id} x{self.quantity})"
