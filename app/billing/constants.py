"""
Invoice lifecycle states.

State Flow:
    PENDING → PAID (settlement of a COMPLETE payment notification)
    PENDING → CANCELLED
    PAID → REFUNDED (outside the payment pipeline)

Terminal for settlement: REFUNDED (a refunded invoice is never re-paid)
"""

from django.db import models


class InvoiceStatus(models.TextChoices):
    """States for the Invoice model lifecycle."""

    PENDING = "PENDING", "Pending"
    PAID = "PAID", "Paid"
    CANCELLED = "CANCELLED", "Cancelled"
    REFUNDED = "REFUNDED", "Refunded"


__all__ = ["InvoiceStatus"]
