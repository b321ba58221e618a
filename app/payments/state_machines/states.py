"""
State enums for payment models.

These are Django TextChoices for database storage and admin integration.
Values are the upper-case strings stored on Payment.status.

State Machines Overview:

Payment States:
    PENDING → PROCESSING → COMPLETED
    PENDING → COMPLETED / FAILED / CANCELLED (gateway notification)
    any → any reported by a later notification for the same payment
"""

from django.db import models


class PaymentStatus(models.TextChoices):
    """
    States for the Payment model lifecycle.

    Terminal states: COMPLETED, FAILED, CANCELLED

    Payments are driven by gateway notifications rather than local
    transitions: the reconciler writes whatever the gateway reports,
    mapped through PayFastPaymentStatus.to_payment_status().
    """

    PENDING = "PENDING", "Pending"
    PROCESSING = "PROCESSING", "Processing"
    COMPLETED = "COMPLETED", "Completed"
    FAILED = "FAILED", "Failed"
    CANCELLED = "CANCELLED", "Cancelled"


class PaymentMethod(models.TextChoices):
    """Gateways a Payment can be settled through."""

    PAYFAST = "payfast", "PayFast"
