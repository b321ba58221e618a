"""
Payment domain models.

- Payment: One payment attempt against an invoice, updated by gateway notifications
"""

from payments.models.payment import Payment

__all__ = [
    "Payment",
]
