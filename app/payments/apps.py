"""
Payments app configuration.

This app receives PayFast Instant Transaction Notifications (ITNs):
- Verifies signature, source address, merchant and remote validation
- Reconciles the Payment record the notification refers to
- Settles the invoice and activates the purchased enrollments
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    """Configuration for the payments application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments"
