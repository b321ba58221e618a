"""
Enrollment lifecycle states.

State Flow:
    PENDING → ACTIVE (invoice paid)
    ACTIVE → EXPIRED / CANCELLED (managed outside the payment pipeline)
    any → ACTIVE (re-activation on a later purchase)
"""

from django.db import models


class EnrollmentStatus(models.TextChoices):
    """States for the Enrollment model lifecycle."""

    PENDING = "PENDING", "Pending"
    ACTIVE = "ACTIVE", "Active"
    EXPIRED = "EXPIRED", "Expired"
    CANCELLED = "CANCELLED", "Cancelled"


__all__ = ["EnrollmentStatus"]
