"""
Data types for the PayFast ITN protocol.

ITNNotification wraps the decoded form body PayFast posts to the
webhook. Field names are fixed by PayFast; by convention custom_str1
carries our user id and custom_str2 our invoice reference.

Status vocabularies are closed enumerations. PayFast statuses are
mapped onto Payment statuses with an explicit PENDING fallback for
anything unrecognised.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any

from django.db import models

from payments.state_machines import PaymentStatus

logger = logging.getLogger(__name__)


# =============================================================================
# Status Vocabularies
# =============================================================================


class PayFastPaymentStatus(models.TextChoices):
    """payment_status values PayFast sends in an ITN."""

    COMPLETE = "COMPLETE", "Complete"
    FAILED = "FAILED", "Failed"
    PENDING = "PENDING", "Pending"
    CANCELLED = "CANCELLED", "Cancelled"

    @classmethod
    def to_payment_status(cls, raw_status: str | None) -> PaymentStatus:
        """
        Map a raw PayFast status onto the internal Payment status.

        COMPLETE -> COMPLETED, FAILED -> FAILED, PENDING -> PENDING,
        CANCELLED -> CANCELLED. Unknown or missing values map to PENDING.

        Example:
            PayFastPaymentStatus.to_payment_status("COMPLETE")
            # PaymentStatus.COMPLETED
        """
        try:
            status = cls(raw_status)
        except ValueError:
            logger.info(
                f"Unrecognised PayFast payment_status {raw_status!r}, treating as pending",
                extra={"payment_status": raw_status},
            )
            return PaymentStatus.PENDING
        return _PAYMENT_STATUS_MAP[status]


_PAYMENT_STATUS_MAP: dict[PayFastPaymentStatus, PaymentStatus] = {
    PayFastPaymentStatus.COMPLETE: PaymentStatus.COMPLETED,
    PayFastPaymentStatus.FAILED: PaymentStatus.FAILED,
    PayFastPaymentStatus.PENDING: PaymentStatus.PENDING,
    PayFastPaymentStatus.CANCELLED: PaymentStatus.CANCELLED,
}


class ITNRejectionReason(models.TextChoices):
    """Why the validator refused a notification."""

    INVALID_SIGNATURE = "invalid_signature", "Invalid signature"
    INVALID_SOURCE = "invalid_source", "Invalid source address"
    MERCHANT_MISMATCH = "merchant_mismatch", "Merchant ID mismatch"
    REMOTE_VALIDATION_FAILED = "remote_validation_failed", "Remote validation failed"


class ReconciliationFailureReason(models.TextChoices):
    """Why an accepted notification could not be applied to a Payment."""

    MISSING_GATEWAY_PAYMENT_ID = "missing_gateway_payment_id", "Missing gateway payment id"
    MISSING_INVOICE_REFERENCE = "missing_invoice_reference", "Missing invoice reference"
    INVOICE_NOT_FOUND = "invoice_not_found", "Invoice not found"
    INVALID_AMOUNT = "invalid_amount", "Invalid amount"


# =============================================================================
# Notification
# =============================================================================


def _field(name: str) -> property:
    return property(lambda self: self.get(name), doc=f"``{name}`` as sent by PayFast.")


@dataclass(frozen=True)
class ITNNotification:
    """
    One Instant Transaction Notification, exactly as received.

    Values are kept as the strings PayFast sent so the signature can be
    recomputed over them. Missing fields read as None.

    Usage:
        notification = ITNNotification.from_querydict(request.POST)
        notification.pf_payment_id      # "1089250"
        notification.invoice_reference  # custom_str2
        notification.gross_amount       # Decimal("100.00")
    """

    fields: Mapping[str, str] = field(default_factory=dict)

    merchant_id = _field("merchant_id")
    m_payment_id = _field("m_payment_id")
    pf_payment_id = _field("pf_payment_id")
    payment_status = _field("payment_status")
    item_name = _field("item_name")
    item_description = _field("item_description")
    amount_gross = _field("amount_gross")
    amount_fee = _field("amount_fee")
    amount_net = _field("amount_net")
    custom_str1 = _field("custom_str1")
    custom_str2 = _field("custom_str2")
    custom_str3 = _field("custom_str3")
    custom_str4 = _field("custom_str4")
    custom_str5 = _field("custom_str5")
    custom_int1 = _field("custom_int1")
    custom_int2 = _field("custom_int2")
    custom_int3 = _field("custom_int3")
    custom_int4 = _field("custom_int4")
    custom_int5 = _field("custom_int5")
    name_first = _field("name_first")
    name_last = _field("name_last")
    email_address = _field("email_address")
    signature = _field("signature")

    @classmethod
    def from_querydict(cls, data: Mapping[str, Any]) -> ITNNotification:
        """
        Build a notification from a decoded form body.

        Accepts a Django QueryDict (last value wins for repeated keys)
        or any plain mapping.
        """
        if hasattr(data, "dict"):
            data = data.dict()
        return cls(fields={str(key): str(value) for key, value in data.items()})

    def get(self, name: str, default: str | None = None) -> str | None:
        return self.fields.get(name, default)

    @property
    def user_reference(self) -> str | None:
        """Internal user id (custom_str1), None when blank."""
        return self.custom_str1 or None

    @property
    def invoice_reference(self) -> str | None:
        """Internal invoice id or number (custom_str2), None when blank."""
        return self.custom_str2 or None

    @property
    def gateway_reference(self) -> str | None:
        """Item description, falling back to the item name."""
        return self.item_description or self.item_name or None

    @property
    def gross_amount(self) -> Decimal | None:
        """amount_gross as a Decimal, None when missing or malformed."""
        try:
            amount = Decimal(self.amount_gross)
        except (InvalidOperation, TypeError, ValueError):
            return None
        return amount if amount.is_finite() else None

    @property
    def is_complete(self) -> bool:
        return self.payment_status == PayFastPaymentStatus.COMPLETE

    def as_dict(self) -> dict[str, str]:
        """Copy of the raw fields, suitable for JSON storage and re-posting."""
        return dict(self.fields)

    def log_context(self) -> dict[str, str | None]:
        """Identifiers attached to every log line about this notification."""
        return {
            "pf_payment_id": self.pf_payment_id,
            "m_payment_id": self.m_payment_id,
            "payment_status": self.payment_status,
        }


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of ITN validation.

    Attributes:
        accepted: Whether every gate passed
        reason: First failing gate, None when accepted
    """

    accepted: bool
    reason: ITNRejectionReason | None = None

    @classmethod
    def accept(cls) -> ValidationResult:
        return cls(accepted=True)

    @classmethod
    def reject(cls, reason: ITNRejectionReason) -> ValidationResult:
        return cls(accepted=False, reason=reason)

    def __bool__(self) -> bool:
        return self.accepted


@dataclass(frozen=True)
class ProcessedPayment:
    """
    Outcome of handling one notification.

    Attributes:
        success: Whether the notification was applied (or already had been)
        payment_id: Internal Payment id (the m_payment_id when none resolved)
        gateway_payment_id: PayFast's pf_payment_id
        status: Raw PayFast payment_status from the notification
        message: Human-readable summary for logs
        reason: Rejection or failure reason code, None on success
        duplicate: True when the notification was a replay
        invoice_id: Invoice the payment belongs to, when resolved
    """

    success: bool
    payment_id: str | None
    gateway_payment_id: str | None
    status: str | None
    message: str
    reason: str | None = None
    duplicate: bool = False
    invoice_id: str | None = None

    def __bool__(self) -> bool:
        return self.success
