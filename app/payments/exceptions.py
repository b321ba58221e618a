"""
Payment-specific exceptions for payment operations.

Exception Hierarchy:
    PaymentError (base for payment domain)
    ├── InvoiceNotFoundError - Notification references an unknown invoice
    └── PayFastValidationUnavailableError - Remote ITN validation unreachable

Usage:
    from payments.exceptions import InvoiceNotFoundError

    invoice = Invoice.objects.by_reference(reference).first()
    if invoice is None:
        raise InvoiceNotFoundError(
            f"Invoice {reference} not found",
            details={"invoice_reference": reference},
        )

Note:
    None of these escape the ITN pipeline. The reconciler turns
    InvoiceNotFoundError into a failed ProcessedPayment and the
    validation client turns PayFastValidationUnavailableError into a
    rejected notification.
"""

from __future__ import annotations

from core.exceptions import BaseApplicationError, ExternalServiceError, NotFoundError


class PaymentError(BaseApplicationError):
    """
    Base exception for all payment operations.

    All payment-specific exceptions inherit from this class,
    which itself inherits from BaseApplicationError for
    consistent logging via to_dict().
    """

    default_error_code: str = "PAYMENT_ERROR"


class InvoiceNotFoundError(PaymentError, NotFoundError):
    """
    Raised when a notification's invoice reference matches no invoice.

    The reference may be the invoice UUID or its invoice number.
    """

    default_error_code: str = "INVOICE_NOT_FOUND"


class PayFastValidationUnavailableError(PaymentError, ExternalServiceError):
    """
    Raised when PayFast's validation endpoint cannot be reached.

    Covers connection errors, timeouts and non-2xx responses.
    """

    default_error_code: str = "PAYFAST_VALIDATION_UNAVAILABLE"
