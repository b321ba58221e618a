"""
Settlement of paid invoices.

When PayFast reports a completed payment the invoice is marked PAID and
every course on it is unlocked for the paying user. Enrollments are
activated one by one: a failure on one course is logged and does not
stop the others.

Usage:
    from payments.services import SettlementOrchestrator

    result = SettlementOrchestrator().settle(invoice.id, user_reference=str(user.id))
    if result.success:
        print(f"Activated {len(result.data.activated)} course(s)")
    else:
        print(f"Settlement failed: {result.error} ({result.error_code})")
"""

from __future__ import annotations

from dataclasses import dataclass, field

from django.contrib.auth import get_user_model
from django_fsm import TransitionNotAllowed

from billing.models import Invoice
from core.exceptions import ConflictError
from core.helpers import validate_uuid
from core.services import BaseService, ServiceResult
from courses.models import Enrollment


@dataclass
class SettlementSummary:
    """
    What settlement did for one invoice.

    Attributes:
        invoice_id: Settled invoice
        user_id: User the enrollments were granted to (None if items could not be loaded)
        activated: Course ids whose enrollment is now ACTIVE
        failed: Course ids whose activation raised
    """

    invoice_id: str
    user_id: str | None = None
    activated: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


class SettlementOrchestrator(BaseService):
    """
    Marks invoices paid and activates the enrollments they purchased.

    Collaborators default to the model managers and can be replaced
    in tests.
    """

    def __init__(self, invoices=None, enrollments=None, users=None):
        self.invoices = invoices if invoices is not None else Invoice.objects
        self.enrollments = enrollments if enrollments is not None else Enrollment.objects
        self.users = users if users is not None else get_user_model().objects

    def settle(self, invoice_id, user_reference: str | None = None) -> ServiceResult[SettlementSummary]:
        """
        Mark the invoice paid and unlock its courses.

        Args:
            invoice_id: Invoice to settle
            user_reference: User id from the notification (custom_str1);
                the invoice owner is used when blank or unknown

        Returns:
            ServiceResult with a SettlementSummary. Fails only when the
            invoice is missing or cannot move to PAID.
        """
        logger = self.get_logger()
        log_context = {"invoice_id": str(invoice_id), "user_reference": user_reference}

        logger.info("Handling successful payment", extra=log_context)

        # Step 1: Invoice -> PAID
        invoice = self.invoices.filter(pk=invoice_id).first()
        if invoice is None:
            logger.error("Invoice to settle not found", extra=log_context)
            return ServiceResult.failure(
                f"Invoice {invoice_id} not found",
                error_code="INVOICE_NOT_FOUND",
            )

        try:
            invoice.mark_paid()
        except TransitionNotAllowed:
            error = ConflictError(
                f"Invoice {invoice.invoice_number} cannot be marked paid from {invoice.status}",
                error_code="INVALID_STATE_TRANSITION",
                details={"current_status": invoice.status, "action": "mark_paid"},
            )
            logger.error(error.message, extra={**log_context, **error.to_dict()})
            return ServiceResult.from_exception(error)

        invoice.save(update_fields=["status", "paid_at", "updated_at"])
        logger.info("Invoice status updated", extra={**log_context, "status": invoice.status})

        # Step 2: Reload with items
        invoice = self.invoices.with_items().filter(pk=invoice_id).first()
        if invoice is None:
            logger.warning("Invoice items not found, no courses unlocked", extra=log_context)
            return ServiceResult.success(SettlementSummary(invoice_id=str(invoice_id)))

        # Step 3: Unlock each course for the paying user
        user_id = self._resolve_user_id(invoice, user_reference)
        summary = SettlementSummary(invoice_id=str(invoice.id), user_id=str(user_id))

        for item in invoice.items.all():
            item_context = {**log_context, "user_id": str(user_id), "course_id": str(item.course_id)}
            try:
                self.enrollments.upsert_active(user_id, item.course_id)
            except Exception:
                logger.error("Failed to unlock course access", extra=item_context, exc_info=True)
                summary.failed.append(str(item.course_id))
                continue

            logger.info("Course access unlocked", extra=item_context)
            summary.activated.append(str(item.course_id))

        return ServiceResult.success(summary)

    def _resolve_user_id(self, invoice: Invoice, user_reference: str | None):
        if not user_reference:
            return invoice.user_id

        if validate_uuid(user_reference):
            user_id = self.users.filter(pk=user_reference).values_list("pk", flat=True).first()
            if user_id is not None:
                return user_id

        self.get_logger().warning(
            "Unknown user reference on notification, using invoice owner",
            extra={"invoice_id": str(invoice.id), "user_reference": user_reference},
        )
        return invoice.user_id
