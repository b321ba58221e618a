"""
Webhook endpoint views for PayFast.

PayFast posts an ITN as a form-encoded body and only looks at the HTTP
status: anything but 200 is redelivered. Every notification is
therefore acknowledged with ``200 OK``, whatever happened; rejections
and failures are visible in the logs instead.

Usage:
    # In urls.py
    from payments.webhooks.views import payfast_itn, webhook_health

    urlpatterns = [
        path("webhooks/payfast/", payfast_itn, name="payfast_itn"),
        path("webhooks/health/", webhook_health, name="webhook_health"),
    ]
"""

from __future__ import annotations

import logging

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from core.helpers import get_client_ip

from payments.payfast import ITNNotification
from payments.services import ITNProcessor


logger = logging.getLogger(__name__)


@csrf_exempt
@require_POST
def payfast_itn(request: HttpRequest) -> HttpResponse:
    """
    Receive a PayFast Instant Transaction Notification.

    This view:
    1. Decodes the form body into an ITNNotification
    2. Resolves the caller's address (X-Forwarded-For, then REMOTE_ADDR)
    3. Runs the validate -> reconcile -> settle pipeline
    4. Returns 200 "OK"

    Security:
    - Signature, source network, merchant id and PayFast's validate
      endpoint are checked by the pipeline
    - CSRF exemption required for external webhooks
    - Only POST requests accepted

    Idempotency:
    - Payment.gateway_payment_id is unique
    - Replayed notifications are detected and acknowledged without writes

    Returns:
        HttpResponse 200 "OK" (text/plain) in every case
    """
    source_ip = get_client_ip(request)
    notification = ITNNotification.from_querydict(request.POST)
    log_context = {**notification.log_context(), "source_ip": source_ip}

    logger.info("Received PayFast ITN", extra=log_context)

    try:
        result = ITNProcessor.from_settings().process(notification, source_ip)
    except Exception as e:
        logger.error(
            f"Unexpected error processing PayFast ITN: {type(e).__name__}",
            extra=log_context,
            exc_info=True,
        )
    else:
        log = logger.info if result.success else logger.warning
        log(
            f"PayFast ITN handled: {result.message}",
            extra={
                **log_context,
                "payment_id": result.payment_id,
                "success": result.success,
                "duplicate": result.duplicate,
                "reason": result.reason,
            },
        )

    return HttpResponse("OK", status=200, content_type="text/plain")


@require_GET
def webhook_health(request: HttpRequest) -> JsonResponse:
    """
    Liveness check for the webhook routes.

    Example Response:
        {
            "status": "ok",
            "endpoint": "webhooks",
            "timestamp": "2026-03-01T10:00:00+00:00"
        }
    """
    return JsonResponse(
        {
            "status": "ok",
            "endpoint": "webhooks",
            "timestamp": timezone.now().isoformat(),
        }
    )
