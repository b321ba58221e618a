"""
Webhook endpoints for payment gateway notifications.

- payfast_itn: PayFast ITN receiver (always acknowledges 200 OK)
- webhook_health: Liveness check for the webhook routes
"""

from payments.webhooks.views import payfast_itn, webhook_health

__all__ = [
    "payfast_itn",
    "webhook_health",
]
