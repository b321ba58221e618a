"""
URL configuration for the payments app.

Routes:
    - POST /webhooks/payfast/ - PayFast ITN endpoint
    - GET /webhooks/health/ - Webhook liveness check

All routes are prefixed with /api/v1/payments/ when included in the main URLconf.

Usage:
    # In config/urls.py
    api_v1_patterns = [
        path("payments/", include("payments.urls")),
    ]
"""

from django.urls import path

from payments.webhooks.views import payfast_itn, webhook_health

app_name = "payments"

urlpatterns = [
    # Webhook endpoints
    path("webhooks/payfast/", payfast_itn, name="payfast_itn"),
    path("webhooks/health/", webhook_health, name="webhook_health"),
]
