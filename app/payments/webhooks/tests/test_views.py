"""
Tests for webhook views.

Tests cover:
- Acknowledgement (always 200 "OK")
- Client address resolution
- Error handling
- Webhook health endpoint
"""

import json
from unittest.mock import patch

import pytest
from django.test import RequestFactory
from django.urls import reverse

from payments.models import Payment
from payments.webhooks.views import payfast_itn, webhook_health
from payments.tests.factories import signed_itn_fields


# =============================================================================
# Setup
# =============================================================================


@pytest.fixture
def rf():
    """Request factory for creating test requests."""
    return RequestFactory()


def make_itn_request(rf, fields: dict, **extra):
    """Create a form-encoded POST to the ITN endpoint."""
    return rf.post("/api/v1/payments/webhooks/payfast/", data=fields, **extra)


# =============================================================================
# ITN Endpoint Tests
# =============================================================================


class TestPayFastITN:
    """Tests for the payfast_itn view."""

    def test_valid_notification_returns_ok(self, rf, payfast_settings, payment):
        response = payfast_itn(make_itn_request(rf, signed_itn_fields(payment=payment)))

        assert response.status_code == 200
        assert response.content == b"OK"
        assert response["Content-Type"].startswith("text/plain")
        payment.refresh_from_db()
        assert payment.gateway_payment_id == "1089250"

    def test_rejected_notification_still_returns_ok(self, rf, payfast_settings, payment):
        fields = signed_itn_fields(payment=payment)
        fields["signature"] = "0" * 32

        response = payfast_itn(make_itn_request(rf, fields))

        assert response.status_code == 200
        assert response.content == b"OK"
        assert not Payment.objects.exclude(gateway_payment_id=None).exists()

    def test_unreconcilable_notification_still_returns_ok(self, rf, payfast_settings, payment):
        response = payfast_itn(
            make_itn_request(rf, signed_itn_fields(payment=payment, custom_str2=None))
        )

        assert response.status_code == 200
        assert response.content == b"OK"

    def test_unexpected_error_is_logged_and_acknowledged(self, rf, payfast_settings, caplog):
        with patch("payments.webhooks.views.ITNProcessor.from_settings") as mock_factory:
            mock_factory.return_value.process.side_effect = RuntimeError("database down")

            with caplog.at_level("ERROR", logger="payments"):
                response = payfast_itn(make_itn_request(rf, {"pf_payment_id": "1"}))

        assert response.status_code == 200
        assert response.content == b"OK"
        [record] = [r for r in caplog.records if r.levelname == "ERROR"]
        assert record.exc_info is not None
        assert record.pf_payment_id == "1"

    def test_forwarded_address_is_used(self, rf, payfast_settings):
        with patch("payments.webhooks.views.ITNProcessor.from_settings") as mock_factory:
            payfast_itn(
                make_itn_request(
                    rf,
                    {"pf_payment_id": "1"},
                    HTTP_X_FORWARDED_FOR="197.97.145.150, 10.0.0.1",
                    REMOTE_ADDR="10.0.0.2",
                )
            )

        notification, source_ip = mock_factory.return_value.process.call_args.args
        assert source_ip == "197.97.145.150"
        assert notification.pf_payment_id == "1"

    def test_get_not_allowed(self, rf):
        response = payfast_itn(rf.get("/api/v1/payments/webhooks/payfast/"))

        assert response.status_code == 405

    def test_csrf_exempt_through_url(self, client, payfast_settings, payment):
        client = client.__class__(enforce_csrf_checks=True)

        response = client.post(
            reverse("payments:payfast_itn"),
            data=signed_itn_fields(payment=payment),
            secure=True,
        )

        assert response.status_code == 200
        assert response.content == b"OK"


# =============================================================================
# Health Endpoint Tests
# =============================================================================


class TestWebhookHealth:
    def test_reports_ok(self, rf):
        response = webhook_health(rf.get("/api/v1/payments/webhooks/health/"))

        body = json.loads(response.content)
        assert response.status_code == 200
        assert body["status"] == "ok"
        assert body["endpoint"] == "webhooks"
        assert "T" in body["timestamp"]

    def test_routed(self, client):
        response = client.get(reverse("payments:webhook_health"), secure=True)

        assert response.status_code == 200
