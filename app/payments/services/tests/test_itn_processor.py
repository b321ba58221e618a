"""
Tests for ITNProcessor.

Runs the real validator, reconciler and settlement against the test
database; only PayFast's validate endpoint is mocked.
"""

from unittest.mock import MagicMock, patch

import pytest

from billing.constants import InvoiceStatus
from courses.models import Enrollment
from payments.models import Payment
from payments.payfast import ITNNotification, PayFastSettings
from payments.services import ITNProcessor
from payments.state_machines import PaymentStatus
from payments.tests.factories import MERCHANT_ID, PASSPHRASE, signed_itn_fields


def process(config, fields, source_ip="127.0.0.1"):
    return ITNProcessor.from_settings(config).process(ITNNotification(fields=fields), source_ip)


class TestFromSettings:
    def test_builds_pipeline_from_django_settings(self, payfast_settings):
        processor = ITNProcessor.from_settings()

        assert processor.validator.merchant_id == MERCHANT_ID
        assert processor.validator.sandbox is True
        assert processor.validator.codec.passphrase == PASSPHRASE
        assert processor.validator.authenticator.trust_any_source is True
        assert processor.validator.remote_client.validate_url.startswith("https://sandbox.payfast")


class TestProcess:
    """validate -> reconcile -> settle."""

    def test_complete_notification_settles_invoice(self, sandbox_config, payment, invoice):
        result = process(sandbox_config, signed_itn_fields(payment=payment))

        invoice.refresh_from_db()
        payment.refresh_from_db()
        assert result.success is True
        assert payment.status == PaymentStatus.COMPLETED
        assert invoice.status == InvoiceStatus.PAID
        assert Enrollment.objects.filter(user=invoice.user).count() == 2

    @pytest.mark.parametrize("status", ["FAILED", "CANCELLED", "PENDING"])
    def test_other_statuses_do_not_settle(self, sandbox_config, payment, invoice, status):
        result = process(sandbox_config, signed_itn_fields(payment=payment, payment_status=status))

        invoice.refresh_from_db()
        assert result.success is True
        assert invoice.status == InvoiceStatus.PENDING
        assert not Enrollment.objects.exists()

    def test_rejected_notification_writes_nothing(self, sandbox_config, payment, invoice):
        fields = signed_itn_fields(payment=payment)
        fields["amount_gross"] = "1.00"

        result = process(sandbox_config, fields)

        payment.refresh_from_db()
        invoice.refresh_from_db()
        assert result.success is False
        assert result.reason == "invalid_signature"
        assert payment.gateway_payment_id is None
        assert invoice.status == InvoiceStatus.PENDING
        assert not Enrollment.objects.exists()

    def test_replay_settles_once(self, sandbox_config, payment, invoice):
        fields = signed_itn_fields(payment=payment)
        processor = ITNProcessor.from_settings(sandbox_config)
        settlement = MagicMock(wraps=processor.settlement)
        processor.settlement = settlement

        first = processor.process(ITNNotification(fields=fields), "127.0.0.1")
        invoice.refresh_from_db()
        paid_at = invoice.paid_at
        second = processor.process(ITNNotification(fields=fields), "127.0.0.1")

        invoice.refresh_from_db()
        assert first.duplicate is False
        assert second.success is True
        assert second.duplicate is True
        assert second.message == "Payment already processed"
        assert settlement.settle.call_count == 1
        assert invoice.paid_at == paid_at
        assert Payment.objects.count() == 1
        assert Enrollment.objects.count() == 2

    def test_notification_without_gateway_id_never_settles(self, sandbox_config, invoice):
        fields = signed_itn_fields(invoice=invoice, pf_payment_id=None)

        first = process(sandbox_config, fields)
        second = process(sandbox_config, fields)

        invoice.refresh_from_db()
        assert first.success is False
        assert second.reason == "missing_gateway_payment_id"
        assert not Payment.objects.exists()
        assert invoice.status == InvoiceStatus.PENDING
        assert not Enrollment.objects.exists()

    def test_settlement_failure_keeps_reconciliation_result(self, sandbox_config, payment, invoice):
        invoice.status = InvoiceStatus.REFUNDED
        invoice.save()

        result = process(sandbox_config, signed_itn_fields(payment=payment))

        payment.refresh_from_db()
        assert result.success is True
        assert payment.status == PaymentStatus.COMPLETED
        assert not Enrollment.objects.exists()

    def test_settles_the_payments_own_invoice(self, sandbox_config, payment, invoice):
        result = process(
            sandbox_config,
            signed_itn_fields(payment=payment, custom_str2=invoice.invoice_number),
        )

        invoice.refresh_from_db()
        assert result.invoice_id == str(invoice.id)
        assert invoice.status == InvoiceStatus.PAID


class TestProductionMode:
    """Source and remote validation enforced."""

    @pytest.fixture
    def production_config(self):
        return PayFastSettings(merchant_id=MERCHANT_ID, passphrase=PASSPHRASE, sandbox=False)

    @patch("payments.payfast.client.requests.post")
    def test_remote_confirmation_required(self, mock_post, production_config, payment):
        mock_post.return_value = MagicMock(status_code=200, text="INVALID")

        result = process(production_config, signed_itn_fields(payment=payment), "197.97.145.150")

        payment.refresh_from_db()
        assert result.reason == "remote_validation_failed"
        assert payment.gateway_payment_id is None

    @patch("payments.payfast.client.requests.post")
    def test_outside_source_rejected_before_remote_call(self, mock_post, production_config, payment):
        result = process(production_config, signed_itn_fields(payment=payment), "8.8.8.8")

        assert result.reason == "invalid_source"
        mock_post.assert_not_called()

    @patch("payments.payfast.client.requests.post")
    def test_confirmed_notification_is_processed(self, mock_post, production_config, payment, invoice):
        mock_post.return_value = MagicMock(status_code=200, text="VALID")

        result = process(production_config, signed_itn_fields(payment=payment), "41.74.179.200")

        invoice.refresh_from_db()
        assert result.success is True
        assert invoice.status == InvoiceStatus.PAID
