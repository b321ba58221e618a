"""
Tests for the simulate_itn management command.
"""

import json
from io import StringIO
from unittest.mock import MagicMock, patch

import pytest
import requests
from django.core.management import CommandError, call_command

from payments.payfast import SignatureCodec
from payments.tests.factories import MERCHANT_ID, PASSPHRASE


def run(*args):
    out = StringIO()
    call_command("simulate_itn", *args, stdout=out)
    return out.getvalue()


def printed_payload(output: str) -> dict:
    return json.loads(output[: output.rindex("}") + 1])


class TestSimulateITN:
    def test_dry_run_prints_signed_payload(self, payfast_settings, invoice, payment):
        with patch("payments.management.commands.simulate_itn.requests.post") as mock_post:
            output = run(invoice.invoice_number, "--dry-run", "--pf-payment-id", "PF1")

        payload = printed_payload(output)
        mock_post.assert_not_called()
        assert payload["merchant_id"] == MERCHANT_ID
        assert payload["m_payment_id"] == str(payment.id)
        assert payload["pf_payment_id"] == "PF1"
        assert payload["payment_status"] == "COMPLETE"
        assert payload["amount_gross"] == "1000.00"
        assert payload["amount_net"] == "1000.00"
        assert payload["item_name"] == "TypeScript Fundamentals"
        assert payload["custom_str1"] == str(invoice.user_id)
        assert payload["custom_str2"] == str(invoice.id)
        assert SignatureCodec(PASSPHRASE).verify(payload) is True

    def test_status_and_fee_options(self, payfast_settings, invoice):
        output = run(str(invoice.id), "--dry-run", "--status", "FAILED", "--fee", "23.00")

        payload = printed_payload(output)
        assert payload["payment_status"] == "FAILED"
        assert payload["amount_fee"] == "23.00"
        assert payload["amount_net"] == "977.00"

    def test_posts_to_webhook(self, payfast_settings, invoice):
        with patch("payments.management.commands.simulate_itn.requests.post") as mock_post:
            mock_post.return_value = MagicMock(ok=True, status_code=200, text="OK")

            output = run(invoice.invoice_number, "--url", "http://localhost:9000/itn/")

        args, kwargs = mock_post.call_args
        assert args[0] == "http://localhost:9000/itn/"
        assert kwargs["data"]["custom_str2"] == str(invoice.id)
        assert "Notification delivered" in output

    def test_unreachable_webhook(self, payfast_settings, invoice):
        with patch("payments.management.commands.simulate_itn.requests.post") as mock_post:
            mock_post.side_effect = requests.exceptions.ConnectionError("refused")

            with pytest.raises(CommandError, match="Could not reach"):
                run(invoice.invoice_number)

    def test_unknown_invoice(self, payfast_settings, db):
        with pytest.raises(CommandError, match="not found"):
            run("INV-MISSING")

    def test_requires_merchant_id(self, payfast_settings, invoice):
        payfast_settings.PAYFAST_MERCHANT_ID = ""

        with pytest.raises(CommandError, match="PAYFAST_MERCHANT_ID"):
            run(invoice.invoice_number, "--dry-run")

    @pytest.mark.parametrize("fee", ["lots", "NaN", "-1.00"])
    def test_invalid_fee_is_a_command_error(self, payfast_settings, invoice, fee):
        with pytest.raises(CommandError, match="Invalid --fee"):
            run(invoice.invoice_number, "--dry-run", f"--fee={fee}")

    def test_fee_above_total_is_a_command_error(self, payfast_settings, invoice):
        with pytest.raises(CommandError, match="exceeds the invoice total 1000.00"):
            run(invoice.invoice_number, "--dry-run", "--fee", "1000.01")

    def test_fee_equal_to_total_leaves_zero_net(self, payfast_settings, invoice):
        payload = printed_payload(run(invoice.invoice_number, "--dry-run", "--fee", "1000.00"))

        assert payload["amount_net"] == "0.00"
