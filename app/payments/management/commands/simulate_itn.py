"""
Simulate a PayFast ITN for an existing invoice.

Builds the notification PayFast would send for the invoice, signs it
with the configured passphrase and posts it to the webhook. Useful for
exercising the full pipeline locally with PAYFAST_SANDBOX=True.

Usage:
    python manage.py simulate_itn INV-20260301-3F9A1C
    python manage.py simulate_itn <invoice-uuid> --status FAILED
    python manage.py simulate_itn INV-20260301-3F9A1C --dry-run
"""

import json
import time
import uuid
from decimal import Decimal, InvalidOperation

import requests
from django.core.management.base import BaseCommand, CommandError

from billing.models import Invoice
from payments.payfast import PayFastPaymentStatus, PayFastSettings, SignatureCodec

DEFAULT_WEBHOOK_URL = "http://localhost:8000/api/v1/payments/webhooks/payfast/"


class Command(BaseCommand):
    """
    Post a signed PayFast notification to the ITN webhook.

    Usage:
        python manage.py simulate_itn <invoice>
        python manage.py simulate_itn <invoice> --status CANCELLED
        python manage.py simulate_itn <invoice> --url https://example.ngrok.app/api/v1/payments/webhooks/payfast/
        python manage.py simulate_itn <invoice> --dry-run
    """

    help = "Send a signed PayFast ITN for an invoice to the webhook endpoint"

    def add_arguments(self, parser):
        parser.add_argument(
            "invoice",
            help="Invoice id or invoice number",
        )
        parser.add_argument(
            "--status",
            default=PayFastPaymentStatus.COMPLETE.value,
            choices=PayFastPaymentStatus.values,
            help="payment_status to report (default: COMPLETE)",
        )
        parser.add_argument(
            "--payment",
            help="m_payment_id to send (default: the invoice's latest payment, else a new id)",
        )
        parser.add_argument(
            "--user",
            help="custom_str1 user id (default: the invoice owner)",
        )
        parser.add_argument(
            "--pf-payment-id",
            help="pf_payment_id to send (default: a fresh PF<timestamp> id)",
        )
        parser.add_argument(
            "--fee",
            default="0.00",
            help="amount_fee to report (default: 0.00)",
        )
        parser.add_argument(
            "--url",
            default=DEFAULT_WEBHOOK_URL,
            help=f"Webhook URL (default: {DEFAULT_WEBHOOK_URL})",
        )
        parser.add_argument(
            "--timeout",
            type=float,
            default=10.0,
            help="Request timeout in seconds (default: 10)",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Print the signed payload without sending it",
        )

    def handle(self, *args, **options):
        invoice = Invoice.objects.with_items().by_reference(options["invoice"]).first()
        if invoice is None:
            raise CommandError(f"Invoice {options['invoice']} not found")

        config = PayFastSettings.from_django_settings()
        if not config.merchant_id:
            raise CommandError("PAYFAST_MERCHANT_ID must be set")

        payload = self.build_payload(invoice, config, options)
        codec = SignatureCodec(passphrase=config.passphrase)
        payload["signature"] = codec.generate(payload)

        self.stdout.write(json.dumps(payload, indent=2))

        if options["dry_run"]:
            self.stdout.write(self.style.WARNING("Dry run: notification not sent"))
            return

        try:
            response = requests.post(options["url"], data=payload, timeout=options["timeout"])
        except requests.exceptions.RequestException as e:
            raise CommandError(f"Could not reach {options['url']}: {e}") from e

        self.stdout.write(f"Response: {response.status_code} {response.text}")
        if response.ok:
            self.stdout.write(self.style.SUCCESS("Notification delivered"))
        else:
            raise CommandError(f"Webhook answered {response.status_code}")

    def build_payload(self, invoice: Invoice, config: PayFastSettings, options: dict) -> dict:
        user = invoice.user
        items = list(invoice.items.all())
        item_name = items[0].course.title if items else invoice.invoice_number

        payment_id = options.get("payment")
        if not payment_id:
            latest = invoice.payments.order_by("-created_at").first()
            payment_id = str(latest.id if latest else uuid.uuid4())

        gross = invoice.total
        fee = self.parse_fee(options.get("fee"), gross)

        return {
            "merchant_id": config.merchant_id,
            "m_payment_id": payment_id,
            "pf_payment_id": options.get("pf_payment_id") or f"PF{int(time.time() * 1000)}",
            "payment_status": options["status"],
            "item_name": item_name,
            "amount_gross": f"{gross:.2f}",
            "amount_fee": f"{fee:.2f}",
            "amount_net": f"{gross - fee:.2f}",
            "custom_str1": options.get("user") or str(user.id),
            "custom_str2": str(invoice.id),
            "name_first": user.first_name,
            "name_last": user.last_name,
            "email_address": user.email,
        }

    @staticmethod
    def parse_fee(value, gross: Decimal) -> Decimal:
        """amount_fee as a Decimal between 0 and the invoice total."""
        try:
            fee = Decimal(value or "0.00")
        except (InvalidOperation, TypeError, ValueError) as e:
            raise CommandError(f"Invalid --fee {value!r}: not a decimal amount") from e

        if not fee.is_finite() or fee < 0:
            raise CommandError(f"Invalid --fee {value!r}: must be a non-negative amount")
        if fee > gross:
            raise CommandError(f"Invalid --fee {value!r}: exceeds the invoice total {gross:.2f}")
        return fee
