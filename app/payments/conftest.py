"""
Pytest fixtures for payment tests.

Fixtures provide a PayFast-configured Django settings block, an invoice
with two courses and the pieces of the ITN pipeline.

Usage:
    def test_complete_itn(invoice, payfast_settings):
        fields = signed_itn_fields(invoice=invoice)
"""

from decimal import Decimal

import pytest

from authentication.tests.factories import UserFactory
from billing.tests.factories import invoice_with_courses
from courses.tests.factories import CourseFactory
from payments.payfast import PayFastSettings
from payments.tests.factories import MERCHANT_ID, PASSPHRASE, PaymentFactory


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture
def payfast_settings(settings):
    """Sandbox PayFast settings (remote validation skipped, any source trusted)."""
    settings.DEBUG = False
    settings.PAYFAST_MERCHANT_ID = MERCHANT_ID
    settings.PAYFAST_MERCHANT_KEY = "46f0cd694581a"
    settings.PAYFAST_PASSPHRASE = PASSPHRASE
    settings.PAYFAST_SANDBOX = True
    settings.PAYFAST_VALIDATE_URL = "https://sandbox.payfast.co.za/eng/query/validate"
    settings.PAYFAST_VALIDATE_TIMEOUT = None
    return settings


@pytest.fixture
def production_payfast_settings(payfast_settings):
    """Production PayFast settings (source and remote validation enforced)."""
    payfast_settings.PAYFAST_SANDBOX = False
    payfast_settings.PAYFAST_VALIDATE_URL = "https://www.payfast.co.za/eng/query/validate"
    return payfast_settings


@pytest.fixture
def sandbox_config():
    """Plain PayFastSettings for building a sandbox pipeline directly."""
    return PayFastSettings(merchant_id=MERCHANT_ID, passphrase=PASSPHRASE, sandbox=True)


# =============================================================================
# Domain Fixtures
# =============================================================================


@pytest.fixture
def user(db):
    """Create a test user."""
    return UserFactory()


@pytest.fixture
def courses(db):
    """Two published courses."""
    return [
        CourseFactory(title="TypeScript Fundamentals", price=Decimal("574.99")),
        CourseFactory(title="Node.js in Production", price=Decimal("425.01")),
    ]


@pytest.fixture
def invoice(db, user, courses):
    """PENDING invoice for both courses, total 1000.00."""
    return invoice_with_courses(user=user, courses=courses)


@pytest.fixture
def payment(db, invoice):
    """PENDING payment created at checkout for the invoice."""
    return PaymentFactory(invoice=invoice)
