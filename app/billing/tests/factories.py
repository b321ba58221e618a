"""
Factory Boy factories for billing test data.

Usage:
    from billing.tests.factories import InvoiceFactory, InvoiceItemFactory

    invoice = InvoiceFactory(total=Decimal("100.00"))
    InvoiceItemFactory(invoice=invoice, course=course)

    # Invoice with N course lines and consistent totals
    invoice = invoice_with_courses(user, [course_a, course_b])
"""

from decimal import Decimal

import factory

from authentication.tests.factories import UserFactory
from billing.constants import InvoiceStatus
from billing.models import Invoice, InvoiceItem
from courses.tests.factories import CourseFactory


class InvoiceFactory(factory.django.DjangoModelFactory):
    """Factory for PENDING invoices without items."""

    class Meta:
        model = Invoice

    user = factory.SubFactory(UserFactory)
    invoice_number = factory.Sequence(lambda n: f"INV-20260301-{n:06X}")
    status = InvoiceStatus.PENDING
    subtotal = Decimal("100.00")
    tax = Decimal("0.00")
    total = Decimal("100.00")


class InvoiceItemFactory(factory.django.DjangoModelFactory):
    """Factory for a single-quantity invoice line."""

    class Meta:
        model = InvoiceItem

    invoice = factory.SubFactory(InvoiceFactory)
    course = factory.SubFactory(CourseFactory)
    quantity = 1
    unit_price = factory.LazyAttribute(lambda o: o.course.price)
    line_total = factory.LazyAttribute(lambda o: o.unit_price * o.quantity)
    position = factory.Sequence(lambda n: n)


def invoice_with_courses(user=None, courses=None, **kwargs) -> Invoice:
    """Create an invoice whose lines are the given courses at list price."""
    user = user or UserFactory()
    courses = courses if courses is not None else [CourseFactory()]
    return Invoice.objects.create_with_items(
        user=user,
        lines=[(course, 1, course.price) for course in courses],
        **kwargs,
    )
