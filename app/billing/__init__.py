"""
Billing app: invoices and their line items.

Models:
    - Invoice: What a user owes for one purchase (PENDING → PAID)
    - InvoiceItem: One course on an invoice

Usage:
    from billing.models import Invoice

    invoice = Invoice.objects.create_with_items(
        user=user,
        lines=[(course, 1, course.price)],
    )
"""
