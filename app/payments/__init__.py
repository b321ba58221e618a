"""
Payments app for PayFast integration.

This app handles:
- PayFast ITN verification (signature, source address, merchant, remote validation)
- Payment reconciliation with idempotent replay handling
- Invoice settlement and course enrollment activation

Related apps:
    - billing: Invoice and InvoiceItem settled by a completed payment
    - courses: Enrollment activated for each purchased course

Usage:
    from payments.services import ITNProcessor
    from payments.payfast import ITNNotification

    notification = ITNNotification.from_querydict(request.POST)
    result = ITNProcessor.from_settings().process(notification, source_ip)
"""
