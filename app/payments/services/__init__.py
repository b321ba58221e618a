"""
Payment services for handling PayFast notifications.

This module provides:
- PaymentReconciler: Applies a validated ITN to its Payment record
- SettlementOrchestrator: Marks invoices paid and unlocks purchased courses
- ITNProcessor: Validate -> reconcile -> settle pipeline used by the webhook

Usage:
    from payments.services import ITNProcessor

    result = ITNProcessor.from_settings().process(notification, source_ip)
"""

from payments.services.itn_processor import ITNProcessor
from payments.services.reconciler import PaymentReconciler
from payments.services.settlement import SettlementOrchestrator, SettlementSummary

__all__ = [
    "ITNProcessor",
    "PaymentReconciler",
    "SettlementOrchestrator",
    "SettlementSummary",
]
