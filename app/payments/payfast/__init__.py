"""
PayFast ITN protocol: wire types, signatures, source checks and validation.

Usage:
    from payments.payfast import ITNNotification, ITNValidator, SignatureCodec
"""

from payments.payfast.client import RemoteAttestationClient
from payments.payfast.config import PayFastSettings
from payments.payfast.signature import SignatureCodec
from payments.payfast.source import PAYFAST_NETWORKS, SourceAuthenticator
from payments.payfast.types import (
    ITNNotification,
    ITNRejectionReason,
    PayFastPaymentStatus,
    ProcessedPayment,
    ReconciliationFailureReason,
    ValidationResult,
)
from payments.payfast.validator import ITNValidator

__all__ = [
    "PAYFAST_NETWORKS",
    "ITNNotification",
    "ITNRejectionReason",
    "ITNValidator",
    "PayFastPaymentStatus",
    "PayFastSettings",
    "ProcessedPayment",
    "ReconciliationFailureReason",
    "RemoteAttestationClient",
    "SignatureCodec",
    "SourceAuthenticator",
    "ValidationResult",
]
