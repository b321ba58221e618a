"""
PayFast configuration snapshot.

Reads the PAYFAST_* Django settings once so the ITN pipeline can be
built from plain values (and tests can build it from their own).
"""

from __future__ import annotations

from dataclasses import dataclass

from django.conf import settings

from payments.payfast.source import PAYFAST_NETWORKS

SANDBOX_VALIDATE_URL = "https://sandbox.payfast.co.za/eng/query/validate"
PRODUCTION_VALIDATE_URL = "https://www.payfast.co.za/eng/query/validate"


@dataclass(frozen=True)
class PayFastSettings:
    """
    Merchant configuration for PayFast.

    Attributes:
        merchant_id: Expected merchant_id on every notification
        merchant_key: Merchant key (used when building checkout payloads)
        passphrase: Shared signing passphrase, "" when not configured
        sandbox: Sandbox mode (skips remote validation, trusts any source)
        debug: Development mode (trusts any source)
        validate_url: PayFast validate endpoint
        validate_timeout: Seconds before the validate call gives up, None for no limit
        source_networks: CIDR networks allowed to deliver ITNs
    """

    merchant_id: str
    merchant_key: str = ""
    passphrase: str = ""
    sandbox: bool = False
    debug: bool = False
    validate_url: str = PRODUCTION_VALIDATE_URL
    validate_timeout: float | None = None
    source_networks: tuple[str, ...] = PAYFAST_NETWORKS

    @property
    def trust_any_source(self) -> bool:
        return self.sandbox or self.debug

    @classmethod
    def from_django_settings(cls) -> PayFastSettings:
        sandbox = bool(getattr(settings, "PAYFAST_SANDBOX", False))
        default_url = SANDBOX_VALIDATE_URL if sandbox else PRODUCTION_VALIDATE_URL
        return cls(
            merchant_id=getattr(settings, "PAYFAST_MERCHANT_ID", ""),
            merchant_key=getattr(settings, "PAYFAST_MERCHANT_KEY", ""),
            passphrase=getattr(settings, "PAYFAST_PASSPHRASE", "") or "",
            sandbox=sandbox,
            debug=bool(settings.DEBUG),
            validate_url=getattr(settings, "PAYFAST_VALIDATE_URL", None) or default_url,
            validate_timeout=getattr(settings, "PAYFAST_VALIDATE_TIMEOUT", None),
            source_networks=tuple(
                getattr(settings, "PAYFAST_VALID_SOURCE_NETWORKS", None) or PAYFAST_NETWORKS
            ),
        )
