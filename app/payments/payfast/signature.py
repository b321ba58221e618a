"""
PayFast ITN signature generation and verification.

PayFast signs each notification with an MD5 digest over the posted
fields:

1. Drop the ``signature`` field itself
2. Drop fields whose value is None or empty
3. Sort the remaining fields by name
4. Percent-encode each value the way encodeURIComponent does, then
   turn ``%20`` into ``+``
5. Join as ``name=value`` pairs with ``&``
6. Append ``&passphrase=<encoded>`` when a passphrase is configured
7. Lower-case hex MD5 of the resulting string

MD5 is mandated by PayFast.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

logger = logging.getLogger(__name__)

SIGNATURE_FIELD = "signature"

# Punctuation encodeURIComponent leaves literal; quote() always keeps _.-
URI_COMPONENT_SAFE = "!*'()~"


class SignatureCodec:
    """
    Builds and checks PayFast signatures for a merchant passphrase.

    Usage:
        codec = SignatureCodec(passphrase=settings.PAYFAST_PASSPHRASE)

        fields["signature"] = codec.generate(fields)
        codec.verify(fields)  # True
    """

    def __init__(self, passphrase: str = ""):
        self.passphrase = passphrase or ""

    @staticmethod
    def encode(value: Any) -> str:
        return quote(str(value), safe=URI_COMPONENT_SAFE).replace("%20", "+")

    def build_param_string(self, fields: Mapping[str, Any]) -> str:
        """
        Return the canonical string the digest is computed over.

        Example:
            codec.build_param_string({"item_name": "Course A", "amount_gross": "100.00"})
            # "amount_gross=100.00&item_name=Course+A"
        """
        names = sorted(
            name
            for name, value in fields.items()
            if name != SIGNATURE_FIELD and value is not None and value != ""
        )
        param_string = "&".join(f"{name}={self.encode(fields[name])}" for name in names)

        if self.passphrase:
            param_string = f"{param_string}&passphrase={self.encode(self.passphrase)}"

        return param_string

    def generate(self, fields: Mapping[str, Any]) -> str:
        """Lower-case hex MD5 signature for the given fields."""
        param_string = self.build_param_string(fields)
        logger.debug(
            "Computed PayFast signature string",
            extra={"param_string": param_string},
        )
        return hashlib.md5(param_string.encode("utf-8")).hexdigest()

    def verify(self, fields: Mapping[str, Any], signature: str | None = None) -> bool:
        """
        Check a signature against the fields.

        Args:
            fields: Notification fields (may include ``signature``)
            signature: Signature to check; defaults to ``fields["signature"]``

        Returns:
            True if the supplied signature equals the computed one
        """
        supplied = signature if signature is not None else fields.get(SIGNATURE_FIELD)
        if not supplied:
            return False

        expected = self.generate(fields)
        logger.debug(
            "Comparing PayFast signatures",
            extra={"received": supplied, "calculated": expected},
        )
        return hmac.compare_digest(str(supplied).encode("utf-8"), expected.encode("utf-8"))
