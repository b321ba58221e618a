"""
Client for PayFast's server-side ITN validation endpoint.

PayFast confirms a notification when the exact fields it sent are
posted back to its validate URL; the response body is ``VALID`` or
``INVALID``.

Usage:
    client = RemoteAttestationClient(
        validate_url=settings.PAYFAST_VALIDATE_URL,
        timeout=settings.PAYFAST_VALIDATE_TIMEOUT,
    )
    client.confirm(notification.as_dict())  # True / False
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping

import requests

from payments.exceptions import PayFastValidationUnavailableError

logger = logging.getLogger(__name__)

VALID_RESPONSE = "VALID"


class RemoteAttestationClient:
    """Posts notifications back to PayFast for confirmation."""

    def __init__(self, validate_url: str, timeout: float | None = None):
        self.validate_url = validate_url
        self.timeout = timeout

    def confirm(self, fields: Mapping[str, str]) -> bool:
        """
        Ask PayFast whether it sent these fields.

        Returns:
            True only if PayFast answered exactly ``VALID``. Transport
            failures are logged and reported as False.
        """
        try:
            body = self._post(fields)
        except PayFastValidationUnavailableError as e:
            logger.error(
                f"PayFast validation request failed: {e.message}",
                extra=e.to_dict(),
            )
            return False

        return body == VALID_RESPONSE

    def _post(self, fields: Mapping[str, str]) -> str:
        start = time.monotonic()
        try:
            response = requests.post(
                self.validate_url,
                data=dict(fields),
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise PayFastValidationUnavailableError(
                f"Could not reach PayFast validate endpoint: {e}",
                details={"validate_url": self.validate_url},
            ) from e

        logger.debug(
            "PayFast validation responded",
            extra={
                "validate_url": self.validate_url,
                "status_code": response.status_code,
                "duration_ms": round((time.monotonic() - start) * 1000),
            },
        )
        return response.text
