"""
Source address checks for PayFast notifications.

PayFast posts ITNs from a small set of published networks. In sandbox
or development every source is trusted; otherwise only those networks
and loopback are.
"""

from __future__ import annotations

import ipaddress
import logging
from collections.abc import Iterable

logger = logging.getLogger(__name__)

# Published PayFast ITN source networks
PAYFAST_NETWORKS: tuple[str, ...] = (
    "197.97.145.144/28",
    "41.74.179.192/27",
    "196.11.240.0/22",
)


class SourceAuthenticator:
    """
    Decides whether a request address may deliver ITNs.

    Loopback is always allowed (IPv4, IPv6 and IPv4-mapped IPv6) so a
    local proxy can forward notifications.

    Usage:
        authenticator = SourceAuthenticator(trust_any_source=settings.PAYFAST_SANDBOX)
        authenticator.is_allowed("197.97.145.150")  # True
    """

    def __init__(
        self,
        trust_any_source: bool = False,
        networks: Iterable[str] = PAYFAST_NETWORKS,
    ):
        self.trust_any_source = trust_any_source
        self.networks = tuple(ipaddress.ip_network(network, strict=False) for network in networks)

    def is_allowed(self, address: str | None) -> bool:
        if self.trust_any_source:
            return True

        if not address:
            return False

        try:
            ip = ipaddress.ip_address(address.strip())
        except ValueError:
            logger.warning(
                f"Unparseable ITN source address: {address!r}",
                extra={"source_ip": address},
            )
            return False

        if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
            ip = ip.ipv4_mapped

        if ip.is_loopback:
            return True

        return any(ip in network for network in self.networks)
