"""DNS identity fallback.

Used when every instrumentation query failed. Resolves the host's canonical entry with aiodns
(forward lookup for names, reverse lookup for IP literals) and derives the identity from it:
the name is the queried host part, the DNS host name is the entry's leading label and the
domain is the rest of the entry's FQDN.
"""

import ipaddress
import logging
import socket
from typing import Optional, Tuple

from aiodns import DNSResolver
from aiodns import error as dns_error

from hostident.model.host import Credential, IdentityRecord
from hostident.strategies.base import (
    FailureReason,
    IdentityStrategy,
    StrategyError,
    clean_value,
)

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = frozenset(
    [
        dns_error.ARES_ENOTFOUND,
        dns_error.ARES_ENODATA,
    ]
)
TIMEOUT_CODES = frozenset([dns_error.ARES_ETIMEOUT])


def split_fqdn(fqdn: str) -> Tuple[Optional[str], Optional[str]]:
    """Split an FQDN into (host label, domain).

    Exactly one leading "{label}." is removed to form the domain. A name without a dot has no
    domain.
    """
    fqdn = fqdn.strip().rstrip(".")
    if len(fqdn) == 0:
        return None, None
    dns_host_name = fqdn.split(".", 1)[0]
    domain = fqdn.removeprefix(f"{dns_host_name}.")
    if domain == fqdn:
        return clean_value(dns_host_name), None
    return clean_value(dns_host_name), clean_value(domain)


def is_ip_literal(host: str) -> bool:
    try:
        ipaddress.ip_address(host)
    except ValueError:
        return False
    return True


class DnsStrategy(IdentityStrategy):
    """Identity derived from the host's DNS entry."""

    name = "dns"

    def __init__(self, timeout: float = 5.0) -> None:
        self._timeout = timeout

    async def canonical_name(self, host: str) -> str:
        """Look up the canonical FQDN of a host name or IP literal.

        Raises:
            StrategyError: If the lookup fails or returns no name
        """
        resolver = DNSResolver(timeout=self._timeout, tries=1)
        try:
            if is_ip_literal(host):
                result = await resolver.gethostbyaddr(host)
            else:
                result = await resolver.gethostbyname(host, socket.AF_INET)
        except dns_error.DNSError as e:
            code = e.args[0] if len(e.args) > 0 else None
            message = e.args[1] if len(e.args) > 1 else str(e)
            if code in NOT_FOUND_CODES:
                raise StrategyError(FailureReason.not_found, message) from e
            if code in TIMEOUT_CODES:
                raise StrategyError(FailureReason.timeout, message) from e
            raise StrategyError(FailureReason.connection, message) from e

        name = getattr(result, "name", None)
        if not name:
            raise StrategyError(FailureReason.not_found, f"No DNS entry for {host}")
        return name

    async def lookup(
        self, host: str, credential: Optional[Credential] = None
    ) -> IdentityRecord:
        fqdn = await self.canonical_name(host)
        dns_host_name, domain = split_fqdn(fqdn)
        return IdentityRecord(name=host, dns_host_name=dns_host_name, domain=domain)
