"""Result normalizer."""

from typing import Optional

from hostident.model.host import (
    HostQuery,
    IdentityRecord,
    ReachabilityResult,
    ResolvedHost,
)


def build_fqdn(dns_host_name: Optional[str], domain: Optional[str]) -> Optional[str]:
    """Join host name and domain, or None when either part is missing or blank.

    Every degenerate join ("." as well as ".domain" and "host.") is suppressed.
    """
    if dns_host_name is None or domain is None:
        return None
    dns_host_name = dns_host_name.strip()
    domain = domain.strip()
    if len(dns_host_name) == 0 or len(domain) == 0:
        return None
    return f"{dns_host_name}.{domain}"


def normalize(
    query: HostQuery, reach: ReachabilityResult, identity: IdentityRecord
) -> ResolvedHost:
    """Combine the query, probe result and identity into the output record."""
    return ResolvedHost(
        input_name=query.raw_input,
        computer_name=identity.name,
        ip_address=reach.ip_address,
        dns_host_name=identity.dns_host_name,
        domain=identity.domain,
        fqdn=build_fqdn(identity.dns_host_name, identity.domain),
    )
