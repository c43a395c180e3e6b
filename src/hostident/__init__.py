"""
hostident - Network Identity Resolution

This package resolves the canonical network identity of a host from an arbitrary identifying
string: a bare host name, a SQL Server style `host\\instance` name, or an IP literal. Each
resolution produces a single record holding the original input, the short computer name, the
IP address, the DNS host name, the domain and the fully qualified domain name.

Key Components:
- model: Immutable value objects passed between the resolution stages
- strategies: Identity lookup adapters (WS-Man CIM, DCOM CIM, legacy WMI, DNS)
- resolve: Reachability probe, identity resolver chain, normalizer and CLI
- app: Settings, logging and error reporting bootstrap, metrics

Resolution Flow:
1. Parse the input and strip any instance qualifier or port suffix
2. Probe the host with a single ICMP echo to learn its address
3. Walk the identity strategies in order, stopping at the first success
4. Normalize the probe and identity results into one record

Transport failures never escape a resolution. A host that cannot be reached or identified
still yields a record, with the unknown fields left empty.
"""
