"""
Host Identity Resolution

This package resolves an identifying string to the canonical network identity of a host.

Key Components:
- probe.py: Single ICMP echo through the platform ping command
- identity.py: Ordered strategy chain walk, first success wins
- normalize.py: Reconciles probe and identity results into one record
- host.py: resolve_host / resolve_hosts entry points and the HostResolver composition object
- __main__.py: CLI interface for resolution

The resolution flow follows these steps:
1. Parse the input, dropping any `\\instance` qualifier and `,port` suffix
2. Probe the host part once for reachability and its IPv4 address
3. Try the WS-Man CIM, DCOM CIM, legacy WMI and DNS strategies in order
4. Build the output record, deriving the FQDN only from non-empty parts

Each strategy is attempted at most once and a failure only advances the chain. A host nothing
can identify still yields a record carrying its input name.
"""
