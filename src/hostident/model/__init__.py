"""
Resolution Models

This package defines the value objects exchanged between the resolution stages using
Pydantic. Every model is frozen: a resolution builds its own chain of values and never
mutates one after creation.

Key Models:
- HostQuery: The parsed input, keeping the raw string and the name used for lookups
- Credential: Optional remote-management credential forwarded to the adapters
- ReachabilityResult: Outcome of the single ICMP echo
- IdentityRecord: Raw name, DNS host name and domain reported by one adapter
- ResolvedHost: The normalized output record
"""
