"""
Identity Strategies

This package provides the adapters that ask a host who it is. Each adapter wraps one concrete
transport behind the IdentityStrategy contract and maps the transport's native result into an
IdentityRecord at its own boundary.

Key Components:
- base.py: IdentityStrategy contract, StrategyOutcome and FailureReason
- wsman.py: Win32_ComputerSystem over a WinRM session (pywinrm)
- dcom.py: Win32_ComputerSystem over DCOM (impacket)
- legacy.py: Win32_ComputerSystem through the Windows COM object model (wmi)
- dns.py: Identity derived from the host's canonical DNS entry (aiodns)
- chain.py: Default ordered chain, gated by the instrumentation capability flag

Strategies never raise out of attempt(): a failure becomes a StrategyOutcome with a reason,
which only moves the resolver on to the next strategy.
"""
