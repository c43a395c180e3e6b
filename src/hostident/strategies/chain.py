"""Default identity strategy chain."""

from typing import List, Optional

from hostident.app.config import Settings
from hostident.strategies.base import IdentityStrategy
from hostident.strategies.dcom import DcomCimStrategy
from hostident.strategies.dns import DnsStrategy
from hostident.strategies.legacy import LegacyWmiStrategy
from hostident.strategies.wsman import WSManCimStrategy


def default_strategies(
    settings: Settings, instrumentation_available: Optional[bool] = None
) -> List[IdentityStrategy]:
    """Build the ordered strategy chain.

    Args:
        settings: Application settings
        instrumentation_available: Capability flag from the caller; falls back to
            settings.instrumentation_available when None

    Returns:
        [wsman, dcom, wmi, dns] when instrumentation queries can run, else [dns]
    """
    if instrumentation_available is None:
        instrumentation_available = settings.instrumentation_available

    dns = DnsStrategy(timeout=settings.strategy_timeout)
    if not instrumentation_available:
        return [dns]

    return [
        WSManCimStrategy(settings, timeout=settings.strategy_timeout),
        DcomCimStrategy(),
        LegacyWmiStrategy(),
        dns,
    ]
