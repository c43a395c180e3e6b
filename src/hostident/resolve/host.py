"""Host identity resolution entry points.

Parses the input, probes reachability, resolves identity through the strategy chain and
normalizes everything into a ResolvedHost. Only InvalidHostQuery ever escapes a resolution;
transport failures just leave fields of the record empty.
"""

import asyncio
import logging
import time
from typing import List, Optional, Sequence

from hostident.app.config import Settings
from hostident.app.metrics import MetricsClient, NoOpMetricsClient
from hostident.model.host import Credential, HostQuery, ResolvedHost
from hostident.resolve.identity import resolve_identity
from hostident.resolve.normalize import normalize
from hostident.resolve.probe import probe
from hostident.strategies.base import IdentityStrategy
from hostident.strategies.chain import default_strategies

logger = logging.getLogger(__name__)


async def resolve_query(
    query: HostQuery,
    credential: Optional[Credential] = None,
    *,
    strategies: Sequence[IdentityStrategy],
    ping_timeout: float = 1.0,
    strategy_timeout: Optional[float] = None,
    metrics: Optional[MetricsClient] = None,
) -> ResolvedHost:
    """Resolve an already parsed query. Never raises for transport failures."""
    if metrics is None:
        metrics = NoOpMetricsClient()

    started = time.monotonic()
    reach = await probe(query.host_part, ping_timeout)
    metrics.increment(
        "hostident.probe.reached", tag_dict={"reached": str(reach.reached).lower()}
    )
    identity = await resolve_identity(
        strategies, query.host_part, credential, strategy_timeout, metrics
    )
    resolved = normalize(query, reach, identity)
    metrics.timer("hostident.resolve.time", time.monotonic() - started)
    return resolved


async def resolve_host(
    raw_input: str,
    credential: Optional[Credential] = None,
    *,
    strategies: Sequence[IdentityStrategy],
    ping_timeout: float = 1.0,
    strategy_timeout: Optional[float] = None,
    metrics: Optional[MetricsClient] = None,
) -> ResolvedHost:
    """Resolve the network identity of one host.

    Args:
        raw_input: Host name, `host\\instance`, `host,port` or IP literal
        credential: Forwarded unchanged to every remote-management strategy
        strategies: Ordered strategy chain
        ping_timeout: Seconds to wait for the echo reply
        strategy_timeout: Seconds allowed for each strategy
        metrics: Metrics client

    Returns:
        ResolvedHost, with unknown fields left empty

    Raises:
        InvalidHostQuery: If raw_input cannot name a host
    """
    query = HostQuery.parse(raw_input)
    return await resolve_query(
        query,
        credential,
        strategies=strategies,
        ping_timeout=ping_timeout,
        strategy_timeout=strategy_timeout,
        metrics=metrics,
    )


async def resolve_hosts(
    raw_inputs: Sequence[str],
    credential: Optional[Credential] = None,
    *,
    strategies: Sequence[IdentityStrategy],
    ping_timeout: float = 1.0,
    strategy_timeout: Optional[float] = None,
    metrics: Optional[MetricsClient] = None,
    max_concurrency: int = 16,
) -> List[ResolvedHost]:
    """Resolve many hosts concurrently, preserving input order.

    Every input is validated before any network activity starts.

    Raises:
        InvalidHostQuery: For the first input that cannot name a host
    """
    queries = [HostQuery.parse(raw_input) for raw_input in raw_inputs]
    semaphore = asyncio.Semaphore(max_concurrency)

    async def bounded(query: HostQuery) -> ResolvedHost:
        async with semaphore:
            return await resolve_query(
                query,
                credential,
                strategies=strategies,
                ping_timeout=ping_timeout,
                strategy_timeout=strategy_timeout,
                metrics=metrics,
            )

    return list(await asyncio.gather(*[bounded(query) for query in queries]))


class HostResolver:
    """
    Resolver bound to settings, a strategy chain and a metrics client.

    This is the composition root for embedding applications: it decides the instrumentation
    capability once and then resolves any number of inputs with the same chain.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        strategies: Optional[Sequence[IdentityStrategy]] = None,
        metrics: Optional[MetricsClient] = None,
        instrumentation_available: Optional[bool] = None,
    ) -> None:
        if settings is None:
            settings = Settings()
        if strategies is None:
            strategies = default_strategies(settings, instrumentation_available)
        self.settings = settings
        self.strategies = list(strategies)
        self.metrics = metrics if metrics is not None else NoOpMetricsClient()

    async def resolve(
        self, raw_input: str, credential: Optional[Credential] = None
    ) -> ResolvedHost:
        return await resolve_host(
            raw_input,
            credential,
            strategies=self.strategies,
            ping_timeout=self.settings.ping_timeout,
            strategy_timeout=self.settings.strategy_timeout,
            metrics=self.metrics,
        )

    async def resolve_many(
        self, raw_inputs: Sequence[str], credential: Optional[Credential] = None
    ) -> List[ResolvedHost]:
        return await resolve_hosts(
            raw_inputs,
            credential,
            strategies=self.strategies,
            ping_timeout=self.settings.ping_timeout,
            strategy_timeout=self.settings.strategy_timeout,
            metrics=self.metrics,
            max_concurrency=self.settings.max_concurrency,
        )
