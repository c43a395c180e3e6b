"""Identity resolver.

Walks the strategy chain in order and stops at the first success. A failing strategy only moves
the walk on; when every strategy fails the result is an empty IdentityRecord.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from hostident.app.metrics import MetricsClient, NoOpMetricsClient
from hostident.model.host import Credential, IdentityRecord
from hostident.strategies.base import FailureReason, IdentityStrategy, StrategyOutcome

logger = logging.getLogger(__name__)

SESSION_REACHED = frozenset([FailureReason.error, FailureReason.empty])
"""Failures that happen after a session to the host was established"""


async def walk_strategies(
    strategies: Sequence[IdentityStrategy],
    host: str,
    credential: Optional[Credential] = None,
    timeout: Optional[float] = None,
    metrics: Optional[MetricsClient] = None,
) -> Tuple[Optional[IdentityRecord], List[StrategyOutcome]]:
    """Attempt each strategy once, in order, until one succeeds.

    A session fallback strategy is skipped when the strategy before it reached the host and
    failed inside the session.

    Returns:
        The winning record (None if all failed) and the outcomes of every attempt made
    """
    if metrics is None:
        metrics = NoOpMetricsClient()

    outcomes: List[StrategyOutcome] = []
    for strategy in strategies:
        previous = outcomes[-1] if outcomes else None
        if (
            strategy.session_fallback
            and previous is not None
            and previous.reason in SESSION_REACHED
        ):
            logger.info(
                "Skipping %s for %s: %s reached the host (%s)",
                strategy.name,
                host,
                previous.strategy,
                previous.reason.value,
            )
            continue
        outcome = await strategy.attempt(host, credential, timeout)
        outcomes.append(outcome)
        metrics.increment(
            "hostident.strategy.attempt",
            tag_dict={
                "strategy": outcome.strategy,
                "outcome": "success" if outcome.succeeded else outcome.reason.value,
            },
        )
        if outcome.succeeded:
            return outcome.record, outcomes

    return None, outcomes


async def resolve_identity(
    strategies: Sequence[IdentityStrategy],
    host: str,
    credential: Optional[Credential] = None,
    timeout: Optional[float] = None,
    metrics: Optional[MetricsClient] = None,
) -> IdentityRecord:
    """Resolve the raw identity of a host.

    Args:
        strategies: Ordered strategy chain
        host: Host part of the query
        credential: Forwarded unchanged to every strategy
        timeout: Seconds allowed for each strategy
        metrics: Metrics client for per-attempt counters

    Returns:
        IdentityRecord from the first successful strategy, or an empty record
    """
    record, outcomes = await walk_strategies(
        strategies, host, credential, timeout, metrics
    )
    if record is None:
        logger.info(
            "No strategy identified %s: %s",
            host,
            ", ".join(f"{o.strategy}={o.reason.value}" for o in outcomes) or "no strategies",
        )
        return IdentityRecord()
    return record
