"""
Metrics Abstraction Layer for hostident

This module provides a small vendor-agnostic metrics interface so the resolver can report
strategy outcomes and resolution timings without depending on a particular backend.

Key Components:
- MetricsClient: Abstract interface for all metrics operations
- TelegrafCompatibilityClient: Wrapper for aio-statsd's TelegrafStatsdClient
- NoOpMetricsClient: No-operation client used when metrics are disabled (the default)
- create_metrics_client: Factory function for backend selection

Metric names emitted by the resolver:
- hostident.strategy.attempt (counter, tags: strategy, outcome)
- hostident.resolve.time (timer, seconds)
- hostident.probe.reached (counter, tags: reached)
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Union

try:
    from aio_statsd import TelegrafStatsdClient
    TELEGRAF_AVAILABLE = True
except ImportError:
    TELEGRAF_AVAILABLE = False

logger = logging.getLogger(__name__)


class MetricsClient(ABC):
    """
    Abstract metrics client interface.

    Tags are passed as a flat dictionary, StatsD style.
    """

    async def connect(self) -> None:
        """Open any underlying connection. Optional for implementations."""
        return None

    @abstractmethod
    def increment(
        self,
        name: str,
        value: Union[int, float] = 1,
        tag_dict: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Increment a counter metric by the specified value.

        Args:
            name: Metric name (e.g., 'hostident.strategy.attempt')
            value: Amount to increment by (default: 1)
            tag_dict: Optional tags for metric dimensions
        """
        pass

    @abstractmethod
    def timer(
        self,
        name: str,
        value: Union[int, float],
        tag_dict: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Record a duration in seconds."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Flush pending metrics and close any network connection."""
        pass


class TelegrafCompatibilityClient(MetricsClient):
    """
    MetricsClient backed by an aio-statsd TelegrafStatsdClient.
    """

    def __init__(self, telegraf_client: Any, prefix: str = ""):
        if not TELEGRAF_AVAILABLE:
            raise ImportError(
                "TelegrafStatsdClient not available. Install with: pip install aio-statsd"
            )

        self.client = telegraf_client
        self.prefix = prefix

    def _name(self, name: str) -> str:
        if self.prefix and not name.startswith(f"{self.prefix}."):
            return f"{self.prefix}.{name}"
        return name

    async def connect(self) -> None:
        await self.client.connect()

    def increment(
        self,
        name: str,
        value: Union[int, float] = 1,
        tag_dict: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.client.increment(self._name(name), value, tag_dict=tag_dict or {})

    def timer(
        self,
        name: str,
        value: Union[int, float],
        tag_dict: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.client.timer(self._name(name), value, tag_dict=tag_dict or {})

    async def close(self) -> None:
        try:
            await self.client.close()
        except Exception as e:
            logger.warning(f"Error closing Telegraf client: {e}")


class NoOpMetricsClient(MetricsClient):
    """
    No-operation metrics client for disabled metrics collection.
    """

    def increment(
        self,
        name: str,
        value: Union[int, float] = 1,
        tag_dict: Optional[Dict[str, Any]] = None,
    ) -> None:
        pass

    def timer(
        self,
        name: str,
        value: Union[int, float],
        tag_dict: Optional[Dict[str, Any]] = None,
    ) -> None:
        pass

    async def close(self) -> None:
        pass


def create_metrics_client(
    backend: str,
    host: str = "localhost",
    port: int = 8125,
    prefix: str = "hostident",
    telegraf_client: Optional[Any] = None,
    debug: bool = False,
) -> MetricsClient:
    """
    Create the metrics client for a backend name.

    Args:
        backend: Backend type ('telegraf', 'none')
        host: Telegraf/StatsD host
        port: Telegraf/StatsD port
        prefix: Prefix prepended to metric names
        telegraf_client: Pre-configured TelegrafStatsdClient instance
        debug: Enable debug logging

    Returns:
        MetricsClient: Configured metrics client instance

    Raises:
        ValueError: If backend type is invalid or required dependencies missing
    """
    backend = backend.lower()

    if debug:
        logger.debug("Creating metrics client with backend: %s", backend)

    if backend == "telegraf":
        if telegraf_client:
            return TelegrafCompatibilityClient(telegraf_client, prefix=prefix)

        if not TELEGRAF_AVAILABLE:
            logger.error("Telegraf backend requested but aio-statsd package not available")
            raise ValueError(
                "aio-statsd package required for 'telegraf' backend. "
                "Install with: pip install aio-statsd"
            )

        return TelegrafCompatibilityClient(
            TelegrafStatsdClient(host=host, port=port, debug=debug), prefix=prefix
        )

    elif backend == "none":
        return NoOpMetricsClient()

    raise ValueError(
        f"Invalid metrics backend: {backend}. Supported backends: 'telegraf', 'none'"
    )
