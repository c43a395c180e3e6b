"""
Shared test configuration and fixtures for hostident tests.

Provides settings, a scriptable identity strategy double and a recording metrics client used
across the resolver and CLI test files.
"""

import asyncio
from typing import Any, Dict, List, Optional, Tuple, Union
from unittest.mock import patch

import pytest

from hostident.app.config import Settings
from hostident.app.metrics import MetricsClient
from hostident.model.host import Credential, IdentityRecord, ReachabilityResult
from hostident.strategies.base import IdentityStrategy


class ScriptedStrategy(IdentityStrategy):
    """Identity strategy double returning a fixed record or raising a fixed error."""

    def __init__(
        self,
        name: str,
        record: Optional[IdentityRecord] = None,
        error: Optional[BaseException] = None,
        delay: float = 0,
        session_fallback: bool = False,
    ) -> None:
        self.name = name
        self.session_fallback = session_fallback
        self.record = record
        self.error = error
        self.delay = delay
        self.calls: List[Tuple[str, Optional[Credential]]] = []

    async def lookup(
        self, host: str, credential: Optional[Credential] = None
    ) -> IdentityRecord:
        self.calls.append((host, credential))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.record if self.record is not None else IdentityRecord()


class RecordingMetricsClient(MetricsClient):
    """Metrics client that keeps every call for assertions."""

    def __init__(self) -> None:
        self.increments: List[Tuple[str, Union[int, float], Dict[str, Any]]] = []
        self.timers: List[Tuple[str, Union[int, float]]] = []
        self.closed = False

    def increment(self, name, value=1, tag_dict=None) -> None:
        self.increments.append((name, value, dict(tag_dict or {})))

    def timer(self, name, value, tag_dict=None) -> None:
        self.timers.append((name, value))

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def settings():
    """Settings with short timeouts, independent of the environment."""
    return Settings(
        ping_timeout=0.5,
        strategy_timeout=0.5,
        instrumentation_available=True,
        metrics_backend="none",
    )


@pytest.fixture
def make_strategy():
    """Factory fixture for ScriptedStrategy instances."""
    return ScriptedStrategy


@pytest.fixture
def metrics_client():
    return RecordingMetricsClient()


@pytest.fixture
def credential():
    return Credential(username="CORP\\svc_sql", password="s3cret")


@pytest.fixture
def probe_reaches():
    """Patch the reachability probe used by the resolver entry points.

    Yields a setter taking the IPv4 address to report, or None for an unreachable host.
    """
    state: Dict[str, Optional[str]] = {"address": None}
    calls: List[Tuple[str, float]] = []

    async def fake_probe(host: str, timeout: float = 1.0) -> ReachabilityResult:
        calls.append((host, timeout))
        address = state["address"]
        return ReachabilityResult(ip_address=address, reached=address is not None)

    def set_address(address: Optional[str]) -> List[Tuple[str, float]]:
        state["address"] = address
        return calls

    with patch("hostident.resolve.host.probe", side_effect=fake_probe):
        yield set_address
