"""Identity strategy contract.

Every concrete transport (WS-Man, DCOM, legacy WMI, DNS) implements IdentityStrategy.lookup
and maps its native result into an IdentityRecord at its own boundary. IdentityStrategy.attempt
isolates failures: it never raises, and reports each failure as a StrategyOutcome carrying a
FailureReason.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Mapping, Optional, TypeVar

import sentry_sdk
from pydantic import BaseModel, ConfigDict

from hostident.model.host import Credential, IdentityRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")

COMPUTER_SYSTEM_FIELDS = ("Name", "Caption", "DNSHostName", "Domain")


class FailureReason(str, Enum):
    """Why a strategy did not produce an identity."""

    connection = "connection"
    authentication = "authentication"
    timeout = "timeout"
    not_found = "not_found"
    unavailable = "unavailable"
    empty = "empty"
    error = "error"


class StrategyError(Exception):
    """Raised by a strategy that knows why it failed."""

    def __init__(self, reason: FailureReason, message: str) -> None:
        super().__init__(message)
        self.reason = reason


class StrategyOutcome(BaseModel):
    """Result of one strategy attempt: a record on success, a reason on failure."""

    model_config = ConfigDict(frozen=True)

    strategy: str
    record: Optional[IdentityRecord] = None
    reason: Optional[FailureReason] = None
    detail: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.record is not None


def clean_value(value: Any) -> Optional[str]:
    """Convert a native property value to a stripped string, or None when blank."""
    if value is None:
        return None
    text = str(value).strip()
    if len(text) == 0:
        return None
    return text


def record_from_properties(properties: Mapping[str, Any]) -> IdentityRecord:
    """Map Win32_ComputerSystem properties to an IdentityRecord.

    Caption stands in for Name when the latter is missing.
    """
    name = clean_value(properties.get("Name"))
    if name is None:
        name = clean_value(properties.get("Caption"))
    return IdentityRecord(
        name=name,
        dns_host_name=clean_value(properties.get("DNSHostName")),
        domain=clean_value(properties.get("Domain")),
    )


class IdentityStrategy(ABC):
    """One identity lookup transport."""

    name: str = "strategy"

    session_fallback: bool = False
    """
    Whether this strategy only stands in for a session transport that never reached the host.
    The resolver skips it when the previous strategy got a session but failed inside it.
    """

    async def run_blocking(self, func: Callable[..., T], *args: Any) -> T:
        """Run a blocking transport call in a worker thread.

        If the awaiting task is cancelled (the strategy deadline passed), the worker is allowed
        to finish its own cleanup before the cancellation propagates, so no session outlives
        the attempt.
        """
        future = asyncio.ensure_future(asyncio.to_thread(func, *args))
        try:
            return await asyncio.shield(future)
        except asyncio.CancelledError:
            await asyncio.wait([future])
            if not future.cancelled() and future.exception() is not None:
                logger.debug(
                    "Strategy %s worker failed after its deadline: %s",
                    self.name,
                    future.exception(),
                )
            raise

    @abstractmethod
    async def lookup(
        self, host: str, credential: Optional[Credential] = None
    ) -> IdentityRecord:
        """Query the host's identity.

        Args:
            host: Host part of the query, never carrying an instance qualifier
            credential: Remote-management credential, None for the caller's defaults

        Returns:
            IdentityRecord mapped from the transport's native result

        Raises:
            Exception: Any transport failure; attempt() classifies it
        """
        pass

    def classify(self, exc: BaseException) -> FailureReason:
        """Map an exception raised by lookup to a FailureReason."""
        if isinstance(exc, StrategyError):
            return exc.reason
        if isinstance(exc, TimeoutError):
            return FailureReason.timeout
        if isinstance(exc, PermissionError):
            return FailureReason.authentication
        if isinstance(exc, OSError):
            return FailureReason.connection
        return FailureReason.error

    async def attempt(
        self,
        host: str,
        credential: Optional[Credential] = None,
        timeout: Optional[float] = None,
    ) -> StrategyOutcome:
        """Run lookup under a timeout and turn every failure into an outcome.

        Returns:
            StrategyOutcome with a record on success, or a FailureReason otherwise
        """
        try:
            record = await asyncio.wait_for(self.lookup(host, credential), timeout=timeout)
        except Exception as e:
            reason = self.classify(e)
            if reason != FailureReason.unavailable:
                sentry_sdk.capture_exception(e)
            detail = str(e) or type(e).__name__
            logger.info("Strategy %s failed for %s: %s (%s)", self.name, host, reason.value, detail)
            return StrategyOutcome(strategy=self.name, reason=reason, detail=detail)

        if record is None or record.is_empty:
            logger.info("Strategy %s returned no identity for %s", self.name, host)
            return StrategyOutcome(
                strategy=self.name,
                reason=FailureReason.empty,
                detail="no identity fields returned",
            )

        logger.debug("Strategy %s resolved %s: %s", self.name, host, record)
        return StrategyOutcome(strategy=self.name, record=record)
