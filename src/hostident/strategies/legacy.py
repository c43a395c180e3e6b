"""Legacy WMI query through the Windows COM object model.

Last instrumentation strategy, only usable on Windows hosts where the wmi package and pywin32
are installed. Elsewhere it reports itself unavailable so the chain moves on to DNS.
"""

import logging
from typing import Any, Dict, Optional

try:
    import pythoncom
    import wmi
    WMI_AVAILABLE = True
except ImportError:
    WMI_AVAILABLE = False

from hostident.model.host import Credential, IdentityRecord
from hostident.strategies.base import (
    COMPUTER_SYSTEM_FIELDS,
    FailureReason,
    IdentityStrategy,
    StrategyError,
    record_from_properties,
)

logger = logging.getLogger(__name__)


class LegacyWmiStrategy(IdentityStrategy):
    """Win32_ComputerSystem through wmi.WMI."""

    name = "wmi"

    def _query(self, host: str, credential: Optional[Credential]) -> Dict[str, Any]:
        # COM apartments are per thread
        pythoncom.CoInitialize()
        try:
            kwargs: Dict[str, Any] = {"computer": host}
            if credential is not None:
                kwargs["user"] = credential.username
                kwargs["password"] = credential.password.get_secret_value()
            connection = wmi.WMI(**kwargs)
            systems = connection.Win32_ComputerSystem()
            if len(systems) == 0:
                raise StrategyError(FailureReason.empty, "No Win32_ComputerSystem instance")
            system = systems[0]
            return {field: getattr(system, field, None) for field in COMPUTER_SYSTEM_FIELDS}
        finally:
            pythoncom.CoUninitialize()

    async def lookup(
        self, host: str, credential: Optional[Credential] = None
    ) -> IdentityRecord:
        if not WMI_AVAILABLE:
            raise StrategyError(
                FailureReason.unavailable, "wmi package is not available on this platform"
            )
        properties = await self.run_blocking(self._query, host, credential)
        return record_from_properties(properties)

    def classify(self, exc: BaseException) -> FailureReason:
        if WMI_AVAILABLE:
            if isinstance(exc, (wmi.x_access_denied, wmi.x_wmi_authentication)):
                return FailureReason.authentication
            if isinstance(exc, wmi.x_wmi_timed_out):
                return FailureReason.timeout
            if isinstance(exc, wmi.x_wmi):
                return FailureReason.connection
        return super().classify(exc)
