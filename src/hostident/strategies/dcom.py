"""CIM query over DCOM.

Fallback for hosts without a WinRM listener. Uses impacket's DCOM object model to log in to
root/cimv2 and run a WQL query against Win32_ComputerSystem. Every remote interface is released
and the DCOM connection is always disconnected.
"""

import logging
from typing import Any, Dict, Optional

from impacket.dcerpc.v5.dcom import wmi
from impacket.dcerpc.v5.dcomrt import DCOMConnection
from impacket.dcerpc.v5.dtypes import NULL
from impacket.dcerpc.v5.rpcrt import DCERPCException

from hostident.model.host import Credential, IdentityRecord
from hostident.strategies.base import (
    COMPUTER_SYSTEM_FIELDS,
    FailureReason,
    IdentityStrategy,
    StrategyError,
    record_from_properties,
)

logger = logging.getLogger(__name__)

COMPUTER_SYSTEM_WQL = (
    f"SELECT {', '.join(COMPUTER_SYSTEM_FIELDS)} FROM Win32_ComputerSystem"
)
CIMV2_NAMESPACE = "//./root/cimv2"


class DcomCimStrategy(IdentityStrategy):
    """Win32_ComputerSystem through a DCOM IWbemServices connection."""

    name = "dcom"
    session_fallback = True

    def _query(self, host: str, credential: Credential) -> Dict[str, Any]:
        domain, user = credential.split_username()
        dcom = DCOMConnection(
            host,
            user,
            credential.password.get_secret_value(),
            domain,
            "",
            "",
            oxidResolver=True,
        )
        try:
            interface = dcom.CoCreateInstanceEx(
                wmi.CLSID_WbemLevel1Login, wmi.IID_IWbemLevel1Login
            )
            login = wmi.IWbemLevel1Login(interface)
            services = login.NTLMLogin(CIMV2_NAMESPACE, NULL, NULL)
            login.RemRelease()
            try:
                enum = services.ExecQuery(COMPUTER_SYSTEM_WQL)
                try:
                    instance = enum.Next(0xFFFFFFFF, 1)[0]
                    properties = instance.getProperties()
                finally:
                    enum.RemRelease()
            finally:
                services.RemRelease()
        finally:
            dcom.disconnect()

        return {key: prop.get("value") for key, prop in properties.items()}

    async def lookup(
        self, host: str, credential: Optional[Credential] = None
    ) -> IdentityRecord:
        if credential is None:
            raise StrategyError(
                FailureReason.unavailable, "DCOM lookup requires an explicit credential"
            )
        properties = await self.run_blocking(self._query, host, credential)
        return record_from_properties(properties)

    def classify(self, exc: BaseException) -> FailureReason:
        if isinstance(exc, DCERPCException):
            if "access_denied" in str(exc).lower():
                return FailureReason.authentication
            return FailureReason.connection
        return super().classify(exc)
