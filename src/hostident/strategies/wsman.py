"""CIM query over a WS-Management session.

Primary identity strategy. Opens a WinRM shell on the target with pywinrm, runs an encoded
PowerShell Get-CimInstance query for Win32_ComputerSystem, and always cleans up the command and
closes the shell before returning.
"""

import base64
import json
import logging
import math
from typing import Any, Dict, Optional

from requests.exceptions import Timeout as RequestsTimeout
from winrm.exceptions import (
    AuthenticationError,
    WinRMError,
    WinRMOperationTimeoutError,
    WinRMTransportError,
)
from winrm.protocol import Protocol

from hostident.app.config import Settings
from hostident.model.host import Credential, IdentityRecord
from hostident.strategies.base import (
    COMPUTER_SYSTEM_FIELDS,
    FailureReason,
    IdentityStrategy,
    StrategyError,
    record_from_properties,
)

logger = logging.getLogger(__name__)

COMPUTER_SYSTEM_SCRIPT = (
    "Get-CimInstance -ClassName Win32_ComputerSystem | "
    f"Select-Object {', '.join(COMPUTER_SYSTEM_FIELDS)} | "
    "ConvertTo-Json -Compress"
)


def encode_powershell(script: str) -> str:
    """Encode a script for powershell.exe -EncodedCommand (base64 of UTF-16LE)."""
    return base64.b64encode(script.encode("utf-16-le")).decode("ascii")


def parse_cim_json(std_out: bytes) -> Dict[str, Any]:
    """Parse ConvertTo-Json output into a single property dictionary.

    Raises:
        StrategyError: If the output is empty or not a JSON object
    """
    text = std_out.decode("utf-8", errors="replace").strip()
    if len(text) == 0:
        raise StrategyError(FailureReason.empty, "CIM query returned no output")
    try:
        body = json.loads(text)
    except json.JSONDecodeError as e:
        raise StrategyError(FailureReason.error, f"Invalid CIM JSON: {e.msg}")
    if isinstance(body, list):
        body = next(iter(body), None)
    if not isinstance(body, dict):
        raise StrategyError(FailureReason.error, "Unexpected CIM JSON shape")
    return body


class WSManCimStrategy(IdentityStrategy):
    """Win32_ComputerSystem through a WinRM shell session."""

    name = "wsman"

    def __init__(self, settings: Settings, timeout: float = 15.0) -> None:
        self._settings = settings
        # pywinrm requires read_timeout_sec > operation_timeout_sec
        self._read_timeout = max(2, math.ceil(timeout) - 1)
        self._operation_timeout = self._read_timeout - 1

    def _protocol(self, host: str, credential: Optional[Credential]) -> Protocol:
        if credential is None:
            transport = "kerberos"
            username = None
            password = None
        else:
            transport = self._settings.winrm_transport
            username = credential.username
            password = credential.password.get_secret_value()

        return Protocol(
            endpoint=self._settings.endpoint_for(host),
            transport=transport,
            username=username,
            password=password,
            server_cert_validation=(
                "validate" if self._settings.winrm_cert_validation else "ignore"
            ),
            operation_timeout_sec=self._operation_timeout,
            read_timeout_sec=self._read_timeout,
        )

    def _query(self, host: str, credential: Optional[Credential]) -> Dict[str, Any]:
        protocol = self._protocol(host, credential)
        shell_id = protocol.open_shell()
        try:
            command_id = protocol.run_command(
                shell_id,
                "powershell.exe",
                [
                    "-NoProfile",
                    "-NonInteractive",
                    "-EncodedCommand",
                    encode_powershell(COMPUTER_SYSTEM_SCRIPT),
                ],
            )
            try:
                std_out, std_err, status_code = protocol.get_command_output(
                    shell_id, command_id
                )
            finally:
                protocol.cleanup_command(shell_id, command_id)
        finally:
            protocol.close_shell(shell_id)

        if status_code != 0:
            message = std_err.decode("utf-8", errors="replace").strip()
            raise StrategyError(
                FailureReason.error, message or f"PowerShell exited with {status_code}"
            )
        return parse_cim_json(std_out)

    async def lookup(
        self, host: str, credential: Optional[Credential] = None
    ) -> IdentityRecord:
        properties = await self.run_blocking(self._query, host, credential)
        return record_from_properties(properties)

    def classify(self, exc: BaseException) -> FailureReason:
        if isinstance(exc, AuthenticationError):
            return FailureReason.authentication
        if isinstance(exc, (WinRMOperationTimeoutError, RequestsTimeout)):
            return FailureReason.timeout
        if isinstance(exc, WinRMTransportError):
            if exc.code in (401, 403):
                return FailureReason.authentication
            return FailureReason.connection
        if isinstance(exc, WinRMError):
            return FailureReason.error
        return super().classify(exc)
