"""
Configuration Module for hostident

This module defines the configuration system for host identity resolution, using Pydantic
settings for validation and environment loading.

The Settings class is the central configuration point. Values are loaded from environment
variables prefixed with HOSTIDENT_, with defaults suitable for resolving hosts on a Windows
domain from an operator workstation. The composition root (the CLI, or any embedding
application) reads the settings once and passes the relevant values into the resolver; the
resolution core never reads configuration on its own.

Key configuration areas include:
- Capability gating for instrumentation queries
- Probe and per-strategy timeouts
- WinRM endpoint and transport
- Error reporting and metrics
"""

import ipaddress
import logging
from typing import Final, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


logger = logging.getLogger(__name__)

WINRM_TRANSPORTS: Final = frozenset(
    ["ntlm", "kerberos", "basic", "credssp", "ssl", "plaintext"]
)
"""Transports understood by pywinrm"""


class Settings(BaseSettings):
    """
    Application settings for hostident.

    Environment variables map to fields by name with the HOSTIDENT_ prefix. For example, the
    per-strategy timeout is set with HOSTIDENT_STRATEGY_TIMEOUT.
    """

    model_config = SettingsConfigDict(env_prefix="HOSTIDENT_")

    debug: bool = False
    """
    Enable verbose logging.
    Set with HOSTIDENT_DEBUG=true environment variable.
    """

    instrumentation_available: bool = True
    """
    Whether this environment can run CIM/WMI style queries. When false, only the DNS
    strategy is used.
    Set with HOSTIDENT_INSTRUMENTATION_AVAILABLE environment variable.
    """

    ping_timeout: float = Field(default=1.0, gt=0)
    """
    Seconds to wait for the single ICMP echo reply.
    Set with HOSTIDENT_PING_TIMEOUT environment variable.
    Default: 1.0
    """

    strategy_timeout: float = Field(default=15.0, gt=0)
    """
    Seconds allowed for one identity strategy before it counts as failed.
    Set with HOSTIDENT_STRATEGY_TIMEOUT environment variable.
    Default: 15.0
    """

    max_concurrency: int = Field(default=16, ge=1)
    """
    Maximum number of hosts resolved at the same time by a batch resolution.
    Set with HOSTIDENT_MAX_CONCURRENCY environment variable.
    """

    # WinRM settings
    winrm_port: int = 5985
    """
    WS-Management listener port.
    Set with HOSTIDENT_WINRM_PORT environment variable.
    Default: 5985 (HTTP). Use 5986 together with winrm_use_ssl for HTTPS.
    """

    winrm_use_ssl: bool = False
    """
    Connect to the WS-Management listener over HTTPS.
    Set with HOSTIDENT_WINRM_USE_SSL environment variable.
    """

    winrm_transport: str = "ntlm"
    """
    pywinrm authentication transport used when a credential is supplied. Without a
    credential, kerberos is always used so the caller's ticket cache applies.
    Set with HOSTIDENT_WINRM_TRANSPORT environment variable.
    """

    winrm_cert_validation: bool = True
    """
    Validate the server certificate for HTTPS listeners.
    Set with HOSTIDENT_WINRM_CERT_VALIDATION environment variable.
    """

    # Monitoring and error reporting
    sentry_dsn: Optional[str] = None
    """
    Sentry DSN for error reporting. Optional, no error reporting if not set.
    Set with HOSTIDENT_SENTRY_DSN environment variable.
    """

    metrics_backend: str = "none"
    """
    Metrics backend, one of 'none' or 'telegraf'.
    Set with HOSTIDENT_METRICS_BACKEND environment variable.
    """

    statsd_host: str = "localhost"
    """StatsD/Telegraf host for metrics collection."""

    statsd_port: int = 8125
    """StatsD/Telegraf port for metrics collection."""

    statsd_prefix: str = "hostident"
    """Prefix for all StatsD metrics."""

    @field_validator("winrm_transport", mode="before")
    @classmethod
    def validate_winrm_transport(cls, v) -> str:
        """
        Normalize and check the WinRM transport name.

        Raises:
            ValueError: If the transport is not one pywinrm supports
        """
        if not isinstance(v, str):
            raise ValueError("winrm_transport must be a string")
        transport = v.strip().lower()
        if transport not in WINRM_TRANSPORTS:
            raise ValueError(
                f"winrm_transport must be one of {', '.join(sorted(WINRM_TRANSPORTS))}"
            )
        return transport

    def endpoint_for(self, host: str) -> str:
        """
        Build the WS-Management endpoint URL for a host.

        IPv6 literals are wrapped in brackets.
        """
        scheme = "https" if self.winrm_use_ssl else "http"
        try:
            if ipaddress.ip_address(host).version == 6:
                host = f"[{host}]"
        except ValueError:
            pass
        return f"{scheme}://{host}:{self.winrm_port}/wsman"
