"""Host resolution value objects.

Provides the immutable Pydantic models that flow through a single resolution:
HostQuery -> ReachabilityResult -> IdentityRecord -> ResolvedHost.
"""

import ipaddress
import socket
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, SecretStr

LOCAL_ALIASES = frozenset([".", "localhost", "(local)"])


class InvalidHostQuery(ValueError):
    """Raised when an input string cannot name a host.

    This is the only error a resolution surfaces to its caller. Transport level problems are
    never raised, they only leave fields of the resolved record empty.
    """

    def __init__(self, raw_input: str, message: str) -> None:
        super().__init__(f"{message}: {raw_input!r}")
        self.raw_input = raw_input


class HostQuery(BaseModel):
    """Parsed resolution input.

    Keeps the raw input verbatim for the output record, and the host part that is the only
    form handed to network transports.
    """

    model_config = ConfigDict(frozen=True)

    raw_input: str
    host_part: str

    @classmethod
    def parse(cls, raw_input: str) -> "HostQuery":
        """Parse a host name, `host\\instance`, `host,port` or IP literal.

        Args:
            raw_input: Identifying string as supplied by the caller

        Returns:
            HostQuery with the qualifier and port suffix removed from host_part

        Raises:
            InvalidHostQuery: If the input is empty, has an empty host part, or the host part
                contains whitespace or control characters or starts with "-"
        """
        if raw_input is None or len(raw_input.strip()) == 0:
            raise InvalidHostQuery(str(raw_input), "Empty host name")

        host_part = raw_input.split("\\", 1)[0]
        host_part = host_part.split(",", 1)[0].strip()

        if len(host_part) == 0:
            raise InvalidHostQuery(raw_input, "Missing host part")

        if any(c.isspace() or not c.isprintable() for c in host_part):
            raise InvalidHostQuery(raw_input, "Host part contains whitespace or control characters")

        if host_part.startswith("-"):
            raise InvalidHostQuery(raw_input, "Host part must not start with '-'")

        if host_part.lower() in LOCAL_ALIASES:
            host_part = socket.gethostname()

        return cls(raw_input=raw_input, host_part=host_part)

    @property
    def is_ip_literal(self) -> bool:
        try:
            ipaddress.ip_address(self.host_part)
        except ValueError:
            return False
        return True


class Credential(BaseModel):
    """Remote-management credential.

    Passed explicitly on every call and forwarded unchanged to each remote adapter. The
    username may be given as `DOMAIN\\user`, `user@domain` or a bare user name.
    """

    model_config = ConfigDict(frozen=True)

    username: str
    password: SecretStr

    def split_username(self) -> Tuple[str, str]:
        """Split the username into (domain, user)."""
        if "\\" in self.username:
            domain, user = self.username.split("\\", 1)
            return domain, user
        if "@" in self.username:
            user, domain = self.username.split("@", 1)
            return domain, user
        return "", self.username

    @property
    def domain(self) -> str:
        return self.split_username()[0]

    @property
    def user(self) -> str:
        return self.split_username()[1]


class ReachabilityResult(BaseModel):
    """Outcome of the single ICMP echo sent to the host."""

    model_config = ConfigDict(frozen=True)

    ip_address: Optional[str] = None
    reached: bool = False


class IdentityRecord(BaseModel):
    """Raw identity reported by exactly one adapter, or fully empty if all failed."""

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    dns_host_name: Optional[str] = None
    domain: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not any(
            value is not None and len(value.strip()) > 0
            for value in (self.name, self.dns_host_name, self.domain)
        )


class ResolvedHost(BaseModel):
    """Normalized resolution output.

    Serializes with the external field names (InputName, ComputerName, IPAddress,
    DNSHostName, Domain, FQDN) when dumped with `by_alias=True`.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    input_name: str = Field(serialization_alias="InputName")
    computer_name: Optional[str] = Field(default=None, serialization_alias="ComputerName")
    ip_address: Optional[str] = Field(default=None, serialization_alias="IPAddress")
    dns_host_name: Optional[str] = Field(default=None, serialization_alias="DNSHostName")
    domain: Optional[str] = Field(default=None, serialization_alias="Domain")
    fqdn: Optional[str] = Field(default=None, serialization_alias="FQDN")
