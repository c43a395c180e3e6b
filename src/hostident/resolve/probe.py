"""Reachability probe.

Sends one ICMP echo with the platform ping command and extracts the responding IPv4 address.
A failed probe is a normal outcome, never an error.
"""

import asyncio
import ipaddress
import logging
import platform
import re
from typing import List, Optional

from hostident.model.host import ReachabilityResult

logger = logging.getLogger(__name__)

IPV4_PATTERN = r"\d{1,3}(?:\.\d{1,3}){3}"
REPLY_RE = re.compile(rf"from\s+(?P<address>{IPV4_PATTERN})", re.IGNORECASE)
HEADER_RE = re.compile(rf"[\(\[](?P<address>{IPV4_PATTERN})[\)\]]")
UNREACHABLE_RE = re.compile(r"unreachable|timed out|100% packet loss", re.IGNORECASE)


def ping_command(host: str, timeout: float) -> List[str]:
    """Build a single-echo ping command line for the current platform."""
    if platform.system().lower().startswith("win"):
        timeout_ms = max(1, int(timeout * 1000))
        return ["ping", "-n", "1", "-w", str(timeout_ms), host]
    return ["ping", "-c", "1", "-W", str(max(1, int(timeout))), host]


def parse_address(output: str) -> Optional[str]:
    """Extract the responding IPv4 address from ping output.

    Reply lines ("from 10.0.0.5") win over the header ("PING host (10.0.0.5)").
    """
    for pattern in (REPLY_RE, HEADER_RE):
        match = pattern.search(output)
        if match is None:
            continue
        try:
            return str(ipaddress.IPv4Address(match.group("address")))
        except ValueError:
            continue
    return None


async def probe(host: str, timeout: float = 1.0) -> ReachabilityResult:
    """Send one echo request to host.

    Args:
        host: Host part of the query
        timeout: Seconds to wait for the reply

    Returns:
        ReachabilityResult, with reached=False on any failure
    """
    unreachable = ReachabilityResult(ip_address=None, reached=False)
    command = ping_command(host, timeout)
    try:
        proc = await asyncio.create_subprocess_exec(
            *command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
    except (OSError, ValueError) as e:
        logger.debug("Ping of %s could not start: %s", host, e)
        return unreachable

    try:
        stdout, _ = await asyncio.wait_for(proc.communicate(), timeout=timeout + 1)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        logger.debug("Ping of %s timed out", host)
        return unreachable

    output = (stdout or b"").decode(errors="ignore")
    if proc.returncode != 0 or UNREACHABLE_RE.search(output):
        logger.debug("Ping of %s failed (exit %s)", host, proc.returncode)
        return unreachable

    address = parse_address(output)
    if address is None:
        logger.debug("Ping of %s succeeded without an IPv4 address", host)
        return ReachabilityResult(ip_address=None, reached=True)

    logger.debug("Ping of %s succeeded from %s", host, address)
    return ReachabilityResult(ip_address=address, reached=True)
