"""
Unit tests for hostident.resolve.probe

Tests cover ping command construction, address extraction from Linux and Windows output, and
the probe's handling of failures, which must never raise.
"""

import asyncio
from unittest.mock import AsyncMock, Mock, patch

import pytest

from hostident.model.host import ReachabilityResult
from hostident.resolve.probe import parse_address, ping_command, probe

LINUX_OK = b"""PING web01.corp.local (10.0.0.5) 56(84) bytes of data.
64 bytes from web01.corp.local (10.0.0.5): icmp_seq=1 ttl=128 time=0.412 ms

--- web01.corp.local ping statistics ---
1 packets transmitted, 1 received, 0% packet loss, time 0ms
"""

LINUX_OK_BY_IP = b"""PING 10.0.0.7 (10.0.0.7) 56(84) bytes of data.
64 bytes from 10.0.0.7: icmp_seq=1 ttl=64 time=0.051 ms
"""

WINDOWS_OK = b"""
Pinging sql2016.corp.local [10.0.0.5] with 32 bytes of data:
Reply from 10.0.0.5: bytes=32 time<1ms TTL=128

Ping statistics for 10.0.0.5:
    Packets: Sent = 1, Received = 1, Lost = 0 (0% loss),
"""

WINDOWS_UNREACHABLE = b"""
Pinging 10.0.0.99 with 32 bytes of data:
Reply from 10.0.0.1: Destination host unreachable.
"""

LINUX_LOSS = b"""PING 10.0.0.99 (10.0.0.99) 56(84) bytes of data.

--- 10.0.0.99 ping statistics ---
1 packets transmitted, 0 received, 100% packet loss, time 0ms
"""


def make_process(stdout: bytes, returncode: int = 0) -> Mock:
    proc = Mock()
    proc.communicate = AsyncMock(return_value=(stdout, None))
    proc.returncode = returncode
    proc.kill = Mock()
    proc.wait = AsyncMock(return_value=returncode)
    return proc


class TestPingCommand:
    """Test suite for ping_command."""

    @patch("hostident.resolve.probe.platform.system", return_value="Linux")
    def test_posix_command(self, mock_system):
        assert ping_command("web01", 2.0) == ["ping", "-c", "1", "-W", "2", "web01"]

    @patch("hostident.resolve.probe.platform.system", return_value="Linux")
    def test_posix_command_minimum_one_second(self, mock_system):
        assert ping_command("web01", 0.2)[4] == "1"

    @patch("hostident.resolve.probe.platform.system", return_value="Windows")
    def test_windows_command(self, mock_system):
        assert ping_command("web01", 1.5) == ["ping", "-n", "1", "-w", "1500", "web01"]


class TestParseAddress:
    """Test suite for parse_address."""

    def test_linux_reply(self):
        assert parse_address(LINUX_OK.decode()) == "10.0.0.5"

    def test_linux_reply_by_ip(self):
        assert parse_address(LINUX_OK_BY_IP.decode()) == "10.0.0.7"

    def test_windows_reply(self):
        assert parse_address(WINDOWS_OK.decode()) == "10.0.0.5"

    def test_header_only(self):
        assert parse_address("PING web01 (10.1.2.3) 56(84) bytes of data.") == "10.1.2.3"

    def test_invalid_octets_are_ignored(self):
        assert parse_address("Reply from 999.1.1.1: bytes=32") is None

    def test_no_address(self):
        assert parse_address("ping: unknown host web99") is None


class TestProbe:
    """Test suite for probe."""

    @pytest.mark.asyncio
    async def test_probe_success(self):
        proc = make_process(LINUX_OK)
        with patch(
            "hostident.resolve.probe.asyncio.create_subprocess_exec",
            new=AsyncMock(return_value=proc),
        ) as mock_exec:
            result = await probe("web01.corp.local", 1.0)

        assert result == ReachabilityResult(ip_address="10.0.0.5", reached=True)
        assert mock_exec.call_count == 1
        assert mock_exec.call_args.args[-1] == "web01.corp.local"

    @pytest.mark.asyncio
    async def test_probe_windows_success(self):
        proc = make_process(WINDOWS_OK)
        with patch(
            "hostident.resolve.probe.asyncio.create_subprocess_exec",
            new=AsyncMock(return_value=proc),
        ):
            result = await probe("sql2016", 1.0)

        assert result.ip_address == "10.0.0.5"
        assert result.reached is True

    @pytest.mark.asyncio
    async def test_probe_nonzero_exit(self):
        proc = make_process(LINUX_LOSS, returncode=1)
        with patch(
            "hostident.resolve.probe.asyncio.create_subprocess_exec",
            new=AsyncMock(return_value=proc),
        ):
            result = await probe("10.0.0.99", 1.0)

        assert result == ReachabilityResult(ip_address=None, reached=False)

    @pytest.mark.asyncio
    async def test_probe_unreachable_reply_with_zero_exit(self):
        proc = make_process(WINDOWS_UNREACHABLE, returncode=0)
        with patch(
            "hostident.resolve.probe.asyncio.create_subprocess_exec",
            new=AsyncMock(return_value=proc),
        ):
            result = await probe("10.0.0.99", 1.0)

        assert result.reached is False
        assert result.ip_address is None

    @pytest.mark.asyncio
    async def test_probe_missing_ping_binary(self):
        with patch(
            "hostident.resolve.probe.asyncio.create_subprocess_exec",
            new=AsyncMock(side_effect=FileNotFoundError("ping")),
        ):
            result = await probe("web01", 1.0)

        assert result == ReachabilityResult(ip_address=None, reached=False)

    @pytest.mark.asyncio
    async def test_probe_unencodable_argument(self):
        with patch(
            "hostident.resolve.probe.asyncio.create_subprocess_exec",
            new=AsyncMock(side_effect=ValueError("embedded null byte")),
        ):
            result = await probe("web\x0001", 1.0)

        assert result == ReachabilityResult(ip_address=None, reached=False)

    @pytest.mark.asyncio
    async def test_probe_timeout_kills_process(self):
        proc = make_process(b"")
        proc.communicate = AsyncMock(side_effect=asyncio.TimeoutError())
        with patch(
            "hostident.resolve.probe.asyncio.create_subprocess_exec",
            new=AsyncMock(return_value=proc),
        ):
            result = await probe("web01", 0.1)

        assert result.reached is False
        proc.kill.assert_called_once()
        proc.wait.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_probe_success_without_ipv4(self):
        proc = make_process(b"64 bytes from fe80::1: icmp_seq=1 ttl=64 time=0.05 ms\n")
        with patch(
            "hostident.resolve.probe.asyncio.create_subprocess_exec",
            new=AsyncMock(return_value=proc),
        ):
            result = await probe("fe80::1", 1.0)

        assert result == ReachabilityResult(ip_address=None, reached=True)
