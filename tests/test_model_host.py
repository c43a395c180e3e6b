"""
Unit tests for hostident.model.host

Tests cover input parsing into HostQuery, credential username splitting, identity emptiness
and the external field names of ResolvedHost.
"""

from unittest.mock import patch

import pytest
from pydantic import ValidationError

from hostident.model.host import (
    Credential,
    HostQuery,
    IdentityRecord,
    InvalidHostQuery,
    ReachabilityResult,
    ResolvedHost,
)


class TestHostQueryParse:
    """Test suite for HostQuery.parse."""

    def test_parse_bare_hostname(self):
        query = HostQuery.parse("web01")
        assert query.raw_input == "web01"
        assert query.host_part == "web01"

    def test_parse_strips_instance_qualifier(self):
        """The qualifier is dropped from the lookup name but kept in raw_input."""
        query = HostQuery.parse("sql2016\\sqlexpress")
        assert query.raw_input == "sql2016\\sqlexpress"
        assert query.host_part == "sql2016"

    def test_parse_strips_port_suffix(self):
        query = HostQuery.parse("sql01,1433")
        assert query.host_part == "sql01"

    def test_parse_strips_qualifier_and_port(self):
        query = HostQuery.parse("sql01\\inst,14330")
        assert query.host_part == "sql01"

    def test_parse_keeps_raw_whitespace(self):
        query = HostQuery.parse("  web01  ")
        assert query.raw_input == "  web01  "
        assert query.host_part == "web01"

    def test_parse_ipv4_literal(self):
        query = HostQuery.parse("10.0.0.5")
        assert query.host_part == "10.0.0.5"
        assert query.is_ip_literal is True

    def test_parse_ipv6_literal(self):
        query = HostQuery.parse("fe80::1")
        assert query.host_part == "fe80::1"
        assert query.is_ip_literal is True

    def test_hostname_is_not_ip_literal(self):
        assert HostQuery.parse("web01.corp.local").is_ip_literal is False

    @pytest.mark.parametrize("alias", [".", "localhost", "LOCALHOST", "(local)"])
    @patch("hostident.model.host.socket.gethostname", return_value="WORKSTATION7")
    def test_parse_local_aliases(self, mock_gethostname, alias):
        query = HostQuery.parse(alias)
        assert query.host_part == "WORKSTATION7"
        assert query.raw_input == alias

    @patch("hostident.model.host.socket.gethostname", return_value="WORKSTATION7")
    def test_parse_local_alias_with_instance(self, mock_gethostname):
        query = HostQuery.parse("(local)\\SQLEXPRESS")
        assert query.host_part == "WORKSTATION7"
        assert query.raw_input == "(local)\\SQLEXPRESS"

    @pytest.mark.parametrize("raw", ["", "   ", "\t\n"])
    def test_parse_rejects_empty_input(self, raw):
        with pytest.raises(InvalidHostQuery):
            HostQuery.parse(raw)

    @pytest.mark.parametrize("raw", ["\\sqlexpress", ",1433", "  \\inst"])
    def test_parse_rejects_empty_host_part(self, raw):
        with pytest.raises(InvalidHostQuery) as exc_info:
            HostQuery.parse(raw)
        assert exc_info.value.raw_input == raw

    @pytest.mark.parametrize(
        "raw", ["web\x0001", "web 01", "web\t01\\inst", "web\x1b[0m", "sql\x7f01,1433"]
    )
    def test_parse_rejects_whitespace_and_control_characters(self, raw):
        with pytest.raises(InvalidHostQuery) as exc_info:
            HostQuery.parse(raw)
        assert exc_info.value.raw_input == raw

    @pytest.mark.parametrize("raw", ["-f", "-c 100", "--help\\inst", "  -w5000"])
    def test_parse_rejects_option_like_host_part(self, raw):
        with pytest.raises(InvalidHostQuery):
            HostQuery.parse(raw)

    def test_parse_allows_inner_hyphen(self):
        assert HostQuery.parse("web-01.corp.local").host_part == "web-01.corp.local"

    def test_invalid_host_query_is_value_error(self):
        assert issubclass(InvalidHostQuery, ValueError)

    def test_host_query_is_frozen(self):
        query = HostQuery.parse("web01")
        with pytest.raises(ValidationError):
            query.host_part = "web02"


class TestCredential:
    """Test suite for Credential username handling."""

    def test_split_domain_backslash_user(self):
        credential = Credential(username="CORP\\svc_sql", password="pw")
        assert credential.domain == "CORP"
        assert credential.user == "svc_sql"

    def test_split_upn(self):
        credential = Credential(username="svc_sql@corp.local", password="pw")
        assert credential.domain == "corp.local"
        assert credential.user == "svc_sql"

    def test_split_bare_user(self):
        credential = Credential(username="administrator", password="pw")
        assert credential.domain == ""
        assert credential.user == "administrator"

    def test_password_is_secret(self):
        credential = Credential(username="u", password="hunter2")
        assert "hunter2" not in repr(credential)
        assert credential.password.get_secret_value() == "hunter2"


class TestIdentityRecord:
    """Test suite for IdentityRecord."""

    def test_default_record_is_empty(self):
        assert IdentityRecord().is_empty is True

    def test_blank_fields_are_empty(self):
        assert IdentityRecord(name=" ", dns_host_name="", domain=None).is_empty is True

    def test_any_field_makes_record_non_empty(self):
        assert IdentityRecord(domain="corp.local").is_empty is False


class TestResolvedHost:
    """Test suite for ResolvedHost serialization."""

    def test_dump_by_alias_uses_external_names(self):
        record = ResolvedHost(
            input_name="sql2016\\sqlexpress",
            computer_name="SQL2016",
            ip_address="10.0.0.5",
            dns_host_name="sql2016",
            domain="corp.local",
            fqdn="sql2016.corp.local",
        )
        assert record.model_dump(by_alias=True) == {
            "InputName": "sql2016\\sqlexpress",
            "ComputerName": "SQL2016",
            "IPAddress": "10.0.0.5",
            "DNSHostName": "sql2016",
            "Domain": "corp.local",
            "FQDN": "sql2016.corp.local",
        }

    def test_optional_fields_default_to_none(self):
        record = ResolvedHost(input_name="ghost")
        assert record.computer_name is None
        assert record.ip_address is None
        assert record.fqdn is None

    def test_reachability_defaults(self):
        assert ReachabilityResult() == ReachabilityResult(ip_address=None, reached=False)
