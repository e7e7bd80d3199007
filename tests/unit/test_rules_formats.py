"""
Tests for the email, hostname, URL and IP address validators.
"""

import pytest

from askr_core.errors import ArgumentError


class TestEmail:
    """Test the email validator."""

    @pytest.mark.parametrize("address", ["user@example.com", "first.last+tag@sub.example.org"])
    def test_valid_addresses(self, make_rule, address):
        """Test accepted addresses."""
        assert make_rule("email").validate(address).passed is True

    @pytest.mark.parametrize("address", ["user@localhost", "a..b@example.com", "@example.com", "user@", "user"])
    def test_invalid_addresses(self, make_rule, address):
        """Test rejected addresses."""
        outcome = make_rule("email").validate(address)

        assert outcome.passed is False
        assert outcome.message == "Must be a valid email address"

    def test_partial_flags_bad_local_character(self, make_rule):
        """Test that a space in the local part is flagged where it is."""
        assert make_rule("email").partial_validate("us er", 5).first_error_offset == 2

    def test_partial_flags_leading_at(self, make_rule):
        """Test that an address cannot start with @."""
        assert make_rule("email").partial_validate("@", 1).first_error_offset == 0

    def test_partial_flags_bad_domain_character(self, make_rule):
        """Test that domain errors are offset past the @."""
        assert make_rule("email").partial_validate("user@exa mple", 13).first_error_offset == 8

    def test_partial_incomplete_address_is_ok(self, make_rule):
        """Test that a valid prefix is not colored."""
        assert make_rule("email").partial_validate("user@exa", 8).first_error_offset is None


class TestHostname:
    """Test the hostname validator."""

    def test_valid(self, make_rule):
        """Test accepted host names."""
        rule = make_rule("hostname")

        assert rule.validate("example.com").passed is True
        assert rule.validate("localhost").passed is True

    def test_invalid(self, make_rule):
        """Test rejected host names."""
        rule = make_rule("hostname")

        assert rule.validate("-bad.com").message == "Must be a valid hostname"
        assert rule.validate("a" * 64).passed is False

    def test_partial(self, make_rule):
        """Test partial offsets."""
        rule = make_rule("hostname")

        assert rule.partial_validate("exa_mple", 8).first_error_offset == 3
        assert rule.partial_validate("a..b", 4).first_error_offset == 2


class TestUrl:
    """Test the URL validator."""

    def test_valid(self, make_rule):
        """Test accepted URLs."""
        rule = make_rule("url")

        assert rule.validate("https://example.com/path?q=1").passed is True
        assert rule.validate("http://127.0.0.1:8080").passed is True

    def test_invalid(self, make_rule):
        """Test rejected URLs."""
        rule = make_rule("url")

        assert rule.validate("gopher://example.com").message == "Must be a valid URL"
        assert rule.validate("http://").passed is False
        assert rule.validate("http://exa mple.com").passed is False

    def test_custom_schemes(self, make_rule):
        """Test restricting the allowed schemes."""
        rule = make_rule("url", schemes="https")

        assert rule.validate("https://example.com").passed is True
        assert rule.validate("http://example.com").passed is False

    def test_partial_scheme_prefix(self, make_rule):
        """Test that an impossible scheme is flagged while typing."""
        rule = make_rule("url")

        assert rule.partial_validate("htp", 3).first_error_offset == 2
        assert rule.partial_validate("ftp://", 6).first_error_offset is None

    def test_empty_schemes_rejected(self, make_rule):
        """Test that an empty scheme list is a configuration error."""
        with pytest.raises(ArgumentError):
            make_rule("url", schemes=[])


class TestIpAddresses:
    """Test the IPv4 and IPv6 validators."""

    def test_ipv4(self, make_rule):
        """Test full IPv4 validation."""
        rule = make_rule("ipv4")

        assert rule.validate("192.168.1.1").passed is True
        assert rule.validate("256.1.1.1").message == "Must be a valid IPv4 address"

    def test_ipv4_partial(self, make_rule):
        """Test partial IPv4 offsets."""
        rule = make_rule("ipv4")

        assert rule.partial_validate("192.168.1.", 10).first_error_offset is None
        assert rule.partial_validate("192.168.1.256", 13).first_error_offset == 12
        assert rule.partial_validate("01", 2).first_error_offset == 1
        assert rule.partial_validate("1.2.3.4.5", 9).first_error_offset == 7

    def test_ipv6(self, make_rule):
        """Test full IPv6 validation."""
        rule = make_rule("ipv6")

        assert rule.validate("::1").passed is True
        assert rule.validate("2001:db8::1").passed is True
        assert rule.validate("12345::").message == "Must be a valid IPv6 address"

    def test_ipv6_partial(self, make_rule):
        """Test partial IPv6 offsets."""
        rule = make_rule("ipv6")

        assert rule.partial_validate("g", 1).first_error_offset == 0
        assert rule.partial_validate("2001:db8:::", 11).first_error_offset == 10
        assert rule.partial_validate("12345", 5).first_error_offset == 4
