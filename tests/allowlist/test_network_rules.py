import logging

import pytest

from src.attendance_guard.attendance_guard.allowlist.rules import address_matches, parse_rule, validate_rules
from src.attendance_guard.attendance_guard.core.exceptions import ValidationError


@pytest.mark.parametrize(
    "address, rules, expected",
    [
        ("192.168.1.42", ["192.168.1.0/24"], True),
        ("192.168.2.1", ["192.168.1.0/24"], False),
        ("10.0.0.7", ["10.0.0.7"], True),
        ("10.0.0.8", ["10.0.0.7"], False),
        ("2001:db8::5", ["2001:db8::/32"], True),
        ("2001:db9::5", ["2001:db8::/32"], False),
        ("::1", ["::1"], True),
    ],
)
def test_address_matches_literals_and_blocks(address, rules, expected):
    assert address_matches(address, rules) is expected


def test_ipv4_and_ipv6_never_match_each_other():
    assert address_matches("::ffff:192.168.1.10", ["192.168.1.0/24"]) is False
    assert address_matches("192.168.1.10", ["::/0"]) is False


def test_host_bits_in_cidr_are_masked():
    rule = parse_rule("192.168.1.77/24")

    assert str(rule) == "192.168.1.0/24"
    assert address_matches("192.168.1.200", ["192.168.1.77/24"]) is True


def test_empty_rules_match_nothing():
    assert address_matches("127.0.0.1", []) is False


@pytest.mark.parametrize("address", [None, "", "not-an-ip", "300.1.1.1"])
def test_unparseable_address_matches_nothing(address):
    assert address_matches(address, ["0.0.0.0/0"]) is False


def test_malformed_stored_rule_is_skipped_with_warning(caplog):
    caplog.set_level(logging.WARNING)

    allowed = address_matches("10.1.1.1", ["bogus-rule-7f3a", "10.1.1.0/24"], source="company allowlist")

    assert allowed is True
    assert "bogus-rule-7f3a" in caplog.text
    assert "company allowlist" in caplog.text


def test_validate_rules_rejects_malformed_entries():
    with pytest.raises(ValidationError) as exc:
        validate_rules(["10.0.0.0/8", "10.0.0.0/33", "nope"])

    assert "10.0.0.0/33" in str(exc.value)
    assert "nope" in str(exc.value)


def test_validate_rules_accepts_mixed_families():
    validate_rules(["10.0.0.1", "2001:db8::/48", "172.16.0.0/12"])
