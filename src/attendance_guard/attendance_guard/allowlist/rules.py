"""Network rule parsing and matching.

A rule is either a single address literal (``10.0.0.7``, ``2001:db8::1``) or a
CIDR block (``10.0.0.0/24``, ``2001:db8::/32``). Host bits in a CIDR block are
masked off rather than rejected. IPv4 and IPv6 never match each other.
"""

from __future__ import annotations

import ipaddress
import logging
from typing import Iterable, Optional, Union

from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)

Address = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]
Network = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]
Rule = Union[Address, Network]


def parse_rule(text: str) -> Rule:
    """Parse one rule; raises ValueError when it is neither an address nor a CIDR block."""
    value = (text or "").strip()
    if not value:
        raise ValueError("empty network rule")
    if "/" in value:
        return ipaddress.ip_network(value, strict=False)
    return ipaddress.ip_address(value)


def parse_address(text: Optional[str]) -> Optional[Address]:
    value = (text or "").strip()
    if not value:
        return None
    try:
        return ipaddress.ip_address(value)
    except ValueError:
        return None


def rule_matches(rule: Rule, address: Address) -> bool:
    if rule.version != address.version:
        return False
    if isinstance(rule, (ipaddress.IPv4Network, ipaddress.IPv6Network)):
        return address in rule
    return rule == address


def address_matches(address: Optional[str], rules: Iterable[str], *, source: str = "allowlist") -> bool:
    """True if ``address`` equals a literal or falls inside a block of ``rules``.

    Malformed rules are skipped with a warning so one bad entry cannot lock the
    whole workforce out. An unparseable address matches nothing.
    """
    parsed = parse_address(address)
    if parsed is None:
        return False

    for text in rules:
        try:
            rule = parse_rule(text)
        except ValueError:
            logger.warning("Skipping malformed network rule %r in %s", text, source)
            continue
        if rule_matches(rule, parsed):
            return True
    return False


def validate_rules(rules: Iterable[str]) -> None:
    """Reject a write that contains malformed rules (stored rules are only ever skipped)."""
    bad = []
    for text in rules:
        try:
            parse_rule(text)
        except ValueError:
            bad.append(text)
    if bad:
        raise ValidationError(f"Invalid network rule(s): {', '.join(bad)}")
