from __future__ import annotations

from typing import Iterable, Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_max_length(value: str, field_name: str, max_len: int) -> str:
    if len(value) > max_len:
        raise ValidationError(f"{field_name} must be at most {max_len} characters")
    return value


def optional_text(value: Optional[str], max_len: Optional[int] = None) -> Optional[str]:
    """Strip ``value``; blank becomes None."""
    if value is not None and not isinstance(value, str):
        raise ValidationError("Expected a string value")
    text = (value or "").strip() or None
    if text is not None and max_len is not None:
        text = text[:max_len]
    return text


def normalize_network_list(values: Iterable[str]) -> tuple[str, ...]:
    """Strip entries, drop blanks and repeated entries, keep first-seen order."""
    if isinstance(values, (str, bytes)):
        raise ValidationError("networks must be a list")

    seen: set[str] = set()
    out: list[str] = []
    for raw in values:
        if not isinstance(raw, str):
            raise ValidationError("networks must contain strings only")
        rule = raw.strip()
        if not rule or rule in seen:
            continue
        seen.add(rule)
        out.append(rule)
    return tuple(out)
