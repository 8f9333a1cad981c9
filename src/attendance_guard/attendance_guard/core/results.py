"""Tagged result types for expected business outcomes.

Security denials and stale-state races are normal outcomes that callers branch
on, so they travel as values instead of exceptions:

    decision = gate.authorize(identity, device_id, address)
    if isinstance(decision, Deny):
        ...

Infrastructure failures still raise (see ``core.exceptions.StorageError``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from .enums import DenyReason, ErrorKind

T = TypeVar("T")


@dataclass(frozen=True)
class Allow:
    @property
    def allowed(self) -> bool:
        return True


@dataclass(frozen=True)
class Deny:
    reason: DenyReason

    @property
    def allowed(self) -> bool:
        return False


Decision = Union[Allow, Deny]


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str = ""

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]
