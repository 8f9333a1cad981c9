from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Account roles used for authorization decisions."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class RequestStatus(str, Enum):
    """Lifecycle of a device change request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class DenyReason(str, Enum):
    """Why the gate refused a punch. Sent to the client verbatim."""

    NETWORK_NOT_ALLOWED = "network_not_allowed"
    NO_DEVICE_REGISTERED = "no_device_registered"
    DEVICE_MISMATCH = "device_mismatch"


class ErrorKind(str, Enum):
    """Expected business failures returned as ``Err`` results."""

    DUPLICATE_PENDING = "duplicate_pending"
    NOT_FOUND = "not_found"
    ALREADY_REVIEWED = "already_reviewed"
    FORBIDDEN = "forbidden"


class PunchType(str, Enum):
    IN = "in"
    OUT = "out"
