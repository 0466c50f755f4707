"""Typed views of the structs returned by the Access Server RPC methods."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Mapping

from .rpc import DecodeError


def _require_struct(method: str, raw: Any) -> Mapping[str, Any]:
    if not isinstance(raw, Mapping):
        raise DecodeError(f"{method}: expected a struct, got {type(raw).__name__}")
    return raw


def _require_int(method: str, raw: Mapping[str, Any], key: str) -> int:
    if key not in raw:
        raise DecodeError(f"{method}: missing field {key!r}")
    value = raw[key]
    # bool is an int subclass but an XML-RPC <boolean> is not a count
    if isinstance(value, bool) or not isinstance(value, int):
        raise DecodeError(f"{method}: field {key!r} is not an integer: {value!r}")
    return value


@dataclass(frozen=True)
class VPNSummary:
    """Result of ``GetVPNSummary``."""

    METHOD = "GetVPNSummary"

    n_clients: int

    @classmethod
    def from_response(cls, raw: Any) -> VPNSummary:
        struct = _require_struct(cls.METHOD, raw)
        return cls(n_clients=_require_int(cls.METHOD, struct, "n_clients"))


# Descriptive fields decoded when present; none of them is exported.
_OPTIONAL_SUBSCRIPTION_FIELDS = (
    "agent_disabled",
    "agent_id",
    "cc_limit",
    "error",
    "grace_period",
    "last_successful_update_age",
    "name",
    "next_update",
    "next_update_in",
    "notes",
    "overdraft",
    "server",
    "state",
    "type",
    "updates_failed",
)


@dataclass(frozen=True)
class SubscriptionStatus:
    """Result of ``GetSubscriptionStatus``.

    The four connection/timestamp fields are required. Everything else the
    endpoint reports lands in :attr:`details`; unknown keys are dropped.
    """

    METHOD = "GetSubscriptionStatus"

    last_successful_update: int
    current_cc: int
    max_cc: int
    fallback_cc: int
    details: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_response(cls, raw: Any) -> SubscriptionStatus:
        struct = _require_struct(cls.METHOD, raw)
        required = {
            f.name: _require_int(cls.METHOD, struct, f.name)
            for f in fields(cls)
            if f.name != "details"
        }
        details = {k: struct[k] for k in _OPTIONAL_SUBSCRIPTION_FIELDS if k in struct}
        return cls(details=details, **required)
