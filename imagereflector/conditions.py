"""Status conditions and the reasons reported on image objects."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from .duration import format_timestamp, parse_timestamp

READY_CONDITION = "Ready"
IMAGE_FINALIZER = "finalizers.fluxcd.io"

IMAGE_URL_INVALID_REASON = "ImageURLInvalid"
DEPENDENCY_NOT_READY_REASON = "DependencyNotReady"
RECONCILIATION_SUCCEEDED_REASON = "ReconciliationSucceeded"
RECONCILIATION_FAILED_REASON = "ReconciliationFailed"
AUTHENTICATION_FAILED_REASON = "AuthenticationFailed"
READ_OPERATION_FAILED_REASON = "ReadOperationFailed"
INTERVAL_NOT_CONFIGURED_REASON = "IntervalNotConfigured"


class ConditionStatus(str, Enum):
    """The status of a condition."""

    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


@dataclass
class Condition:
    """One aspect of an object's current state."""

    type: str
    status: ConditionStatus
    reason: str = ""
    message: str = ""
    observed_generation: int = 0
    last_transition_time: datetime | None = None

    def __post_init__(self) -> None:
        self.status = ConditionStatus(self.status)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type, "status": self.status.value}
        if self.observed_generation:
            data["observedGeneration"] = self.observed_generation
        if self.last_transition_time is not None:
            data["lastTransitionTime"] = format_timestamp(self.last_transition_time)
        data["reason"] = self.reason
        data["message"] = self.message
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Condition:
        if "type" not in data or "status" not in data:
            raise ValueError("condition requires 'type' and 'status'")
        transition = data.get("lastTransitionTime")
        return cls(
            type=data["type"],
            status=data["status"],
            reason=data.get("reason", ""),
            message=data.get("message", ""),
            observed_generation=int(data.get("observedGeneration", 0)),
            last_transition_time=parse_timestamp(transition) if transition else None,
        )


def find_status_condition(conditions: list[Condition], condition_type: str) -> Condition | None:
    """Return the condition of the given type, or None."""
    return next((c for c in conditions if c.type == condition_type), None)


def set_status_condition(
    conditions: list[Condition], new_condition: Condition, now: datetime | None = None
) -> bool:
    """Add or update a condition in place; return whether anything changed.

    The transition time moves only when the status changes.
    """
    stamp = new_condition.last_transition_time or now or datetime.now(timezone.utc).replace(
        microsecond=0
    )
    existing = find_status_condition(conditions, new_condition.type)
    if existing is None:
        conditions.append(replace(new_condition, last_transition_time=stamp))
        return True
    changed = False
    if existing.status != new_condition.status:
        existing.status = new_condition.status
        existing.last_transition_time = stamp
        changed = True
    for name in ("reason", "message", "observed_generation"):
        value = getattr(new_condition, name)
        if getattr(existing, name) != value:
            setattr(existing, name, value)
            changed = True
    return changed


def remove_status_condition(conditions: list[Condition], condition_type: str) -> bool:
    """Remove the condition of the given type in place; return whether one was removed."""
    before = len(conditions)
    conditions[:] = [c for c in conditions if c.type != condition_type]
    return len(conditions) != before