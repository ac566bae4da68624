from datetime import datetime, timezone

import pytest

from imagereflector.conditions import (
    READY_CONDITION,
    Condition,
    ConditionStatus,
    find_status_condition,
    remove_status_condition,
    set_status_condition,
)

T0 = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
T1 = datetime(2024, 1, 2, 4, 0, 0, tzinfo=timezone.utc)


def ready(status=ConditionStatus.TRUE, reason="Succeeded", message="ok", **kw):
    return Condition(READY_CONDITION, status, reason, message, **kw)


def test_status_coerced_from_string():
    cond = Condition.from_dict({"type": "Ready", "status": "True"})
    assert cond.status is ConditionStatus.TRUE


def test_invalid_status_rejected():
    with pytest.raises(ValueError):
        Condition("Ready", "Maybe")


def test_from_dict_missing_type():
    with pytest.raises(ValueError):
        Condition.from_dict({"status": "True"})


def test_to_dict_fields():
    data = ready(observed_generation=3, last_transition_time=T0).to_dict()
    assert data["type"] == READY_CONDITION
    assert data["status"] == ConditionStatus.TRUE.value
    assert data["observedGeneration"] == 3
    assert data["lastTransitionTime"] == "2024-01-02T03:04:05Z"
    assert data["reason"] == "Succeeded"


def test_to_dict_omits_zero_generation():
    data = ready().to_dict()
    assert "observedGeneration" not in data
    assert "lastTransitionTime" not in data


def test_round_trip():
    cond = ready(status=ConditionStatus.FALSE, observed_generation=7, last_transition_time=T0)
    assert Condition.from_dict(cond.to_dict()) == cond


def test_set_new_condition_appends():
    conditions = []
    new = ready()
    assert set_status_condition(conditions, new, T0) is True
    assert len(conditions) == 1
    assert conditions[0].last_transition_time == T0
    assert new.last_transition_time is None


def test_set_same_status_keeps_transition_time():
    conditions = [ready(last_transition_time=T0)]
    changed = set_status_condition(conditions, ready(message="updated"), T1)
    assert changed is True
    assert conditions[0].message == "updated"
    assert conditions[0].last_transition_time == T0


def test_set_identical_reports_no_change():
    conditions = [ready(last_transition_time=T0)]
    assert set_status_condition(conditions, ready(), T1) is False
    assert conditions[0].last_transition_time == T0


def test_set_status_change_moves_transition_time():
    conditions = [ready(last_transition_time=T0)]
    changed = set_status_condition(conditions, ready(status=ConditionStatus.FALSE), T1)
    assert changed is True
    assert conditions[0].status is ConditionStatus.FALSE
    assert conditions[0].last_transition_time == T1


def test_set_status_change_uses_explicit_time():
    conditions = [ready(last_transition_time=T0)]
    set_status_condition(
        conditions,
        ready(status=ConditionStatus.UNKNOWN, last_transition_time=T1),
        datetime(2030, 1, 1, tzinfo=timezone.utc),
    )
    assert conditions[0].last_transition_time == T1


def test_set_default_now_is_utc_seconds():
    conditions = []
    set_status_condition(conditions, ready())
    stamp = conditions[0].last_transition_time
    assert stamp.tzinfo == timezone.utc
    assert stamp.microsecond == 0


def test_set_updates_generation():
    conditions = [ready(last_transition_time=T0)]
    assert set_status_condition(conditions, ready(observed_generation=4), T1)
    assert conditions[0].observed_generation == 4


def test_find():
    cond = ready()
    other = Condition("Reconciling", ConditionStatus.TRUE)
    conditions = [other, cond]
    assert find_status_condition(conditions, READY_CONDITION) is cond
    assert find_status_condition(conditions, "Stalled") is None


def test_remove():
    conditions = [ready(), Condition("Reconciling", ConditionStatus.TRUE)]
    assert remove_status_condition(conditions, READY_CONDITION) is True
    assert [c.type for c in conditions] == ["Reconciling"]
    assert remove_status_condition(conditions, READY_CONDITION) is False
    assert len(conditions) == 1