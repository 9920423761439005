"""Tests for the activity store service."""

from dataclasses import replace
from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from meeting_activity.domain.activities import ActivityStatus, NewActivity
from meeting_activity.domain.errors import PersistenceError, ValidationError
from meeting_activity.services.activities import ActivityService, aggregate_stats
from tests.conftest import (
    FailingActivityRepository,
    InMemoryActivityRepository,
    SteppingClock,
)


def _activity(**overrides) -> NewActivity:
    activity = NewActivity(
        owner_id=uuid4(),
        meeting_name="Standup",
        meeting_id="m1",
        start_time=datetime(2024, 5, 1, 9, tzinfo=UTC),
    )
    return replace(activity, **overrides)


def test_append_assigns_id_and_created_at() -> None:
    repository = InMemoryActivityRepository()
    service = ActivityService(repository)
    before = datetime.now(tz=UTC)

    record = service.append(_activity(duration=15))

    assert record.id is not None
    assert record.created_at >= before
    assert record.status == ActivityStatus.COMPLETED
    assert record.participant_count == 1
    assert repository.records == [record]


@pytest.mark.parametrize(
    "overrides",
    [
        {"meeting_name": None},
        {"meeting_name": ""},
        {"meeting_id": None},
        {"owner_id": None},
        {"start_time": None},
    ],
)
def test_append_rejects_missing_required_fields(overrides) -> None:
    repository = InMemoryActivityRepository()
    service = ActivityService(repository)

    with pytest.raises(ValidationError):
        service.append(_activity(**overrides))

    assert repository.records == []


def test_append_rejects_inconsistent_values() -> None:
    service = ActivityService(InMemoryActivityRepository())
    start = datetime(2024, 5, 1, 9, tzinfo=UTC)

    with pytest.raises(ValidationError):
        service.append(_activity(duration=-1))
    with pytest.raises(ValidationError):
        service.append(_activity(participant_count=0))
    with pytest.raises(ValidationError):
        service.append(_activity(start_time=start, end_time=start - timedelta(1)))


def test_append_wraps_store_failures() -> None:
    service = ActivityService(FailingActivityRepository())

    with pytest.raises(PersistenceError):
        service.append(_activity())


def test_recent_for_user_is_newest_first_and_limited() -> None:
    repository = InMemoryActivityRepository()
    clock = SteppingClock(step=timedelta(seconds=1))
    service = ActivityService(repository, clock=clock)
    owner_id = uuid4()
    for index in range(12):
        service.append(_activity(owner_id=owner_id, meeting_id=f"m{index}"))
    service.append(_activity(meeting_id="someone-else"))

    recent = service.recent_for_user(owner_id)

    assert len(recent) == 10
    assert recent[0].meeting_id == "m11"
    created = [record.created_at for record in recent]
    assert created == sorted(created, reverse=True)
    assert all(record.owner_id == owner_id for record in recent)


def test_stats_for_user_averages_timed_meetings() -> None:
    service = ActivityService(InMemoryActivityRepository())
    owner_id = uuid4()
    service.append(_activity(owner_id=owner_id, duration=30))
    service.append(_activity(owner_id=owner_id, duration=15))
    service.append(_activity(owner_id=owner_id))

    stats = service.stats_for_user(owner_id)

    assert stats.total_meetings == 3
    assert stats.total_minutes == 45
    assert stats.average_duration == 22.5


def test_aggregate_stats_without_meetings() -> None:
    stats = aggregate_stats([])

    assert stats.total_meetings == 0
    assert stats.average_duration == 0.0
