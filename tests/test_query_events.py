"""Tests for filtering and sorting in the query engine."""

from datetime import timedelta

from conftest import T0
from models import EventsQuery
from query_events import query


def titles(events):
    return [e.title for e in events]


def test_search_matches_title_or_description_case_insensitively(make_event):
    events = [
        make_event("Team Meeting"),
        make_event("Lunch", description="with the TEAM"),
        make_event("Dentist"),
        make_event("Gym", description=None),
    ]

    result = query(events, EventsQuery(search="team"))

    assert titles(result) == ["Team Meeting", "Lunch"]


def test_no_params_returns_copy_in_insertion_order(make_event):
    events = [make_event("B"), make_event("A"), make_event("C")]

    result = query(events)

    assert titles(result) == ["B", "A", "C"]
    assert result is not events


def test_date_bounds_are_inclusive_and_use_start_time_only(make_event):
    early = make_event("Early", start=T0 - timedelta(days=1))
    at_start = make_event("AtStart", start=T0)
    # starts inside the window but ends well after endDate
    long_one = make_event("Long", start=T0 + timedelta(hours=2), hours=48)
    late = make_event("Late", start=T0 + timedelta(days=2))
    events = [early, at_start, long_one, late]

    result = query(events, EventsQuery(start_date=T0, end_date=T0 + timedelta(hours=2)))

    assert titles(result) == ["AtStart", "Long"]


def test_start_and_end_filters_apply_independently(make_event):
    events = [make_event("Past", start=T0 - timedelta(days=3)), make_event("Future", start=T0 + timedelta(days=3))]

    assert titles(query(events, EventsQuery(start_date=T0))) == ["Future"]
    assert titles(query(events, EventsQuery(end_date=T0))) == ["Past"]


def test_sort_by_start_time_descending(make_event):
    events = [
        make_event("Second", start=T0 + timedelta(hours=1)),
        make_event("First", start=T0),
        make_event("Third", start=T0 + timedelta(hours=2)),
    ]

    result = query(events, EventsQuery(sort_by="startTime", sort_order="desc"))

    assert titles(result) == ["Third", "Second", "First"]


def test_title_sort_uses_native_string_order(make_event):
    events = [make_event("banana"), make_event("Apple"), make_event("cherry")]

    result = query(events, EventsQuery(sort_by="title"))

    assert titles(result) == ["Apple", "banana", "cherry"]


def test_ascending_reversed_equals_descending(make_event):
    events = [
        make_event(
            f"Event {i}",
            start=T0 + timedelta(hours=i * 5 % 8),
            created=T0 - timedelta(minutes=i * 7 % 11),
        )
        for i in range(8)
    ]

    for key in ("title", "startTime", "endTime", "createdAt"):
        asc = query(events, EventsQuery(sort_by=key, sort_order="asc"))
        desc = query(events, EventsQuery(sort_by=key, sort_order="desc"))
        assert list(reversed(asc)) == desc


def test_equal_keys_keep_input_order(make_event):
    events = [make_event("A"), make_event("B"), make_event("C")]

    result = query(events, EventsQuery(sort_by="startTime"))

    assert titles(result) == ["A", "B", "C"]


def test_query_does_not_mutate_input(make_event):
    events = [make_event("b"), make_event("a")]
    before = list(events)

    query(events, EventsQuery(sort_by="title", search="a"))

    assert events == before


def test_filters_and_sort_compose(make_event):
    events = [
        make_event("Team sync", start=T0 + timedelta(hours=3)),
        make_event("Team retro", start=T0 + timedelta(hours=1)),
        make_event("Team offsite", start=T0 - timedelta(days=5)),
        make_event("Solo focus", start=T0 + timedelta(hours=2)),
    ]

    result = query(events, EventsQuery(search="team", start_date=T0, sort_by="startTime"))

    assert titles(result) == ["Team retro", "Team sync"]
