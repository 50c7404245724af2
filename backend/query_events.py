"""
Query engine for `GET /events`.

`query()` is a pure function over a snapshot of the store: it filters by
search text and start-date window, then sorts. It returns a new list and
never mutates its input.
"""

from typing import Iterable, List, Optional

from models import Event, EventsQuery


# wire name -> attribute on Event
SORT_KEYS = {
    "title": "title",
    "startTime": "start_time",
    "endTime": "end_time",
    "createdAt": "created_at",
}


def matches_search(event: Event, term: str) -> bool:
    """Case-insensitive substring match on title or description."""

    needle = term.lower()
    if needle in event.title.lower():
        return True
    return bool(event.description) and needle in event.description.lower()


def query(events: Iterable[Event], params: Optional[EventsQuery] = None) -> List[Event]:
    """Filter and sort `events` according to `params`.

    - `search` keeps events whose title or description contains the term.
    - `start_date` / `end_date` are inclusive bounds on `start_time` only,
      applied independently of each other.
    - `sort_by` orders the result (ascending unless `sort_order="desc"`).
      Without it the input order is preserved. The sort is stable, so
      events with equal keys keep their relative input order.
    """

    params = params or EventsQuery()
    out = list(events)

    if params.search:
        out = [e for e in out if matches_search(e, params.search)]

    if params.start_date is not None:
        out = [e for e in out if e.start_time >= params.start_date]

    if params.end_date is not None:
        out = [e for e in out if e.start_time <= params.end_date]

    if params.sort_by:
        attr = SORT_KEYS[params.sort_by]
        out = sorted(
            out,
            key=lambda e: getattr(e, attr),
            reverse=params.sort_order == "desc",
        )

    return out
