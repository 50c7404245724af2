#!/usr/bin/env python3
"""
Terminal watcher: polls the API and announces events as they start.

The schedule is rebuilt only when a poll returns a list that differs from
the last one received. A failed poll keeps the current schedule, so armed
timers, open alerts and follow-up prompts survive network hiccups.

Alerts go to the log. There is no input channel in a terminal, so the
"Snooze event?" prompt is logged with the event id but cannot be accepted;
callers that embed `NotificationScheduler` can call `snooze(event_id)`.

Usage:
    python watch_events.py                          # default API_URL
    python watch_events.py --base-url http://host:3000 --refresh 30
    python watch_events.py --search standup
"""

import argparse
import asyncio
import logging
from functools import partial
from typing import List, Optional

from api_client import CalendarClient
from models import Event
from notifications import LoggingNotifier, NotificationScheduler
from settings import settings

logger = logging.getLogger(__name__)


async def refresh_once(
    client: CalendarClient,
    scheduler: NotificationScheduler,
    params: dict,
    last: Optional[List[Event]] = None,
) -> Optional[List[Event]]:
    """Fetch the event list and rebuild the scheduler if it changed.

    Returns the list the schedule is now built from: the fetched one, or
    `last` when the fetch failed.
    """
    loop = asyncio.get_running_loop()
    raw = await loop.run_in_executor(None, partial(client.get_events, **params))
    if client.error:
        logger.warning("Failed to load events, keeping current schedule: %s", client.error)
        return last
    events = [Event.model_validate(item) for item in raw]
    if events == last:
        return last
    armed = scheduler.rebuild(events)
    logger.info("%d upcoming event(s) armed", armed)
    return events


async def watch(client: CalendarClient, refresh: float, params: dict) -> None:
    scheduler = NotificationScheduler(LoggingNotifier())
    last = None
    try:
        while True:
            last = await refresh_once(client, scheduler, params, last)
            await asyncio.sleep(refresh)
    finally:
        scheduler.close()


def main():
    parser = argparse.ArgumentParser(description="Watch Calendrix events and notify at start time")
    parser.add_argument("--base-url", default=settings.api_url, help=f"API base URL (default: {settings.api_url})")
    parser.add_argument("--refresh", type=float, default=60.0, help="Seconds between event list refreshes (default: 60)")
    parser.add_argument("--search", default=None, help="Only watch events matching this text")
    args = parser.parse_args()

    logging.basicConfig(level=settings.log_level.upper(), format="%(asctime)s %(message)s")
    client = CalendarClient(args.base_url)
    params = {"search": args.search} if args.search else {}
    try:
        asyncio.run(watch(client, args.refresh, params))
    except KeyboardInterrupt:
        logger.info("Stopped")


if __name__ == "__main__":
    main()
