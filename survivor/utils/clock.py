"""
Clock utilities for the survivor pool

Services never read the wall clock directly. The application factory installs
a clock on the app and request handlers hand it to the services they build.
"""

from datetime import datetime, timezone

import pytz
from flask import current_app

EXTENSION_KEY = "survivor.clock"


def resolve_timezone(timezone_name):
    """Resolve a timezone name, falling back to UTC if it is invalid"""
    try:
        return pytz.timezone(timezone_name or "UTC")
    except pytz.UnknownTimeZoneError:
        return pytz.UTC


class SystemClock:
    """Wall clock pinned to the pool's civil timezone"""

    def __init__(self, timezone_name="UTC"):
        self.tz = resolve_timezone(timezone_name)

    def now(self):
        """Current time in the pool's timezone"""
        return datetime.now(self.tz)

    def utcnow(self):
        return datetime.now(timezone.utc)


class FixedClock:
    """Clock frozen at a given moment, used by tests and replays"""

    def __init__(self, moment, timezone_name="UTC"):
        self.tz = resolve_timezone(timezone_name)
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        self.moment = moment

    def now(self):
        return self.moment.astimezone(self.tz)

    def utcnow(self):
        return self.moment.astimezone(timezone.utc)

    def advance(self, delta):
        self.moment = self.moment + delta


def init_clock(app, clock=None):
    """Install the clock on the application"""
    if clock is None:
        clock = SystemClock(app.config.get("TIMEZONE", "UTC"))
    app.extensions[EXTENSION_KEY] = clock
    return clock


def get_clock():
    """Get the clock installed on the current application"""
    return current_app.extensions[EXTENSION_KEY]

