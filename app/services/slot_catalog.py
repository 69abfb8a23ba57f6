"""Bookable time-of-day values for a clinic day."""

from datetime import datetime, timedelta

FIRST_SLOT = "09:00"
SLOT_MINUTES = 30
SLOTS_PER_DAY = 16


def _build_catalog():
    start = datetime.strptime(FIRST_SLOT, "%H:%M")
    step = timedelta(minutes=SLOT_MINUTES)
    return tuple((start + i * step).strftime("%H:%M") for i in range(SLOTS_PER_DAY))


# 09:00, 09:30, ... 16:30
SLOT_TIMES = _build_catalog()


def is_catalog_time(value: str) -> bool:
    return value in SLOT_TIMES
