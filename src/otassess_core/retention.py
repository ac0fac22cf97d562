"""Healthcare record retention rules.

Archived records may only be permanently deleted once their retention
period has passed:

    - incomplete assessments (draft, in_progress): 30 days after archival
    - completed/approved assessments: 7 years from completion
    - adult clients: 7 years from archival
    - anyone under 18 when archived: 7 years from their 18th birthday

All functions take explicit timestamps so callers (and tests) control "now".
"""

import math
from datetime import date, datetime, time, timedelta, timezone

from otassess_db.models.enums import INCOMPLETE_STATUSES

from otassess_core.constants import (
    AGE_OF_MAJORITY,
    INCOMPLETE_RETENTION_DAYS,
    RECORD_RETENTION_YEARS,
)


def add_years(moment: datetime, years: int) -> datetime:
    """Shift by whole calendar years; 29 February lands on 28 February."""
    try:
        return moment.replace(year=moment.year + years)
    except ValueError:
        return moment.replace(year=moment.year + years, day=28)


def age_on(date_of_birth: date, today: date) -> int:
    had_birthday = (today.month, today.day) >= (date_of_birth.month, date_of_birth.day)
    return today.year - date_of_birth.year - (0 if had_birthday else 1)


def is_child(date_of_birth: date | None, *, today: date) -> bool:
    if date_of_birth is None:
        return False
    return age_on(date_of_birth, today) < AGE_OF_MAJORITY


def _child_retention(date_of_birth: date) -> datetime:
    adulthood = datetime.combine(date_of_birth, time.min, tzinfo=timezone.utc)
    adulthood = add_years(adulthood, AGE_OF_MAJORITY)
    return add_years(adulthood, RECORD_RETENTION_YEARS)


def client_retention_date(date_of_birth: date | None, archived_at: datetime) -> datetime:
    if is_child(date_of_birth, today=archived_at.date()):
        return _child_retention(date_of_birth)
    return add_years(archived_at, RECORD_RETENTION_YEARS)


def assessment_retention_date(
    status: str,
    completed_at: datetime | None,
    archived_at: datetime,
    client_date_of_birth: date | None,
) -> datetime:
    if status in INCOMPLETE_STATUSES:
        return archived_at + timedelta(days=INCOMPLETE_RETENTION_DAYS)
    if is_child(client_date_of_birth, today=archived_at.date()):
        return _child_retention(client_date_of_birth)
    return add_years(completed_at or archived_at, RECORD_RETENTION_YEARS)


def can_permanently_delete(can_delete_after: datetime | None, *, now: datetime) -> bool:
    """A record with no retention date recorded is never deletable."""
    if can_delete_after is None:
        return False
    return now >= can_delete_after


def days_remaining(can_delete_after: datetime, *, now: datetime) -> int:
    return max(0, math.ceil((can_delete_after - now).total_seconds() / 86400))
