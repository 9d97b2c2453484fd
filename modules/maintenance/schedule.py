# modules/maintenance/schedule.py
"""
Occurrence dates for recurring maintenance.

Every frequency code maps to two independent rules:
- ``occurrences`` - the dates a checklist item is generated for;
- ``end_date``    - the end date stored on the plan and shown in titles.

For monthly/2months/quarterly/weekly/yearly the end date is a one-year span
and is NOT the last occurrence. Both rules are kept as they are.

Month offsets are always taken from the start date (never chained), with
relativedelta clamping to the last day of short months: Jan 31 -> Feb 29 -> Mar 31.
"""

from datetime import date, datetime, timedelta
from enum import Enum

from dateutil.relativedelta import relativedelta

ISO_FORMAT = "%Y-%m-%d"
DISPLAY_FORMAT = "%d/%m/%Y"


class Frequency(Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    EVERY_15_DAYS = "15days"
    EVERY_20_DAYS = "20days"
    MONTHLY = "monthly"
    EVERY_2_MONTHS = "2months"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"
    SINGLE = ""

    @classmethod
    def parse(cls, code) -> "Frequency":
        """Map a raw frequency code to a member; unknown or empty codes are SINGLE."""
        if isinstance(code, cls):
            return code
        try:
            return cls((code or "").strip().lower())
        except ValueError:
            return cls.SINGLE

    @classmethod
    def codes(cls) -> list[str]:
        return [f.value for f in cls if f is not cls.SINGLE]

    @property
    def is_recurring(self) -> bool:
        return self is not Frequency.SINGLE

    @property
    def label(self) -> str:
        """Title-cased code as shown in plan titles: 'Daily', '15days', '2months'."""
        return self.value[:1].upper() + self.value[1:]


def parse_date(value) -> date:
    """Return a calendar date for a ``date``/``datetime`` or a strict ``YYYY-MM-DD`` string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or len(value.strip()) != 10:
        raise ValueError(f"Expected a YYYY-MM-DD date, got {value!r}")
    try:
        return datetime.strptime(value.strip(), ISO_FORMAT).date()
    except ValueError:
        raise ValueError(f"Expected a YYYY-MM-DD date, got {value!r}") from None


def format_display_date(d: date) -> str:
    return d.strftime(DISPLAY_FORMAT)


# ---------- occurrence rules ----------

def _consecutive_days(count: int):
    def rule(start: date) -> list[date]:
        return [start + timedelta(days=i) for i in range(count)]
    return rule


def _month_steps(step: int, count: int):
    def rule(start: date) -> list[date]:
        return [start + relativedelta(months=step * i) for i in range(count)]
    return rule


def _weekly(start: date) -> list[date]:
    limit = start + relativedelta(years=1)
    dates = []
    current = start
    while current < limit:
        dates.append(current)
        current += timedelta(days=7)
    return dates


def _only_start(start: date) -> list[date]:
    return [start]


# ---------- end-date rules ----------

def _days_after(days: int):
    def rule(start: date) -> date:
        return start + timedelta(days=days)
    return rule


def _one_year_span(start: date) -> date:
    return start + relativedelta(years=1) - timedelta(days=1)


def _same_day(start: date) -> date:
    return start


# frequency -> (occurrences, end_date)
RULES = {
    Frequency.DAILY: (_consecutive_days(365), _days_after(364)),
    Frequency.WEEKLY: (_weekly, _one_year_span),
    Frequency.EVERY_15_DAYS: (_consecutive_days(15), _days_after(14)),
    Frequency.EVERY_20_DAYS: (_consecutive_days(20), _days_after(19)),
    Frequency.MONTHLY: (_month_steps(1, 12), _one_year_span),
    Frequency.EVERY_2_MONTHS: (_month_steps(2, 6), _one_year_span),
    Frequency.QUARTERLY: (_month_steps(3, 4), _one_year_span),
    Frequency.YEARLY: (_only_start, _one_year_span),
    Frequency.SINGLE: (_only_start, _same_day),
}


def occurrence_dates(start, frequency) -> list[date]:
    """Every date a checklist item is generated for, in order."""
    occurrences, _ = RULES[Frequency.parse(frequency)]
    return occurrences(parse_date(start))


def plan_end_date(start, frequency) -> date:
    """End date stored on the plan (see module docstring for how it differs from the last occurrence)."""
    _, end_rule = RULES[Frequency.parse(frequency)]
    return end_rule(parse_date(start))
