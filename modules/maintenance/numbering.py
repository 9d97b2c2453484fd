# modules/maintenance/numbering.py
"""
Task numbers (HP-001) and machine serial numbers (SN-2025/Hydraulic Press/001).

Both counters are read from the current rows, not from an atomic sequence:
two assignments for the same prefix running at the same time can hand out
the same numbers. The app assumes a single planner writing at a time.
"""

import logging
from datetime import date

from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from modules.maintenance.models import ChecklistItem, Machine

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "M"


def machine_prefix(name: str | None) -> str:
    """Initials of the machine name: 'Hydraulic Press' -> 'HP'."""
    words = (name or "").split()
    if not words:
        return DEFAULT_PREFIX
    return "".join(w[0] for w in words).upper()


def format_task_no(prefix: str, number: int) -> str:
    return f"{prefix}-{number:03d}"


def parse_task_suffix(task_no: str | None) -> int | None:
    """Integer after the last '-', or None when there is none."""
    if not task_no or "-" not in task_no:
        return None
    try:
        return int(task_no.rsplit("-", 1)[1])
    except ValueError:
        return None


def _starts_with(text: str) -> str:
    """LIKE pattern matching values that begin with ``text`` literally."""
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"{escaped}%"


def next_task_number(prefix: str) -> int:
    """
    First free number for ``prefix``: one past the most recently inserted
    ``PREFIX-NNN`` item, or 1. A failed query also gives 1.
    """
    try:
        last = (db.session.query(ChecklistItem.task_no)
                .filter(ChecklistItem.task_no.ilike(_starts_with(f"{prefix}-"), escape="\\"))
                .order_by(ChecklistItem.id.desc())
                .limit(1)
                .scalar())
    except SQLAlchemyError:
        logger.warning("Task number lookup failed for prefix %s, starting at 1", prefix, exc_info=True)
        db.session.rollback()
        return 1

    suffix = parse_task_suffix(last)
    return suffix + 1 if suffix is not None else 1


def generate_serial_number(machine_name: str, year: int | None = None) -> str:
    """Next ``SN-{year}/{name}/NNN`` for a new machine: one past the highest numeric tail."""
    base = f"SN-{year or date.today().year}/{machine_name}/"
    try:
        serials = (db.session.query(Machine.serial_number)
                   .filter(Machine.serial_number.ilike(_starts_with(base), escape="\\"))
                   .all())
    except SQLAlchemyError:
        logger.warning("Serial number lookup failed for %s", base, exc_info=True)
        db.session.rollback()
        return f"{base}001"

    tails = [s[len(base):] for (s,) in serials]
    highest = max((int(t) for t in tails if t.isdigit()), default=0)
    return f"{base}{highest + 1:03d}"
