# modules/maintenance/services.py
"""
Plan assignment and checklist workflow.

build_assignment() is pure: it turns a machine, a frequency and a start date
into plan fields plus one checklist item per occurrence. assign_maintenance()
reads the next task number, builds, and writes plan + items in a single
transaction.
"""

import logging
from decimal import Decimal, InvalidOperation

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from modules.maintenance.models import ChecklistItem, Machine, MaintenancePlan
from modules.maintenance.numbering import (
    format_task_no,
    generate_serial_number,
    machine_prefix,
    next_task_number,
)
from modules.maintenance.schedule import (
    Frequency,
    format_display_date,
    occurrence_dates,
    parse_date,
    plan_end_date,
)

logger = logging.getLogger(__name__)

DEFAULT_DEPARTMENT = "Maintenance"

# from-status -> statuses it may move to
STATUS_TRANSITIONS = {
    "pending": {"in_progress", "completed"},
    "in_progress": {"pending", "completed"},
    "completed": {"approved", "rejected"},
    "rejected": {"pending", "in_progress", "completed"},
    "approved": set(),
}
REVIEW_STATUSES = {"approved", "rejected"}

PLAN_OPTIONAL_FIELDS = (
    "priority", "assigned_to", "given_by",
    "is_temperature_sensitive", "enable_reminder", "require_attachment",
)


class AssignmentError(ValueError):
    """Assignment input the planner has to correct."""


class ChecklistStatusError(ValueError):
    """A status change the checklist workflow does not allow."""


# Numeric(12, 2) holds at most ten integer digits
MAX_COST = Decimal("9999999999.99")


def _parse_num(s):
    if s is None or s == "":
        return None
    try:
        value = Decimal(str(s).replace(",", "."))
    except InvalidOperation:
        raise ChecklistStatusError(f"Not a number: {s!r}") from None
    if not value.is_finite() or abs(value) > MAX_COST:
        raise ChecklistStatusError(f"Cost out of range: {s!r}")
    return value


# ---------- machines ----------

def create_machine(name: str, department: str | None = None, location: str | None = None) -> Machine:
    name = (name or "").strip()
    if not name:
        raise AssignmentError("Machine name is required")
    machine = Machine(
        name=name,
        department=department or None,
        location=location or None,
        serial_number=generate_serial_number(name),
    )
    db.session.add(machine)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Could not save machine %s", name)
        raise
    logger.info("Created machine %s (%s)", machine.name, machine.serial_number)
    return machine


# ---------- generation ----------

def build_assignment(machine, frequency, start_date, work_description=None, part_name=None,
                     start_number: int = 1, end_date=None, **plan_fields):
    """
    Build the plan record and its checklist without touching the database.

    ``machine`` only needs ``name``, ``department`` and ``serial_number``
    attributes. ``end_date`` is honoured for single-occurrence plans only;
    recurring plans take theirs from the frequency rules.

    Returns ``(plan_dict, [item_dict, ...])``.
    """
    freq = Frequency.parse(frequency)
    start = parse_date(start_date)
    dates = occurrence_dates(start, freq)

    if freq.is_recurring or end_date in (None, ""):
        end = plan_end_date(start, freq)
    else:
        end = parse_date(end_date)
        if end < start:
            raise AssignmentError("End date cannot be before start date")

    prefix = machine_prefix(getattr(machine, "name", None))
    department = getattr(machine, "department", None) or DEFAULT_DEPARTMENT
    serial_number = getattr(machine, "serial_number", None) or ""
    base_description = work_description or part_name

    items = []
    for offset, occurrence in enumerate(dates):
        if freq.is_recurring:
            description = f"{base_description or 'Maintenance'} - {format_display_date(occurrence)}"
        else:
            description = base_description or "Maintenance Task"
        items.append({
            "task_no": format_task_no(prefix, start_number + offset),
            "scheduled_date": occurrence,
            "description": description,
            "department": department,
            "serial_number": serial_number,
            "status": "pending",
            "remarks": "",
            "sound_of_machine": "",
            "temperature": "",
            "maintenance_cost": None,
            "image_url": None,
            "is_submitted": False,
        })

    title = part_name or work_description or "Maintenance Task"
    if freq.is_recurring:
        title = f"{title} ({freq.label}: {format_display_date(start)} - {format_display_date(end)})"

    plan = {
        "task_title": title,
        "description": work_description,
        "status": "scheduled",
        "frequency": freq.value or None,
        "start_date": start,
        "end_date": end,
        "due_date": end,
        "serial_number": serial_number,
    }
    for key in PLAN_OPTIONAL_FIELDS:
        if key in plan_fields:
            plan[key] = plan_fields[key]
    return plan, items


def preview_assignment(machine, frequency, start_date, **kwargs):
    """What assign_maintenance() would write right now, numbered from the current counter."""
    start_number = next_task_number(machine_prefix(machine.name))
    return build_assignment(machine, frequency, start_date, start_number=start_number, **kwargs)


def assign_maintenance(machine: Machine, frequency, start_date, **kwargs) -> MaintenancePlan:
    """Allocate numbers, build, and persist plan + checklist together."""
    prefix = machine_prefix(machine.name)
    start_number = next_task_number(prefix)
    plan_fields, items = build_assignment(machine, frequency, start_date,
                                          start_number=start_number, **kwargs)

    plan = MaintenancePlan(machine_id=machine.id, **plan_fields)
    db.session.add(plan)
    try:
        db.session.flush()
        db.session.add_all([ChecklistItem(maintenance_id=plan.id, **it) for it in items])
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Could not save maintenance plan for machine %s", machine.id)
        raise

    logger.info("Plan %s for %s: %d item(s) %s..%s", plan.id, machine.name, len(items),
                items[0]["task_no"], items[-1]["task_no"])
    return plan


def delete_plan(plan: MaintenancePlan) -> None:
    plan_id = plan.id
    db.session.delete(plan)
    db.session.commit()
    logger.info("Deleted plan %s", plan_id)


# ---------- checklist workflow ----------

def change_item_status(item: ChecklistItem, new_status: str) -> ChecklistItem:
    new_status = (new_status or "").strip().lower()
    if new_status not in STATUS_TRANSITIONS:
        raise ChecklistStatusError(f"Unknown status: {new_status!r}")
    if new_status == item.status:
        return item
    if new_status not in STATUS_TRANSITIONS.get(item.status, set()):
        raise ChecklistStatusError(f"Cannot move {item.task_no} from {item.status} to {new_status}")

    logger.info("%s: %s -> %s", item.task_no, item.status, new_status)
    item.status = new_status
    db.session.commit()
    return item


def submit_item(item: ChecklistItem, remarks=None, sound_of_machine=None, temperature=None,
                maintenance_cost=None, image_url=None) -> ChecklistItem:
    """Record the doer's evidence and mark the item completed."""
    if item.status != "completed" and "completed" not in STATUS_TRANSITIONS.get(item.status, set()):
        raise ChecklistStatusError(f"{item.task_no} cannot be submitted while {item.status}")

    cost = _parse_num(maintenance_cost)
    item.remarks = remarks or ""
    item.sound_of_machine = sound_of_machine or ""
    item.temperature = "" if temperature is None else str(temperature)
    item.maintenance_cost = cost
    item.image_url = image_url or None
    item.is_submitted = True
    item.status = "completed"
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Could not save submission for %s", item.task_no)
        raise
    logger.info("%s submitted", item.task_no)
    return item


def filter_items(status=None, search=None, machine_name=None, assigned_to=None):
    """Checklist item query with the task list filters applied, newest first."""
    query = (ChecklistItem.query
             .join(MaintenancePlan, ChecklistItem.maintenance_id == MaintenancePlan.id)
             .join(Machine, MaintenancePlan.machine_id == Machine.id))

    if status:
        statuses = status if isinstance(status, (list, tuple)) else [s.strip() for s in status.split(",") if s.strip()]
        if statuses and statuses != ["all"]:
            query = query.filter(ChecklistItem.status.in_(statuses))

    if machine_name and machine_name != "all":
        query = query.filter(Machine.name == machine_name)

    if assigned_to:
        query = query.filter(MaintenancePlan.assigned_to == assigned_to)

    if search:
        like = f"%{search}%"
        query = query.filter(or_(ChecklistItem.task_no.ilike(like),
                                 ChecklistItem.description.ilike(like)))

    return query.order_by(ChecklistItem.id.desc())
