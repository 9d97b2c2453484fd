# modules/maintenance/routes.py
"""JSON routes for machines, maintenance plans and checklist items."""

import logging
from datetime import date

from flask import abort, current_app, jsonify, make_response, request
from flask_login import login_required
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from modules.maintenance.models import ChecklistItem, Machine, MaintenancePlan
from modules.maintenance.schedule import Frequency
from modules.maintenance.services import (
    REVIEW_STATUSES,
    AssignmentError,
    ChecklistStatusError,
    assign_maintenance,
    change_item_status,
    create_machine,
    delete_plan,
    filter_items,
    preview_assignment,
    submit_item,
)
from permissions import has_role, role_required

from . import bp

logger = logging.getLogger(__name__)

TRUTHY = {"1", "true", "yes", "on"}


# ---------- helpers ----------
def _payload() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return request.form.to_dict()
    if not isinstance(data, dict):
        abort(make_response(jsonify({"error": "Request body must be a JSON object"}), 400))
    return data


def _text(data: dict, key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value).strip()


def _flag(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in TRUTHY


def _error(message: str, status: int = 400):
    return jsonify({"error": message}), status


def _jsonable(record: dict) -> dict:
    return {k: (v.isoformat() if isinstance(v, date) else v) for k, v in record.items()}


def _assignment_args(data: dict):
    """Validate the assignment form; returns (machine, frequency, start_date, extra kwargs)."""
    machine_id = _text(data, "machine_id")
    if not machine_id.isdigit():
        raise AssignmentError("Please select a machine")
    machine = db.session.get(Machine, int(machine_id))
    if machine is None:
        raise AssignmentError("Unknown machine")

    # an empty code is a one-off task; a missing one is a form error
    if data.get("frequency") is None:
        raise AssignmentError("Frequency is required")
    frequency = _text(data, "frequency").lower()
    if frequency and frequency not in Frequency.codes():
        raise AssignmentError(f"Frequency must be one of: {', '.join(Frequency.codes())}")

    start_date = data.get("start_date")
    if not start_date:
        raise AssignmentError("Start date is required")

    assigned_to = _text(data, "assigned_to")
    given_by = _text(data, "given_by")
    if assigned_to and assigned_to == given_by:
        raise AssignmentError("Given By and Doer's Name cannot be the same")

    kwargs = {
        "work_description": _text(data, "work_description") or None,
        "part_name": _text(data, "part_name") or None,
        "priority": _text(data, "priority") or None,
        "end_date": data.get("end_date") or None,
        "assigned_to": assigned_to or None,
        "given_by": given_by or None,
        "is_temperature_sensitive": _flag(data.get("temperature")) or _flag(data.get("is_temperature_sensitive")),
        "enable_reminder": _flag(data.get("enable_reminder")),
        "require_attachment": _flag(data.get("require_attachment")),
    }
    return machine, frequency, start_date, kwargs


# =================== MACHINES ===================
@bp.route("/machines")
@login_required
def machine_list():
    q = request.args.get("q", "").strip()
    query = Machine.query
    if q:
        like = f"%{q}%"
        query = query.filter(or_(
            Machine.name.ilike(like),
            Machine.department.ilike(like),
            Machine.serial_number.ilike(like),
        ))
    items = query.order_by(Machine.name.asc()).all()
    return jsonify([m.to_dict() for m in items])


@bp.route("/machines", methods=["POST"])
@role_required(["admin"])
def machine_add():
    data = _payload()
    try:
        machine = create_machine(_text(data, "name"), _text(data, "department"), _text(data, "location"))
    except AssignmentError as exc:
        return _error(str(exc))
    except SQLAlchemyError:
        return _error("Failed to save machine", 500)
    return jsonify(machine.to_dict()), 201


@bp.route("/machines/<int:mid>")
@login_required
def machine_view(mid: int):
    machine = Machine.query.get_or_404(mid)
    return jsonify(machine.to_dict(with_plans=True))


@bp.route("/machines/<int:mid>", methods=["DELETE"])
@role_required(["root"])
def machine_delete(mid: int):
    machine = Machine.query.get_or_404(mid)
    db.session.delete(machine)
    db.session.commit()
    logger.info("Deleted machine %s", mid)
    return jsonify({"deleted": mid})


# =================== MAINTENANCE PLANS ===================
@bp.route("/plans/preview", methods=["POST"])
@login_required
def plan_preview():
    try:
        machine, frequency, start_date, kwargs = _assignment_args(_payload())
        plan, items = preview_assignment(machine, frequency, start_date, **kwargs)
    except ValueError as exc:
        return _error(str(exc))
    return jsonify({
        "maintenance_plan": _jsonable(dict(plan, machine_id=machine.id)),
        "checklist_items": [_jsonable(it) for it in items],
    })


@bp.route("/plans", methods=["POST"])
@role_required(["admin"])
def plan_add():
    data = _payload()
    try:
        machine, frequency, start_date, kwargs = _assignment_args(data)
        plan = assign_maintenance(machine, frequency, start_date, **kwargs)
    except ValueError as exc:
        return _error(str(exc))
    except SQLAlchemyError:
        return _error("Failed to assign task", 500)
    return jsonify(plan.to_dict(with_items=True)), 201


@bp.route("/plans/<int:pid>")
@login_required
def plan_view(pid: int):
    plan = MaintenancePlan.query.get_or_404(pid)
    return jsonify(plan.to_dict(with_items=True))


@bp.route("/plans/<int:pid>", methods=["DELETE"])
@role_required(["root"])
def plan_delete(pid: int):
    plan = MaintenancePlan.query.get_or_404(pid)
    delete_plan(plan)
    return jsonify({"deleted": pid})


# =================== CHECKLIST ITEMS ===================
@bp.route("/tasks")
@login_required
def task_list():
    default_per_page = current_app.config.get("TASKS_PER_PAGE", 20)
    max_per_page = current_app.config.get("MAX_TASKS_PER_PAGE", 100)
    page = max(request.args.get("page", 1, type=int) or 1, 1)
    per_page = min(max(request.args.get("per_page", default_per_page, type=int) or default_per_page, 1),
                   max_per_page)

    query = filter_items(
        status=request.args.get("status"),
        search=request.args.get("search", "").strip() or None,
        machine_name=request.args.get("machine"),
        assigned_to=request.args.get("assigned_to"),
    )
    result = query.paginate(page=page, per_page=per_page, error_out=False)
    return jsonify({
        "items": [it.to_dict() for it in result.items],
        "total": result.total,
        "page": result.page,
        "per_page": result.per_page,
        "pages": result.pages,
    })


@bp.route("/tasks/<int:tid>")
@login_required
def task_view(tid: int):
    item = ChecklistItem.query.get_or_404(tid)
    return jsonify(item.to_dict())


@bp.route("/tasks/<int:tid>/status", methods=["POST"])
@login_required
def task_status(tid: int):
    item = ChecklistItem.query.get_or_404(tid)
    status = _text(_payload(), "status").lower()
    if status in REVIEW_STATUSES and not has_role("admin"):
        return _error("Only admins can approve or reject", 403)
    try:
        change_item_status(item, status)
    except ChecklistStatusError as exc:
        return _error(str(exc))
    return jsonify(item.to_dict())


@bp.route("/tasks/<int:tid>/submit", methods=["POST"])
@role_required(["user", "admin"])
def task_submit(tid: int):
    item = ChecklistItem.query.get_or_404(tid)
    data = _payload()
    try:
        submit_item(
            item,
            remarks=data.get("remarks"),
            sound_of_machine=data.get("sound_of_machine"),
            temperature=data.get("temperature"),
            maintenance_cost=data.get("maintenance_cost"),
            image_url=data.get("image_url"),
        )
    except ChecklistStatusError as exc:
        return _error(str(exc))
    return jsonify(item.to_dict())
