"""JSON routes for repair requests."""

import logging

from flask import abort, jsonify, make_response, request
from flask_login import login_required

from extensions import db
from modules.maintenance.models import Machine
from modules.repairs.models import REPAIR_STATUSES, RepairRequest
from permissions import role_required

from . import bp

logger = logging.getLogger(__name__)


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


def _error(message: str, status: int = 400):
    return jsonify({"error": message}), status


@bp.route("/")
@login_required
def repair_list():
    query = RepairRequest.query
    status = request.args.get("status")
    if status:
        query = query.filter_by(status=status)
    items = query.order_by(RepairRequest.id.desc()).all()
    return jsonify([r.to_dict() for r in items])


@bp.route("/", methods=["POST"])
@login_required
def repair_add():
    data = _payload()

    machine_id = _text(data, "machine_id")
    if not machine_id.isdigit():
        return _error("Please select a machine")
    machine = db.session.get(Machine, int(machine_id))
    if machine is None:
        return _error("Unknown machine")

    doer = _text(data, "doer_name")
    given_by = _text(data, "given_by")
    if doer and doer == given_by:
        return _error("Given By and Doer's Name cannot be the same")

    days = _text(data, "expected_delivery_days") or "0"

    repair = RepairRequest(
        machine_id=machine.id,
        machine_serial_no=data.get("machine_serial_no") or machine.serial_number,
        doer_name=doer or None,
        given_by=given_by or None,
        department=data.get("department") or machine.department,
        machine_part_name=data.get("machine_part_name") or None,
        problem_description=data.get("problem_description") or None,
        priority=data.get("priority") or None,
        expected_delivery_days=int(days) if days.isdigit() else 0,
        location=data.get("location") or machine.location,
        status="pending",
        image_url=data.get("image_url") or None,
    )
    db.session.add(repair)
    db.session.commit()
    logger.info("Repair %s raised for machine %s", repair.id, machine.name)
    return jsonify(repair.to_dict()), 201


@bp.route("/<int:rid>")
@login_required
def repair_view(rid: int):
    return jsonify(RepairRequest.query.get_or_404(rid).to_dict())


@bp.route("/<int:rid>/status", methods=["POST"])
@login_required
def repair_status(rid: int):
    repair = RepairRequest.query.get_or_404(rid)
    status = _text(_payload(), "status").lower()
    if status not in REPAIR_STATUSES:
        return _error(f"Status must be one of: {', '.join(REPAIR_STATUSES)}")
    repair.status = status
    db.session.commit()
    return jsonify(repair.to_dict())


@bp.route("/<int:rid>", methods=["DELETE"])
@role_required(["root"])
def repair_delete(rid: int):
    repair = RepairRequest.query.get_or_404(rid)
    db.session.delete(repair)
    db.session.commit()
    return jsonify({"deleted": rid})
