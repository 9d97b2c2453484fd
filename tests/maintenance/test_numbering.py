"""Task number prefixes, formatting and the next-number lookup."""

from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from extensions import db
from modules.maintenance.models import ChecklistItem, Machine, MaintenancePlan
from modules.maintenance.numbering import (
    format_task_no,
    generate_serial_number,
    machine_prefix,
    next_task_number,
    parse_task_suffix,
)


@pytest.mark.parametrize("name, prefix", [
    ("Hydraulic Press", "HP"),
    ("cnc  mill", "CM"),
    ("Lathe", "L"),
    ("", "M"),
    ("   ", "M"),
    (None, "M"),
])
def test_machine_prefix(name, prefix) -> None:
    assert machine_prefix(name) == prefix


def test_task_number_padding() -> None:
    assert format_task_no("HP", 5) == "HP-005"
    assert format_task_no("HP", 42) == "HP-042"
    assert format_task_no("HP", 1200) == "HP-1200"


def test_parse_task_suffix() -> None:
    assert parse_task_suffix("HP-007") == 7
    assert parse_task_suffix("HP-1200") == 1200
    assert parse_task_suffix("HP-x") is None
    assert parse_task_suffix("HP") is None
    assert parse_task_suffix(None) is None


def _plan_with_items(name: str, *task_nos: str) -> MaintenancePlan:
    machine = Machine(name=name)
    db.session.add(machine)
    db.session.flush()
    plan = MaintenancePlan(machine_id=machine.id, task_title="Existing",
                           start_date=date(2024, 1, 1), end_date=date(2024, 1, 1))
    db.session.add(plan)
    db.session.flush()
    for no in task_nos:
        db.session.add(ChecklistItem(maintenance_id=plan.id, task_no=no))
    db.session.commit()
    return plan


def test_next_number_starts_at_one(app) -> None:
    assert next_task_number("HP") == 1


def test_next_number_follows_existing(app) -> None:
    _plan_with_items("Hydraulic Press", "HP-006", "HP-007")
    assert next_task_number("HP") == 8


def test_next_number_ignores_longer_prefixes(app) -> None:
    _plan_with_items("Hydraulic Press X", "HPX-050")
    assert next_task_number("HP") == 1
    assert next_task_number("hpx") == 51


def test_next_number_uses_latest_row_not_highest(app) -> None:
    _plan_with_items("Hydraulic Press", "HP-010", "HP-003")
    assert next_task_number("HP") == 4


def test_next_number_falls_back_to_one_on_db_error(app, monkeypatch) -> None:
    _plan_with_items("Hydraulic Press", "HP-007")

    def broken_query(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection lost"))

    monkeypatch.setattr(type(db.session()), "query", broken_query)
    assert next_task_number("HP") == 1


def test_serial_numbers_increment_per_name(app) -> None:
    assert generate_serial_number("Press", year=2025) == "SN-2025/Press/001"

    db.session.add(Machine(name="Press", serial_number="SN-2025/Press/001"))
    db.session.commit()

    assert generate_serial_number("Press", year=2025) == "SN-2025/Press/002"
    assert generate_serial_number("Lathe", year=2025) == "SN-2025/Lathe/001"


def test_next_number_treats_wildcards_literally(app) -> None:
    _plan_with_items("Hydraulic Press", "HP-015")
    assert next_task_number("_P") == 1
    assert next_task_number("%") == 1

    _plan_with_items("_ Press", "_P-002")
    assert next_task_number("_P") == 3
    assert next_task_number("HP") == 16


def test_serial_numbers_compare_numerically(app) -> None:
    db.session.add_all([
        Machine(name="Press", serial_number="SN-2025/Press/999"),
        Machine(name="Press", serial_number="SN-2025/Press/1000"),
    ])
    db.session.commit()

    assert generate_serial_number("Press", year=2025) == "SN-2025/Press/1001"


def test_serial_numbers_match_name_literally(app) -> None:
    db.session.add(Machine(name="PressXA", serial_number="SN-2025/PressXA/004"))
    db.session.commit()

    assert generate_serial_number("Press_A", year=2025) == "SN-2025/Press_A/001"
