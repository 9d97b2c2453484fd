# seed_maintenance.py
from datetime import date

from extensions import db
from modules.maintenance.models import Machine
from modules.maintenance.services import assign_maintenance, create_machine

DEMO_MACHINES = [
    ("Hydraulic Press", "Rolling Mill", "Shop Floor A - Bay 3"),
    ("CNC Mill", "CCM", "CNC Section - Bay 5"),
    ("Slag Crusher", "Slag Crusher", "Maintenance Bay"),
]


def run(start=None):
    start = start or date.today()
    created = []
    for name, department, location in DEMO_MACHINES:
        machine = Machine.query.filter_by(name=name).first()
        if machine is None:
            machine = create_machine(name, department, location)
            created.append(machine)

    press = Machine.query.filter_by(name="Hydraulic Press").first()
    if not press.plans:
        assign_maintenance(
            press, "weekly", start,
            work_description="Check hydraulic oil level and hoses",
            priority="high",
            assigned_to="operator",
            given_by="planner",
        )

    db.session.commit()
    print(f"Seed OK: {len(created)} machine(s) created, weekly plan on {press.name}.")
    return created


if __name__ == "__main__":
    from app import create_app

    with create_app().app_context():
        run()
