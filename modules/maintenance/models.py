# modules/maintenance/models.py
"""SQLAlchemy models for machines, maintenance plans and their checklist items."""

from datetime import datetime

from sqlalchemy.orm import relationship

from extensions import db


def _iso(value):
    return value.isoformat() if value is not None else None


# ========== MACHINES ==========
class Machine(db.Model):
    __tablename__ = "machines"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    department = db.Column(db.String(120))
    location = db.Column(db.String(120))
    serial_number = db.Column(db.String(255), unique=True)   # SN-2025/Hydraulic Press/001
    status = db.Column(db.String(64), default="active")
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    plans = relationship("MaintenancePlan", back_populates="machine",
                         cascade="all, delete-orphan",
                         order_by="MaintenancePlan.id")
    repairs = relationship("RepairRequest", back_populates="machine",
                           cascade="all, delete-orphan")

    def to_dict(self, with_plans: bool = False) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "department": self.department,
            "location": self.location,
            "serial_number": self.serial_number,
            "status": self.status,
            "created_at": _iso(self.created_at),
        }
        if with_plans:
            data["plans"] = [p.to_dict() for p in self.plans]
        return data

    def __repr__(self) -> str:
        return f"<Machine {self.name}>"


# ========== MAINTENANCE PLANS ==========
class MaintenancePlan(db.Model):
    """One assignment of recurring (or one-off) work to a machine."""

    __tablename__ = "maintenance"

    id = db.Column(db.Integer, primary_key=True)
    machine_id = db.Column(db.Integer,
                           db.ForeignKey("machines.id", ondelete="CASCADE"),
                           nullable=False)

    task_title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    priority = db.Column(db.String(32))
    status = db.Column(db.String(32), default="scheduled")

    frequency = db.Column(db.String(32))   # daily/weekly/15days/20days/monthly/2months/quarterly/yearly or empty
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    due_date = db.Column(db.Date)

    assigned_to = db.Column(db.String(150))
    given_by = db.Column(db.String(150))
    serial_number = db.Column(db.String(255))

    is_temperature_sensitive = db.Column(db.Boolean, default=False)
    enable_reminder = db.Column(db.Boolean, default=False)
    require_attachment = db.Column(db.Boolean, default=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    machine = relationship("Machine", back_populates="plans")
    items = relationship("ChecklistItem", back_populates="plan",
                         cascade="all, delete-orphan",
                         order_by="ChecklistItem.id")

    def to_dict(self, with_items: bool = False) -> dict:
        data = {
            "id": self.id,
            "machine_id": self.machine_id,
            "task_title": self.task_title,
            "description": self.description,
            "priority": self.priority,
            "status": self.status,
            "frequency": self.frequency,
            "start_date": _iso(self.start_date),
            "end_date": _iso(self.end_date),
            "due_date": _iso(self.due_date),
            "assigned_to": self.assigned_to,
            "given_by": self.given_by,
            "serial_number": self.serial_number,
            "is_temperature_sensitive": bool(self.is_temperature_sensitive),
            "enable_reminder": bool(self.enable_reminder),
            "require_attachment": bool(self.require_attachment),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }
        if with_items:
            data["items"] = [it.to_dict() for it in self.items]
        return data

    def __repr__(self) -> str:
        return f"<MaintenancePlan {self.id} {self.task_title!r}>"


# ========== CHECKLIST ITEMS ==========
class ChecklistItem(db.Model):
    """One scheduled occurrence of a plan's work.

    ``task_no`` is numbered per machine prefix across all plans and has no
    unique constraint; numbering.next_task_number reads the latest row.
    """

    __tablename__ = "maintenance_tasks"

    id = db.Column(db.Integer, primary_key=True)
    maintenance_id = db.Column(db.Integer,
                               db.ForeignKey("maintenance.id", ondelete="CASCADE"),
                               nullable=False)

    task_no = db.Column(db.String(64), nullable=False, index=True)   # HP-001
    scheduled_date = db.Column(db.Date)
    description = db.Column(db.Text)
    department = db.Column(db.String(120))
    serial_number = db.Column(db.String(255))
    status = db.Column(db.String(32), default="pending")   # pending|in_progress|completed|approved|rejected

    # evidence filled in by the doer
    remarks = db.Column(db.Text)
    sound_of_machine = db.Column(db.String(120))
    temperature = db.Column(db.String(64))
    maintenance_cost = db.Column(db.Numeric(12, 2))
    image_url = db.Column(db.String(500))
    is_submitted = db.Column(db.Boolean, default=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    plan = relationship("MaintenancePlan", back_populates="items")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "maintenance_id": self.maintenance_id,
            "task_no": self.task_no,
            "scheduled_date": _iso(self.scheduled_date),
            "description": self.description,
            "department": self.department,
            "serial_number": self.serial_number,
            "status": self.status,
            "remarks": self.remarks,
            "sound_of_machine": self.sound_of_machine,
            "temperature": self.temperature,
            "maintenance_cost": float(self.maintenance_cost) if self.maintenance_cost is not None else None,
            "image_url": self.image_url,
            "is_submitted": bool(self.is_submitted),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<ChecklistItem {self.task_no}>"
