"""SQLAlchemy models for the repairs domain."""

from datetime import datetime

from extensions import db

REPAIR_STATUSES = ["pending", "in_progress", "completed"]


class RepairRequest(db.Model):
    """A breakdown reported against a machine."""

    __tablename__ = "repairs"

    id = db.Column(db.Integer, primary_key=True)
    machine_id = db.Column(db.Integer, db.ForeignKey("machines.id", ondelete="CASCADE"), nullable=False)
    machine_serial_no = db.Column(db.String(255))
    doer_name = db.Column(db.String(150))
    given_by = db.Column(db.String(150))
    department = db.Column(db.String(120))
    machine_part_name = db.Column(db.String(255))
    problem_description = db.Column(db.Text)
    priority = db.Column(db.String(32))
    expected_delivery_days = db.Column(db.Integer, default=0)
    location = db.Column(db.String(255))
    status = db.Column(db.String(32), default="pending")
    image_url = db.Column(db.String(500))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    machine = db.relationship("Machine", back_populates="repairs")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "machine_id": self.machine_id,
            "machine_serial_no": self.machine_serial_no,
            "doer_name": self.doer_name,
            "given_by": self.given_by,
            "department": self.department,
            "machine_part_name": self.machine_part_name,
            "problem_description": self.problem_description,
            "priority": self.priority,
            "expected_delivery_days": self.expected_delivery_days,
            "location": self.location,
            "status": self.status,
            "image_url": self.image_url,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<RepairRequest {self.id} machine={self.machine_id}>"
