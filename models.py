"""Shared SQLAlchemy models."""

from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

from extensions import db

ROLES = ("user", "admin", "root")


class User(UserMixin, db.Model):
    """An operator, planner or administrator of the maintenance app."""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(150), unique=True, nullable=False)
    password = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(50), nullable=False, default="user")  # user, admin, root

    def set_password(self, raw: str) -> None:
        self.password = generate_password_hash(raw)

    def check_password(self, raw: str) -> bool:
        return check_password_hash(self.password, raw)

    def to_dict(self) -> dict:
        return {"id": self.id, "username": self.username, "role": self.role}

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<User {self.username}>"
