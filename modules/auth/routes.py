"""Login, logout and the Flask-Login user loader."""

import logging

from flask import current_app, jsonify, request
from flask_login import (
    UserMixin,
    current_user,
    login_required,
    login_user,
    logout_user,
)

from extensions import db, login_manager
from models import User

from . import bp

logger = logging.getLogger(__name__)


@login_manager.user_loader
def load_user(user_id: str | None) -> User | UserMixin | None:
    """Resolve a ``User`` instance for Flask-Login sessions."""

    if not user_id:
        return None

    user = db.session.get(User, int(user_id))
    if user is not None:
        return user

    if current_app.config.get("LOGIN_DISABLED"):
        class _TestingUser(UserMixin):
            """Fallback principal used when authentication is disabled."""

            def __init__(self, test_user_id: int) -> None:
                self.id = test_user_id
                self.username = "test-user"
                self.role = "root"

        return _TestingUser(int(user_id))

    return None


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({"error": "Authentication required"}), 401


@bp.route("/login", methods=["POST"])
def login():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        payload = {}
    username = str(payload.get("username") or "").strip()
    password = str(payload.get("password") or "")

    user = User.query.filter_by(username=username).first()
    if user is None or not user.check_password(password):
        logger.info("Failed login for %r", username)
        return jsonify({"error": "Invalid username or password"}), 401

    login_user(user)
    return jsonify(user.to_dict())


@bp.route("/logout", methods=["POST"])
@login_required
def logout():
    logout_user()
    return jsonify({"ok": True})


@bp.route("/me")
@login_required
def me():
    return jsonify({
        "id": current_user.id,
        "username": getattr(current_user, "username", None),
        "role": getattr(current_user, "role", None),
    })
