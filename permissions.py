# permissions.py
"""
Role checks for the JSON API.

- role_required([...]) is the route decorator (root always passes).
- has_role(...) is for checks that depend on the request body, such as approvals.

Roles:
- user   assigned doers: fill in and submit checklist items, raise repairs
- admin  everything a user can do, plus machines, plan assignment, approvals
- root   full access, including deletes
"""

from functools import wraps
from typing import Iterable, Set

from flask import abort
from flask_login import current_user, login_required


def role_required(allowed_roles: Iterable[str]):
    """
    Restrict a view to the given roles.
    Example:
        @role_required(["admin"])
        def view(): ...

    Rules:
    - anonymous users get 401 (from login_required or here);
    - root always passes;
    - any other role outside the set gets 403.
    """
    if isinstance(allowed_roles, str):
        allowed: Set[str] = {allowed_roles}
    else:
        allowed = set(allowed_roles or [])

    def decorator(view_func):
        @wraps(view_func)
        @login_required
        def wrapped(*args, **kwargs):
            if not current_user.is_authenticated:
                abort(401)

            role = getattr(current_user, "role", None)
            if role == "root" or role in allowed:
                return view_func(*args, **kwargs)

            abort(403)

        return wrapped
    return decorator


def has_role(*roles: str) -> bool:
    """True when the current user holds one of ``roles``; root counts for every role."""
    if not current_user.is_authenticated:
        return False
    role = getattr(current_user, "role", None)
    return role == "root" or role in roles
