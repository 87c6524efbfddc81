"""Authorization layer wrapped around every route.

Routes declare who may call them; the services underneath trust the acting
user they are handed and only enforce domain rules.
"""

from __future__ import annotations

from functools import wraps

from flask import current_app, g, session

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError


def _directory():
    return current_app.extensions["school_records"].identity_directory


def current_actor():
    """The authenticated user for this request (re-read, never cached across requests)."""

    if "actor" in g:
        return g.actor

    user_id = session.get("user_id")
    if not user_id:
        raise AuthenticationError("Please log in to continue")

    user = _directory().find(user_id)
    if not user or not user.is_active:
        session.clear()
        raise AuthenticationError("Please log in to continue")

    g.actor = user
    return user


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        current_actor()
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    allowed = set(roles)

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if current_actor().role not in allowed:
                raise AuthorizationError("Access forbidden: insufficient permissions")
            return view(*args, **kwargs)

        return wrapper

    return decorator


def self_or_admin(param: str = "user_id"):
    """Allow admins, or the user whose id is the ``param`` URL argument."""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            actor = current_actor()
            if actor.role != Role.ADMIN and actor.user_id != kwargs.get(param):
                raise AuthorizationError("Access forbidden: insufficient permissions")
            return view(*args, **kwargs)

        return wrapper

    return decorator
