from __future__ import annotations

from flask import Flask, session

from ..common.access import current_actor, login_required, roles_required, self_or_admin
from ..common.http import json_body, ok
from ..common.validators import optional_str, parse_role
from ..container import Container
from ..core.enums import Role
from .model import User


def user_json(user: User) -> dict:
    return {
        "id": user.user_id,
        "email": user.email,
        "full_name": user.full_name,
        "phone": user.phone,
        "avatar_url": user.avatar_url,
        "role": user.role.value,
        "is_active": user.is_active,
        "created_at": user.created_at,
        "updated_at": user.updated_at,
    }


def user_summary(user: User) -> dict:
    return {"id": user.user_id, "full_name": user.full_name, "email": user.email}


def _auth_json(user: User) -> dict:
    return {
        "user_id": user.user_id,
        "email": user.email,
        "full_name": user.full_name,
        "role": user.role.value,
    }


def register(app: Flask, container: Container) -> None:
    def _start_session(user: User) -> None:
        session.clear()
        session["user_id"] = user.user_id
        session["role"] = user.role.value

    # ===== AUTH =====

    @app.route("/api/auth/signup", methods=["POST"], endpoint="auth_signup")
    def auth_signup():
        data = json_body()
        user = container.auth_service.signup(
            email=data.get("email", ""),
            password=data.get("password", ""),
            full_name=data.get("full_name", ""),
            role=parse_role(data.get("role")),
            phone=optional_str(data, "phone"),
        )
        _start_session(user)
        return ok(_auth_json(user), "User registered successfully", 201)

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def auth_login():
        data = json_body()
        user = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))
        _start_session(user)
        return ok(_auth_json(user), "Login successful")

    @app.route("/api/auth/logout", methods=["POST"], endpoint="auth_logout")
    def auth_logout():
        session.clear()
        return ok(None, "Logged out")

    @app.route("/api/auth/me", methods=["GET"], endpoint="auth_me")
    @login_required
    def auth_me():
        return ok(user_json(current_actor()))

    # ===== USERS =====

    @app.route("/api/users", methods=["GET"], endpoint="users_list")
    @roles_required(Role.ADMIN)
    def users_list():
        return ok([user_json(u) for u in container.user_service.list_all()])

    @app.route("/api/users/students", methods=["GET"], endpoint="users_students")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def users_students():
        return ok([user_json(u) for u in container.user_service.list_students()])

    @app.route("/api/users/teachers", methods=["GET"], endpoint="users_teachers")
    @roles_required(Role.ADMIN)
    def users_teachers():
        return ok([user_json(u) for u in container.user_service.list_teachers()])

    @app.route("/api/users/<user_id>", methods=["GET"], endpoint="users_get")
    @self_or_admin("user_id")
    def users_get(user_id: str):
        return ok(user_json(container.user_service.get_user(user_id)))

    @app.route("/api/users/<user_id>", methods=["PUT"], endpoint="users_update")
    @self_or_admin("user_id")
    def users_update(user_id: str):
        data = json_body()
        user = container.user_service.update_user(
            user_id,
            full_name=optional_str(data, "full_name"),
            phone=optional_str(data, "phone"),
        )
        return ok(user_json(user), "User updated successfully")

    @app.route("/api/users/<user_id>", methods=["DELETE"], endpoint="users_delete")
    @roles_required(Role.ADMIN)
    def users_delete(user_id: str):
        container.user_service.delete_user(user_id)
        return ok(None, "User deleted successfully")

    @app.route("/api/users/<user_id>/toggle-status", methods=["PATCH"], endpoint="users_toggle_status")
    @roles_required(Role.ADMIN)
    def users_toggle_status(user_id: str):
        return ok(user_json(container.user_service.toggle_status(user_id)))
