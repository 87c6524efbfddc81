from __future__ import annotations

from typing import Optional, Sequence

import structlog
from werkzeug.security import check_password_hash, generate_password_hash

from ..common.unit_of_work import UnitOfWork
from ..common.validators import require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ConflictError, NotFoundError, ValidationError
from .model import User
from .repository import UserRepository

logger = structlog.get_logger(__name__)


class IdentityDirectory:
    """Answers "does this id exist and what role does it have"."""

    def __init__(self, users: UserRepository):
        self._users = users

    def find(self, user_id: Optional[str]) -> Optional[User]:
        if not user_id:
            return None
        return self._users.get_by_id(user_id)

    def resolve(self, user_id: str, *, label: str = "User") -> User:
        user = self.find(user_id)
        if not user:
            raise NotFoundError(f"{label} not found")
        return user

    @staticmethod
    def role_of(user: User) -> Role:
        return user.role


class AuthService:
    """Use case: sign up and authenticate users."""

    def __init__(self, users: UserRepository, uow: UnitOfWork):
        self._users = users
        self._uow = uow

    def signup(
        self,
        *,
        email: str,
        password: str,
        full_name: str,
        role: Role,
        phone: Optional[str] = None,
    ) -> User:
        email = require_non_empty(email, "Email").lower()
        full_name = require_non_empty(full_name, "Full name")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        with self._uow.transaction():
            if self._users.get_by_email(email):
                raise ConflictError("Email already exists")

            # Admin accounts can only be self-assigned while none exist.
            if role == Role.ADMIN and self._users.count_by_role(Role.ADMIN) > 0:
                raise ValidationError("Admin role can only be assigned by existing admins")

            user_id = self._users.create_user(
                email=email,
                password_hash=generate_password_hash(password),
                full_name=full_name,
                role=role,
                phone=phone,
            )
            user = self._users.get_by_id(user_id)

        logger.info("user.signed_up", user_id=user_id, role=role.value)
        return user

    def authenticate(self, email: str, password: str) -> User:
        user = self._users.get_by_email((email or "").strip().lower())
        if not user or not user.is_active:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder or corrupted hashes
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")
        return user


class UserService:
    """Use case: manage users (admin)."""

    def __init__(self, users: UserRepository, uow: UnitOfWork):
        self._users = users
        self._uow = uow

    def list_all(self) -> Sequence[User]:
        return self._users.list_all()

    def list_students(self) -> Sequence[User]:
        return self._users.list_by_role(Role.STUDENT)

    def list_teachers(self) -> Sequence[User]:
        return self._users.list_by_role(Role.TEACHER)

    def get_user(self, user_id: str) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_user(self, user_id: str, *, full_name: Optional[str] = None, phone: Optional[str] = None) -> User:
        with self._uow.transaction():
            user = self.get_user(user_id)
            self._users.update_profile(
                user_id,
                full_name=full_name if full_name is not None else user.full_name,
                phone=phone if phone is not None else user.phone,
            )
            return self._users.get_by_id(user_id)

    def delete_user(self, user_id: str) -> None:
        with self._uow.transaction():
            if not self._users.delete_by_id(user_id):
                raise NotFoundError("User not found")
        logger.info("user.deleted", user_id=user_id)

    def toggle_status(self, user_id: str) -> User:
        with self._uow.transaction():
            user = self.get_user(user_id)
            self._users.set_active(user_id, is_active=not user.is_active)
            return self._users.get_by_id(user_id)

    def count_by_role(self, role: Role) -> int:
        return self._users.count_by_role(role)
