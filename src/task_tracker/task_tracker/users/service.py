from __future__ import annotations

import dataclasses
import logging
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..auth.tokens import Principal, TokenService
from ..core.enums import Attendance, Role
from ..core.exceptions import AuthenticationError, DuplicateRecordError, ValidationError
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


def _present(*values: Optional[str]) -> bool:
    return all(isinstance(v, str) and v.strip() for v in values)


class AuthService:
    """Use cases: login, self-registration and password reset."""

    def __init__(self, users: UserRepository, tokens: TokenService):
        self._users = users
        self._tokens = tokens

    def login(self, email: Optional[str], password: Optional[str]) -> str:
        if not _present(email, password):
            raise ValidationError("Email/password required")

        logger.info("Login attempt for %s", email)
        user = self._users.find_by_email(email)
        if not user:
            logger.info("Login failed, no such user: %s", email)
            raise AuthenticationError("Wrong credentials!")

        try:
            ok = check_password_hash(user.password_hash, password)
        except Exception:
            # e.g. legacy cleartext values that are not werkzeug hashes
            ok = False

        if not ok:
            logger.info("Login failed, password mismatch: %s", email)
            raise AuthenticationError("Wrong credentials!")

        logger.info("Login successful for %s role=%s", user.email, user.role.value)
        return self._tokens.issue(Principal(email=user.email, name=user.name, role=user.role))

    def register(self, name: Optional[str], email: Optional[str], password: Optional[str]) -> User:
        if not _present(name, email, password):
            raise ValidationError("All fields required")

        name = name.strip()
        email = email.strip()
        if self._users.find_by_email(email):
            raise ValidationError("Email exists")

        try:
            user = self._users.create(
                name=name,
                email=email,
                password_hash=generate_password_hash(password),
                role=Role.DEVELOPER,
                attendance=Attendance.ABSENT,
            )
        except DuplicateRecordError:
            raise ValidationError("Email exists")

        logger.info("Registered developer %s", user.email)
        return user

    def reset_password(self, email: Optional[str], new_password: Optional[str]) -> None:
        if not _present(email, new_password):
            raise ValidationError("Email and new password are required")

        user = self._users.find_by_email(email.strip())
        if not user:
            raise ValidationError("No user found with that email")

        self._users.save(dataclasses.replace(user, password_hash=generate_password_hash(new_password)))
        logger.info("Password reset for %s", user.email)
