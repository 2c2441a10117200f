from __future__ import annotations

import logging
from dataclasses import dataclass

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.exceptions import AuthenticationError, ValidationError
from ..core.security import TokenService
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthSession:
    """What a client gets back after register/login."""

    token: str
    user: User


def user_to_dict(user: User) -> dict:
    return {"id": user.user_id, "fullName": user.full_name, "email": user.email}


class AuthService:
    """Use case: register accounts and exchange credentials for bearer tokens."""

    def __init__(self, users: UserRepository, tokens: TokenService):
        self._users = users
        self._tokens = tokens

    def register(self, *, full_name: str, email: str, password: str) -> AuthSession:
        full_name = require_non_empty(full_name, "Full name")
        email = require_non_empty(email, "Email").lower()
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        if "@" not in email:
            raise ValidationError("Email is not valid")
        if self._users.get_by_email(email):
            raise ValidationError("Email is already registered")

        user_id = self._users.create_user(
            full_name=full_name,
            email=email,
            password_hash=generate_password_hash(password),
        )
        user = self._users.get_by_id(user_id)
        logger.info("Registered user %s", user_id)
        return AuthSession(token=self._tokens.issue(user_id), user=user)

    def authenticate(self, email: str, password: str) -> AuthSession:
        user = self._users.get_by_email((email or "").strip().lower())
        if not user or not user.is_active:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except Exception:
            # e.g. placeholder or corrupted hashes
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")

        return AuthSession(token=self._tokens.issue(user.user_id), user=user)
