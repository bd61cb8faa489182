"""
Authentication and identity related use cases.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from troq.core.security import hash_password, verify_password
from troq.domain.offers import is_valid_email
from troq.repositories import NotFoundError, Repository
from troq.services.errors import InvalidCredentialsError, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class AuthService:
    """Handles registration, login and password changes."""

    repository: Repository

    def register(self, fullname: str, email: str, password: str) -> str:
        fullname = (fullname or "").strip()
        raw_email = (email or "").strip()
        if not fullname or not raw_email or not password:
            raise ValidationError("All fields are required.")
        if not is_valid_email(raw_email):
            raise ValidationError("Invalid e-mail format.")
        user_id = self.repository.create_user(fullname, raw_email, hash_password(password))
        logger.info("Registered user %s", user_id)
        return user_id

    def login(self, email: str, password: str) -> dict:
        """Return the authenticated user (without credential)."""
        raw_email = (email or "").strip()
        if not is_valid_email(raw_email):
            raise InvalidCredentialsError("Invalid e-mail or password.")
        user = self.repository.find_user_by_email(raw_email)
        if not user or not verify_password(password or "", user.get("password")):
            raise InvalidCredentialsError("Invalid e-mail or password.")
        return {key: value for key, value in user.items() if key != "password"}

    def change_password(self, user_id: str, current_password: str, new_password: str) -> str:
        if not current_password or not new_password:
            raise ValidationError("Current and new password are required.")
        user = self.repository.find_user_by_id_with_password(user_id)
        if not user:
            raise NotFoundError(f"User {user_id} not found")
        if not verify_password(current_password, user.get("password")):
            raise ValidationError("Current password is incorrect.")
        return self.repository.update_user_password(user_id, hash_password(new_password))
