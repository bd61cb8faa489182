"""Profile use cases: account view/update and user search."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from troq.domain.offers import is_valid_email
from troq.repositories import UNSET, Repository
from troq.services.errors import ValidationError
from troq.services.media_service import AVATARS_FOLDER, MediaService, Upload


@dataclass
class AccountService:
    repository: Repository
    media: MediaService

    def get_account(self, user_id: str) -> Optional[dict]:
        return self.repository.find_user_by_id(user_id)

    def update_account(self, user_id: str, fullname: str, email: str, avatar: Upload | None = None) -> dict:
        """Update name/e-mail and, when a picture is sent, the avatar.

        A failed avatar upload keeps the previous avatar.
        """
        fullname = (fullname or "").strip()
        raw_email = (email or "").strip()
        if not fullname or not raw_email:
            raise ValidationError("Name and e-mail are required.")
        if not is_valid_email(raw_email):
            raise ValidationError("Invalid e-mail format.")
        avatar_url = self.media.upload(avatar, folder=AVATARS_FOLDER) if avatar else None
        return self.repository.update_user(user_id, fullname, raw_email, avatar_url if avatar_url else UNSET)

    def search_users(self, term: str | None) -> list[dict]:
        if not term:
            raise ValidationError("A search term is required.")
        return self.repository.find_users_by_name(term)
