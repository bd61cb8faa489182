"""
Storage contract shared by the JSON and SQL backends.

Every backend returns plain dicts shaped like the JSON document records so that
callers cannot tell which one served a request:

* users: ``id, fullname, email, password, avatar_url, created_at`` (``password``
  is dropped from every read except the two credential lookups);
* offers: ``id, user_id, offer_type, title, category, description, image_url,
  phone, address, created_at``. Public reads replace ``user_id`` by the
  author's current ``author_name`` (and ``author_email`` on the detail view).
"""
from __future__ import annotations

from abc import ABC, abstractmethod
import unicodedata
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from troq.domain.offers import OFFER_TYPES, is_offer_type

UNKNOWN_AUTHOR_NAME = "Unknown author"
UNKNOWN_AUTHOR_EMAIL = "unknown@unknown.invalid"

PUBLIC_OFFER_FIELDS = (
    "id",
    "offer_type",
    "title",
    "description",
    "created_at",
    "image_url",
    "phone",
    "address",
    "category",
)
OFFER_FIELDS = PUBLIC_OFFER_FIELDS + ("user_id",)
PUBLIC_USER_FIELDS = ("id", "fullname", "email", "avatar_url", "created_at")


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


# Marks an optional argument the caller did not pass (distinct from None).
UNSET: Any = _Unset()


class RepositoryError(Exception):
    """Base class for storage-level failures callers are expected to handle."""


class DuplicateEmailError(RepositoryError):
    """Raised when an e-mail already belongs to another user."""


class NotFoundError(RepositoryError):
    """Raised when the target user/offer does not exist."""


class AccessDeniedError(RepositoryError):
    """Raised when the offer exists but the acting user is not its owner."""


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> datetime:
    """Parse stored ISO timestamps (including the ``Z`` suffix) into aware datetimes."""
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value or "").strip()
        if not text:
            return datetime.min.replace(tzinfo=timezone.utc)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_timestamp(value: datetime | str | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return parse_timestamp(value).isoformat()


def matches_search(term: str, *values: Optional[str]) -> bool:
    """Case-insensitive substring match against any of the values."""
    needle = term.lower()
    return any(value and needle in value.lower() for value in values)


def category_filter_field(category: str) -> str:
    """Resolve which offer field the ``category`` query value filters on.

    Offer types double as categories in the listing filter: ``sell`` filters the
    ``offer_type`` column while ``electronics`` filters ``category``.
    """
    return "offer_type" if is_offer_type(category) else "category"


def without_password(user: dict) -> dict:
    return {key: value for key, value in user.items() if key != "password"}


def name_sort_key(name: Optional[str]) -> tuple[str, str]:
    """Order names ignoring case and accents (``Álvaro`` < ``ana`` < ``Zeca``)."""
    text = name or ""
    folded = "".join(c for c in unicodedata.normalize("NFKD", text) if not unicodedata.combining(c))
    return folded.casefold(), text


def newest_first(records: Iterable[dict]) -> list[dict]:
    return sorted(records, key=lambda record: parse_timestamp(record.get("created_at")), reverse=True)


class Repository(ABC):
    """Persistence port implemented by every storage backend."""

    # -------------------------- users --------------------------
    @abstractmethod
    def find_user_by_email(self, email: str) -> Optional[dict]:
        """Return the user (credential included) registered with ``email``."""

    @abstractmethod
    def create_user(self, fullname: str, email: str, password_hash: str) -> str:
        """Insert a user and return its generated id; ``DuplicateEmailError`` if taken."""

    @abstractmethod
    def find_user_by_id(self, user_id: str) -> Optional[dict]:
        """Return the user without its credential."""

    @abstractmethod
    def find_user_by_id_with_password(self, user_id: str) -> Optional[dict]:
        ...

    @abstractmethod
    def update_user(self, user_id: str, fullname: str, email: str, avatar_url: Any = UNSET) -> dict:
        """Update profile fields.

        ``avatar_url=UNSET`` keeps the stored avatar and ``None`` clears it.
        Raises ``DuplicateEmailError`` when another user owns ``email`` and
        ``NotFoundError`` when ``user_id`` is unknown.
        """

    @abstractmethod
    def update_user_password(self, user_id: str, password_hash: str) -> str:
        ...

    @abstractmethod
    def find_users_by_name(self, term: str | None) -> list[dict]:
        """Case-insensitive substring search on fullname, ordered by fullname."""

    # -------------------------- offers --------------------------
    @abstractmethod
    def create_offer(
        self,
        user_id: str,
        offer_type: str,
        title: str,
        category: str | None = None,
        description: str | None = None,
        image_url: str | None = None,
        phone: str | None = None,
        address: str | None = None,
    ) -> str:
        ...

    @abstractmethod
    def list_offers(self, search: str | None = None, category: str | None = None) -> list[dict]:
        """Public listing, newest first, with ``author_name`` resolved."""

    @abstractmethod
    def get_offer(self, offer_id: str) -> Optional[dict]:
        """Public detail with ``author_name`` and ``author_email``."""

    @abstractmethod
    def get_offer_for_owner(self, offer_id: str, user_id: str) -> Optional[dict]:
        """Full record, or None when the offer is missing or owned by someone else."""

    @abstractmethod
    def list_offers_by_owner(self, user_id: str) -> list[dict]:
        ...

    @abstractmethod
    def update_offer(
        self,
        offer_id: str,
        user_id: str,
        *,
        offer_type: str,
        title: str,
        category: str | None = None,
        description: str | None = None,
        image_url: str | None = None,
        phone: str | None = None,
        address: str | None = None,
    ) -> dict:
        """Replace the editable fields; ``NotFoundError`` / ``AccessDeniedError``."""

    @abstractmethod
    def delete_offer(self, offer_id: str, user_id: str) -> None:
        ...


__all__ = [
    "OFFER_TYPES",
    "UNKNOWN_AUTHOR_EMAIL",
    "UNKNOWN_AUTHOR_NAME",
    "UNSET",
    "AccessDeniedError",
    "DuplicateEmailError",
    "NotFoundError",
    "Repository",
    "RepositoryError",
]
