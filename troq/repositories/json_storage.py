"""
JSON-based persistence adapter.

The whole store is one document ``{"users": [...], "offers": [...]}``. Every
call loads it from disk; every mutation rewrites it in full before returning.
Uniqueness and ownership rules are checked with in-memory scans.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
import uuid
from pathlib import Path
from typing import Any, Optional

from troq.repositories.base import (
    PUBLIC_OFFER_FIELDS,
    OFFER_FIELDS,
    UNKNOWN_AUTHOR_EMAIL,
    UNKNOWN_AUTHOR_NAME,
    UNSET,
    AccessDeniedError,
    DuplicateEmailError,
    NotFoundError,
    Repository,
    category_filter_field,
    matches_search,
    name_sort_key,
    newest_first,
    utcnow,
    without_password,
)

logger = logging.getLogger(__name__)

_locks: dict[Path, threading.RLock] = {}
_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.RLock:
    with _locks_guard:
        return _locks.setdefault(path, threading.RLock())


def empty_db() -> dict:
    return {"users": [], "offers": []}


def db_defaults(db: dict) -> dict:
    db.setdefault("users", [])
    db.setdefault("offers", [])
    return db


def load(path: Path) -> dict:
    if not path.exists():
        logger.info("%s not found, creating an empty store", path)
        db = empty_db()
        save(path, db)
        return db
    with path.open("r", encoding="utf-8") as f:
        return db_defaults(json.load(f))


def save(path: Path, db: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(db, f, ensure_ascii=False, indent=2)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


def _public_offer(offer: dict, author: Optional[dict]) -> dict:
    data = {field: offer.get(field) for field in PUBLIC_OFFER_FIELDS}
    data["author_name"] = author["fullname"] if author else UNKNOWN_AUTHOR_NAME
    return data


def _owner_offer(offer: dict) -> dict:
    return {field: offer.get(field) for field in OFFER_FIELDS}


class JSONRepository(Repository):
    """Repository backed by a single JSON document on disk."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path).resolve()
        self._lock = _lock_for(self.path)
        with self._lock:
            load(self.path)

    def _load(self) -> dict:
        return load(self.path)

    def _save(self, db: dict) -> None:
        save(self.path, db)

    @staticmethod
    def _find(records: list[dict], record_id: str) -> Optional[dict]:
        for record in records:
            if record.get("id") == record_id:
                return record
        return None

    # -------------------------- users --------------------------
    def find_user_by_email(self, email: str) -> Optional[dict]:
        with self._lock:
            db = self._load()
        for user in db["users"]:
            if user.get("email") == email:
                return dict(user)
        return None

    def create_user(self, fullname: str, email: str, password_hash: str) -> str:
        with self._lock:
            db = self._load()
            if any(user.get("email") == email for user in db["users"]):
                raise DuplicateEmailError(email)
            user = {
                "id": str(uuid.uuid4()),
                "fullname": fullname,
                "email": email,
                "password": password_hash,
                "created_at": utcnow().isoformat(),
                "avatar_url": None,
            }
            db["users"].append(user)
            self._save(db)
        return user["id"]

    def find_user_by_id(self, user_id: str) -> Optional[dict]:
        user = self.find_user_by_id_with_password(user_id)
        return without_password(user) if user else None

    def find_user_by_id_with_password(self, user_id: str) -> Optional[dict]:
        with self._lock:
            db = self._load()
        user = self._find(db["users"], user_id)
        return dict(user) if user else None

    def update_user(self, user_id: str, fullname: str, email: str, avatar_url: Any = UNSET) -> dict:
        with self._lock:
            db = self._load()
            if any(user.get("email") == email and user.get("id") != user_id for user in db["users"]):
                raise DuplicateEmailError(email)
            user = self._find(db["users"], user_id)
            if user is None:
                raise NotFoundError(f"User {user_id} not found")
            user["fullname"] = fullname
            user["email"] = email
            if avatar_url is not UNSET:
                user["avatar_url"] = avatar_url
            self._save(db)
            return without_password(user)

    def update_user_password(self, user_id: str, password_hash: str) -> str:
        with self._lock:
            db = self._load()
            user = self._find(db["users"], user_id)
            if user is None:
                raise NotFoundError(f"User {user_id} not found")
            user["password"] = password_hash
            self._save(db)
        return user_id

    def find_users_by_name(self, term: str | None) -> list[dict]:
        if not term or not term.strip():
            return []
        with self._lock:
            db = self._load()
        logger.debug("Filtering users with term %r", term)
        found = [
            without_password(user)
            for user in db["users"]
            if matches_search(term, user.get("fullname"))
        ]
        return sorted(found, key=lambda user: name_sort_key(user["fullname"]))

    # -------------------------- offers --------------------------
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
        offer = {
            "id": str(uuid.uuid4()),
            "user_id": user_id,
            "offer_type": offer_type,
            "title": title,
            "category": category,
            "description": description,
            "image_url": image_url,
            "phone": phone,
            "address": address,
            "created_at": utcnow().isoformat(),
        }
        with self._lock:
            db = self._load()
            db["offers"].append(offer)
            self._save(db)
        return offer["id"]

    def list_offers(self, search: str | None = None, category: str | None = None) -> list[dict]:
        with self._lock:
            db = self._load()
        offers = db["offers"]
        if search:
            logger.debug("Filtering offers with term %r", search)
            offers = [o for o in offers if matches_search(search, o.get("title"), o.get("description"))]
        if category:
            field = category_filter_field(category)
            logger.debug("Filtering offers on %s=%r", field, category)
            offers = [o for o in offers if o.get(field) == category]
        users = {user.get("id"): user for user in db["users"]}
        return newest_first(_public_offer(o, users.get(o.get("user_id"))) for o in offers)

    def get_offer(self, offer_id: str) -> Optional[dict]:
        with self._lock:
            db = self._load()
        offer = self._find(db["offers"], offer_id)
        if offer is None:
            return None
        author = self._find(db["users"], offer.get("user_id"))
        data = _public_offer(offer, author)
        data["author_email"] = author["email"] if author else UNKNOWN_AUTHOR_EMAIL
        return data

    def get_offer_for_owner(self, offer_id: str, user_id: str) -> Optional[dict]:
        with self._lock:
            db = self._load()
        offer = self._find(db["offers"], offer_id)
        if offer is None or offer.get("user_id") != user_id:
            return None
        return _owner_offer(offer)

    def list_offers_by_owner(self, user_id: str) -> list[dict]:
        with self._lock:
            db = self._load()
        return newest_first(_owner_offer(o) for o in db["offers"] if o.get("user_id") == user_id)

    def _owned_offer(self, db: dict, offer_id: str, user_id: str) -> dict:
        offer = self._find(db["offers"], offer_id)
        if offer is None:
            raise NotFoundError(f"Offer {offer_id} not found")
        if offer.get("user_id") != user_id:
            raise AccessDeniedError(f"Offer {offer_id} belongs to another user")
        return offer

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
        with self._lock:
            db = self._load()
            offer = self._owned_offer(db, offer_id, user_id)
            offer.update(
                offer_type=offer_type,
                title=title,
                category=category,
                description=description,
                image_url=image_url,
                phone=phone,
                address=address,
            )
            self._save(db)
            return _owner_offer(offer)

    def delete_offer(self, offer_id: str, user_id: str) -> None:
        with self._lock:
            db = self._load()
            offer = self._owned_offer(db, offer_id, user_id)
            db["offers"].remove(offer)
            self._save(db)
