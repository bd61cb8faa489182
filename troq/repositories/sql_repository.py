"""Relational persistence adapter backed by SQLAlchemy."""
from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError

from troq.db.models import Offer, User
from troq.db.session import get_session
from troq.repositories.base import (
    PUBLIC_OFFER_FIELDS,
    OFFER_FIELDS,
    PUBLIC_USER_FIELDS,
    UNKNOWN_AUTHOR_EMAIL,
    UNKNOWN_AUTHOR_NAME,
    UNSET,
    AccessDeniedError,
    DuplicateEmailError,
    NotFoundError,
    Repository,
    category_filter_field,
    format_timestamp,
    name_sort_key,
    utcnow,
)

logger = logging.getLogger(__name__)


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _entity_to_user_dict(entity: User, *, with_password: bool = False) -> dict:
    data = {field: getattr(entity, field) for field in PUBLIC_USER_FIELDS}
    data["created_at"] = format_timestamp(entity.created_at)
    if with_password:
        data["password"] = entity.password
    return data


def _entity_to_offer_dict(entity: Offer, fields: tuple[str, ...] = OFFER_FIELDS) -> dict:
    data = {field: getattr(entity, field) for field in fields}
    data["created_at"] = format_timestamp(entity.created_at)
    return data


def _public_offer_dict(entity: Offer, author_name: Optional[str]) -> dict:
    data = _entity_to_offer_dict(entity, PUBLIC_OFFER_FIELDS)
    data["author_name"] = author_name if author_name is not None else UNKNOWN_AUTHOR_NAME
    return data


class SQLRepository(Repository):
    """CRUD helpers wrapping the SQLAlchemy session."""

    # -------------------------- users --------------------------
    def find_user_by_email(self, email: str) -> Optional[dict]:
        with get_session() as session:
            stmt = select(User).where(User.email == email)
            user = session.execute(stmt).scalar_one_or_none()
            return _entity_to_user_dict(user, with_password=True) if user else None

    def _email_taken(self, session, email: str, exclude_id: str | None = None) -> bool:
        stmt = select(User.id).where(User.email == email)
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        return session.execute(stmt.limit(1)).first() is not None

    def create_user(self, fullname: str, email: str, password_hash: str) -> str:
        with get_session() as session:
            if self._email_taken(session, email):
                raise DuplicateEmailError(email)
            user = User(fullname=fullname, email=email, password=password_hash, avatar_url=None, created_at=utcnow())
            session.add(user)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateEmailError(email) from exc
            return user.id

    def find_user_by_id(self, user_id: str) -> Optional[dict]:
        with get_session() as session:
            user = session.get(User, user_id)
            return _entity_to_user_dict(user) if user else None

    def find_user_by_id_with_password(self, user_id: str) -> Optional[dict]:
        with get_session() as session:
            user = session.get(User, user_id)
            return _entity_to_user_dict(user, with_password=True) if user else None

    def update_user(self, user_id: str, fullname: str, email: str, avatar_url: Any = UNSET) -> dict:
        with get_session() as session:
            if self._email_taken(session, email, exclude_id=user_id):
                raise DuplicateEmailError(email)
            user = session.get(User, user_id)
            if user is None:
                raise NotFoundError(f"User {user_id} not found")
            user.fullname = fullname
            user.email = email
            if avatar_url is not UNSET:
                user.avatar_url = avatar_url
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateEmailError(email) from exc
            return _entity_to_user_dict(user)

    def update_user_password(self, user_id: str, password_hash: str) -> str:
        with get_session() as session:
            user = session.get(User, user_id)
            if user is None:
                raise NotFoundError(f"User {user_id} not found")
            user.password = password_hash
            session.commit()
            return user_id

    def find_users_by_name(self, term: str | None) -> list[dict]:
        if not term or not term.strip():
            return []
        stmt = select(User).where(User.fullname.ilike(_like_pattern(term), escape="\\"))
        logger.debug("Searching users with term %r", term)
        with get_session() as session:
            users = session.execute(stmt).scalars().all()
        # Collations differ between databases; order in Python like the JSON store.
        return [_entity_to_user_dict(user) for user in sorted(users, key=lambda user: name_sort_key(user.fullname))]

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
        entity = Offer(
            user_id=user_id,
            offer_type=offer_type,
            title=title,
            category=category,
            description=description,
            image_url=image_url,
            phone=phone,
            address=address,
            created_at=utcnow(),
        )
        with get_session() as session:
            session.add(entity)
            session.commit()
            return entity.id

    def list_offers(self, search: str | None = None, category: str | None = None) -> list[dict]:
        stmt = select(Offer, User.fullname).outerjoin(User, Offer.user_id == User.id)
        if search:
            pattern = _like_pattern(search)
            stmt = stmt.where(
                or_(
                    Offer.title.ilike(pattern, escape="\\"),
                    Offer.description.ilike(pattern, escape="\\"),
                )
            )
        if category:
            column = getattr(Offer, category_filter_field(category))
            stmt = stmt.where(column == category)
        stmt = stmt.order_by(Offer.created_at.desc())
        logger.debug("Listing offers search=%r category=%r", search, category)
        with get_session() as session:
            return [_public_offer_dict(offer, fullname) for offer, fullname in session.execute(stmt).all()]

    def get_offer(self, offer_id: str) -> Optional[dict]:
        stmt = (
            select(Offer, User.fullname, User.email)
            .outerjoin(User, Offer.user_id == User.id)
            .where(Offer.id == offer_id)
        )
        with get_session() as session:
            row = session.execute(stmt).first()
            if row is None:
                return None
            offer, fullname, email = row
            data = _public_offer_dict(offer, fullname)
            data["author_email"] = email if email is not None else UNKNOWN_AUTHOR_EMAIL
            return data

    def get_offer_for_owner(self, offer_id: str, user_id: str) -> Optional[dict]:
        stmt = select(Offer).where(Offer.id == offer_id, Offer.user_id == user_id)
        with get_session() as session:
            offer = session.execute(stmt).scalar_one_or_none()
            return _entity_to_offer_dict(offer) if offer else None

    def list_offers_by_owner(self, user_id: str) -> list[dict]:
        stmt = select(Offer).where(Offer.user_id == user_id).order_by(Offer.created_at.desc())
        with get_session() as session:
            return [_entity_to_offer_dict(offer) for offer in session.execute(stmt).scalars().all()]

    def _owned_offer(self, session, offer_id: str, user_id: str) -> Offer:
        offer = session.get(Offer, offer_id)
        if offer is None:
            raise NotFoundError(f"Offer {offer_id} not found")
        if offer.user_id != user_id:
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
        with get_session() as session:
            offer = self._owned_offer(session, offer_id, user_id)
            offer.offer_type = offer_type
            offer.title = title
            offer.category = category
            offer.description = description
            offer.image_url = image_url
            offer.phone = phone
            offer.address = address
            session.commit()
            return _entity_to_offer_dict(offer)

    def delete_offer(self, offer_id: str, user_id: str) -> None:
        with get_session() as session:
            session.delete(self._owned_offer(session, offer_id, user_id))
            session.commit()
