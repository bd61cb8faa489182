"""Offer use cases: validation, image upload and owner-scoped mutations."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from troq.domain.offers import OFFER_TYPES, is_offer_type, is_valid_phone
from troq.repositories import Repository
from troq.services.errors import ValidationError
from troq.services.media_service import OFFERS_FOLDER, MediaService, Upload

logger = logging.getLogger(__name__)


def _clean(value: str | None) -> str | None:
    value = (value or "").strip()
    return value or None


@dataclass
class OfferFields:
    offer_type: str
    title: str
    category: str | None = None
    description: str | None = None
    phone: str | None = None
    address: str | None = None

    def validated(self) -> "OfferFields":
        offer_type = _clean(self.offer_type)
        title = _clean(self.title)
        if not offer_type or not title:
            raise ValidationError("Offer type and title are required.")
        if not is_offer_type(offer_type):
            raise ValidationError(f"Offer type must be one of: {', '.join(OFFER_TYPES)}.")
        if not is_valid_phone(self.phone):
            raise ValidationError("Invalid phone format. Use (XX) XXXXX-XXXX.")
        return OfferFields(
            offer_type=offer_type,
            title=title,
            category=_clean(self.category),
            description=_clean(self.description),
            phone=_clean(self.phone),
            address=_clean(self.address),
        )


@dataclass
class OfferService:
    repository: Repository
    media: MediaService

    def create_offer(self, user_id: str, fields: OfferFields, image: Upload | None = None) -> str:
        data = fields.validated()
        image_url = self.media.upload(image, folder=OFFERS_FOLDER)
        offer_id = self.repository.create_offer(
            user_id,
            data.offer_type,
            data.title,
            category=data.category,
            description=data.description,
            image_url=image_url,
            phone=data.phone,
            address=data.address,
        )
        logger.info("Offer %s created by %s", offer_id, user_id)
        return offer_id

    def update_offer(
        self,
        offer_id: str,
        user_id: str,
        fields: OfferFields,
        image: Upload | None = None,
        current_image_url: str | None = None,
    ) -> dict:
        """Replace the offer fields; a failed upload keeps ``current_image_url``."""
        data = fields.validated()
        image_url = _clean(current_image_url)
        if image is not None:
            image_url = self.media.upload(image, folder=OFFERS_FOLDER) or image_url
        return self.repository.update_offer(
            offer_id,
            user_id,
            offer_type=data.offer_type,
            title=data.title,
            category=data.category,
            description=data.description,
            image_url=image_url,
            phone=data.phone,
            address=data.address,
        )

    def delete_offer(self, offer_id: str, user_id: str) -> None:
        self.repository.delete_offer(offer_id, user_id)
        logger.info("Offer %s deleted by %s", offer_id, user_id)

    def list_offers(self, search: str | None = None, category: str | None = None) -> list[dict]:
        return self.repository.list_offers(_clean(search), _clean(category))

    def get_offer(self, offer_id: str) -> Optional[dict]:
        return self.repository.get_offer(offer_id)

    def get_offer_for_owner(self, offer_id: str, user_id: str) -> Optional[dict]:
        return self.repository.get_offer_for_owner(offer_id, user_id)

    def list_offers_by_owner(self, user_id: str) -> list[dict]:
        return self.repository.list_offers_by_owner(user_id)
