from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from troq.repositories import AccessDeniedError, NotFoundError
from troq.routers.deps import current_user_id, get_offer_service, to_upload
from troq.services.errors import ValidationError
from troq.services.offer_service import OfferFields, OfferService

router = APIRouter(prefix="/api", tags=["offers"])


def _fields(offer_type: str, title: str, category: str, description: str, phone: str, address: str) -> OfferFields:
    return OfferFields(
        offer_type=offer_type,
        title=title,
        category=category,
        description=description,
        phone=phone,
        address=address,
    )


@router.get("/offers")
def list_offers(
    search: Optional[str] = None,
    category: Optional[str] = None,
    offers: OfferService = Depends(get_offer_service),
):
    return offers.list_offers(search, category)


@router.post("/offers", status_code=201)
def create_offer(
    offer_type: str = Form("", alias="offerType"),
    title: str = Form(""),
    category: str = Form(""),
    description: str = Form(""),
    phone: str = Form(""),
    address: str = Form(""),
    offer_image: Optional[UploadFile] = File(None, alias="offerImage"),
    user_id: str = Depends(current_user_id),
    offers: OfferService = Depends(get_offer_service),
):
    fields = _fields(offer_type, title, category, description, phone, address)
    try:
        offer_id = offers.create_offer(user_id, fields, to_upload(offer_image))
    except ValidationError as exc:
        raise HTTPException(400, exc.message)
    return {"message": "Offer published successfully!", "offer_id": offer_id}


@router.get("/offers/{offer_id}")
def get_offer(offer_id: str, offers: OfferService = Depends(get_offer_service)):
    offer = offers.get_offer(offer_id)
    if not offer:
        raise HTTPException(404, "Offer not found.")
    return offer


@router.get("/offers/{offer_id}/edit")
def get_offer_for_edit(
    offer_id: str,
    user_id: str = Depends(current_user_id),
    offers: OfferService = Depends(get_offer_service),
):
    offer = offers.get_offer_for_owner(offer_id, user_id)
    if not offer:
        raise HTTPException(404, "Offer not found or access denied.")
    return offer


@router.put("/offers/{offer_id}")
def update_offer(
    offer_id: str,
    offer_type: str = Form("", alias="offerType"),
    title: str = Form(""),
    category: str = Form(""),
    description: str = Form(""),
    phone: str = Form(""),
    address: str = Form(""),
    current_image_url: str = Form("", alias="currentImageUrl"),
    offer_image: Optional[UploadFile] = File(None, alias="offerImage"),
    user_id: str = Depends(current_user_id),
    offers: OfferService = Depends(get_offer_service),
):
    fields = _fields(offer_type, title, category, description, phone, address)
    try:
        offer = offers.update_offer(offer_id, user_id, fields, to_upload(offer_image), current_image_url)
    except ValidationError as exc:
        raise HTTPException(400, exc.message)
    except NotFoundError:
        raise HTTPException(404, "Offer not found.")
    except AccessDeniedError:
        raise HTTPException(403, "Access denied.")
    return {"message": "Offer updated successfully!", "offer": offer}


@router.delete("/offers/{offer_id}")
def delete_offer(
    offer_id: str,
    user_id: str = Depends(current_user_id),
    offers: OfferService = Depends(get_offer_service),
):
    try:
        offers.delete_offer(offer_id, user_id)
    except NotFoundError:
        raise HTTPException(404, "Offer not found.")
    except AccessDeniedError:
        raise HTTPException(403, "Access denied.")
    return {"message": "Offer deleted successfully!"}


@router.get("/my-offers")
def my_offers(
    user_id: str = Depends(current_user_id),
    offers: OfferService = Depends(get_offer_service),
):
    return offers.list_offers_by_owner(user_id)
