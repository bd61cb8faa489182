from __future__ import annotations

import pytest

from troq.repositories import AccessDeniedError
from troq.services.account_service import AccountService
from troq.services.errors import ValidationError
from troq.services.media_service import AVATARS_FOLDER, OFFERS_FOLDER, Upload
from troq.services.offer_service import OfferFields, OfferService

from conftest import FakeMedia


@pytest.fixture()
def owner(json_repo):
    return json_repo.create_user("Ana Silva", "ana@x.com", "hash")


def _image():
    return Upload(filename="bike.png", content=b"\x89PNG", content_type="image/png")


@pytest.mark.parametrize(
    "fields",
    [
        OfferFields(offer_type="", title="Bike"),
        OfferFields(offer_type="sell", title="   "),
        OfferFields(offer_type="rent", title="Bike"),
        OfferFields(offer_type="sell", title="Bike", phone="11912345678"),
        OfferFields(offer_type="sell", title="Bike", phone="(11) 123-4567"),
    ],
)
def test_create_offer_validation(json_repo, media, owner, fields):
    service = OfferService(json_repo, media)
    with pytest.raises(ValidationError):
        service.create_offer(owner, fields)
    assert json_repo.list_offers() == []


def test_create_offer_uploads_image_and_normalises_blanks(json_repo, media, owner):
    service = OfferService(json_repo, media)
    offer_id = service.create_offer(
        owner,
        OfferFields(offer_type="sell", title=" Bike ", category="sports", description="", phone="(11) 91234-5678"),
        _image(),
    )
    offer = json_repo.get_offer_for_owner(offer_id, owner)
    assert offer["title"] == "Bike"
    assert offer["description"] is None
    assert offer["image_url"] == "https://media.example/img.png"
    assert media.calls == [("bike.png", OFFERS_FOLDER)]


def test_failed_upload_still_creates_offer(json_repo, owner):
    service = OfferService(json_repo, FakeMedia(url=None))
    offer_id = service.create_offer(owner, OfferFields(offer_type="trade", title="Bike"), _image())
    assert json_repo.get_offer(offer_id)["image_url"] is None


def test_update_offer_keeps_current_image_when_upload_fails(json_repo, owner):
    service = OfferService(json_repo, FakeMedia(url=None))
    offer_id = service.create_offer(owner, OfferFields(offer_type="sell", title="Bike"))

    updated = service.update_offer(
        offer_id,
        owner,
        OfferFields(offer_type="buy", title="Bike wanted"),
        _image(),
        current_image_url="https://media.example/old.png",
    )
    assert updated["image_url"] == "https://media.example/old.png"
    assert updated["offer_type"] == "buy"

    cleared = service.update_offer(offer_id, owner, OfferFields(offer_type="buy", title="Bike wanted"))
    assert cleared["image_url"] is None


def test_update_offer_by_stranger_is_denied(json_repo, media, owner):
    service = OfferService(json_repo, media)
    stranger = json_repo.create_user("Bruno Lima", "bruno@x.com", "hash")
    offer_id = service.create_offer(owner, OfferFields(offer_type="sell", title="Bike"))
    with pytest.raises(AccessDeniedError):
        service.update_offer(offer_id, stranger, OfferFields(offer_type="sell", title="Mine now"))
    with pytest.raises(AccessDeniedError):
        service.delete_offer(offer_id, stranger)
    assert json_repo.get_offer(offer_id)["title"] == "Bike"


def test_account_update_keeps_avatar_on_failed_upload(json_repo, owner):
    accounts = AccountService(json_repo, FakeMedia())
    user = accounts.update_account(owner, "Ana Silva", "ana@x.com", _image())
    assert user["avatar_url"] == "https://media.example/img.png"
    assert accounts.media.calls == [("bike.png", AVATARS_FOLDER)]

    failing = AccountService(json_repo, FakeMedia(url=None))
    user = failing.update_account(owner, "Ana P. Silva", "ana@x.com", _image())
    assert user["avatar_url"] == "https://media.example/img.png"
    assert user["fullname"] == "Ana P. Silva"

    with pytest.raises(ValidationError):
        accounts.update_account(owner, "", "ana@x.com")
    with pytest.raises(ValidationError):
        accounts.search_users("")
