"""
Document-level behaviour of the JSON backend.
"""
from __future__ import annotations

import json

from troq.repositories.base import UNKNOWN_AUTHOR_EMAIL, UNKNOWN_AUTHOR_NAME
from troq.repositories.json_storage import JSONRepository


def _read(path):
    return json.loads(path.read_text(encoding="utf-8"))


def test_missing_document_is_created_empty(tmp_path):
    path = tmp_path / "nested" / "database.json"
    JSONRepository(path)
    assert _read(path) == {"users": [], "offers": []}


def test_missing_collections_are_defaulted(tmp_path):
    path = tmp_path / "database.json"
    path.write_text(json.dumps({"users": []}), encoding="utf-8")
    repo = JSONRepository(path)
    assert repo.list_offers() == []


def test_records_use_flat_snake_case_layout(json_repo):
    user_id = json_repo.create_user("Ana Silva", "ana@x.com", "hash")
    offer_id = json_repo.create_offer(user_id, "sell", "Bike", category="sports")

    doc = _read(json_repo.path)
    [user] = doc["users"]
    assert user == {
        "id": user_id,
        "fullname": "Ana Silva",
        "email": "ana@x.com",
        "password": "hash",
        "created_at": user["created_at"],
        "avatar_url": None,
    }
    [offer] = doc["offers"]
    assert offer["id"] == offer_id
    assert offer["user_id"] == user_id
    assert offer["offer_type"] == "sell"
    assert offer["image_url"] is None
    assert set(offer) == {
        "id", "user_id", "offer_type", "title", "category", "description",
        "image_url", "phone", "address", "created_at",
    }


def test_every_write_is_visible_to_a_fresh_instance(json_repo):
    user_id = json_repo.create_user("Ana Silva", "ana@x.com", "hash")
    other = JSONRepository(json_repo.path)
    assert other.find_user_by_id(user_id)["email"] == "ana@x.com"
    assert not list(json_repo.path.parent.glob("*.tmp"))


def test_existing_data_with_legacy_timestamps(tmp_path):
    path = tmp_path / "database.json"
    path.write_text(
        json.dumps(
            {
                "users": [
                    {
                        "id": "u1",
                        "fullname": "Ana Silva",
                        "email": "ana@x.com",
                        "password": "hash",
                        "created_at": "2024-01-01T10:00:00.000Z",
                        "avatar_url": None,
                    }
                ],
                "offers": [
                    {"id": "o1", "user_id": "u1", "offer_type": "sell", "title": "Old",
                     "created_at": "2024-01-02T10:00:00.000Z"},
                    {"id": "o2", "user_id": "ghost", "offer_type": "buy", "title": "Orphan",
                     "created_at": "2024-03-01T10:00:00.000Z"},
                ],
            }
        ),
        encoding="utf-8",
    )
    repo = JSONRepository(path)

    listed = repo.list_offers()
    assert [o["id"] for o in listed] == ["o2", "o1"]
    assert listed[0]["author_name"] == UNKNOWN_AUTHOR_NAME
    assert listed[0]["category"] is None
    assert listed[1]["author_name"] == "Ana Silva"

    orphan = repo.get_offer("o2")
    assert orphan["author_email"] == UNKNOWN_AUTHOR_EMAIL
