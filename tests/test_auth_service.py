from __future__ import annotations

import pytest

from troq.core.security import verify_password
from troq.repositories import DuplicateEmailError, NotFoundError
from troq.services.auth_service import AuthService
from troq.services.errors import InvalidCredentialsError, ValidationError


@pytest.fixture()
def auth(json_repo):
    return AuthService(json_repo)


def test_register_hashes_password(auth, json_repo):
    user_id = auth.register(" Ana Silva ", "ana@x.com", "s3cret!")
    stored = json_repo.find_user_by_id_with_password(user_id)
    assert stored["fullname"] == "Ana Silva"
    assert stored["password"] != "s3cret!"
    assert verify_password("s3cret!", stored["password"])


@pytest.mark.parametrize(
    "fullname,email,password",
    [("", "ana@x.com", "pw"), ("Ana", "", "pw"), ("Ana", "ana@x.com", ""), ("Ana", "not-an-email", "pw")],
)
def test_register_validates_input(auth, fullname, email, password):
    with pytest.raises(ValidationError):
        auth.register(fullname, email, password)


def test_register_duplicate_email(auth):
    auth.register("Ana Silva", "ana@x.com", "pw")
    with pytest.raises(DuplicateEmailError):
        auth.register("Ana Two", "ana@x.com", "pw")


def test_login_is_generic_on_failure(auth):
    auth.register("Ana Silva", "ana@x.com", "pw")
    user = auth.login("ana@x.com", "pw")
    assert user["fullname"] == "Ana Silva"
    assert "password" not in user

    for email, password in [("ana@x.com", "wrong"), ("bob@x.com", "pw"), ("bad", "pw")]:
        with pytest.raises(InvalidCredentialsError) as exc:
            auth.login(email, password)
        assert exc.value.message == "Invalid e-mail or password."


def test_change_password(auth):
    user_id = auth.register("Ana Silva", "ana@x.com", "old")
    with pytest.raises(ValidationError):
        auth.change_password(user_id, "wrong", "new")
    with pytest.raises(ValidationError):
        auth.change_password(user_id, "", "new")
    with pytest.raises(NotFoundError):
        auth.change_password("missing", "old", "new")

    assert auth.change_password(user_id, "old", "new") == user_id
    assert auth.login("ana@x.com", "new")["id"] == user_id
    with pytest.raises(InvalidCredentialsError):
        auth.login("ana@x.com", "old")
