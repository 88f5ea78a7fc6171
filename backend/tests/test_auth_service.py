import pytest
from pydantic import ValidationError

from conected.core.errors import DuplicateField, InvalidCredentials, PasswordMismatch
from conected.models.session import UserSession
from conected.models.user import User
from conected.services.auth_service import auth_service
from conected.types import RegisterRequest


def make_candidate(**overrides):
    data = {
        "username": "alice",
        "email": "alice@example.com",
        "password": "s3cret-pass",
        "confirm_password": "s3cret-pass",
    }
    data.update(overrides)
    return RegisterRequest(**data)


def test_register_then_login(db):
    user = auth_service.register(db, make_candidate())
    assert user.id is not None

    session = auth_service.login(db, "alice", "s3cret-pass")
    assert session.data.user_id == user.id
    assert session.data.username == "alice"
    assert session.data.email == "alice@example.com"
    assert session.token

    assert auth_service.current_session(db, session.token) == session.data


def test_password_is_stored_hashed(db):
    user = auth_service.register(db, make_candidate())
    assert user.hashed_password != "s3cret-pass"
    assert user.hashed_password.startswith("$2")


def test_registration_password_is_trimmed(db):
    auth_service.register(db, make_candidate(password="  padded  ", confirm_password="  padded  "))

    assert auth_service.login(db, "alice", "padded").data.username == "alice"
    assert auth_service.login(db, "alice", "  padded  ").data.username == "alice"


def test_mismatched_passwords_write_nothing(db):
    with pytest.raises(PasswordMismatch):
        auth_service.register(db, make_candidate(confirm_password="something-else"))

    assert db.query(User).count() == 0


def test_duplicate_username_is_named(db):
    auth_service.register(db, make_candidate())

    with pytest.raises(DuplicateField) as exc_info:
        auth_service.register(db, make_candidate(email="other@example.com"))

    assert exc_info.value.field == "username"
    assert db.query(User).count() == 1


def test_duplicate_email_is_named(db):
    auth_service.register(db, make_candidate())

    with pytest.raises(DuplicateField) as exc_info:
        auth_service.register(db, make_candidate(username="bob"))

    assert exc_info.value.field == "email"


def test_unknown_user_and_wrong_password_look_the_same(db):
    auth_service.register(db, make_candidate())

    with pytest.raises(InvalidCredentials) as unknown:
        auth_service.login(db, "mallory", "s3cret-pass")
    with pytest.raises(InvalidCredentials) as wrong:
        auth_service.login(db, "alice", "not-the-password")

    assert type(unknown.value) is type(wrong.value)
    assert str(unknown.value) == str(wrong.value)


def test_username_lookup_is_case_sensitive(db):
    auth_service.register(db, make_candidate())

    with pytest.raises(InvalidCredentials):
        auth_service.login(db, "ALICE", "s3cret-pass")


def test_registration_does_not_log_in(db):
    auth_service.register(db, make_candidate())
    assert db.query(UserSession).count() == 0


def test_logout_ends_session(db):
    auth_service.register(db, make_candidate())
    session = auth_service.login(db, "alice", "s3cret-pass")

    assert auth_service.logout(db, session.token) is True
    assert auth_service.current_session(db, session.token) is None
    assert auth_service.logout(db, session.token) is False


def test_extra_profile_fields_are_ignored(db):
    candidate = make_candidate(full_name="Alice Example")
    user = auth_service.register(db, candidate)
    assert not hasattr(user, "full_name")


@pytest.mark.parametrize("password", ["   ", "\t\n"])
def test_blank_password_is_rejected(db, password):
    with pytest.raises(ValidationError):
        make_candidate(password=password, confirm_password=password)

    assert db.query(User).count() == 0
