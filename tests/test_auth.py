from datetime import timedelta

import jwt as pyjwt
import pytest

from auth import AuthSession, JWTError, JWTManager, User


@pytest.fixture
def manager():
    return JWTManager(secret_key="test-secret", access_token_expiry=timedelta(minutes=5))


def test_token_round_trip(manager, user):
    token = manager.generate_access_token(user)
    assert manager.verify_token(token) == user


def test_expired_token(manager, user):
    token = manager.generate_access_token(user, expiry=timedelta(seconds=-1))
    with pytest.raises(JWTError, match="expired"):
        manager.verify_token(token)


def test_wrong_secret(manager, user):
    token = JWTManager(secret_key="other").generate_access_token(user)
    with pytest.raises(JWTError):
        manager.verify_token(token)


def test_wrong_token_type(manager):
    token = pyjwt.encode(
        {"sub": "u", "email": "u@example.com", "type": "refresh"},
        "test-secret",
        algorithm="HS256",
    )
    with pytest.raises(JWTError, match="type"):
        manager.verify_token(token)


def test_session_notifies_immediately_and_on_change(user):
    session = AuthSession()
    states = []
    unsubscribe = session.on_auth_state_changed(states.append)

    assert states[0].is_loading is True
    assert session.is_authenticated is False

    session.sign_in(user)
    assert session.is_authenticated is True
    assert session.user == user

    unsubscribe()
    session.sign_out()

    assert len(states) == 2
    assert session.is_authenticated is False


def test_user_email_is_validated():
    with pytest.raises(ValueError):
        User(id="1", email="not-an-email")
