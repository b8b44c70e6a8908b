import pytest
from jose import jwt

from config import settings
from services.session_token import (
    ACCESS_TOKEN_TYPE,
    create_access_token,
    create_refresh_token,
    decode_access_token,
    decode_refresh_token,
)


def test_access_token_round_trips_claims():
    issued = create_access_token("user-1", email="alice@example.com", username="alice")
    payload = decode_access_token(issued["token"])

    assert payload["sub"] == "user-1"
    assert payload["email"] == "alice@example.com"
    assert payload["username"] == "alice"
    assert issued["expires_at"] == payload["exp"]


def test_token_types_are_not_interchangeable():
    access = create_access_token("user-1")["token"]
    refresh = create_refresh_token("user-1")["token"]

    with pytest.raises(ValueError):
        decode_refresh_token(access)
    with pytest.raises(ValueError):
        decode_access_token(refresh)


def test_refresh_tokens_are_unique_per_issue():
    assert create_refresh_token("user-1")["token"] != create_refresh_token("user-1")["token"]


def test_token_signed_with_another_secret_is_rejected():
    forged = jwt.encode(
        {"sub": "user-1", "type": ACCESS_TOKEN_TYPE},
        "some-other-secret-value-123456",
        algorithm=settings.JWT_ALGORITHM,
    )
    with pytest.raises(ValueError):
        decode_access_token(forged)
