from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from src.task_tracker.task_tracker.auth.middleware import bearer_token
from src.task_tracker.task_tracker.auth.tokens import TokenService
from src.task_tracker.task_tracker.core.enums import Role
from src.task_tracker.task_tracker.core.exceptions import AuthenticationError

from tests.fakes import ADMIN, DEV

SECRET = "test-secret-key-for-signing-tokens-0123456789"


def test_issue_and_verify_roundtrip_keeps_identity(tokens):
    principal = tokens.verify(tokens.issue(DEV))

    assert principal == DEV
    assert principal.role == Role.DEVELOPER


def test_expired_token_is_rejected():
    two_hours_ago = datetime.now(timezone.utc) - timedelta(hours=2)
    issuer = TokenService(SECRET, ttl_minutes=60, clock=lambda: two_hours_ago)

    with pytest.raises(AuthenticationError, match="Invalid token!"):
        TokenService(SECRET).verify(issuer.issue(DEV))


def test_token_signed_with_another_secret_is_rejected(tokens):
    foreign = TokenService("another-secret-key-that-is-long-enough-000").issue(DEV)

    with pytest.raises(AuthenticationError):
        tokens.verify(foreign)


def test_tampered_token_is_rejected(tokens):
    head, _, sig = tokens.issue(DEV).split(".")
    _, other_body, _ = tokens.issue(ADMIN).split(".")

    with pytest.raises(AuthenticationError):
        tokens.verify(".".join([head, other_body, sig]))


def test_token_with_unknown_role_is_rejected(tokens):
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"email": "x@x.com", "role": "superuser", "iat": now, "exp": now + timedelta(minutes=5)},
        SECRET,
        algorithm="HS256",
    )

    with pytest.raises(AuthenticationError):
        tokens.verify(token)


def test_token_without_expiry_is_rejected(tokens):
    token = jwt.encode({"email": "x@x.com", "role": "admin"}, SECRET, algorithm="HS256")

    with pytest.raises(AuthenticationError):
        tokens.verify(token)


def test_garbage_is_rejected(tokens):
    with pytest.raises(AuthenticationError):
        tokens.verify("not-a-token")


def test_empty_secret_is_refused():
    with pytest.raises(ValueError):
        TokenService("")


@pytest.mark.parametrize(
    "header,expected",
    [
        ("Bearer abc.def.ghi", "abc.def.ghi"),
        ("  Bearer   tok  ", "tok"),
        ("Bearer", None),
        ("", None),
        (None, None),
    ],
)
def test_bearer_token(header, expected):
    assert bearer_token(header) == expected
