from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

import jwt

from ..core.constants import DEFAULT_TOKEN_TTL_MINUTES
from ..core.enums import Role
from ..core.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"

CLAIM_EMAIL = "email"
CLAIM_NAME = "name"
CLAIM_ROLE = "role"
CLAIM_IAT = "iat"
CLAIM_EXP = "exp"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, as carried by the identity token."""

    email: str
    name: str
    role: Role


class TokenService:
    """Issue and verify signed identity tokens.

    Stateless: the token is the only source of identity until it expires, so
    a role change does not affect tokens already issued.
    """

    def __init__(
        self,
        secret: str,
        *,
        ttl_minutes: int = DEFAULT_TOKEN_TTL_MINUTES,
        clock: Callable[[], datetime] = _utcnow,
    ):
        if not secret:
            raise ValueError("Token secret must not be empty")
        self._secret = secret
        self._ttl = timedelta(minutes=int(ttl_minutes))
        self._clock = clock

    def issue(self, principal: Principal) -> str:
        now = self._clock()
        payload = {
            CLAIM_EMAIL: principal.email,
            CLAIM_NAME: principal.name,
            CLAIM_ROLE: principal.role.value,
            CLAIM_IAT: now,
            CLAIM_EXP: now + self._ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)

    def verify(self, token: str) -> Principal:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[JWT_ALGORITHM],
                options={"require": [CLAIM_EXP, CLAIM_IAT]},
            )
        except jwt.ExpiredSignatureError:
            logger.info("Rejected expired token")
            raise AuthenticationError("Invalid token!")
        except jwt.InvalidTokenError:
            logger.info("Rejected invalid token")
            raise AuthenticationError("Invalid token!")

        try:
            return Principal(
                email=str(payload[CLAIM_EMAIL]),
                name=str(payload.get(CLAIM_NAME) or ""),
                role=Role(payload[CLAIM_ROLE]),
            )
        except (KeyError, ValueError):
            raise AuthenticationError("Invalid token!")
