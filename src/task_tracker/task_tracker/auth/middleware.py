from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import g, request

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError
from .tokens import Principal, TokenService


def bearer_token(header_value: Optional[str]) -> Optional[str]:
    """Return the credential part of an ``Authorization: Bearer <token>`` header."""
    if not header_value:
        return None
    parts = header_value.strip().split(None, 1)
    if len(parts) != 2 or not parts[1].strip():
        return None
    return parts[1].strip()


def current_principal() -> Principal:
    return g.principal


def require_auth(tokens: TokenService, *roles: Role):
    """Guard a view: verify the bearer token, then check the role set.

    With no ``roles`` any authenticated principal is accepted. The verified
    principal is stored on ``flask.g.principal``.
    """
    allowed = frozenset(roles)

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            token = bearer_token(request.headers.get("Authorization"))
            if not token:
                raise AuthenticationError("Login required!")

            principal = tokens.verify(token)

            if allowed and principal.role not in allowed:
                raise AuthorizationError("Forbidden")

            g.principal = principal
            return view(*args, **kwargs)

        return wrapper

    return decorator
