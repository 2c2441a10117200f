"""Bearer-token authentication.

Tokens are HS256 JWTs carrying the principal's ``userId``. Controllers wrap
their views with ``bearer_required`` and read the verified principal from
``flask.g.principal``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import wraps
from typing import Callable, Optional

import jwt
from flask import g, jsonify, request

from .constants import DEFAULT_TOKEN_TTL_HOURS
from .exceptions import Unauthorized

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


@dataclass(frozen=True)
class Principal:
    """The authenticated identity making a request."""

    user_id: int


class TokenService:
    def __init__(
        self,
        secret: str,
        *,
        ttl_hours: int = DEFAULT_TOKEN_TTL_HOURS,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self._ttl = timedelta(hours=int(ttl_hours))
        self._clock = clock

    def issue(self, user_id: int) -> str:
        now = self._clock()
        payload = {"userId": int(user_id), "iat": now, "exp": now + self._ttl}
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> Principal:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[ALGORITHM])
        except jwt.ExpiredSignatureError:
            logger.warning("Rejected expired token")
            raise Unauthorized("Token is not valid")
        except jwt.InvalidTokenError as e:
            logger.warning("Rejected invalid token: %s", type(e).__name__)
            raise Unauthorized("Token is not valid")

        user_id = payload.get("userId")
        if isinstance(user_id, bool) or not isinstance(user_id, int):
            raise Unauthorized("Token is not valid")
        return Principal(user_id=user_id)


def extract_bearer_token(header_value: Optional[str]) -> str:
    if not header_value:
        raise Unauthorized("No token, authorization denied")
    scheme, _, token = header_value.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthorized("Token is not valid")
    return token.strip()


def make_bearer_required(tokens: TokenService):
    """Build the view decorator that gates a route behind a bearer token."""

    def bearer_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                token = extract_bearer_token(request.headers.get("Authorization"))
                g.principal = tokens.verify(token)
            except Unauthorized as e:
                response = jsonify({"message": str(e)})
                response.headers["WWW-Authenticate"] = "Bearer"
                return response, 401
            return view(*args, **kwargs)

        return wrapper

    return bearer_required


def current_owner_id() -> int:
    return g.principal.user_id
