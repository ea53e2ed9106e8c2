from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt

from ..core.constants import DEFAULT_TOKEN_DAYS
from ..core.exceptions import AuthenticationError

ALGORITHM = "HS256"


class TokenService:
    """Issues and verifies signed bearer tokens (HS256 JWT)."""

    def __init__(
        self,
        secret: str,
        *,
        expire_days: int = DEFAULT_TOKEN_DAYS,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if not secret:
            raise ValueError("JWT secret must not be empty")
        self._secret = secret
        self._expire_days = int(expire_days)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def issue(self, user_id: int) -> str:
        now = self._clock()
        payload = {
            "userId": int(user_id),
            "iat": now,
            "exp": now + timedelta(days=self._expire_days),
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def decode(self, token: str) -> int:
        """Return the user id carried by ``token``."""
        try:
            data = jwt.decode(token, self._secret, algorithms=[ALGORITHM])
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token has expired.")
        except jwt.InvalidTokenError:
            raise AuthenticationError("Invalid token.")

        user_id = data.get("userId")
        if user_id is None:
            raise AuthenticationError("Invalid token.")
        try:
            return int(user_id)
        except (TypeError, ValueError):
            raise AuthenticationError("Invalid token.")
