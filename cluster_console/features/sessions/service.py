"""
Session token issuance and lookup.
"""
import hashlib
import hmac
from datetime import datetime, timezone
from typing import Optional

import jwt
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from ulid import ULID

from cluster_console.core import config
from cluster_console.features.sessions.models import SessionToken


JWT_ALGORITHM = "HS256"


class TokenService:
    """
    Mints opaque session tokens and binds them to HTTP session keys.

    Tokens are HS256 JWTs whose subject is an HMAC of the seed, so the seed
    (which embeds the identity provider's access token) cannot be read back
    out of a token.
    """

    def __init__(self, db: AsyncSession, secret: Optional[str] = None):
        self.db = db
        self.secret = secret or config.JWT_SECRET

    def to_token(self, seed: str) -> str:
        digest = hmac.new(self.secret.encode(), seed.encode(), hashlib.sha256).hexdigest()
        payload = {"sub": digest, "iat": datetime.now(timezone.utc), "jti": str(ULID())}
        return jwt.encode(payload, self.secret, algorithm=JWT_ALGORITHM)

    def decode(self, token: str) -> dict:
        """
        Verify a token's signature and return its payload.

        Raises:
            jwt.InvalidTokenError: If the token was not issued with this secret
        """
        return jwt.decode(token, self.secret, algorithms=[JWT_ALGORITHM])

    async def set_token(self, session_key: str, token: str) -> None:
        """Bind ``token`` to ``session_key``, replacing any earlier token."""
        record = await self.db.get(SessionToken, session_key)
        if record is None:
            self.db.add(SessionToken(session_key=session_key, token=token))
        else:
            record.token = token
        await self.db.flush()

    async def get_token(self, session_key: str) -> Optional[str]:
        record = await self.db.get(SessionToken, session_key)
        return record.token if record else None

    async def remove_token(self, session_key: str) -> None:
        await self.db.execute(delete(SessionToken).where(SessionToken.session_key == session_key))
        await self.db.flush()
