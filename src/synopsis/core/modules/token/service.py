from datetime import timedelta
from functools import cached_property
from uuid import UUID

import structlog
from itsdangerous import BadData, URLSafeTimedSerializer

from synopsis.core.core import Service
from synopsis.core.modules.token.models import AuthToken, TokenClaims
from synopsis.core.modules.user.models import User
from synopsis.errors import AuthenticationError
from synopsis.utils import now

logger = structlog.get_logger(__name__)

TOKEN_SALT = "synopsis.auth"


class TokenCodec:
    """Signs and verifies self-contained, time-limited bearer tokens.

    The payload is ``{"id", "email"}``; the serializer appends the issue
    timestamp and signs the whole value with the server secret, so a token
    is valid only while ``now < issued_at + ttl`` and the signature matches.
    """

    def __init__(self, secret_key: str, ttl: timedelta) -> None:
        self._serializer = URLSafeTimedSerializer(secret_key, salt=TOKEN_SALT)
        self._ttl = ttl

    def issue(self, user_id: UUID, email: str) -> AuthToken:
        return AuthToken(self._serializer.dumps({"id": str(user_id), "email": email}))

    def verify(self, token: str) -> TokenClaims:
        if not token:
            raise AuthenticationError("Unauthorized")

        try:
            payload, issued_at = self._serializer.loads(
                token, max_age=int(self._ttl.total_seconds()), return_timestamp=True
            )
            claims = TokenClaims(
                id=UUID(payload["id"]),
                email=payload["email"],
                issued_at=issued_at,
                expires_at=issued_at + self._ttl,
            )
        except (BadData, KeyError, TypeError, ValueError) as e:
            raise AuthenticationError("Invalid token") from e

        # max_age still accepts a token whose age equals the TTL
        if now() >= claims.expires_at:
            raise AuthenticationError("Invalid token")
        return claims


class TokenService(Service):
    """Issues and verifies bearer tokens. Stateless: nothing is stored, nothing can be revoked."""

    @cached_property
    def codec(self) -> TokenCodec:
        config = self.core.config
        return TokenCodec(config.token_secret_key, timedelta(minutes=config.token_ttl_minutes))

    def issue(self, user: User) -> AuthToken:
        token = self.codec.issue(user.id, user.email)
        logger.debug("token_issued", user_id=user.id)
        return token

    def verify(self, token: str) -> TokenClaims:
        return self.codec.verify(token)
