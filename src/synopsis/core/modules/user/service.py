from typing import Any

import bcrypt
import structlog
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError

from synopsis.core.core import Service
from synopsis.core.modules.user.models import User
from synopsis.core.modules.user.validators import MAX_PASSWORD_BYTES, validate_password
from synopsis.errors import AuthenticationError, ConflictError

logger = structlog.get_logger(__name__)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    """Verify a password against its bcrypt hash. Input bcrypt cannot hash never matches."""
    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        return False
    return bcrypt.checkpw(encoded, password_hash.encode("utf-8"))


class UserService(Service):
    """Stores user credentials. Users are created on registration and never modified."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("users")

    async def on_start(self) -> None:
        """Create the unique email index."""
        await self._collection.create_index([("email", 1)], unique=True)

    async def find_by_email(self, email: str) -> User | None:
        doc = await self._collection.find_one({"email": email})
        return None if doc is None else User.model_validate(doc)

    async def create_user(self, email: str, password: str) -> User:
        """Create user with hashed password."""
        validate_password(password)
        if await self.find_by_email(email) is not None:
            raise ConflictError("Email already registered")

        user = User(email=email, password_hash=hash_password(password))
        try:
            await self._collection.insert_one(user.to_mongo())
        except DuplicateKeyError as e:
            # Concurrent registration of the same email
            raise ConflictError("Email already registered") from e

        logger.info("user_registered", user_id=user.id)
        return user

    async def authenticate(self, email: str, password: str) -> User:
        """Return the user when the password matches, raise AuthenticationError otherwise."""
        user = await self.find_by_email(email)
        if user is None or not check_password(password, user.password_hash):
            logger.info("login_failed")
            raise AuthenticationError("Invalid credentials")
        return user
