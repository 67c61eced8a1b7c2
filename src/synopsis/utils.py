import secrets
import string
from datetime import UTC, datetime

SLUG_ALPHABET = string.ascii_letters + string.digits + "_-"
SLUG_LENGTH = 10


def now() -> datetime:
    return datetime.now(UTC)


def generate_slug(length: int = SLUG_LENGTH) -> str:
    """Random URL-safe identifier, not derived from any content."""
    return "".join(secrets.choice(SLUG_ALPHABET) for _ in range(length))
