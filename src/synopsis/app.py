from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from uuid import UUID

import structlog

from synopsis.config import Config
from synopsis.core.core import Core
from synopsis.core.modules.summary.models import SharedSummary, Summary, SummaryUpdate
from synopsis.core.modules.token.models import AuthToken, TokenClaims
from synopsis.core.modules.user.models import UserView
from synopsis.core.pagination import PageResult

logger = structlog.get_logger(__name__)


class App:
    """Facade for all application operations, checks identity before delegating to Core."""

    def __init__(self, config: Config) -> None:
        self._core = Core(config)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    # === Auth ===
    def authenticate(self, auth_token: AuthToken) -> TokenClaims:
        """Verify a bearer token and return the identity it carries."""
        return self._core.services.token.verify(auth_token)

    async def register(self, email: str, password: str) -> tuple[AuthToken, UserView]:
        """Create an account and sign the user in."""
        user = await self._core.services.user.create_user(email, password)
        return self._core.services.token.issue(user), UserView.from_domain(user)

    async def login(self, email: str, password: str) -> tuple[AuthToken, UserView]:
        """Check credentials and issue a new token."""
        user = await self._core.services.user.authenticate(email, password)
        return self._core.services.token.issue(user), UserView.from_domain(user)

    # === Summaries ===
    async def list_summaries(
        self, q: str | None = None, page: int = 0, limit: int = 0, sort: str | None = None
    ) -> list[Summary] | PageResult[Summary]:
        """List summaries, paginated when both page and limit are positive (public)."""
        return await self._core.services.summary.list_summaries(q, page, limit, sort)

    async def create_summary(self, current_user: TokenClaims, note: str, summary: str, tags: list[str]) -> Summary:
        """Save a summary owned by the current user."""
        return await self._core.services.summary.create_summary(current_user.id, note, summary, tags)

    async def update_summary(self, current_user: TokenClaims, summary_id: UUID, update: SummaryUpdate) -> Summary:
        """Partially update a summary (authenticated)."""
        logger.debug("update_summary", user_id=current_user.id, summary_id=summary_id)
        return await self._core.services.summary.update_summary(summary_id, update)

    async def delete_summary(self, current_user: TokenClaims, summary_id: UUID) -> None:
        """Delete a summary (authenticated)."""
        logger.debug("delete_summary", user_id=current_user.id, summary_id=summary_id)
        await self._core.services.summary.delete_summary(summary_id)

    async def set_starred(self, summary_id: UUID, starred: bool | None) -> Summary:
        """Set or toggle the star flag (public)."""
        return await self._core.services.summary.set_starred(summary_id, starred)

    async def share_summary(self, summary_id: UUID) -> str:
        """Create a new public slug for a summary (public)."""
        return await self._core.services.summary.share_summary(summary_id)

    async def get_shared_summary(self, slug: str) -> SharedSummary:
        """Read a shared summary by slug (public)."""
        return await self._core.services.summary.get_shared_summary(slug)
