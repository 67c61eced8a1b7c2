from typing import Any
from uuid import UUID

import structlog
from pymongo import DESCENDING, ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError

from synopsis.core.core import Service
from synopsis.core.modules.summary.models import SharedSummary, Summary, SummaryUpdate
from synopsis.core.modules.summary.query_builder import build_search_query, is_paginated, parse_sort
from synopsis.core.modules.summary.validators import clean_tags, validate_note, validate_summary
from synopsis.core.pagination import PageResult, count_pages
from synopsis.errors import ConflictError, NotFoundError
from synopsis.utils import generate_slug

logger = structlog.get_logger(__name__)


class SummaryService(Service):
    """Persists summaries and answers list, search and share lookups."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("summaries")

    async def on_start(self) -> None:
        """Create indexes for sorting and slug lookup."""
        await self._collection.create_index([("created_at", DESCENDING)])
        # Only string slugs take part in uniqueness; unshared summaries store null
        await self._collection.create_index(
            [("slug", 1)], unique=True, partialFilterExpression={"slug": {"$type": "string"}}
        )

    async def create_summary(self, owner_id: UUID, note: str, summary: str, tags: list[str] | None = None) -> Summary:
        """Validate and store a new summary. New summaries are unstarred and unshared."""
        record = Summary(
            note=validate_note(note),
            summary=validate_summary(summary),
            tags=clean_tags(tags or []),
            owner_id=owner_id,
        )
        await self._collection.insert_one(record.to_mongo())
        logger.info("summary_created", summary_id=record.id, owner_id=owner_id, tags=len(record.tags))
        return record

    async def get_summary(self, summary_id: UUID) -> Summary:
        doc = await self._collection.find_one({"_id": summary_id})
        if doc is None:
            raise NotFoundError("Summary not found")
        return Summary.model_validate(doc)

    async def list_summaries(
        self,
        q: str | None = None,
        page: int = 0,
        limit: int = 0,
        sort: str | None = None,
    ) -> list[Summary] | PageResult[Summary]:
        """List summaries matching `q`, sorted by `sort`.

        Args:
            q: Case-insensitive substring searched in note, summary and tags
            page: 1-based page number
            limit: Page size
            sort: Field name with optional '-' prefix, newest first by default

        Returns:
            A PageResult when both page and limit are positive, otherwise the full ordered list
        """
        query = build_search_query(q)
        sort_spec = parse_sort(sort)

        if not is_paginated(page, limit):
            cursor = self._collection.find(query).sort(sort_spec)
            items = [Summary.model_validate(doc) for doc in await cursor.to_list()]
            logger.debug("list_summaries", q=q, sort=sort_spec, returned=len(items))
            return items

        total = await self._collection.count_documents(query)
        cursor = self._collection.find(query).sort(sort_spec).skip((page - 1) * limit).limit(limit)
        items = [Summary.model_validate(doc) for doc in await cursor.to_list()]

        logger.debug(
            "list_summaries",
            q=q,
            sort=sort_spec,
            page=page,
            limit=limit,
            total=total,
            returned=len(items),
        )
        return PageResult(items=items, page=page, pages=count_pages(total, limit), total=total)

    async def update_summary(self, summary_id: UUID, update: SummaryUpdate) -> Summary:
        """Apply a partial update. Only the provided fields are written."""
        update_doc: dict[str, Any] = {}
        if update.note is not None:
            update_doc["note"] = validate_note(update.note)
        if update.summary is not None:
            update_doc["summary"] = validate_summary(update.summary)
        if update.tags is not None:
            update_doc["tags"] = clean_tags(update.tags)
        if update.starred is not None:
            update_doc["starred"] = update.starred

        if not update_doc:
            return await self.get_summary(summary_id)

        doc = await self._collection.find_one_and_update(
            {"_id": summary_id}, {"$set": update_doc}, return_document=ReturnDocument.AFTER
        )
        if doc is None:
            raise NotFoundError("Summary not found")

        logger.info("summary_updated", summary_id=summary_id, fields=sorted(update_doc))
        return Summary.model_validate(doc)

    async def delete_summary(self, summary_id: UUID) -> None:
        result = await self._collection.delete_one({"_id": summary_id})
        if result.deleted_count == 0:
            raise NotFoundError("Summary not found")
        logger.info("summary_deleted", summary_id=summary_id)

    async def set_starred(self, summary_id: UUID, starred: bool | None = None) -> Summary:
        """Set the starred flag, or flip it when `starred` is None."""
        update: dict[str, Any] | list[dict[str, Any]]
        if starred is None:
            # Pipeline update flips the stored value in a single atomic write
            update = [{"$set": {"starred": {"$not": ["$starred"]}}}]
        else:
            update = {"$set": {"starred": starred}}

        doc = await self._collection.find_one_and_update(
            {"_id": summary_id}, update, return_document=ReturnDocument.AFTER
        )
        if doc is None:
            raise NotFoundError("Summary not found")
        return Summary.model_validate(doc)

    async def share_summary(self, summary_id: UUID) -> str:
        """Assign a fresh public slug, replacing any previous one.

        Raises:
            NotFoundError: If the summary does not exist
            ConflictError: If the generated slug already belongs to another summary
        """
        slug = generate_slug()
        try:
            doc = await self._collection.find_one_and_update(
                {"_id": summary_id}, {"$set": {"slug": slug}}, return_document=ReturnDocument.AFTER
            )
        except DuplicateKeyError as e:
            logger.warning("slug_collision", summary_id=summary_id)
            raise ConflictError("Could not allocate a share link, please retry") from e

        if doc is None:
            raise NotFoundError("Summary not found")

        logger.info("summary_shared", summary_id=summary_id)
        return slug

    async def get_shared_summary(self, slug: str) -> SharedSummary:
        doc = await self._collection.find_one({"slug": slug})
        if doc is None:
            raise NotFoundError("Shared summary not found")
        return SharedSummary.from_domain(Summary.model_validate(doc))
