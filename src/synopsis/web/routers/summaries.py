from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Body, Query
from pydantic import BaseModel, Field

from synopsis.core.modules.summary.models import Summary, SummaryUpdate
from synopsis.core.modules.summary.query_builder import MAX_PAGE, MAX_PAGE_SIZE
from synopsis.core.modules.summary.validators import MAX_NOTE_LENGTH, MAX_SUMMARY_LENGTH, MAX_TAGS
from synopsis.core.pagination import PageResult
from synopsis.web.deps import AppDep, CurrentUserDep
from synopsis.web.openapi import ErrorResponse

router: APIRouter = APIRouter(tags=["summaries"])


class CreateSummaryRequest(BaseModel):
    """Request to save a note and its summary."""

    note: str = Field(..., min_length=1, max_length=MAX_NOTE_LENGTH, description="Original text")
    summary: str = Field(..., min_length=1, max_length=MAX_SUMMARY_LENGTH, description="Generated or edited summary")
    tags: list[str] = Field(
        default_factory=list,
        max_length=MAX_TAGS,
        description="Tags; whitespace is trimmed and blank entries are dropped",
    )

    model_config = {
        "json_schema_extra": {
            "examples": [{"note": "hello world", "summary": "hello", "tags": ["t1"]}],
        }
    }


class UpdateSummaryRequest(BaseModel):
    """Partial update. Omitted fields are left unchanged."""

    note: str | None = Field(None, min_length=1, max_length=MAX_NOTE_LENGTH)
    summary: str | None = Field(None, min_length=1, max_length=MAX_SUMMARY_LENGTH)
    tags: list[str] | None = Field(None, max_length=MAX_TAGS)
    starred: bool | None = None

    def to_update(self) -> SummaryUpdate:
        return SummaryUpdate(note=self.note, summary=self.summary, tags=self.tags, starred=self.starred)


class StarRequest(BaseModel):
    """Explicit star value. Send no body (or null) to toggle."""

    starred: bool | None = None


class ShareResponse(BaseModel):
    slug: str = Field(..., description="Public identifier, readable at /s/{slug}")


class MessageResponse(BaseModel):
    message: str


@router.get(
    "/summaries",
    summary="List summaries",
    description="""List saved summaries, newest first.

**Search:** `q` matches case-insensitively as a substring of the note, the summary, or any tag.

**Pagination:** when both `page` and `limit` are positive the response is
`{items, page, pages, total}`; otherwise it is a plain array of every match.

**Sorting:** `sort` is a single field with optional `-` prefix for descending:
`createdAt`, `note`, `summary`, `starred`. Default `-createdAt`.""",
    operation_id="listSummaries",
    responses={
        200: {"description": "Array of summaries, or a page when page and limit are given"},
        400: {"model": ErrorResponse, "description": "Unsupported sort field or page out of range"},
    },
)
async def list_summaries(
    app: AppDep,
    q: Annotated[str | None, Query(description="Substring to search for")] = None,
    page: Annotated[int, Query(le=MAX_PAGE, description="1-based page number, 0 disables pagination")] = 0,
    limit: Annotated[int, Query(le=MAX_PAGE_SIZE, description="Page size, 0 disables pagination")] = 0,
    sort: Annotated[str | None, Query(description="Sort field, '-' prefix for descending")] = None,
) -> list[Summary] | PageResult[Summary]:
    return await app.list_summaries(q, page, limit, sort)


@router.post(
    "/summaries",
    summary="Save summary",
    description="Save a note with its summary. New summaries are unstarred and not shared.",
    operation_id="createSummary",
    status_code=201,
    responses={
        201: {"description": "Summary created"},
        400: {"model": ErrorResponse, "description": "Validation failed"},
        401: {"model": ErrorResponse, "description": "Missing, invalid or expired token"},
    },
)
async def create_summary(request: CreateSummaryRequest, app: AppDep, current_user: CurrentUserDep) -> Summary:
    return await app.create_summary(current_user, request.note, request.summary, request.tags)


@router.put(
    "/summaries/{summary_id}",
    summary="Update summary",
    description="Update any subset of note, summary, tags and starred.",
    operation_id="updateSummary",
    responses={
        200: {"description": "Updated summary"},
        400: {"model": ErrorResponse, "description": "Validation failed"},
        401: {"model": ErrorResponse, "description": "Missing, invalid or expired token"},
        404: {"model": ErrorResponse, "description": "Summary not found"},
    },
)
async def update_summary(
    summary_id: UUID, request: UpdateSummaryRequest, app: AppDep, current_user: CurrentUserDep
) -> Summary:
    return await app.update_summary(current_user, summary_id, request.to_update())


@router.delete(
    "/summaries/{summary_id}",
    summary="Delete summary",
    operation_id="deleteSummary",
    responses={
        200: {"description": "Summary deleted"},
        401: {"model": ErrorResponse, "description": "Missing, invalid or expired token"},
        404: {"model": ErrorResponse, "description": "Summary not found"},
    },
)
async def delete_summary(summary_id: UUID, app: AppDep, current_user: CurrentUserDep) -> MessageResponse:
    await app.delete_summary(current_user, summary_id)
    return MessageResponse(message="Summary deleted successfully")


@router.patch(
    "/summaries/{summary_id}/star",
    summary="Star or unstar summary",
    description="Set `starred` explicitly, or omit it to toggle the current value.",
    operation_id="starSummary",
    responses={
        200: {"description": "Summary with the new starred value"},
        404: {"model": ErrorResponse, "description": "Summary not found"},
    },
)
async def star_summary(
    summary_id: UUID, app: AppDep, request: Annotated[StarRequest | None, Body()] = None
) -> Summary:
    starred = request.starred if request is not None else None
    return await app.set_starred(summary_id, starred)


@router.post(
    "/summaries/{summary_id}/share",
    summary="Share summary",
    description="Generate a new public slug. A previously issued slug for this summary stops working.",
    operation_id="shareSummary",
    responses={
        200: {"description": "New slug"},
        404: {"model": ErrorResponse, "description": "Summary not found"},
        409: {"model": ErrorResponse, "description": "Slug collision, retry"},
    },
)
async def share_summary(summary_id: UUID, app: AppDep) -> ShareResponse:
    return ShareResponse(slug=await app.share_summary(summary_id))
