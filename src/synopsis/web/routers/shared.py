from fastapi import APIRouter

from synopsis.core.modules.summary.models import SharedSummary
from synopsis.web.deps import AppDep
from synopsis.web.openapi import ErrorResponse

router = APIRouter(tags=["shared"])


@router.get(
    "/s/{slug}",
    summary="Read shared summary",
    description="Public read-only view of a shared summary. Only note, summary, tags and creation time are returned.",
    operation_id="getSharedSummary",
    responses={
        200: {"description": "Shared summary"},
        404: {"model": ErrorResponse, "description": "No summary has this slug"},
    },
)
async def get_shared_summary(slug: str, app: AppDep) -> SharedSummary:
    return await app.get_shared_summary(slug)
