"""
StackIt Backend — Tag Route Handlers
======================================
"""

from typing import List

from fastapi import APIRouter, Query

from stackit.schemas.common import SuggestedTagsResponse
from stackit.services.tags import MAX_TAGS, normalize_tags, suggestions_for

router = APIRouter(prefix="/api/tags", tags=["Tags"])


@router.get(
    "/suggested",
    response_model=SuggestedTagsResponse,
    summary="Suggested tags for the ask form",
    description="Pass the tags already chosen as repeated `selected` params to hide them.",
)
async def suggested_tags(
    selected: List[str] = Query(default=[]),
) -> SuggestedTagsResponse:
    return SuggestedTagsResponse(
        tags=suggestions_for(normalize_tags(selected)),
        max_tags=MAX_TAGS,
    )
