"""
StackIt Backend — Question Route Handlers
===========================================

What:  Listing, asking, editing, detail, views, votes and answers-of-a-question.
Who:   Called by the listing, ask-question and question-detail pages.
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Header, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from stackit.database import get_db_session
from stackit.dependencies import get_optional_identity, require_identity
from stackit.schemas.answer import AnswerCreate, AnswerResponse
from stackit.schemas.common import ErrorResponse
from stackit.schemas.question import (
    QuestionCreate,
    QuestionListResponse,
    QuestionResponse,
    QuestionUpdate,
    ViewResponse,
    VoteRequest,
)
from stackit.services.answer_service import answer_service
from stackit.services.identity_base import Identity
from stackit.services.question_service import question_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/questions", tags=["Questions"])


def get_viewer_key(
    request: Request,
    identity: Optional[Identity] = Depends(get_optional_identity),
    x_viewer_key: Optional[str] = Header(default=None, max_length=200),
) -> str:
    """
    Key used to count a view once per viewer: the signed-in user, else a
    client-generated key (one per browser session), else the client address.
    """
    if identity is not None:
        return f"user:{identity.user_id}"
    if x_viewer_key and x_viewer_key.strip():
        return f"key:{x_viewer_key.strip()}"
    client_ip = request.client.host if request.client else "unknown"
    return f"ip:{client_ip}"


@router.get(
    "",
    response_model=QuestionListResponse,
    responses={400: {"description": "Invalid sort or filter", "model": ErrorResponse}},
    summary="List questions",
)
async def list_questions(
    response: Response,
    sort: str = Query(default="newest", description="newest, oldest, votes or answers"),
    filter_by: str = Query(default="all", alias="filter", description="all, answered, unanswered or accepted"),
    tag: Optional[str] = Query(default=None, description="Only questions with this tag"),
    search: Optional[str] = Query(default=None, max_length=200, description="Text to find in title or description"),
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db_session),
) -> QuestionListResponse:
    result = await question_service.list_questions(
        db=db,
        sort=sort,
        filter_by=filter_by,
        tag=tag,
        search=search,
        limit=limit,
        offset=offset,
    )
    response.headers["X-Total-Count"] = str(result.total_count)
    return result


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=QuestionResponse,
    responses={
        400: {"description": "Title or description missing, too many tags", "model": ErrorResponse},
        401: {"description": "Login required", "model": ErrorResponse},
    },
    summary="Ask a question",
)
async def create_question(
    payload: QuestionCreate,
    response: Response,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> QuestionResponse:
    """Creates one question; `Location` points at its detail resource."""
    question = await question_service.create_question(db=db, identity=identity, payload=payload)
    response.headers["Location"] = f"/api/questions/{question.id}"
    return question


@router.get(
    "/{question_id}",
    response_model=QuestionResponse,
    responses={404: {"description": "Question not found", "model": ErrorResponse}},
    summary="Get a question",
)
async def get_question(
    question_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> QuestionResponse:
    return await question_service.get_question(db=db, question_id=question_id)


@router.patch(
    "/{question_id}",
    response_model=QuestionResponse,
    responses={
        400: {"description": "Blank title or description, too many tags", "model": ErrorResponse},
        401: {"description": "Login required", "model": ErrorResponse},
        403: {"description": "Not the author", "model": ErrorResponse},
        404: {"description": "Question not found", "model": ErrorResponse},
    },
    summary="Edit your question",
)
async def update_question(
    question_id: UUID,
    payload: QuestionUpdate,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> QuestionResponse:
    return await question_service.update_question(
        db=db,
        identity=identity,
        question_id=question_id,
        payload=payload,
    )


@router.delete(
    "/{question_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        403: {"description": "Not the author", "model": ErrorResponse},
        404: {"description": "Question not found", "model": ErrorResponse},
    },
    summary="Delete your question",
)
async def delete_question(
    question_id: UUID,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await question_service.delete_question(db=db, identity=identity, question_id=question_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{question_id}/views",
    response_model=ViewResponse,
    responses={404: {"description": "Question not found", "model": ErrorResponse}},
    summary="Register a view",
    description="Counts at most one view per viewer per question.",
)
async def register_view(
    question_id: UUID,
    viewer_key: str = Depends(get_viewer_key),
    db: AsyncSession = Depends(get_db_session),
) -> ViewResponse:
    return await question_service.register_view(db=db, question_id=question_id, viewer_key=viewer_key)


@router.post(
    "/{question_id}/vote",
    response_model=QuestionResponse,
    responses={
        401: {"description": "Login required", "model": ErrorResponse},
        404: {"description": "Question not found", "model": ErrorResponse},
    },
    summary="Vote on a question",
)
async def vote_question(
    question_id: UUID,
    payload: VoteRequest,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> QuestionResponse:
    return await question_service.vote_question(db=db, question_id=question_id, delta=payload.delta)


@router.get(
    "/{question_id}/answers",
    response_model=List[AnswerResponse],
    responses={404: {"description": "Question not found", "model": ErrorResponse}},
    summary="List answers, newest first",
)
async def list_answers(
    question_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> List[AnswerResponse]:
    return await answer_service.list_answers(db=db, question_id=question_id)


@router.post(
    "/{question_id}/answers",
    status_code=status.HTTP_201_CREATED,
    response_model=AnswerResponse,
    responses={
        400: {"description": "Answer required", "model": ErrorResponse},
        401: {"description": "Login required", "model": ErrorResponse},
        404: {"description": "Question not found", "model": ErrorResponse},
    },
    summary="Post an answer",
)
async def create_answer(
    question_id: UUID,
    payload: AnswerCreate,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> AnswerResponse:
    return await answer_service.create_answer(
        db=db,
        identity=identity,
        question_id=question_id,
        payload=payload,
    )
