"""
StackIt Backend — Answer Route Handlers
=========================================

What:  Editing, voting on, accepting and deleting individual answers.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from stackit.database import get_db_session
from stackit.dependencies import require_identity
from stackit.schemas.answer import AnswerResponse, AnswerUpdate
from stackit.schemas.common import ErrorResponse
from stackit.schemas.question import VoteRequest
from stackit.services.answer_service import answer_service
from stackit.services.identity_base import Identity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/answers", tags=["Answers"])


@router.post(
    "/{answer_id}/vote",
    response_model=AnswerResponse,
    responses={
        401: {"description": "Login required", "model": ErrorResponse},
        404: {"description": "Answer not found", "model": ErrorResponse},
    },
    summary="Vote on an answer",
)
async def vote_answer(
    answer_id: UUID,
    payload: VoteRequest,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> AnswerResponse:
    return await answer_service.vote_answer(db=db, answer_id=answer_id, delta=payload.delta)


@router.post(
    "/{answer_id}/accept",
    response_model=AnswerResponse,
    responses={
        401: {"description": "Login required", "model": ErrorResponse},
        403: {"description": "Only question owner can accept answers", "model": ErrorResponse},
        404: {"description": "Answer not found", "model": ErrorResponse},
    },
    summary="Accept an answer",
    description="Clears any previous acceptance on the question and accepts this answer in one transaction.",
)
async def accept_answer(
    answer_id: UUID,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> AnswerResponse:
    return await answer_service.accept_answer(db=db, identity=identity, answer_id=answer_id)


@router.patch(
    "/{answer_id}",
    response_model=AnswerResponse,
    responses={
        400: {"description": "Answer required", "model": ErrorResponse},
        401: {"description": "Login required", "model": ErrorResponse},
        403: {"description": "Not the author", "model": ErrorResponse},
        404: {"description": "Answer not found", "model": ErrorResponse},
    },
    summary="Edit your answer",
)
async def update_answer(
    answer_id: UUID,
    payload: AnswerUpdate,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> AnswerResponse:
    return await answer_service.update_answer(
        db=db,
        identity=identity,
        answer_id=answer_id,
        payload=payload,
    )


@router.delete(
    "/{answer_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        403: {"description": "Not the author", "model": ErrorResponse},
        404: {"description": "Answer not found", "model": ErrorResponse},
    },
    summary="Delete your answer",
)
async def delete_answer(
    answer_id: UUID,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await answer_service.delete_answer(db=db, identity=identity, answer_id=answer_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
