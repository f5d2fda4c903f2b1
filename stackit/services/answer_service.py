"""
StackIt Backend — Answer Service
==================================

What:  Posting, listing, editing, voting, accepting and deleting answers.
Who:   Called by stackit/routes/answers.py and stackit/routes/questions.py.

Acceptance Flow (POST /api/answers/{id}/accept):
    ┌──────────────────┐    ┌──────────────────┐    ┌──────────────────────┐
    │ Clear is_accepted│───▶│ Set is_accepted  │───▶│ Set question's       │
    │ on all answers   │    │ on chosen answer │    │ has_accepted_answer  │
    └──────────────────┘    └──────────────────┘    └──────────────────────┘

    All three statements run in the request's transaction (see
    get_db_session), so readers never observe a question whose previous
    acceptance was cleared but whose new one was not yet set; any failure
    rolls back every step. The partial unique index on
    answers(question_id) WHERE is_accepted rejects a second accepted answer
    outright.
"""

import logging
from typing import List
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from stackit.exceptions import (
    DatabaseError,
    NotFoundError,
    PermissionDeniedError,
    StackItError,
    ValidationError,
)
from stackit.models.answer import Answer
from stackit.models.question import Question
from stackit.schemas.answer import AnswerCreate, AnswerResponse, AnswerUpdate
from stackit.services.identity_base import Identity
from stackit.services.question_service import question_service

logger = logging.getLogger(__name__)


class AnswerService:

    async def list_answers(self, db: AsyncSession, question_id: UUID) -> List[AnswerResponse]:
        """All answers for a question, newest first."""
        await question_service.get_question_row(db, question_id)
        try:
            result = await db.execute(
                select(Answer)
                .where(Answer.question_id == question_id)
                .order_by(Answer.created_at.desc())
            )
            return [AnswerResponse.model_validate(answer) for answer in result.scalars().all()]
        except Exception as e:
            logger.error("Database error listing answers for %s: %s", question_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve answers. Please try again.",
                context={"question_id": str(question_id)},
            )

    async def create_answer(
        self,
        db: AsyncSession,
        identity: Identity,
        question_id: UUID,
        payload: AnswerCreate,
    ) -> AnswerResponse:
        """
        Insert one answer tied to the question, owned by the caller.

        Raises:
            ValidationError: Blank content (→ 400 "Answer required")
            NotFoundError: Question does not exist (→ 404)
        """
        if not payload.content.strip():
            raise ValidationError(message="Answer required", field="content")

        await question_service.get_question_row(db, question_id)

        try:
            answer = Answer(
                question_id=question_id,
                content=payload.content,
                author_name=identity.display_name,
                user_id=identity.user_id,
            )
            db.add(answer)
            await db.flush()
            logger.info("Answer %s posted on question %s by %s", answer.id, question_id, identity.user_id)
            return AnswerResponse.model_validate(answer)
        except Exception as e:
            logger.error("Database error posting answer on %s: %s", question_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not post your answer. Please try again.",
                context={"question_id": str(question_id)},
            )

    async def update_answer(
        self,
        db: AsyncSession,
        identity: Identity,
        answer_id: UUID,
        payload: AnswerUpdate,
    ) -> AnswerResponse:
        """
        Replace the content of the caller's own answer. Votes and acceptance
        are untouched.

        Raises:
            NotFoundError: No such answer (→ 404)
            PermissionDeniedError: Caller did not write it (→ 403)
            ValidationError: Blank content (→ 400 "Answer required")
        """
        answer = await self._get_answer_row(db, answer_id)
        if answer.user_id is None or answer.user_id != identity.user_id:
            raise PermissionDeniedError(message="Only the author can edit this answer")
        if not payload.content.strip():
            raise ValidationError(message="Answer required", field="content")

        try:
            answer.content = payload.content
            await db.flush()
            await db.refresh(answer)
            logger.info("Answer %s edited by %s", answer_id, identity.user_id)
            return AnswerResponse.model_validate(answer)
        except Exception as e:
            logger.error("Database error editing answer %s: %s", answer_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save your changes. Please try again.",
                context={"answer_id": str(answer_id)},
            )

    async def vote_answer(self, db: AsyncSession, answer_id: UUID, delta: int) -> AnswerResponse:
        """Apply +1 or -1 with one `votes = votes + delta` UPDATE."""
        answer = await self._get_answer_row(db, answer_id)
        try:
            await db.execute(
                update(Answer)
                .where(Answer.id == answer_id)
                .values(votes=Answer.votes + delta)
                .execution_options(synchronize_session=False)
            )
            await db.refresh(answer)
            logger.info("Answer %s voted %+d (now %d)", answer_id, delta, answer.votes)
            return AnswerResponse.model_validate(answer)
        except Exception as e:
            logger.error("Database error voting on answer %s: %s", answer_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not record your vote. Please try again.",
                context={"answer_id": str(answer_id)},
            )

    async def accept_answer(self, db: AsyncSession, identity: Identity, answer_id: UUID) -> AnswerResponse:
        """
        Mark `answer_id` as the accepted answer of its question.

        Only the question's owner may accept. Accepting the already-accepted
        answer is a no-op that returns it unchanged.

        Raises:
            NotFoundError: Answer (or its question) does not exist (→ 404)
            PermissionDeniedError: Caller does not own the question (→ 403)
        """
        answer = await self._get_answer_row(db, answer_id)
        question = await question_service.get_question_row(db, answer.question_id)

        if question.user_id is None or question.user_id != identity.user_id:
            raise PermissionDeniedError(message="Only question owner can accept answers")

        try:
            await db.execute(
                update(Answer)
                .where(Answer.question_id == question.id, Answer.is_accepted.is_(True))
                .values(is_accepted=False)
                .execution_options(synchronize_session=False)
            )
            await db.execute(
                update(Answer)
                .where(Answer.id == answer_id)
                .values(is_accepted=True)
                .execution_options(synchronize_session=False)
            )
            await db.execute(
                update(Question)
                .where(Question.id == question.id)
                .values(has_accepted_answer=True)
                .execution_options(synchronize_session=False)
            )
            await db.refresh(answer)
            await db.refresh(question)
            logger.info("Answer %s accepted on question %s", answer_id, question.id)
            return AnswerResponse.model_validate(answer)
        except Exception as e:
            logger.error("Database error accepting answer %s: %s", answer_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not accept the answer. Please try again.",
                context={"answer_id": str(answer_id)},
            )

    async def delete_answer(self, db: AsyncSession, identity: Identity, answer_id: UUID) -> None:
        """
        Remove an answer. Owner only. Removing the accepted answer clears the
        question's has_accepted_answer flag in the same transaction.
        """
        answer = await self._get_answer_row(db, answer_id)
        if answer.user_id != identity.user_id:
            raise PermissionDeniedError(message="Only the author can delete this answer")

        try:
            was_accepted = answer.is_accepted
            question_id = answer.question_id
            await db.delete(answer)
            if was_accepted:
                await db.execute(
                    update(Question)
                    .where(Question.id == question_id)
                    .values(has_accepted_answer=False)
                    .execution_options(synchronize_session=False)
                )
            await db.flush()
            logger.info("Answer %s deleted by %s (was_accepted=%s)", answer_id, identity.user_id, was_accepted)
        except StackItError:
            raise
        except Exception as e:
            logger.error("Database error deleting answer %s: %s", answer_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the answer. Please try again.",
                context={"answer_id": str(answer_id)},
            )

    async def _get_answer_row(self, db: AsyncSession, answer_id: UUID) -> Answer:
        answer = await db.get(Answer, answer_id)
        if answer is None:
            raise NotFoundError(resource="answer", resource_id=str(answer_id))
        return answer


answer_service = AnswerService()
