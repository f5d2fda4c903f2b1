"""
StackIt Backend — Question Service
====================================

What:  Listing, submission, editing, detail, view counting, voting and deletion
       of questions.
Why:   Keeps every question rule out of the HTTP layer so it can be tested
       against a mock or SQLite session.
Who:   Called by stackit/routes/questions.py.

Counter Semantics:
    votes and views are never read, modified and written back. Each change is
    one `UPDATE questions SET x = x + n` statement, so concurrent voters and
    viewers cannot overwrite each other's increments.

    Views are additionally de-duplicated per viewer: registering a view inserts
    a (question_id, viewer_key) row with ON CONFLICT DO NOTHING, and only an
    insert that actually created the row bumps the counter.
"""

import logging
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from stackit.exceptions import (
    DatabaseError,
    NotFoundError,
    PermissionDeniedError,
    StackItError,
    ValidationError,
)
from stackit.models.answer import Answer
from stackit.models.question import TITLE_MAX_LENGTH, Question
from stackit.models.question_view import QuestionView
from stackit.schemas.question import (
    QuestionCreate,
    QuestionListItem,
    QuestionListResponse,
    QuestionResponse,
    QuestionUpdate,
    ViewResponse,
)
from stackit.services.identity_base import Identity
from stackit.services.tags import MAX_TAGS, dedupe_tags

logger = logging.getLogger(__name__)

SORT_OPTIONS = ("newest", "oldest", "votes", "answers")
FILTER_OPTIONS = ("all", "answered", "unanswered", "accepted")
PREVIEW_LENGTH = 200


def _answer_count():
    return (
        select(func.count(Answer.id))
        .where(Answer.question_id == Question.id)
        .correlate(Question)
        .scalar_subquery()
    )


def _answer_count_column():
    return _answer_count().label("answer_count")


def _clean_title(raw: str) -> str:
    title = raw.strip()
    if not title:
        raise ValidationError(message="Title required", field="title")
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(
            message=f"Title must be {TITLE_MAX_LENGTH} characters or fewer",
            field="title",
        )
    return title


def _check_description(description: str) -> str:
    if not description.strip():
        raise ValidationError(message="Description required", field="description")
    return description


def _clean_tags(raw: List[str]) -> List[str]:
    tags = dedupe_tags(raw)
    if len(tags) > MAX_TAGS:
        raise ValidationError(
            message=f"Add up to {MAX_TAGS} tags to help categorize your question",
            field="tags",
            context={"max_tags": MAX_TAGS, "received": len(tags)},
        )
    return tags


def _has_tag_clause(dialect_name: str, tag: str):
    """Membership test for one tag in the tags column, per backend."""
    if dialect_name == "postgresql":
        return Question.tags.any(tag)
    # SQLite stores the list as JSON
    tag_values = func.json_each(Question.tags).table_valued("value")
    return select(tag_values.c.value).where(tag_values.c.value == tag).exists()


def _to_response(question: Question, answer_count: int) -> QuestionResponse:
    return QuestionResponse(
        id=question.id,
        title=question.title,
        description=question.description,
        tags=list(question.tags or []),
        author_name=question.author_name,
        user_id=question.user_id,
        created_at=question.created_at,
        updated_at=question.updated_at,
        votes=question.votes,
        views=question.views,
        has_accepted_answer=question.has_accepted_answer,
        answer_count=answer_count or 0,
    )


class QuestionService:
    """
    Responsibilities:
        - list_questions(): sorted, filtered, paginated listing
        - create_question(): validated submission owned by the caller
        - update_question(): owner-only partial edit
        - get_question(): detail with answer count
        - register_view(): idempotent per-viewer view counting
        - vote_question(): atomic +1 / -1
        - delete_question(): owner-only removal
    """

    # ── Listing ───────────────────────────────────────────────────────────

    async def list_questions(
        self,
        db: AsyncSession,
        sort: str = "newest",
        filter_by: str = "all",
        tag: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> QuestionListResponse:
        """
        List questions with one ordering and one answered-state filter applied
        by the database.

        Args:
            sort: 'newest', 'oldest', 'votes' or 'answers' (ties newest first)
            filter_by: 'all', 'answered' (at least one answer), 'unanswered'
                (no answers) or 'accepted' (has an accepted answer)
            tag: Only questions carrying this exact tag
            search: Case-insensitive substring of title or description

        Raises:
            ValidationError: Unknown sort or filter option (→ 400)
            DatabaseError: Query execution failed (→ 500)
        """
        if sort not in SORT_OPTIONS:
            raise ValidationError(
                message=f"Invalid sort '{sort}'. Must be one of: {', '.join(SORT_OPTIONS)}",
                field="sort",
            )
        if filter_by not in FILTER_OPTIONS:
            raise ValidationError(
                message=f"Invalid filter '{filter_by}'. Must be one of: {', '.join(FILTER_OPTIONS)}",
                field="filter",
            )

        try:
            conditions = []
            if filter_by == "answered":
                conditions.append(_answer_count() > 0)
            elif filter_by == "unanswered":
                conditions.append(_answer_count() == 0)
            elif filter_by == "accepted":
                conditions.append(Question.has_accepted_answer.is_(True))

            if tag and tag.strip():
                dialect_name = db.get_bind().dialect.name
                conditions.append(_has_tag_clause(dialect_name, tag.strip()))

            if search and search.strip():
                # autoescape: '%' and '_' typed by the user match literally
                needle = search.strip()
                conditions.append(
                    or_(
                        Question.title.icontains(needle, autoescape=True),
                        Question.description.icontains(needle, autoescape=True),
                    )
                )

            answer_count = _answer_count_column()
            query = select(Question, answer_count)
            if conditions:
                query = query.where(*conditions)

            if sort == "oldest":
                query = query.order_by(Question.created_at.asc())
            elif sort == "votes":
                query = query.order_by(Question.votes.desc(), Question.created_at.desc())
            elif sort == "answers":
                query = query.order_by(answer_count.desc(), Question.created_at.desc())
            else:
                query = query.order_by(Question.created_at.desc())

            # One extra row tells us whether another page exists
            query = query.limit(limit + 1).offset(offset)
            rows: List[Tuple[Question, int]] = list((await db.execute(query)).all())

            count_query = select(func.count(Question.id))
            if conditions:
                count_query = count_query.where(*conditions)
            total_count = (await db.execute(count_query)).scalar() or 0

            has_more = len(rows) > limit
            rows = rows[:limit]

            items = [
                QuestionListItem(
                    id=question.id,
                    title=question.title,
                    description_preview=(question.description or "")[:PREVIEW_LENGTH],
                    tags=list(question.tags or []),
                    author_name=question.author_name,
                    created_at=question.created_at,
                    votes=question.votes,
                    views=question.views,
                    answer_count=answer_count or 0,
                    has_accepted_answer=question.has_accepted_answer,
                )
                for question, answer_count in rows
            ]

            return QuestionListResponse(
                questions=items,
                total_count=total_count,
                limit=limit,
                offset=offset,
                has_more=has_more,
            )

        except StackItError:
            raise
        except Exception as e:
            logger.error("Database error listing questions: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve questions. Please try again.",
                context={"error_type": type(e).__name__},
            )

    # ── Submission ────────────────────────────────────────────────────────

    async def create_question(
        self,
        db: AsyncSession,
        identity: Identity,
        payload: QuestionCreate,
    ) -> QuestionResponse:
        """
        Validate and insert one question owned by the caller.

        Validation order mirrors the ask form: title, then description, then tags.

        Raises:
            ValidationError: Blank or over-long title, blank description,
                more than MAX_TAGS distinct tags (→ 400)
            DatabaseError: Insert failed (→ 500)
        """
        title = _clean_title(payload.title)
        _check_description(payload.description)
        tags = _clean_tags(payload.tags)

        try:
            question = Question(
                title=title,
                description=payload.description,
                tags=tags,
                author_name=identity.display_name,
                user_id=identity.user_id,
            )
            db.add(question)
            await db.flush()
            logger.info("Question %s created by %s (%d tags)", question.id, identity.user_id, len(tags))
            return _to_response(question, 0)

        except Exception as e:
            logger.error("Database error creating question: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not post your question. Please try again.",
                context={"error_type": type(e).__name__},
            )

    # ── Editing ───────────────────────────────────────────────────────────

    async def update_question(
        self,
        db: AsyncSession,
        identity: Identity,
        question_id: UUID,
        payload: QuestionUpdate,
    ) -> QuestionResponse:
        """
        Apply the fields present in `payload` to the caller's own question.

        Each field sent is checked by the same rules as a new question.

        Raises:
            NotFoundError: No such question (→ 404)
            PermissionDeniedError: Caller does not own it (→ 403)
            ValidationError: A sent field breaks the ask-form rules (→ 400)
        """
        question = await self.get_question_row(db, question_id)
        if question.user_id is None or question.user_id != identity.user_id:
            raise PermissionDeniedError(message="Only the author can edit this question")

        changes = payload.model_dump(exclude_unset=True)
        if changes.get("title") is not None:
            changes["title"] = _clean_title(changes["title"])
        elif "title" in changes:
            raise ValidationError(message="Title required", field="title")
        if "description" in changes:
            _check_description(changes["description"] or "")
        if "tags" in changes:
            changes["tags"] = _clean_tags(changes["tags"] or [])

        try:
            for field, value in changes.items():
                setattr(question, field, value)
            await db.flush()
            await db.refresh(question)
            logger.info("Question %s edited by %s: %s", question_id, identity.user_id, sorted(changes))
        except Exception as e:
            logger.error("Database error editing question %s: %s", question_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save your changes. Please try again.",
                context={"question_id": str(question_id)},
            )
        return await self.get_question(db, question_id)

    # ── Detail ────────────────────────────────────────────────────────────

    async def get_question(self, db: AsyncSession, question_id: UUID) -> QuestionResponse:
        """
        Raises:
            NotFoundError: No question with this id (→ 404)
        """
        try:
            result = await db.execute(
                select(Question, _answer_count_column()).where(Question.id == question_id)
            )
            row = result.first()
        except Exception as e:
            logger.error("Database error fetching question %s: %s", question_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the question. Please try again.",
                context={"question_id": str(question_id)},
            )

        if row is None:
            raise NotFoundError(resource="question", resource_id=str(question_id))
        question, answer_count = row
        return _to_response(question, answer_count)

    async def get_question_row(self, db: AsyncSession, question_id: UUID) -> Question:
        """Load the ORM row or raise NotFoundError; shared with AnswerService."""
        question = await db.get(Question, question_id)
        if question is None:
            raise NotFoundError(resource="question", resource_id=str(question_id))
        return question

    # ── Views ─────────────────────────────────────────────────────────────

    async def register_view(
        self,
        db: AsyncSession,
        question_id: UUID,
        viewer_key: str,
    ) -> ViewResponse:
        """
        Count a view once per (question, viewer).

        Args:
            viewer_key: Stable identifier for the viewer, e.g. "user:<uuid>"

        Returns:
            ViewResponse with the current count and whether this call counted.
        """
        question = await self.get_question_row(db, question_id)

        try:
            counted = await self._record_viewer(db, question_id, viewer_key)
            if counted:
                await db.execute(
                    update(Question)
                    .where(Question.id == question_id)
                    .values(views=Question.views + 1)
                    .execution_options(synchronize_session=False)
                )
            await db.refresh(question)
            logger.debug(
                "View on question %s by %s (counted=%s, views=%d)",
                question_id,
                viewer_key,
                counted,
                question.views,
            )
            return ViewResponse(question_id=question.id, views=question.views, counted=counted)

        except Exception as e:
            logger.error("Database error registering view on %s: %s", question_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not record the view. Please try again.",
                context={"question_id": str(question_id)},
            )

    async def _record_viewer(self, db: AsyncSession, question_id: UUID, viewer_key: str) -> bool:
        """Insert the viewer row; True only when this call created it."""
        dialect_name = db.get_bind().dialect.name
        values = {"question_id": question_id, "viewer_key": viewer_key}

        if dialect_name in ("postgresql", "sqlite"):
            insert = postgresql.insert if dialect_name == "postgresql" else sqlite.insert
            stmt = (
                insert(QuestionView.__table__)
                .values(**values)
                .on_conflict_do_nothing(index_elements=["question_id", "viewer_key"])
            )
            result = await db.execute(stmt)
            return result.rowcount == 1

        existing = await db.get(QuestionView, (question_id, viewer_key))
        if existing is not None:
            return False
        db.add(QuestionView(**values))
        await db.flush()
        return True

    # ── Voting ────────────────────────────────────────────────────────────

    async def vote_question(self, db: AsyncSession, question_id: UUID, delta: int) -> QuestionResponse:
        """Apply +1 or -1 in a single UPDATE and return the fresh question."""
        question = await self.get_question_row(db, question_id)
        try:
            await db.execute(
                update(Question)
                .where(Question.id == question_id)
                .values(votes=Question.votes + delta)
                .execution_options(synchronize_session=False)
            )
            await db.refresh(question)
            logger.info("Question %s voted %+d (now %d)", question_id, delta, question.votes)
        except Exception as e:
            logger.error("Database error voting on question %s: %s", question_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not record your vote. Please try again.",
                context={"question_id": str(question_id)},
            )
        return await self.get_question(db, question_id)

    # ── Deletion ──────────────────────────────────────────────────────────

    async def delete_question(self, db: AsyncSession, identity: Identity, question_id: UUID) -> None:
        """
        Remove a question and everything hanging off it. Owner only.

        Raises:
            NotFoundError: No such question (→ 404)
            PermissionDeniedError: Caller does not own it (→ 403)
        """
        question = await self.get_question_row(db, question_id)
        if question.user_id != identity.user_id:
            raise PermissionDeniedError(message="Only the author can delete this question")

        try:
            await db.execute(delete(Answer).where(Answer.question_id == question_id))
            await db.execute(delete(QuestionView).where(QuestionView.question_id == question_id))
            await db.delete(question)
            await db.flush()
            logger.info("Question %s deleted by %s", question_id, identity.user_id)
        except Exception as e:
            logger.error("Database error deleting question %s: %s", question_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the question. Please try again.",
                context={"question_id": str(question_id)},
            )


question_service = QuestionService()
