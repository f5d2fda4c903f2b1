"""
StackIt Backend — Question SQLAlchemy Model
=============================================

What:  ORM model representing the `questions` table.
Who:   Used by QuestionService for reads/writes and by Alembic for schema management.

Table Design Rationale:
    - UUID primary key: Non-sequential, globally unique
    - tags: Postgres TEXT[] (JSON on SQLite for the test suite); order preserved
    - author_name: Display name captured at post time (not joined from profiles)
    - user_id: Owning user; nullable for seeded/legacy rows with no owner
    - votes / views: Signed counters, only ever changed by single-statement
      increments in the service layer
    - has_accepted_answer: True iff exactly one answer is accepted; maintained
      by AnswerService.accept_answer inside one transaction
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import JSON, Boolean, DateTime, Index, Integer, String, Text, Uuid, false, text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from stackit.database import Base

TITLE_MAX_LENGTH = 150

# TEXT[] on Postgres; SQLite has no array type, so store JSON there
TagList = ARRAY(Text).with_variant(JSON(), "sqlite")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Question(Base):
    """
    A question posted to the forum.

    Lifecycle:
        1. Created on submission (votes=0, views=0, has_accepted_answer=False)
        2. votes changes on every up/down vote; views on first view per viewer
        3. has_accepted_answer flips to True when the owner accepts an answer,
           back to False if the accepted answer is deleted
        4. Deleted only by its owner (answers cascade)
    """

    __tablename__ = "questions"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)

    # Markdown produced by the rich-text editor; no length limit
    description: Mapped[str] = mapped_column(Text, nullable=False)

    tags: Mapped[List[str]] = mapped_column(
        TagList,
        nullable=False,
        default=list,
    )

    author_name: Mapped[str] = mapped_column(Text, nullable=False)

    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        nullable=True,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    votes: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    views: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    has_accepted_answer: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )

    # Listing defaults to newest first
    __table_args__ = (
        Index("idx_questions_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return (
            f"<Question(id={self.id}, title='{self.title[:30]}', "
            f"votes={self.votes}, accepted={self.has_accepted_answer})>"
        )
