"""
StackIt Backend — Answer SQLAlchemy Model
===========================================

What:  ORM model representing the `answers` table.

Invariant:
    At most one answer per question has is_accepted = True. The partial unique
    index below makes a second accepted answer a constraint violation, so a
    buggy or concurrent accept can never leave two answers accepted.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, Text, Uuid, false, text
from sqlalchemy.orm import Mapped, mapped_column

from stackit.database import Base
from stackit.models.question import utcnow


class Answer(Base):
    """An answer to a question; listed newest first on the detail page."""

    __tablename__ = "answers"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    question_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("questions.id", ondelete="CASCADE"),
        nullable=False,
    )

    content: Mapped[str] = mapped_column(Text, nullable=False)

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

    is_accepted: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )

    __table_args__ = (
        Index("idx_answers_question_id_created_at", question_id, created_at.desc()),
        Index(
            "uq_answers_one_accepted_per_question",
            question_id,
            unique=True,
            postgresql_where=text("is_accepted"),
            sqlite_where=text("is_accepted"),
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<Answer(id={self.id}, question_id={self.question_id}, "
            f"votes={self.votes}, accepted={self.is_accepted})>"
        )
