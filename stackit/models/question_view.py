"""
StackIt Backend — QuestionView SQLAlchemy Model
=================================================

What:  One row per (question, viewer) pair that has already been counted.
Why:   Registering a view is idempotent per viewer: only the insert that
       creates the row increments `questions.views`, so re-renders, reloads
       and repeated visits from the same viewer count once.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from stackit.database import Base
from stackit.models.question import utcnow


class QuestionView(Base):
    __tablename__ = "question_views"

    question_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("questions.id", ondelete="CASCADE"),
        primary_key=True,
    )

    # "user:<uuid>", "key:<client key>" or "ip:<address>"
    viewer_key: Mapped[str] = mapped_column(String(255), primary_key=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
