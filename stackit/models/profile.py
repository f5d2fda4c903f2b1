"""
StackIt Backend — Profile SQLAlchemy Model
============================================

What:  Public profile for an account held by the identity provider.
How:   The primary key IS the provider's user id. Rows are created the first
       time an identity reaches the API (see ProfileService.ensure_profile).
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from stackit.database import Base
from stackit.models.question import utcnow


class Profile(Base):
    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)

    username: Mapped[Optional[str]] = mapped_column(Text, unique=True, nullable=True)

    full_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    avatar_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

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

    def __repr__(self) -> str:
        return f"<Profile(id={self.id}, username='{self.username}')>"
