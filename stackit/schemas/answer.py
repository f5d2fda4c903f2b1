"""
StackIt Backend — Answer Request/Response Schemas
===================================================
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class AnswerCreate(BaseModel):
    """Body of POST /api/questions/{id}/answers."""
    content: str = Field(description="Answer body in markdown (required)")


class AnswerUpdate(BaseModel):
    """Body of PATCH /api/answers/{id}."""
    content: str = Field(description="Replacement answer body (required)")


class AnswerResponse(BaseModel):
    id: uuid.UUID
    question_id: uuid.UUID
    content: str
    author_name: str
    user_id: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime
    votes: int
    is_accepted: bool

    model_config = {"from_attributes": True}
