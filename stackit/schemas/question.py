"""
StackIt Backend — Question Request/Response Schemas
=====================================================

What:  Pydantic models defining the question API contract.
Why:   Shape validation (types, required keys) happens here and yields 422;
       forum rules (blank title, tag cap) are enforced by QuestionService
       and yield 400 with a field-specific message.
"""

import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class QuestionCreate(BaseModel):
    """Body of POST /api/questions. Author identity comes from the session."""
    title: str = Field(description="Question title (required, max 150 characters)")
    description: str = Field(description="Question body in markdown (required)")
    tags: List[str] = Field(
        default_factory=list,
        description="Up to 5 tags; blanks and duplicates are dropped",
    )


class QuestionUpdate(BaseModel):
    """
    Body of PATCH /api/questions/{id}. Only the fields sent are changed;
    each is held to the same rules as when asking.
    """
    title: Optional[str] = Field(default=None, description="New title (max 150 characters)")
    description: Optional[str] = Field(default=None, description="New markdown body")
    tags: Optional[List[str]] = Field(default=None, description="Replacement tag list, up to 5")


class VoteRequest(BaseModel):
    """Body of the vote endpoints."""
    direction: Literal["up", "down"] = Field(description="'up' adds 1, 'down' subtracts 1")

    @property
    def delta(self) -> int:
        return 1 if self.direction == "up" else -1


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class QuestionResponse(BaseModel):
    """
    What:  Full representation of a question.
    Who:   Returned by GET /api/questions/{id}, POST /api/questions and the
           question vote endpoint.
    """
    id: uuid.UUID
    title: str
    description: str
    tags: List[str] = Field(default_factory=list)
    author_name: str
    user_id: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime
    votes: int
    views: int
    has_accepted_answer: bool
    answer_count: int = Field(default=0, description="Number of answers posted")

    model_config = {"from_attributes": True}


class QuestionListItem(BaseModel):
    """
    What:  Compact question representation for the listing page.
    Why:   Carries a 200-character description preview instead of the full body.
    """
    id: uuid.UUID
    title: str
    description_preview: str = Field(description="First 200 characters of the description")
    tags: List[str] = Field(default_factory=list)
    author_name: str
    created_at: datetime
    votes: int
    views: int
    answer_count: int
    has_accepted_answer: bool


class QuestionListResponse(BaseModel):
    """Paginated response wrapper for GET /api/questions."""
    questions: List[QuestionListItem]
    total_count: int = Field(description="Total number of questions matching filters")
    limit: int
    offset: int
    has_more: bool = Field(description="Whether more pages are available")


class ViewResponse(BaseModel):
    """Result of POST /api/questions/{id}/views."""
    question_id: uuid.UUID
    views: int = Field(description="View count after this registration")
    counted: bool = Field(description="False when this viewer was already counted")
