"""
StackIt Backend — ORM Models
==============================

Importing this package registers every table with `Base.metadata`
(used by Alembic autogenerate and by the test suite's `create_all`).
"""

from stackit.models.question import Question
from stackit.models.answer import Answer
from stackit.models.profile import Profile
from stackit.models.question_view import QuestionView

__all__ = ["Question", "Answer", "Profile", "QuestionView"]
