"""Create forum tables

Revision ID: 001
Revises: None
Create Date: 2025-07-12 00:00:00.000000+00:00

What:  Creates questions, answers, profiles and question_views.
How:   PostgreSQL features: gen_random_uuid() keys, TEXT[] tags,
       TIMESTAMP WITH TIME ZONE, and a partial unique index that allows
       at most one accepted answer per question.

Rollback: downgrade() drops all four tables (destructive, all forum data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "profiles",
        # Same value as the identity provider's user id
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("username", sa.Text(), nullable=True),
        sa.Column("full_name", sa.Text(), nullable=True),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username"),
    )

    op.create_table(
        "questions",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("title", sa.String(150), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column(
            "tags",
            postgresql.ARRAY(sa.Text()),
            server_default=sa.text("'{}'::text[]"),
            nullable=False,
        ),
        sa.Column("author_name", sa.Text(), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=True),
        *_timestamps(),
        sa.Column("votes", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("views", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column(
            "has_accepted_answer",
            sa.Boolean(),
            server_default=sa.false(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_questions_created_at", "questions", [sa.text("created_at DESC")])
    op.create_index("ix_questions_user_id", "questions", ["user_id"])
    # Backs the ?tag= filter (tags @> ARRAY[...] / = ANY(tags))
    op.create_index(
        "idx_questions_tags",
        "questions",
        ["tags"],
        postgresql_using="gin",
    )

    op.create_table(
        "answers",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("question_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("author_name", sa.Text(), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=True),
        *_timestamps(),
        sa.Column("votes", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("is_accepted", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.ForeignKeyConstraint(["question_id"], ["questions.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_answers_question_id_created_at",
        "answers",
        ["question_id", sa.text("created_at DESC")],
    )
    op.create_index("ix_answers_user_id", "answers", ["user_id"])
    op.create_index(
        "uq_answers_one_accepted_per_question",
        "answers",
        ["question_id"],
        unique=True,
        postgresql_where=sa.text("is_accepted"),
    )

    op.create_table(
        "question_views",
        sa.Column("question_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("viewer_key", sa.String(255), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["question_id"], ["questions.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("question_id", "viewer_key"),
    )


def downgrade() -> None:
    op.drop_table("question_views")
    op.drop_index("uq_answers_one_accepted_per_question", table_name="answers")
    op.drop_index("ix_answers_user_id", table_name="answers")
    op.drop_index("idx_answers_question_id_created_at", table_name="answers")
    op.drop_table("answers")
    op.drop_index("idx_questions_tags", table_name="questions")
    op.drop_index("ix_questions_user_id", table_name="questions")
    op.drop_index("idx_questions_created_at", table_name="questions")
    op.drop_table("questions")
    op.drop_table("profiles")
