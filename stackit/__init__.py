"""
StackIt Backend — Application Package Initializer
=================================================

What: Marks the `stackit` directory as a Python package.
Why:  Enables module imports like `from stackit.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend of a Q&A forum (questions, tags, answers, votes, accepted answers)
    follows a layered architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (Forum Rules + Identity) │  ← Votes, acceptance, view counting
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Authorization that a managed store would express as row-level policies
    (only the owner may update/delete, only the question owner may accept)
    lives in the services layer. Identity comes from an injected
    IdentityProvider, never from module-level state.
"""

__version__ = "1.0.0"
