"""
Recipe Book Backend — Recipe SQLAlchemy Models
===============================================

What:  ORM models for the `recipes` and `recipe_likes` tables.
How:   Inherit from the shared DeclarativeBase; Alembic reads these for migrations.
Who:   Used by RecipeService for CRUD operations and by Alembic for schema management.

Table Design Rationale:
    recipes
    - UUID primary key: opaque, non-sequential, assigned once on insert
    - user_id / user_name: owner identity stamped from the verified token
    - likes: denormalised counter, sortable for the "top recipes" query
    - data: JSON document with every client-supplied field (title,
      ingredients, ...). The API is schemaless for these.
    - created_at: UTC, set server-side

    recipe_likes
    - One row per (recipe, user). The unique constraint is what makes a like
      idempotent; the counter is only incremented after this insert succeeds.
    - ON DELETE CASCADE plus ORM cascade: deleting a recipe removes its likes.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
DocumentType = JSON().with_variant(JSONB(), "postgresql")


class Recipe(Base):
    """
    A shared recipe and its like metadata.

    Lifecycle:
        1. Created by POST /api/recipes (likes=0, no like rows)
        2. `data` merged by PUT /api/recipes/{id}
        3. likes/liked_by grow through POST /api/recipes/{id}/like
        4. Hard-deleted by DELETE /api/recipes/{id}

    Query Patterns:
        - Top recipes: ORDER BY likes DESC LIMIT n  → idx_recipes_likes
        - My recipes:  WHERE user_id = :uid          → idx_recipes_user_id
    """

    __tablename__ = "recipes"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    user_id: Mapped[str] = mapped_column(String(128), nullable=False)

    user_name: Mapped[str] = mapped_column(String(255), nullable=False, default="User")

    likes: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    # Reassign (never mutate in place): plain JSON columns don't track
    # in-place dict changes.
    data: Mapped[Dict[str, Any]] = mapped_column(DocumentType, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    # lazy="selectin": async sessions cannot lazy-load on attribute access,
    # so likes are fetched alongside every recipe query.
    liked_by: Mapped[List["RecipeLike"]] = relationship(
        back_populates="recipe",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="RecipeLike.id",
    )

    __table_args__ = (
        Index("idx_recipes_likes", likes.desc()),
        Index("idx_recipes_user_id", user_id),
    )

    @property
    def liked_by_ids(self) -> List[str]:
        return [like.user_id for like in self.liked_by]

    def to_document(self) -> Dict[str, Any]:
        """
        Flatten the row into the API document shape.

        Server-managed keys are written last so a stale reserved key inside
        `data` can never shadow them.
        """
        document = dict(self.data or {})
        document.update(
            id=str(self.id),
            userId=self.user_id,
            userName=self.user_name,
            likes=self.likes,
            likedBy=self.liked_by_ids,
            createdAt=self.created_at,
        )
        return document

    def __repr__(self) -> str:
        return f"<Recipe(id={self.id}, user_id='{self.user_id}', likes={self.likes})>"


class RecipeLike(Base):
    """Membership row of a recipe's likedBy set."""

    __tablename__ = "recipe_likes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    recipe_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("recipes.id", ondelete="CASCADE"),
        nullable=False,
    )

    user_id: Mapped[str] = mapped_column(String(128), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    recipe: Mapped[Recipe] = relationship(back_populates="liked_by")

    __table_args__ = (
        UniqueConstraint("recipe_id", "user_id", name="uq_recipe_likes_recipe_user"),
    )

    def __repr__(self) -> str:
        return f"<RecipeLike(recipe_id={self.recipe_id}, user_id='{self.user_id}')>"
