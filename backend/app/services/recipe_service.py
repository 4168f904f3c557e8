"""
Recipe Book Backend — Recipe Service (Store Access)
====================================================

What:  Every operation the API performs on recipes: count, list (all / by
       owner / top-liked), get, create, update, remove, like.
Why:   Keeps the business rules (ownership, self-like ban, reserved fields,
       idempotent likes) out of the HTTP layer and testable without HTTP.
How:   Each method maps to one or two statements on the request's session.
       There are no retries and no cross-request transactions; the session
       dependency commits on success and rolls back on error.

Error Handling Strategy:
    - Input problems are raised before any query (ValidationError)
    - Domain outcomes become NotFoundError / ForbiddenError
    - SQLAlchemy faults are logged with full context and wrapped in
      DatabaseError; the client only sees the operation-level message

Like Semantics:
    likedBy is a set backed by the recipe_likes table (unique per user). The
    counter increment is issued only after the membership row is flushed, so
    `likes == len(likedBy)` holds and liking twice is a no-op.
"""

import logging
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import (
    DatabaseError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from app.models.recipe import Recipe, RecipeLike
from app.schemas.recipe import RESERVED_FIELDS, RecipeResponse
from app.services.token_verifier_base import AuthenticatedUser

logger = logging.getLogger(__name__)

DEFAULT_TOP_LIMIT = 6
MAX_TOP_LIMIT = 100

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_recipe_id(raw: Any) -> uuid.UUID:
    """
    Validate a recipe ID before it reaches the database.

    Raises:
        ValidationError: `raw` is not a UUID (→ 400 "Invalid recipe ID format")
    """
    try:
        return uuid.UUID(str(raw))
    except (TypeError, ValueError):
        raise ValidationError(
            message="Invalid recipe ID format",
            field="id",
            context={"recipe_id": str(raw)[:64]},
        )


def parse_limit(
    raw: Optional[str],
    default: int = DEFAULT_TOP_LIMIT,
    maximum: int = MAX_TOP_LIMIT,
) -> int:
    """
    Parse the `limit` query parameter the lenient way clients expect.

    "3" → 3, "3abc" → 3, "abc" / "" / None / "0" / "-2" → default.
    Values above `maximum` are clamped to it.
    """
    if raw is None:
        return default
    match = _LEADING_INT.match(raw)
    if not match:
        return default
    digits = match.group(1)
    if len(digits.lstrip("+-").lstrip("0")) > 9:
        # Too long to be a sensible count; skip int() on arbitrarily long input
        return default if digits.startswith("-") else maximum
    value = int(digits)
    if value <= 0:
        return default
    return min(value, maximum)


def strip_reserved(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Drop server-managed keys from a client document."""
    return {key: value for key, value in payload.items() if key not in RESERVED_FIELDS}


def _to_response(recipe: Recipe) -> RecipeResponse:
    return RecipeResponse.model_validate(recipe.to_document())


class RecipeService:
    """
    Business logic layer for recipe operations.

    Stateless: the session is passed into every call, so a single instance is
    shared by all requests.
    """

    # ── Reads ─────────────────────────────────────────────────────────────

    async def count(self, db: AsyncSession, user_id: Optional[str] = None) -> int:
        """Total recipes, optionally only those owned by `user_id`."""
        try:
            query = select(func.count(Recipe.id))
            if user_id is not None:
                query = query.where(Recipe.user_id == user_id)
            result = await db.execute(query)
            return result.scalar() or 0
        except SQLAlchemyError as e:
            logger.error("Count error (user_id=%s): %s", user_id, str(e), exc_info=True)
            message = (
                "Failed to get my recipes count"
                if user_id is not None
                else "Failed to get total recipes count"
            )
            raise DatabaseError(message=message, context={"error_type": type(e).__name__})

    async def list_top(self, db: AsyncSession, limit: int = DEFAULT_TOP_LIMIT) -> List[RecipeResponse]:
        """Most-liked recipes first; newer recipes win ties."""
        query = (
            select(Recipe)
            .order_by(Recipe.likes.desc(), Recipe.created_at.desc())
            .limit(limit)
        )
        return await self._fetch_many(db, query, "Failed to fetch top recipes")

    async def list_by_owner(self, db: AsyncSession, user_id: str) -> List[RecipeResponse]:
        query = (
            select(Recipe)
            .where(Recipe.user_id == user_id)
            .order_by(Recipe.created_at.asc())
        )
        return await self._fetch_many(db, query, "Failed to get my recipes")

    async def list_all(self, db: AsyncSession) -> List[RecipeResponse]:
        query = select(Recipe).order_by(Recipe.created_at.asc())
        return await self._fetch_many(db, query, "Failed to fetch recipes")

    async def get_by_id(self, db: AsyncSession, recipe_id: str) -> RecipeResponse:
        """
        Retrieve a single recipe.

        Raises:
            ValidationError: malformed ID (no query is issued)
            NotFoundError: no recipe with that ID
            DatabaseError: query failed
        """
        recipe = await self._load(db, recipe_id, "Failed to fetch recipe")
        return _to_response(recipe)

    # ── Writes ────────────────────────────────────────────────────────────

    async def create(
        self,
        db: AsyncSession,
        payload: Dict[str, Any],
        user: AuthenticatedUser,
    ) -> RecipeResponse:
        """
        Insert a new recipe owned by the authenticated caller.

        Client values for the reserved fields are discarded: the owner comes
        from the verified identity and the like metadata starts empty.
        """
        try:
            recipe = Recipe(
                user_id=user.uid,
                user_name=user.display_name,
                likes=0,
                data=strip_reserved(payload),
                created_at=datetime.now(timezone.utc),
                liked_by=[],
            )
            db.add(recipe)
            await db.flush()
            logger.info("Recipe %s created by user %s", recipe.id, user.uid)
            return _to_response(recipe)
        except SQLAlchemyError as e:
            logger.error("Create recipe error: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to create recipe",
                context={"user_id": user.uid, "error_type": type(e).__name__},
            )

    async def update(
        self,
        db: AsyncSession,
        recipe_id: str,
        patch: Dict[str, Any],
        requester_id: Optional[str],
    ) -> RecipeResponse:
        """
        Shallow-merge `patch` into the recipe document.

        Order of checks: ID format → existence → ownership. The recipe's
        identity and like metadata cannot be changed through this call.
        """
        recipe = await self._load(db, recipe_id, "Failed to update recipe")
        self._check_owner(recipe, requester_id)

        changes = strip_reserved(patch)
        try:
            recipe.data = {**(recipe.data or {}), **changes}
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Update recipe error (%s): %s", recipe_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to update recipe",
                context={"recipe_id": recipe_id, "error_type": type(e).__name__},
            )
        logger.info("Recipe %s updated (%d fields)", recipe.id, len(changes))
        return _to_response(recipe)

    async def remove(
        self,
        db: AsyncSession,
        recipe_id: str,
        requester_id: Optional[str],
    ) -> None:
        """Hard-delete a recipe (and its likes) after the ownership check."""
        recipe = await self._load(db, recipe_id, "Failed to delete recipe")
        self._check_owner(recipe, requester_id)

        try:
            await db.delete(recipe)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Delete recipe error (%s): %s", recipe_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to delete recipe",
                context={"recipe_id": recipe_id, "error_type": type(e).__name__},
            )
        logger.info("Recipe %s deleted by user %s", recipe_id, requester_id)

    async def like(self, db: AsyncSession, recipe_id: str, liker_id: str) -> bool:
        """
        Record that `liker_id` likes the recipe.

        Returns:
            True if a new like was recorded, False if the user already liked it.

        Raises:
            ValidationError: malformed ID
            NotFoundError: no recipe with that ID
            ForbiddenError: the liker owns the recipe
            DatabaseError: store failure
        """
        recipe = await self._load(db, recipe_id, "Failed to like recipe")

        if recipe.user_id == liker_id:
            logger.warning("User %s tried to like own recipe %s", liker_id, recipe_id)
            raise ForbiddenError(
                message="You can't like your own recipe",
                context={"recipe_id": recipe_id, "user_id": liker_id},
            )

        if liker_id in recipe.liked_by_ids:
            return False

        try:
            recipe.liked_by.append(RecipeLike(user_id=liker_id))
            # Flush the membership row first: a concurrent duplicate trips the
            # unique constraint here, before the counter is touched.
            await db.flush()
        except IntegrityError:
            await db.rollback()
            logger.info("Concurrent duplicate like on %s by %s ignored", recipe_id, liker_id)
            return False
        except SQLAlchemyError as e:
            logger.error("Like recipe error (%s): %s", recipe_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to like recipe",
                context={"recipe_id": recipe_id, "error_type": type(e).__name__},
            )

        try:
            await db.execute(
                update(Recipe)
                .where(Recipe.id == recipe.id)
                .values(likes=Recipe.likes + 1)
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            logger.error("Like counter error (%s): %s", recipe_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to like recipe",
                context={"recipe_id": recipe_id, "error_type": type(e).__name__},
            )

        logger.info("Recipe %s liked by user %s", recipe_id, liker_id)
        return True

    # ── Internals ─────────────────────────────────────────────────────────

    async def _fetch_many(self, db: AsyncSession, query, failure_message: str) -> List[RecipeResponse]:
        try:
            result = await db.execute(query)
            return [_to_response(recipe) for recipe in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("%s: %s", failure_message, str(e), exc_info=True)
            raise DatabaseError(
                message=failure_message,
                context={"error_type": type(e).__name__},
            )

    async def _load(self, db: AsyncSession, recipe_id: str, failure_message: str) -> Recipe:
        """Validate the ID, fetch the row, and convert a miss into NotFoundError."""
        key = parse_recipe_id(recipe_id)
        try:
            result = await db.execute(select(Recipe).where(Recipe.id == key))
            recipe = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("%s (%s): %s", failure_message, recipe_id, str(e), exc_info=True)
            raise DatabaseError(
                message=failure_message,
                context={"recipe_id": recipe_id, "error_type": type(e).__name__},
            )

        if recipe is None:
            raise NotFoundError(resource="recipe", resource_id=recipe_id)
        return recipe

    @staticmethod
    def _check_owner(recipe: Recipe, requester_id: Optional[str]) -> None:
        if not requester_id or str(recipe.user_id) != str(requester_id):
            logger.warning(
                "Ownership check failed on recipe %s (requester=%s)",
                recipe.id,
                requester_id,
            )
            raise ForbiddenError(
                message="Not authorized",
                context={"recipe_id": str(recipe.id)},
            )


# ── Singleton Instance ────────────────────────────────────────────────────
recipe_service = RecipeService()
