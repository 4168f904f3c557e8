"""
Recipe Book Backend — Recipe Route Handlers
============================================

What:  The /api/recipes surface: counts, listings, CRUD, and likes.
How:   Extracts path/query/body values, picks the caller identity, delegates
       to RecipeService. Errors propagate to the global exception handlers.

Route Order:
    Fixed sub-paths (/count, /my/count, /top, /my) are registered BEFORE
    /{recipe_id}; otherwise "count" would be parsed as a recipe ID.

Identity for ownership and likes:
    The verified token identity wins whenever an Authorization header is sent.
    Without one, the client-supplied body.userId is used. That fallback keeps
    older clients working but is only as trustworthy as the client; set
    REQUIRE_VERIFIED_OWNERSHIP=true to disable it.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db_session
from app.exceptions import ValidationError
from app.schemas.recipe import (
    CountResponse,
    ErrorResponse,
    MessageResponse,
    RecipeResponse,
)
from app.security import optional_user, require_user
from app.services.recipe_service import parse_limit, recipe_service
from app.services.token_verifier_base import AuthenticatedUser

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/recipes", tags=["Recipes"])

_ERRORS = {
    400: {"description": "Invalid input", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}


def _require_query_user_id(user_id: Optional[str]) -> str:
    if not user_id:
        raise ValidationError(message="userId is required", field="userId")
    return user_id


def _body_user_id(payload: Optional[Dict[str, Any]]) -> Optional[str]:
    value = (payload or {}).get("userId")
    return str(value) if value not in (None, "") else None


def _caller_id(user: Optional[AuthenticatedUser], payload: Optional[Dict[str, Any]]) -> Optional[str]:
    if user is not None:
        return user.uid
    return _body_user_id(payload)


# ── Counts ────────────────────────────────────────────────────────────────

@router.get("/count", response_model=CountResponse, responses=_ERRORS, summary="Total recipe count")
async def count_recipes(db: AsyncSession = Depends(get_db_session)) -> CountResponse:
    return CountResponse(count=await recipe_service.count(db))


@router.get(
    "/my/count",
    response_model=CountResponse,
    responses=_ERRORS,
    summary="Number of recipes owned by a user",
)
async def count_my_recipes(
    user_id: Optional[str] = Query(default=None, alias="userId"),
    db: AsyncSession = Depends(get_db_session),
) -> CountResponse:
    owner = _require_query_user_id(user_id)
    return CountResponse(count=await recipe_service.count(db, user_id=owner))


# ── Listings ──────────────────────────────────────────────────────────────

@router.get(
    "/top",
    response_model=List[RecipeResponse],
    responses=_ERRORS,
    summary="Most-liked recipes",
    description=(
        "Recipes ordered by like count, highest first. `limit` defaults to 6 "
        "when missing, non-numeric, or not positive, and is capped at 100."
    ),
)
async def top_recipes(
    limit: Optional[str] = Query(default=None, description="Maximum number of recipes"),
    db: AsyncSession = Depends(get_db_session),
) -> List[RecipeResponse]:
    count = parse_limit(
        limit,
        default=settings.top_recipes_default_limit,
        maximum=settings.top_recipes_max_limit,
    )
    return await recipe_service.list_top(db, limit=count)


@router.get(
    "/my",
    response_model=List[RecipeResponse],
    responses=_ERRORS,
    summary="Recipes owned by a user",
)
async def my_recipes(
    user_id: Optional[str] = Query(default=None, alias="userId"),
    db: AsyncSession = Depends(get_db_session),
) -> List[RecipeResponse]:
    owner = _require_query_user_id(user_id)
    return await recipe_service.list_by_owner(db, owner)


@router.get(
    "/{recipe_id}",
    response_model=RecipeResponse,
    responses={**_ERRORS, 404: {"description": "Recipe not found", "model": ErrorResponse}},
    summary="Get a single recipe",
)
async def get_recipe(
    recipe_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> RecipeResponse:
    return await recipe_service.get_by_id(db, recipe_id)


@router.get("", response_model=List[RecipeResponse], responses=_ERRORS, summary="All recipes")
async def list_recipes(db: AsyncSession = Depends(get_db_session)) -> List[RecipeResponse]:
    return await recipe_service.list_all(db)


# ── Writes ────────────────────────────────────────────────────────────────

@router.post(
    "",
    status_code=201,
    response_model=RecipeResponse,
    responses={**_ERRORS, 401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="Create a recipe",
    description=(
        "Stores any JSON object as a recipe. userId and userName are taken from "
        "the verified token; likes and likedBy always start empty."
    ),
)
async def create_recipe(
    payload: Dict[str, Any] = Body(...),
    user: AuthenticatedUser = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
) -> RecipeResponse:
    return await recipe_service.create(db, payload, user)


@router.put(
    "/{recipe_id}",
    response_model=RecipeResponse,
    responses={
        **_ERRORS,
        403: {"description": "Caller does not own the recipe", "model": ErrorResponse},
        404: {"description": "Recipe not found", "model": ErrorResponse},
    },
    summary="Update a recipe",
)
async def update_recipe(
    recipe_id: str,
    payload: Dict[str, Any] = Body(...),
    user: Optional[AuthenticatedUser] = Depends(optional_user),
    db: AsyncSession = Depends(get_db_session),
) -> RecipeResponse:
    return await recipe_service.update(
        db, recipe_id, payload, requester_id=_caller_id(user, payload)
    )


@router.delete(
    "/{recipe_id}",
    response_model=MessageResponse,
    responses={
        **_ERRORS,
        403: {"description": "Caller does not own the recipe", "model": ErrorResponse},
        404: {"description": "Recipe not found", "model": ErrorResponse},
    },
    summary="Delete a recipe",
)
async def delete_recipe(
    recipe_id: str,
    payload: Optional[Dict[str, Any]] = Body(default=None),
    user: Optional[AuthenticatedUser] = Depends(optional_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await recipe_service.remove(db, recipe_id, requester_id=_caller_id(user, payload))
    return MessageResponse(message="Recipe deleted successfully")


@router.post(
    "/{recipe_id}/like",
    response_model=MessageResponse,
    responses={
        **_ERRORS,
        403: {"description": "Owners cannot like their own recipe", "model": ErrorResponse},
        404: {"description": "Recipe not found", "model": ErrorResponse},
    },
    summary="Like a recipe",
    description="Idempotent: liking a recipe you already liked changes nothing.",
)
async def like_recipe(
    recipe_id: str,
    payload: Optional[Dict[str, Any]] = Body(default=None),
    user: Optional[AuthenticatedUser] = Depends(optional_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    liker_id = _caller_id(user, payload)
    if not liker_id:
        raise ValidationError(message="User ID is required", field="userId")

    recorded = await recipe_service.like(db, recipe_id, liker_id)
    return MessageResponse(message="Liked successfully" if recorded else "Already liked")
