"""Create recipes and recipe_likes tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Initial schema: recipe documents plus the like membership table.
How:   Portable column types (generic UUID, JSON with a JSONB variant on
       PostgreSQL) so the same migration runs on SQLite for local work.

Rollback: downgrade() drops both tables (destructive — all data lost).
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "recipes",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("user_name", sa.String(255), nullable=False),
        sa.Column("likes", sa.Integer(), nullable=False, server_default=sa.text("0")),
        # Client-supplied recipe fields (title, ingredients, ...)
        sa.Column(
            "data",
            sa.JSON().with_variant(postgresql.JSONB(), "postgresql"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    # ORDER BY likes DESC for /api/recipes/top
    op.create_index("idx_recipes_likes", "recipes", [sa.text("likes DESC")])
    # WHERE user_id = :uid for /api/recipes/my and /my/count
    op.create_index("idx_recipes_user_id", "recipes", ["user_id"])

    op.create_table(
        "recipe_likes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("recipe_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["recipe_id"], ["recipes.id"], ondelete="CASCADE"),
        # One like per user per recipe: this is what makes liking idempotent
        sa.UniqueConstraint("recipe_id", "user_id", name="uq_recipe_likes_recipe_user"),
    )


def downgrade() -> None:
    op.drop_table("recipe_likes")
    op.drop_index("idx_recipes_user_id", table_name="recipes")
    op.drop_index("idx_recipes_likes", table_name="recipes")
    op.drop_table("recipes")
