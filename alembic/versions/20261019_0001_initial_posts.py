"""Initial tables for users, cities, posts, and post likes.

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 10:00:00
"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20261019_0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Upgrade schema."""

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    op.create_table(
        "cities",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_cities"),
        sa.UniqueConstraint("slug", name="uq_cities_slug"),
    )

    op.create_table(
        "posts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("city", sa.String(length=255), nullable=False),
        sa.Column("sector", sa.String(length=255), nullable=False),
        sa.Column("price", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("product", sa.String(length=255), nullable=False),
        sa.Column("type", sa.String(length=255), nullable=False),
        sa.Column("bedrooms", sa.SmallInteger(), server_default="0", nullable=False),
        sa.Column("bathrooms", sa.SmallInteger(), server_default="0", nullable=False),
        sa.Column("area", sa.Numeric(precision=8, scale=2), nullable=False),
        sa.Column("address", sa.String(length=255), nullable=False),
        sa.Column("address_maps", sa.String(length=255), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("image", sa.String(length=255), nullable=True),
        sa.Column("likes", sa.Integer(), server_default="0", nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_posts"),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name="fk_posts_user_id", ondelete="CASCADE"
        ),
        sa.CheckConstraint("bedrooms >= 0", name="ck_posts_bedrooms_unsigned"),
        sa.CheckConstraint("bathrooms >= 0", name="ck_posts_bathrooms_unsigned"),
    )
    op.create_index("idx_posts_city", "posts", ["city"], unique=False)
    op.create_index("idx_posts_sector", "posts", ["sector"], unique=False)
    op.create_index("idx_posts_price", "posts", ["price"], unique=False)
    op.create_index("idx_posts_user", "posts", ["user_id"], unique=False)

    op.create_table(
        "post_likes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("post_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_post_likes"),
        sa.ForeignKeyConstraint(
            ["post_id"], ["posts.id"], name="fk_post_likes_post_id", ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name="fk_post_likes_user_id", ondelete="CASCADE"
        ),
        sa.UniqueConstraint("user_id", "post_id", name="uq_post_likes_user_post"),
    )
    op.create_index("idx_post_likes_post", "post_likes", ["post_id"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""

    op.drop_index("idx_post_likes_post", table_name="post_likes")
    op.drop_table("post_likes")

    op.drop_index("idx_posts_user", table_name="posts")
    op.drop_index("idx_posts_price", table_name="posts")
    op.drop_index("idx_posts_sector", table_name="posts")
    op.drop_index("idx_posts_city", table_name="posts")
    op.drop_table("posts")

    op.drop_table("cities")
    op.drop_table("users")
