"""Repository helpers for post, like, user, and city persistence."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import asdict, dataclass, fields
from decimal import Decimal

from sqlalchemy import ColumnElement, delete, func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.errors import DuplicateLikeError, PostNotFoundError, UserNotFoundError
from src.models.city import City
from src.models.post import Post
from src.models.post_like import PostLike
from src.models.user import User
from src.search.filters import SearchFilter

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PostCreate:
    """Payload used to insert a post."""

    user_id: int
    city: str
    sector: str
    price: Decimal
    product: str
    type: str
    area: Decimal
    address: str
    address_maps: str
    title: str
    description: str
    bedrooms: int = 0
    bathrooms: int = 0
    image: str | None = None


UPDATABLE_POST_FIELDS = frozenset(
    f.name for f in fields(PostCreate) if f.name != "user_id"
)


def search_conditions(search_filter: SearchFilter) -> list[ColumnElement[bool]]:
    """Translate a normalized filter into SQL predicates on ``posts``."""

    conditions: list[ColumnElement[bool]] = []
    if search_filter.query is not None:
        conditions.append(Post.title.icontains(search_filter.query, autoescape=True))
    if search_filter.category is not None:
        conditions.append(Post.type == search_filter.category.value)
    if search_filter.city is not None:
        conditions.append(Post.city == search_filter.city)
    return conditions


async def search_posts(
    session: AsyncSession,
    search_filter: SearchFilter,
    *,
    offset: int = 0,
    limit: int = 12,
) -> tuple[list[Post], int]:
    """Fetch one page of posts matching the filter and the total match count."""

    conditions = search_conditions(search_filter)

    count_stmt = select(func.count(Post.id)).where(*conditions)
    total = (await session.execute(count_stmt)).scalar_one()

    stmt = (
        select(Post)
        .where(*conditions)
        .order_by(Post.created_at.desc(), Post.id.desc())
        .offset(offset)
        .limit(limit)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all()), int(total)


async def _user_exists(session: AsyncSession, user_id: int) -> bool:
    stmt = select(User.id).where(User.id == user_id)
    return (await session.execute(stmt)).first() is not None


async def create_post(session: AsyncSession, payload: PostCreate) -> Post:
    """Insert a post owned by an existing user."""

    if not await _user_exists(session, payload.user_id):
        raise UserNotFoundError(payload.user_id)

    post = Post(**asdict(payload))
    session.add(post)
    await session.commit()
    await session.refresh(post)
    return post


async def fetch_post(session: AsyncSession, post_id: int) -> Post | None:
    stmt = (
        select(Post)
        .where(Post.id == post_id)
        .execution_options(populate_existing=True)
    )
    return (await session.execute(stmt)).scalar_one_or_none()


async def fetch_posts_by_ids(session: AsyncSession, post_ids: list[int]) -> list[Post]:
    """Fetch posts by exact IDs.

    Preserves input order in the returned list.
    """
    if not post_ids:
        return []

    stmt = (
        select(Post)
        .where(Post.id.in_(post_ids))
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    posts = {post.id: post for post in result.scalars().all()}

    return [posts[pid] for pid in post_ids if pid in posts]


async def update_post(
    session: AsyncSession, post_id: int, changes: Mapping[str, object]
) -> Post | None:
    """Apply field changes to a post. Ownership and like counter are not editable."""

    unknown = set(changes) - UPDATABLE_POST_FIELDS
    if unknown:
        raise ValueError(f"Cannot update post fields: {', '.join(sorted(unknown))}")

    post = await fetch_post(session, post_id)
    if post is None:
        return None

    for key, value in changes.items():
        setattr(post, key, value)
    await session.commit()
    await session.refresh(post)
    return post


async def delete_post(session: AsyncSession, post_id: int) -> bool:
    """Delete a post; its likes go with it through ON DELETE CASCADE."""

    result = await session.execute(
        delete(Post)
        .where(Post.id == post_id)
        .execution_options(synchronize_session=False)
    )
    await session.commit()
    return result.rowcount > 0


async def create_user(session: AsyncSession, *, name: str, email: str) -> User:
    user = User(name=name, email=email)
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


def _actual_like_count() -> ColumnElement[int]:
    return (
        select(func.count(PostLike.id))
        .where(PostLike.post_id == Post.id)
        .correlate(Post)
        .scalar_subquery()
    )


async def _recount_likes(session: AsyncSession, post_ids: list[int]) -> None:
    await session.execute(
        update(Post)
        .where(Post.id.in_(post_ids))
        .values(likes=_actual_like_count())
        .execution_options(synchronize_session=False)
    )


async def delete_user(session: AsyncSession, user_id: int) -> bool:
    """Delete a user together with their posts and likes.

    Posts and likes are removed by ON DELETE CASCADE. Like counters on
    other users' posts that this user had liked are recomputed in the
    same transaction.
    """

    liked_stmt = select(PostLike.post_id).where(PostLike.user_id == user_id)
    liked_post_ids = list((await session.execute(liked_stmt)).scalars().all())

    result = await session.execute(delete(User).where(User.id == user_id))
    if result.rowcount == 0:
        await session.commit()
        return False

    if liked_post_ids:
        await _recount_likes(session, liked_post_ids)

    await session.commit()
    return True


async def add_post_like(session: AsyncSession, user_id: int, post_id: int) -> PostLike:
    """Insert a like and increment the post's counter in one transaction.

    A second like for the same (user, post) pair raises
    :class:`DuplicateLikeError` and leaves the counter unchanged.
    """

    if (await session.execute(select(Post.id).where(Post.id == post_id))).first() is None:
        raise PostNotFoundError(post_id)
    if not await _user_exists(session, user_id):
        raise UserNotFoundError(user_id)

    like = PostLike(user_id=user_id, post_id=post_id)
    session.add(like)
    try:
        await session.flush()
    except IntegrityError as exc:
        await session.rollback()
        raise DuplicateLikeError(user_id, post_id) from exc

    await session.execute(
        update(Post)
        .where(Post.id == post_id)
        .values(likes=Post.likes + 1)
        .execution_options(synchronize_session=False)
    )
    await session.commit()
    await session.refresh(like)
    return like


async def remove_post_like(session: AsyncSession, user_id: int, post_id: int) -> bool:
    """Delete a like and decrement the post's counter in one transaction."""

    result = await session.execute(
        delete(PostLike)
        .where(PostLike.user_id == user_id)
        .where(PostLike.post_id == post_id)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await session.commit()
        return False

    await session.execute(
        update(Post)
        .where(Post.id == post_id)
        .where(Post.likes > 0)
        .values(likes=Post.likes - 1)
        .execution_options(synchronize_session=False)
    )
    await session.commit()
    return True


async def fetch_post_likes(
    session: AsyncSession,
    *,
    user_id: int | None = None,
    post_id: int | None = None,
    limit: int = 200,
) -> list[PostLike]:
    """Fetch like records with optional filters."""

    stmt = select(PostLike).order_by(PostLike.created_at.desc(), PostLike.id.desc())

    if user_id is not None:
        stmt = stmt.where(PostLike.user_id == user_id)

    if post_id is not None:
        stmt = stmt.where(PostLike.post_id == post_id)

    stmt = stmt.limit(limit)

    result = await session.execute(stmt)
    return list(result.scalars().all())


async def reconcile_like_counts(session: AsyncSession) -> int:
    """Reset ``posts.likes`` wherever it drifted from the like-row count."""

    actual = _actual_like_count()
    result = await session.execute(
        update(Post)
        .where(Post.likes != actual)
        .values(likes=actual)
        .execution_options(synchronize_session=False)
    )
    await session.commit()
    repaired = result.rowcount
    if repaired:
        logger.info("Repaired like counters on %s posts", repaired)
    return repaired


async def fetch_cities(session: AsyncSession) -> list[City]:
    result = await session.execute(select(City).order_by(City.name.asc()))
    return list(result.scalars().all())


async def upsert_city(session: AsyncSession, *, name: str, slug: str) -> int:
    """Insert a city or rename the existing one with the same slug."""

    dialect_name = session.get_bind().dialect.name

    if dialect_name == "postgresql":
        stmt = pg_insert(City).values(name=name, slug=slug)
        stmt = stmt.on_conflict_do_update(
            index_elements=["slug"], set_={"name": stmt.excluded.name}
        ).returning(City.id)
        city_id = (await session.execute(stmt)).scalar_one()
        await session.commit()
        return city_id

    existing = (
        await session.execute(select(City).where(City.slug == slug))
    ).scalar_one_or_none()
    if existing is None:
        existing = City(name=name, slug=slug)
        session.add(existing)
    else:
        existing.name = name
    await session.commit()
    return existing.id
