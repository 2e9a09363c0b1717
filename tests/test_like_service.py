from collections.abc import Awaitable, Callable

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from src.models import Post, User
from src.services import LikeService

pytestmark = pytest.mark.anyio

PostFactory = Callable[..., Awaitable[Post]]
UserFactory = Callable[..., Awaitable[User]]


async def test_like_then_repeat_reports_already_liked(
    db_session: AsyncSession, make_user: UserFactory, make_post: PostFactory
) -> None:
    owner = await make_user(name="Owner")
    post = await make_post(owner)
    service = LikeService(db_session)

    first = await service.like(owner.id, post.id)
    second = await service.like(owner.id, post.id)

    assert first["status"] == "liked"
    assert first["likes"] == 1
    assert second["status"] == "already_liked"
    assert second["likes"] == 1


async def test_like_unknown_post_is_not_found(
    db_session: AsyncSession, make_user: UserFactory
) -> None:
    user = await make_user(name="Lonely")

    result = await LikeService(db_session).like(user.id, 404)

    assert result["status"] == "not_found"
    assert "404" in str(result["message"])


async def test_toggle_alternates(
    db_session: AsyncSession, make_user: UserFactory, make_post: PostFactory
) -> None:
    owner = await make_user(name="Owner")
    post = await make_post(owner)
    service = LikeService(db_session)

    statuses = [(await service.toggle(owner.id, post.id))["status"] for _ in range(3)]

    assert statuses == ["liked", "unliked", "liked"]


async def test_list_liked_posts_serializes_posts(
    db_session: AsyncSession, make_user: UserFactory, make_post: PostFactory
) -> None:
    owner = await make_user(name="Owner")
    fan = await make_user(name="Fan")
    villa = await make_post(owner, title="Villa Moderne", type="maison")
    studio = await make_post(owner, title="Studio")
    service = LikeService(db_session)
    await service.like(fan.id, villa.id)
    await service.like(fan.id, studio.id)

    items = await LikeService(db_session).list_liked_posts(fan.id)

    assert {item["post"]["title"] for item in items} == {"Villa Moderne", "Studio"}  # type: ignore[index]
    assert await service.list_liked_posts(owner.id) == []
