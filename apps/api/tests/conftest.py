from datetime import datetime, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from database import Base, get_db
from main import app
from models.user import User
from models.video import Video
from routers import rate_limit
from services.passwords import hash_password
from services.session_token import create_access_token


DEFAULT_PASSWORD = "correct-horse-battery"


@pytest.fixture(autouse=True)
def reset_local_rate_limit_counters():
    """Keep in-memory rate-limit state isolated between tests."""
    previous = getattr(app.state, "disable_rate_limits", False)
    app.state.disable_rate_limits = True
    rate_limit._local_counters.clear()
    yield
    rate_limit._local_counters.clear()
    app.state.disable_rate_limits = previous


@pytest_asyncio.fixture
async def api_client(tmp_path):
    db_path = tmp_path / "vidshare.db"
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}")
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client, session_maker

    app.dependency_overrides.pop(get_db, None)
    await engine.dispose()


def auth_header_for(user: User) -> dict:
    token = create_access_token(user.id, email=user.email, username=user.username)["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_user(api_client):
    """Factory inserting a user row and returning it with a bearer header."""
    _, session_maker = api_client

    async def _make(username: str, password: str = DEFAULT_PASSWORD):
        async with session_maker() as session:
            user = User(
                username=username,
                email=f"{username}@example.com",
                fullname=username.title(),
                avatar=f"https://res.cloudinary.com/demo/image/upload/v1/vidshare/avatars/{username}.png",
                cover_image="",
                password_hash=hash_password(password),
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
        return user, auth_header_for(user)

    return _make


@pytest.fixture
def make_video(api_client):
    """Factory inserting a published video with an explicit creation time."""
    _, session_maker = api_client

    async def _make(owner: User, title: str, *, created_at=None, views: int = 0, description: str = "a video"):
        async with session_maker() as session:
            video = Video(
                owner_id=owner.id,
                video_file=f"https://res.cloudinary.com/demo/video/upload/v1/vidshare/videos/{title.replace(' ', '-')}.mp4",
                thumbnail=f"https://res.cloudinary.com/demo/image/upload/v1/vidshare/thumbnails/{title.replace(' ', '-')}.jpg",
                title=title,
                description=description,
                duration=12.5,
                views=views,
                is_published=True,
                created_at=created_at or datetime(2026, 1, 1, tzinfo=timezone.utc),
            )
            session.add(video)
            await session.commit()
            await session.refresh(video)
        return video

    return _make
