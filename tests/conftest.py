"""Fixtures for the connector tests."""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from ally.authors import AuthorResolver
from ally.models import RoleAssignment
from database.models import Base
from database.seed import populate

from .fakes import COURSE_A, FakeIdentityProvider


@pytest.fixture
def identity() -> FakeIdentityProvider:
    return FakeIdentityProvider(
        admins={1, 2},
        role_ids={3, 4},
        assignments={
            COURSE_A.id: [
                RoleAssignment(userid=10, roleid=3, contextid=COURSE_A.id),
                RoleAssignment(userid=11, roleid=5, contextid=COURSE_A.id),
                RoleAssignment(userid=0, roleid=3, contextid=COURSE_A.id),
                RoleAssignment(userid=2, roleid=4, contextid=COURSE_A.id),
            ],
        },
    )


@pytest.fixture
def authors(identity: FakeIdentityProvider) -> AuthorResolver:
    return AuthorResolver(identity)


@pytest_asyncio.fixture
async def db_sessionmaker(tmp_path) -> AsyncGenerator[async_sessionmaker, None]:
    """A fresh sqlite database holding the demo site."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ally_test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with maker() as session:
        await populate(session)
        await session.commit()
    yield maker
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_sessionmaker: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    async with db_sessionmaker() as session:
        yield session
