"""Shared fixtures: a file-backed SQLite database seeded with users."""
from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from sqlalchemy import Column, Date, DateTime, Float, Integer, MetaData, String, Table, Uuid
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from resource_query.config.settings import Settings
from resource_query.db.database import Base
from resource_query.models import User, UserRole
from resource_query.search import TableDescriptor

metadata = MetaData()

items_table = Table(
    "items",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(100)),
    Column("email", String(255)),
    Column("role", String(20)),
    Column("mobile_no", String(15)),
    Column("age", Integer),
    Column("score", Float),
    Column("external_id", Uuid),
    Column("birthday", Date),
    Column("created_at", DateTime),
    Column("deleted_at", DateTime),
)

ITEM_COLUMNS = (
    "id", "name", "email", "role", "mobile_no", "age", "score",
    "external_id", "birthday", "created_at", "deleted_at",
)


def build_users() -> list[User]:
    """
    25 users:
      - 12 "Alice NN": admin when NN % 3 == 0, else user; active when NN is even
      - 8 "Bob N": users, active when N < 4; Bob 0 has mobile "0070"
      - 3 "Carol N": soft-deleted admins
      - 2 "Dave N": superadmins created 2026-03-10 / 2026-03-11
    """
    users = []
    for i in range(12):
        users.append(User(
            name=f"Alice {i:02d}",
            email=f"alice{i}@example.com",
            role=UserRole.ADMIN if i % 3 == 0 else UserRole.USER,
            is_active=i % 2 == 0,
            created_at=datetime(2026, 1, 1) + timedelta(days=i),
        ))
    for i in range(8):
        users.append(User(
            name=f"Bob {i}",
            email=f"bob{i}@example.com",
            role=UserRole.USER,
            is_active=i < 4,
            mobile_no="0070" if i == 0 else None,
            created_at=datetime(2026, 2, 1) + timedelta(days=i),
        ))
    for i in range(3):
        users.append(User(
            name=f"Carol {i}",
            email=f"carol{i}@example.com",
            role=UserRole.ADMIN,
            created_at=datetime(2026, 3, 1) + timedelta(days=i),
            deleted_at=datetime(2026, 3, 5),
        ))
    for i in range(2):
        users.append(User(
            name=f"Dave {i}",
            email=f"dave{i}@corp.test",
            role=UserRole.SUPERADMIN,
            created_at=datetime(2026, 3, 10) + timedelta(days=i),
        ))
    return users


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def items() -> TableDescriptor:
    return TableDescriptor.from_table(items_table)


@pytest_asyncio.fixture
async def session_maker(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'users.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with maker() as session:
        session.add_all(build_users())
        await session.commit()

    yield maker
    await engine.dispose()
