from typing import Any

import pytest
from asyncstdlib import anext
from fastapi_users.db import SQLAlchemyUserDatabase
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from test_helpers import TEST_PASSWORD, add_vehicle, login_as

from paddock.auth_config import get_user_manager
from paddock.models import User, Vehicle
from paddock.schemas.user import UserCreate


# Helper function to create a user (not a fixture itself)
async def register_test_user(
    session_maker: async_sessionmaker[AsyncSession],
    user_data: UserCreate,
    user_manager_dependency: Any,
) -> User:
    async with session_maker() as session:
        user_manager_gen = user_manager_dependency(
            SQLAlchemyUserDatabase(session, User)
        )
        user_manager = await anext(user_manager_gen)
        try:
            user = await user_manager.create(user_data)
            await session.commit()
            await session.refresh(user)
            return user
        finally:
            try:
                await anext(user_manager_gen)
            except StopAsyncIteration:
                pass
            if hasattr(user_manager_gen, "aclose"):
                await user_manager_gen.aclose()


async def _register(
    db_test_session_manager: async_sessionmaker[AsyncSession], name: str
) -> User:
    user_data = UserCreate(
        email=f"{name.split()[0].lower()}@example.com",
        password=TEST_PASSWORD,
        name=name,
    )
    return await register_test_user(db_test_session_manager, user_data, get_user_manager)


@pytest.fixture(scope="function")
async def renter_user(
    db_test_session_manager: async_sessionmaker[AsyncSession],
) -> User:
    return await _register(db_test_session_manager, "Riley Renter")


@pytest.fixture(scope="function")
async def owner_user(
    db_test_session_manager: async_sessionmaker[AsyncSession],
) -> User:
    return await _register(db_test_session_manager, "Olive Owner")


@pytest.fixture(scope="function")
async def outsider_user(
    db_test_session_manager: async_sessionmaker[AsyncSession],
) -> User:
    return await _register(db_test_session_manager, "Oscar Outsider")


@pytest.fixture(scope="function")
async def listed_vehicle(
    db_test_session_manager: async_sessionmaker[AsyncSession], owner_user: User
) -> Vehicle:
    async with db_test_session_manager() as session:
        return await add_vehicle(session, owner_user)


@pytest.fixture(scope="function")
async def renter_client(test_client: AsyncClient, renter_user: User) -> AsyncClient:
    await login_as(test_client, renter_user)
    yield test_client
    test_client.headers.pop("Cookie", None)
