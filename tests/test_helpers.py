import uuid
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from paddock.auth_config import transport
from paddock.core.clock import utcnow
from paddock.models import (
    Conversation,
    DriverProfile,
    Message,
    Reservation,
    Team,
    User,
    Vehicle,
)
from paddock.schemas.auth import AuthContext

TEST_PASSWORD = "password123"


def create_test_user(
    id: Optional[UUID] = None,
    name: Optional[str] = None,
    email: Optional[str] = None,
    hashed_password: Optional[str] = None,
    is_active: bool = True,
    is_superuser: bool = False,
    is_verified: bool = True,
) -> User:
    """Creates a User instance with default values for testing."""
    unique_suffix = uuid.uuid4()
    return User(
        id=id or unique_suffix,
        name=name or f"testuser_{unique_suffix}",
        email=email or f"test_{unique_suffix}@example.com",
        hashed_password=hashed_password or f"password_{unique_suffix}",
        is_active=is_active,
        is_superuser=is_superuser,
        is_verified=is_verified,
    )


def auth_for(user: User) -> AuthContext:
    return AuthContext(subject=user.id)


async def add_user(session: AsyncSession, **kwargs) -> User:
    user = create_test_user(**kwargs)
    session.add(user)
    await session.commit()
    return user


async def add_vehicle(
    session: AsyncSession,
    owner: User,
    make: str = "Porsche",
    model: str = "911 GT3",
    year: int = 2022,
) -> Vehicle:
    vehicle = Vehicle(owner_id=owner.id, make=make, model=model, year=year)
    session.add(vehicle)
    await session.commit()
    return vehicle


async def add_team(session: AsyncSession, owner: User, name: str = "Apex Racing") -> Team:
    team = Team(owner_id=owner.id, name=name)
    session.add(team)
    await session.commit()
    return team


async def add_driver_profile(
    session: AsyncSession, user: User, headline: str = "Club racer, 5 seasons"
) -> DriverProfile:
    profile = DriverProfile(user_id=user.id, headline=headline)
    session.add(profile)
    await session.commit()
    return profile


async def add_reservation(
    session: AsyncSession,
    vehicle: Vehicle,
    renter: User,
    owner: User,
    status: str = "confirmed",
) -> Reservation:
    reservation = Reservation(
        vehicle_id=vehicle.id,
        renter_id=renter.id,
        owner_id=owner.id,
        start_date=date(2026, 11, 1),
        end_date=date(2026, 11, 3),
        status=status,
        total_amount=450.0,
    )
    session.add(reservation)
    await session.commit()
    return reservation


async def add_message(
    session: AsyncSession,
    conversation_id: UUID,
    sender: User,
    content: str,
    created_at: Optional[datetime] = None,
    is_read: bool = False,
) -> Message:
    """Inserts a message directly, bypassing the conversation bookkeeping."""
    now = created_at or utcnow()
    message = Message(
        conversation_id=conversation_id,
        sender_id=sender.id,
        content=content,
        is_read=is_read,
        created_at=now,
        updated_at=now,
    )
    session.add(message)
    await session.commit()
    return message


async def reload_conversation(
    session: AsyncSession, conversation_id: UUID
) -> Optional[Conversation]:
    """Fetches the stored row, overwriting any stale state in the identity map."""
    stmt = (
        select(Conversation)
        .filter(Conversation.id == conversation_id)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalars().first()


async def reload_message(session: AsyncSession, message_id: UUID) -> Optional[Message]:
    stmt = (
        select(Message)
        .filter(Message.id == message_id)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalars().first()


async def login_as(client: AsyncClient, user: User) -> None:
    """Logs the user in and points the client's auth cookie at their session."""
    res = await client.post(
        "/auth/jwt/login", data={"username": user.email, "password": TEST_PASSWORD}
    )
    assert res.status_code == 204, res.text

    # The cookie is marked secure, so httpx will not replay it over plain http
    cookie = res.headers["Set-Cookie"]
    access_token = cookie.split(";")[0].split("=")[1]
    client.headers["Cookie"] = f"{transport.cookie_name}={access_token}"
