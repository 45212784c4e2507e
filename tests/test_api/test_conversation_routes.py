import uuid

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from test_helpers import add_reservation, login_as

from paddock.models import Conversation, User, Vehicle

pytestmark = pytest.mark.asyncio


async def _create(client: AsyncClient, vehicle: Vehicle, renter: User, owner: User):
    response = await client.post(
        "/conversations",
        json={
            "vehicle_id": str(vehicle.id),
            "renter_id": str(renter.id),
            "owner_id": str(owner.id),
        },
    )
    assert response.status_code == 201, response.text
    return response.json()["conversation_id"]


async def test_create_conversation_is_idempotent(
    renter_client: AsyncClient,
    db_test_session_manager: async_sessionmaker[AsyncSession],
    renter_user: User,
    owner_user: User,
    listed_vehicle: Vehicle,
):
    first = await _create(renter_client, listed_vehicle, renter_user, owner_user)
    second = await _create(renter_client, listed_vehicle, renter_user, owner_user)
    assert first == second

    async with db_test_session_manager() as session:
        rows = (await session.execute(select(Conversation))).scalars().all()
        assert len(rows) == 1
        assert rows[0].is_active is False


async def test_create_conversation_for_others_is_forbidden(
    renter_client: AsyncClient,
    owner_user: User,
    outsider_user: User,
    listed_vehicle: Vehicle,
):
    response = await renter_client.post(
        "/conversations",
        json={
            "vehicle_id": str(listed_vehicle.id),
            "renter_id": str(outsider_user.id),
            "owner_id": str(owner_user.id),
        },
    )
    assert response.status_code == 403


async def test_create_conversation_rejects_unknown_references(
    renter_client: AsyncClient, renter_user: User, owner_user: User
):
    response = await renter_client.post(
        "/conversations",
        json={
            "vehicle_id": str(uuid.uuid4()),
            "renter_id": str(renter_user.id),
            "owner_id": str(owner_user.id),
        },
    )
    assert response.status_code == 404

    response = await renter_client.post(
        "/conversations",
        json={
            "vehicle_id": str(uuid.uuid4()),
            "renter_id": str(renter_user.id),
            "owner_id": str(renter_user.id),
        },
    )
    assert response.status_code == 400


async def test_lookup_conversation(
    renter_client: AsyncClient,
    renter_user: User,
    owner_user: User,
    listed_vehicle: Vehicle,
):
    params = {
        "vehicle_id": str(listed_vehicle.id),
        "renter_id": str(renter_user.id),
        "owner_id": str(owner_user.id),
    }
    response = await renter_client.get("/conversations/lookup", params=params)
    assert response.status_code == 200
    assert response.json() is None

    conversation_id = await _create(
        renter_client, listed_vehicle, renter_user, owner_user
    )
    response = await renter_client.get("/conversations/lookup", params=params)
    body = response.json()
    assert body["id"] == conversation_id
    assert body["vehicle"]["model"] == listed_vehicle.model
    assert body["owner"]["name"] == "Olive Owner"


async def test_list_user_conversations(
    renter_client: AsyncClient,
    renter_user: User,
    owner_user: User,
    listed_vehicle: Vehicle,
):
    conversation_id = await _create(
        renter_client, listed_vehicle, renter_user, owner_user
    )
    url = f"/users/{renter_user.id}/conversations"

    # Not listed until the first message
    response = await renter_client.get(url, params={"role": "renter"})
    assert response.json() == []

    await renter_client.post(
        "/messages",
        json={"conversation_id": conversation_id, "content": "Is it available?"},
    )

    response = await renter_client.get(url, params={"role": "renter"})
    assert response.status_code == 200
    body = response.json()
    assert [item["id"] for item in body] == [conversation_id]
    assert body[0]["subject"] == {
        "kind": "rental",
        "vehicle_id": str(listed_vehicle.id),
    }
    assert body[0]["last_message_text"] == "Is it available?"
    assert body[0]["unread_count_owner"] == 1

    response = await renter_client.get(url, params={"role": "owner"})
    assert response.json() == []

    response = await renter_client.get(
        f"/users/{owner_user.id}/conversations", params={"role": "owner"}
    )
    assert response.status_code == 403

    response = await renter_client.get(url)
    assert response.status_code == 422


async def test_get_conversation(
    test_client: AsyncClient,
    renter_user: User,
    owner_user: User,
    outsider_user: User,
    listed_vehicle: Vehicle,
):
    await login_as(test_client, renter_user)
    conversation_id = await _create(
        test_client, listed_vehicle, renter_user, owner_user
    )

    response = await test_client.get(f"/conversations/{conversation_id}")
    assert response.status_code == 200
    assert response.json()["renter"]["id"] == str(renter_user.id)

    response = await test_client.get(f"/conversations/{uuid.uuid4()}")
    assert response.status_code == 404

    await login_as(test_client, outsider_user)
    response = await test_client.get(f"/conversations/{conversation_id}")
    assert response.status_code == 403


async def test_delete_conversation_hides_then_purges(
    test_client: AsyncClient,
    db_test_session_manager: async_sessionmaker[AsyncSession],
    renter_user: User,
    owner_user: User,
    listed_vehicle: Vehicle,
):
    await login_as(test_client, renter_user)
    conversation_id = await _create(
        test_client, listed_vehicle, renter_user, owner_user
    )

    response = await test_client.delete(f"/conversations/{conversation_id}")
    assert response.status_code == 200
    assert response.json() == {
        "conversation_id": conversation_id,
        "hard_deleted": False,
    }
    response = await test_client.get(f"/conversations/{conversation_id}")
    assert response.status_code == 404

    await login_as(test_client, owner_user)
    response = await test_client.get(f"/conversations/{conversation_id}")
    assert response.status_code == 200

    response = await test_client.delete(f"/conversations/{conversation_id}")
    assert response.json()["hard_deleted"] is True

    async with db_test_session_manager() as session:
        remaining = await session.get(Conversation, uuid.UUID(conversation_id))
        assert remaining is None


async def test_archive_conversation(
    renter_client: AsyncClient,
    renter_user: User,
    owner_user: User,
    listed_vehicle: Vehicle,
):
    conversation_id = await _create(
        renter_client, listed_vehicle, renter_user, owner_user
    )
    await renter_client.post(
        "/messages", json={"conversation_id": conversation_id, "content": "Hi"}
    )

    response = await renter_client.post(f"/conversations/{conversation_id}/archive")
    assert response.status_code == 200

    response = await renter_client.get(
        f"/users/{renter_user.id}/conversations", params={"role": "renter"}
    )
    assert response.json() == []


async def test_mark_conversation_read(
    test_client: AsyncClient,
    renter_user: User,
    owner_user: User,
    listed_vehicle: Vehicle,
):
    await login_as(test_client, renter_user)
    conversation_id = await _create(
        test_client, listed_vehicle, renter_user, owner_user
    )
    await test_client.post(
        "/messages", json={"conversation_id": conversation_id, "content": "Hello"}
    )

    await login_as(test_client, owner_user)
    response = await test_client.get(f"/users/{owner_user.id}/unread-count")
    assert response.json() == {"user_id": str(owner_user.id), "unread_count": 1}

    response = await test_client.post(f"/conversations/{conversation_id}/read")
    assert response.status_code == 200

    response = await test_client.get(f"/users/{owner_user.id}/unread-count")
    assert response.json()["unread_count"] == 0

    response = await test_client.post(
        f"/conversations/{conversation_id}/read",
        params={"user_id": str(renter_user.id)},
    )
    assert response.status_code == 403


async def test_link_conversation_to_reservation(
    renter_client: AsyncClient,
    db_test_session_manager: async_sessionmaker[AsyncSession],
    renter_user: User,
    owner_user: User,
    listed_vehicle: Vehicle,
):
    conversation_id = await _create(
        renter_client, listed_vehicle, renter_user, owner_user
    )
    async with db_test_session_manager() as session:
        reservation = await add_reservation(
            session, listed_vehicle, renter_user, owner_user
        )

    response = await renter_client.put(
        f"/conversations/{conversation_id}/reservation",
        json={"reservation_id": str(reservation.id)},
    )
    assert response.status_code == 200

    response = await renter_client.get(f"/conversations/{conversation_id}")
    assert response.json()["reservation"]["status"] == "confirmed"

    response = await renter_client.put(
        f"/conversations/{conversation_id}/reservation",
        json={"reservation_id": str(uuid.uuid4())},
    )
    assert response.status_code == 404


async def test_create_motorsports_conversation(
    renter_client: AsyncClient,
    owner_user: User,
):
    response = await renter_client.post(
        "/conversations/motorsports",
        json={"participant_id": str(owner_user.id), "conversation_type": "team"},
    )
    assert response.status_code == 201
    conversation_id = response.json()["conversation_id"]

    response = await renter_client.get(f"/conversations/{conversation_id}")
    body = response.json()
    assert body["conversation_type"] == "team"
    assert body["subject"] is None
    assert body["vehicle"] is None

    response = await renter_client.post(
        "/conversations/motorsports",
        json={"participant_id": str(owner_user.id), "conversation_type": "rental"},
    )
    assert response.status_code == 400
