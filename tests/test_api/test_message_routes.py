import uuid
from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from test_helpers import add_message, login_as

from paddock.core.clock import utcnow
from paddock.models import User, Vehicle

pytestmark = pytest.mark.asyncio


async def _send_first(
    client: AsyncClient, vehicle: Vehicle, renter: User, owner: User, content: str
) -> dict:
    response = await client.post(
        "/messages",
        json={
            "vehicle_id": str(vehicle.id),
            "renter_id": str(renter.id),
            "owner_id": str(owner.id),
            "content": content,
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


async def test_send_and_list_messages(
    test_client: AsyncClient,
    renter_user: User,
    owner_user: User,
    listed_vehicle: Vehicle,
):
    await login_as(test_client, renter_user)
    sent = await _send_first(
        test_client, listed_vehicle, renter_user, owner_user, "Free next weekend?"
    )
    conversation_id = sent["conversation_id"]

    await login_as(test_client, owner_user)
    response = await test_client.post(
        "/messages",
        json={
            "conversation_id": conversation_id,
            "content": "Yes it is",
            "reply_to_id": sent["message_id"],
        },
    )
    assert response.status_code == 201
    assert response.json()["conversation_id"] == conversation_id

    response = await test_client.get(f"/conversations/{conversation_id}/messages")
    assert response.status_code == 200
    messages = response.json()
    assert [message["content"] for message in messages] == [
        "Free next weekend?",
        "Yes it is",
    ]
    assert messages[0]["sender"]["name"] == "Riley Renter"
    assert messages[1]["replied_to_message"]["id"] == sent["message_id"]

    response = await test_client.get(
        f"/conversations/{conversation_id}/messages", params={"limit": 1}
    )
    assert [message["content"] for message in response.json()] == ["Yes it is"]


async def test_send_message_errors(
    test_client: AsyncClient,
    renter_user: User,
    owner_user: User,
    outsider_user: User,
    listed_vehicle: Vehicle,
):
    await login_as(test_client, renter_user)
    sent = await _send_first(test_client, listed_vehicle, renter_user, owner_user, "Hi")

    response = await test_client.post(
        "/messages",
        json={"vehicle_id": str(listed_vehicle.id), "content": "Incomplete"},
    )
    assert response.status_code == 400

    response = await test_client.post(
        "/messages", json={"conversation_id": str(uuid.uuid4()), "content": "Lost"}
    )
    assert response.status_code == 404

    response = await test_client.post(
        "/messages", json={"conversation_id": sent["conversation_id"]}
    )
    assert response.status_code == 422

    await login_as(test_client, outsider_user)
    response = await test_client.post(
        "/messages",
        json={"conversation_id": sent["conversation_id"], "content": "Hello?"},
    )
    assert response.status_code == 403

    response = await test_client.get(
        f"/conversations/{sent['conversation_id']}/messages"
    )
    assert response.status_code == 403


async def test_edit_message(
    test_client: AsyncClient,
    db_test_session_manager: async_sessionmaker[AsyncSession],
    renter_user: User,
    owner_user: User,
    listed_vehicle: Vehicle,
):
    await login_as(test_client, renter_user)
    sent = await _send_first(
        test_client, listed_vehicle, renter_user, owner_user, "Pickup at 9"
    )

    response = await test_client.patch(
        f"/messages/{sent['message_id']}", json={"content": "Pickup at 10"}
    )
    assert response.status_code == 200
    assert response.json() == {"message_id": sent["message_id"]}

    async with db_test_session_manager() as session:
        old = await add_message(
            session,
            uuid.UUID(sent["conversation_id"]),
            renter_user,
            "Ancient",
            created_at=utcnow() - timedelta(hours=1),
        )
    response = await test_client.patch(f"/messages/{old.id}", json={"content": "New"})
    assert response.status_code == 400

    await login_as(test_client, owner_user)
    response = await test_client.patch(
        f"/messages/{sent['message_id']}", json={"content": "Mine now"}
    )
    assert response.status_code == 403

    response = await test_client.get(
        f"/conversations/{sent['conversation_id']}/messages"
    )
    edited = next(m for m in response.json() if m["id"] == sent["message_id"])
    assert edited["content"] == "Pickup at 10"
    assert edited["edited_at"] is not None


async def test_delete_message(
    test_client: AsyncClient,
    renter_user: User,
    owner_user: User,
    listed_vehicle: Vehicle,
):
    await login_as(test_client, renter_user)
    sent = await _send_first(test_client, listed_vehicle, renter_user, owner_user, "Oops")

    await login_as(test_client, owner_user)
    response = await test_client.delete(f"/messages/{sent['message_id']}")
    assert response.status_code == 403

    await login_as(test_client, renter_user)
    response = await test_client.delete(f"/messages/{sent['message_id']}")
    assert response.status_code == 200

    response = await test_client.delete(f"/messages/{sent['message_id']}")
    assert response.status_code == 404


async def test_mark_message_read_and_unread_count(
    test_client: AsyncClient,
    renter_user: User,
    owner_user: User,
    listed_vehicle: Vehicle,
):
    await login_as(test_client, renter_user)
    sent = await _send_first(test_client, listed_vehicle, renter_user, owner_user, "1")
    await test_client.post(
        "/messages", json={"conversation_id": sent["conversation_id"], "content": "2"}
    )

    await login_as(test_client, owner_user)
    url = f"/users/{owner_user.id}/unread-count"
    assert (await test_client.get(url)).json()["unread_count"] == 2

    response = await test_client.post(f"/messages/{sent['message_id']}/read")
    assert response.status_code == 200
    assert (await test_client.get(url)).json()["unread_count"] == 1

    response = await test_client.get(f"/users/{renter_user.id}/unread-count")
    assert response.status_code == 403
