from __future__ import annotations

from hanumant.services.chat import private_room_id, room_members


def test_private_room_id_is_order_independent():
    assert private_room_id(7, 3) == private_room_id(3, 7) == "3_7"
    assert room_members("3_7") == {"3", "7"}


def test_group_chat_round_trip(client, authorize, make_member):
    asha = make_member()
    authorize(asha.uid)

    response = client.post("/chat/group", json={"content": "  Library closes early today  "})
    assert response.status_code == 201
    assert response.json()["content"] == "Library closes early today"
    assert response.json()["room_id"] == "group"

    client.post("/chat/group", json={"content": "🙏", "type": "emoji"})

    messages = client.get("/chat/group").json()
    assert [item["type"] for item in messages] == ["text", "emoji"]
    assert messages[0]["sender_name"] == "Asha Gupta"


def test_blank_message_is_rejected(client, as_member):
    assert client.post("/chat/group", json={"content": "   "}).status_code == 400


def test_unknown_message_type_is_rejected(client, as_member):
    assert client.post("/chat/group", json={"content": "hi", "type": "video"}).status_code == 422


def test_private_messages_are_shared_by_both_members(client, authorize, make_member):
    asha = make_member()
    vikram = make_member(name="Vikram Singh", email="vikram@hanumantlibrary.in")

    authorize(asha.uid)
    sent = client.post(f"/chat/private/{vikram.id}", json={"content": "Notes for tomorrow?"})
    assert sent.status_code == 201
    assert sent.json()["room_id"] == private_room_id(asha.id, vikram.id)

    authorize(vikram.uid)
    thread = client.get(f"/chat/private/{asha.id}").json()
    assert [item["content"] for item in thread] == ["Notes for tomorrow?"]

    contacts = client.get("/chat/contacts").json()
    assert [contact["name"] for contact in contacts] == ["Asha Gupta"]


def test_messaging_yourself_is_rejected(client, as_member):
    response = client.post(f"/chat/private/{as_member.id}", json={"content": "hello me"})
    assert response.status_code == 400


def test_disabled_chat_blocks_members(client, authorize, admin, member):
    authorize(admin.uid)
    assert client.put("/settings/chat", json={"chat_enabled": False}).json() == {"chat_enabled": False}

    authorize(member.uid)
    assert client.get("/settings/chat").json() == {"chat_enabled": False}
    assert client.post("/chat/group", json={"content": "anyone here?"}).status_code == 403

    authorize(admin.uid)
    client.put("/settings/chat", json={"chat_enabled": True})
    authorize(member.uid)
    assert client.post("/chat/group", json={"content": "anyone here?"}).status_code == 201


def test_members_cannot_toggle_chat(client, as_member):
    assert client.put("/settings/chat", json={"chat_enabled": False}).status_code == 403
