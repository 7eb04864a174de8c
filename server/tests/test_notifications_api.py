from __future__ import annotations


def _send(client, recipient_id="all", title="Holiday", message="Closed on Sunday"):
    return client.post("/notifications", json={"title": title, "message": message, "recipient_id": recipient_id})


def test_broadcast_and_direct_notifications(client, authorize, admin, make_member):
    asha = make_member()
    vikram = make_member(name="Vikram Singh", email="vikram@hanumantlibrary.in")

    authorize(admin.uid)
    assert _send(client).status_code == 201
    assert _send(client, recipient_id=str(asha.id), title="Fee reminder", message="Please clear dues").status_code == 201

    authorize(asha.uid)
    titles = {item["title"] for item in client.get("/notifications").json()}
    assert titles == {"Holiday", "Fee reminder"}
    assert client.get("/notifications/unread-count").json() == {"unread": 2}

    authorize(vikram.uid)
    assert [item["title"] for item in client.get("/notifications").json()] == ["Holiday"]


def test_mark_read_tracks_each_member(client, authorize, admin, make_member):
    asha = make_member()
    vikram = make_member(name="Vikram Singh", email="vikram@hanumantlibrary.in")
    authorize(admin.uid)
    notification_id = _send(client).json()["id"]

    authorize(asha.uid)
    response = client.post(f"/notifications/{notification_id}/read")
    assert response.status_code == 200
    assert response.json()["read"] is True
    assert client.get("/notifications/unread-count").json() == {"unread": 0}

    authorize(vikram.uid)
    assert client.get("/notifications/unread-count").json() == {"unread": 1}
    assert client.post("/notifications/read-all").json() == {"marked": 1}
    assert client.post("/notifications/read-all").json() == {"marked": 0}


def test_members_cannot_read_someone_elses_notification(client, authorize, admin, make_member):
    asha = make_member()
    vikram = make_member(name="Vikram Singh", email="vikram@hanumantlibrary.in")
    authorize(admin.uid)
    notification_id = _send(client, recipient_id=str(asha.id)).json()["id"]

    authorize(vikram.uid)
    assert client.post(f"/notifications/{notification_id}/read").status_code == 404


def test_send_validates_recipient_and_content(client, as_admin):
    assert _send(client, recipient_id="999").status_code == 404
    assert _send(client, recipient_id="everyone").status_code == 400
    assert _send(client, title="   ").status_code == 400


def test_admin_lists_all_notifications(client, as_admin, member):
    _send(client)
    _send(client, recipient_id=str(member.id))
    assert len(client.get("/notifications").json()) == 2


def test_members_cannot_send_notifications(client, as_member):
    assert _send(client).status_code == 403
