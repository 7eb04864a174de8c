from __future__ import annotations

from datetime import datetime

from hanumant.models.member import Member


def test_profile_and_profile_picture(client, db_session, as_member):
    profile = client.get("/me").json()
    assert profile["email"] == "asha@hanumantlibrary.in"
    assert profile["profile_pic"] is None

    response = client.patch("/me/profile-pic", json={"profile_pic": "data:image/jpeg;base64,AAAA"})

    assert response.status_code == 200
    assert response.json()["profile_pic"] == "data:image/jpeg;base64,AAAA"
    db_session.expire_all()
    assert db_session.get(Member, as_member.id).profile_pic == "data:image/jpeg;base64,AAAA"


def test_self_check_in_and_out(client, clock, as_member):
    assert client.get("/me/attendance/current").json() == {"checked_in": False, "session": None}

    entry = client.post("/me/attendance/entry")
    assert entry.status_code == 201

    current = client.get("/me/attendance/current").json()
    assert current["checked_in"] is True
    assert current["session"]["id"] == entry.json()["id"]

    assert client.post("/me/attendance/entry").status_code == 409

    clock.advance_to(datetime(2024, 1, 5, 12, 45))
    exit_response = client.post("/me/attendance/exit")
    assert exit_response.status_code == 200
    assert exit_response.json()["duration"] == 225

    assert client.post("/me/attendance/exit").status_code == 409
    history = client.get("/me/attendance").json()
    assert len(history) == 1


def test_inactive_member_cannot_check_in(client, authorize, make_member):
    inactive = make_member(status="inactive")
    authorize(inactive.uid)

    assert client.post("/me/attendance/entry").status_code == 403


def test_my_dues_are_reconciled_and_scoped(client, clock, authorize, make_member):
    asha = make_member()
    make_member(name="Vikram Singh", email="vikram@hanumantlibrary.in")
    authorize(asha.uid)
    clock.advance_to(datetime(2024, 2, 2, 10, 0))

    dues = client.get("/me/dues").json()

    assert len(dues) == 1
    assert dues[0]["member_id"] == asha.id
    assert dues[0]["status"] == "overdue"


def test_admins_have_no_self_service_profile(client, as_admin):
    assert client.get("/me").status_code == 403
