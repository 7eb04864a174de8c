from __future__ import annotations

from datetime import date, datetime

from hanumant.core.config import settings


def _dues(client, member_id):
    return client.get(f"/dues/member/{member_id}").json()


def test_list_dues_reconciles_overdue_on_read(client, clock, as_admin, member):
    clock.advance_to(datetime(2024, 2, 5, 10, 0))

    response = client.get("/dues")

    assert response.status_code == 200
    dues = response.json()
    assert len(dues) == 1
    assert dues[0]["status"] == "overdue"
    assert dues[0]["due_date"] == "2024-01-31"


def test_pending_dues_include_overdue(client, clock, as_admin, make_member):
    make_member()
    make_member(name="Vikram Singh", email="vikram@hanumantlibrary.in", join_date=date(2024, 1, 20))
    clock.advance_to(datetime(2024, 2, 5, 10, 0))

    pending = client.get("/dues/pending").json()

    assert [item["status"] for item in pending] == ["overdue", "pending"]
    assert [item["member_name"] for item in pending] == ["Asha Gupta", "Vikram Singh"]


def test_mark_paid_chains_next_cycle(client, clock, as_admin, member):
    clock.advance_to(datetime(2024, 1, 20, 11, 0))
    due = _dues(client, member.id)[0]

    response = client.post(f"/dues/{due['id']}/pay")

    assert response.status_code == 200
    paid = response.json()
    assert paid["status"] == "paid"
    assert paid["receipt_number"].startswith("RCP-")
    dues = _dues(client, member.id)
    assert {(item["period_start"], item["period_end"], item["status"]) for item in dues} == {
        ("2024-01-01", "2024-01-31", "paid"),
        ("2024-01-31", "2024-03-01", "pending"),
    }

    again = client.post(f"/dues/{due['id']}/pay")
    assert again.status_code == 409


def test_mark_paid_can_change_next_cycle_amount(client, as_admin, member):
    due = _dues(client, member.id)[0]

    client.post(f"/dues/{due['id']}/pay", json={"next_amount": 650})

    upcoming = [item for item in _dues(client, member.id) if item["status"] == "pending"]
    assert upcoming[0]["amount"] == 650


def test_manual_payment_requires_confirmation_code(client, as_admin, member):
    payload = {
        "member_id": member.id,
        "period_start": "2023-12-01",
        "period_end": "2023-12-31",
        "amount": 500,
        "payment_date": "2023-12-02",
        "confirmation_code": "0000",
    }
    assert client.post("/dues/manual", json=payload).status_code == 400

    payload["confirmation_code"] = settings.PAYMENT_CONFIRMATION_CODE
    response = client.post("/dues/manual", json=payload)

    assert response.status_code == 201
    record = response.json()
    assert record["status"] == "paid"
    assert record["paid_date"].startswith("2023-12-02")
    assert len(_dues(client, member.id)) == 2


def test_manual_payment_for_unknown_member_is_404(client, as_admin):
    payload = {
        "member_id": 404,
        "period_start": "2024-01-01",
        "period_end": "2024-01-31",
        "amount": 500,
        "confirmation_code": settings.PAYMENT_CONFIRMATION_CODE,
    }
    assert client.post("/dues/manual", json=payload).status_code == 404


def test_delete_payment_and_receipts(client, as_admin, member):
    due = _dues(client, member.id)[0]
    client.post(f"/dues/{due['id']}/pay")

    receipts = client.get("/dues/receipts").json()
    assert [item["id"] for item in receipts] == [due["id"]]

    assert client.delete(f"/dues/{due['id']}").status_code == 204
    assert client.delete(f"/dues/{due['id']}").status_code == 404
    assert client.get("/dues/receipts").json() == []


def test_fee_transactions_export(client, clock, as_admin, member):
    clock.advance_to(datetime(2024, 1, 20, 11, 0))
    due = _dues(client, member.id)[0]
    paid = client.post(f"/dues/{due['id']}/pay").json()

    response = client.get("/dues/export.csv", params={"period": "weekly"})

    assert response.status_code == 200
    assert "fee_transactions_weekly_2024-01-20.csv" in response.headers["content-disposition"]
    lines = response.text.splitlines()
    assert lines[0] == "Receipt No,Member Name,Period,Amount,Paid Date"
    assert lines[1] == f"{paid['receipt_number']},Asha Gupta,01 Jan - 31 Jan 2024,Rs. 500,20 Jan 2024"
    assert len(lines) == 2


def test_fee_transactions_export_skips_payments_outside_window(client, clock, as_admin, member):
    due = _dues(client, member.id)[0]
    client.post(f"/dues/{due['id']}/pay")
    clock.advance_to(datetime(2024, 1, 20, 11, 0))

    response = client.get("/dues/export.csv", params={"period": "daily"})

    assert response.text.splitlines() == ["Receipt No,Member Name,Period,Amount,Paid Date"]


def test_export_rejects_unknown_period(client, as_admin):
    assert client.get("/dues/export.csv", params={"period": "hourly"}).status_code == 422


def test_members_cannot_manage_dues(client, as_member):
    assert client.get("/dues").status_code == 403
