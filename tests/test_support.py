import pytest
from conftest import auth_headers, make_owner, make_user

from clubicles.config import ADMIN_EMAIL


@pytest.fixture
def member(db):
    return make_user(db)


@pytest.fixture
def admin(db):
    return make_user(db, email="admin@example.com", role="admin")


def open_ticket(client, user, **overrides):
    payload = {"subject": "Double charged", "description": "Card was charged twice", "category": "payment"}
    payload.update(overrides)
    return client.post("/api/support/tickets", json=payload, headers=auth_headers(user))


def test_member_opens_ticket(client, member):
    response = open_ticket(client, member)

    assert response.status_code == 201
    ticket = response.json()["ticket"]
    assert ticket["ticket_number"].startswith("TKT-")
    assert ticket["status"] == "open"
    assert ticket["priority"] == "medium"
    assert ticket["user_role"] == "user"
    assert ticket["messages"] == []


def test_new_ticket_alerts_the_admin_inbox(client, db, member, sent_emails):
    ticket = open_ticket(client, member, priority="urgent").json()["ticket"]

    assert [mail["to"] for mail in sent_emails] == [ADMIN_EMAIL]
    assert sent_emails[0]["subject"] == f"[URGENT] New support ticket {ticket['ticket_number']}"
    assert member.email in sent_emails[0]["body"]

    db.refresh(member)
    assert [t.id for t in member.support_tickets] == [ticket["id"]]


def test_ticket_fields_are_validated(client, member):
    assert open_ticket(client, member, category="complaint").status_code == 422
    assert open_ticket(client, member, subject="<p></p>").status_code == 400


def test_tickets_are_private(client, db, member):
    ticket_id = open_ticket(client, member).json()["ticket"]["id"]
    other = make_user(db, email="other@example.com")

    assert client.get("/api/support/tickets", headers=auth_headers(other)).json()["total"] == 0
    assert client.get(f"/api/support/tickets/{ticket_id}", headers=auth_headers(other)).status_code == 404
    assert client.get(f"/api/support/tickets/{ticket_id}", headers=auth_headers(member)).status_code == 200


def test_owner_tickets_are_tagged(client, db):
    owner = make_owner(db)

    response = client.post(
        "/api/owner/support",
        json={"subject": "Payout delayed", "description": "Still waiting", "priority": "high"},
        headers=auth_headers(owner.user),
    )

    assert response.status_code == 201
    assert response.json()["ticket"]["user_role"] == "owner"
    assert client.get("/api/owner/support", headers=auth_headers(owner.user)).json()["total"] == 1


def test_admin_reply_moves_ticket_in_progress_and_emails(client, member, admin, sent_emails):
    ticket_id = open_ticket(client, member).json()["ticket"]["id"]
    sent_emails.clear()

    response = client.post(
        f"/api/admin/support/{ticket_id}/respond",
        json={"message": "Refund issued"},
        headers=auth_headers(admin),
    )

    assert response.status_code == 201
    assert response.json()["message"]["sender_type"] == "admin"
    ticket = client.get(f"/api/support/tickets/{ticket_id}", headers=auth_headers(member)).json()["ticket"]
    assert ticket["status"] == "in_progress"
    assert [m["message"] for m in ticket["messages"]] == ["Refund issued"]
    assert [mail["to"] for mail in sent_emails] == [member.email]


def test_internal_notes_stay_hidden(client, member, admin, sent_emails):
    ticket_id = open_ticket(client, member).json()["ticket"]["id"]
    sent_emails.clear()

    client.post(
        f"/api/admin/support/{ticket_id}/respond",
        json={"message": "Check gateway logs", "is_internal": True},
        headers=auth_headers(admin),
    )

    ticket = client.get(f"/api/support/tickets/{ticket_id}", headers=auth_headers(member)).json()["ticket"]
    assert ticket["messages"] == []
    assert sent_emails == []

    admin_view = client.get("/api/admin/support", headers=auth_headers(admin)).json()["tickets"][0]
    assert [m["is_internal"] for m in admin_view["messages"]] == [True]
    assert admin_view["user"]["email"] == member.email


def test_closed_ticket_rejects_messages(client, member, admin):
    ticket_id = open_ticket(client, member).json()["ticket"]["id"]

    response = client.post(
        f"/api/support/tickets/{ticket_id}/messages", json={"message": "Any update?"}, headers=auth_headers(member)
    )
    assert response.status_code == 201

    closed = client.patch(
        f"/api/admin/support/{ticket_id}", json={"status": "closed"}, headers=auth_headers(admin)
    )
    assert closed.status_code == 200
    assert closed.json()["ticket"]["closed_at"] is not None

    response = client.post(
        f"/api/support/tickets/{ticket_id}/messages", json={"message": "Hello?"}, headers=auth_headers(member)
    )
    assert response.status_code == 400


def test_admin_filters_tickets(client, member, admin):
    open_ticket(client, member, priority="urgent")
    open_ticket(client, member, subject="Login", category="account")

    body = client.get("/api/admin/support", params={"priority": "urgent"}, headers=auth_headers(admin)).json()
    assert body["total"] == 1
    body = client.get("/api/admin/support", params={"category": "account"}, headers=auth_headers(admin)).json()
    assert body["tickets"][0]["subject"] == "Login"


def test_assigning_unknown_admin_fails(client, member, admin):
    ticket_id = open_ticket(client, member).json()["ticket"]["id"]
    response = client.patch(
        f"/api/admin/support/{ticket_id}", json={"assigned_to": 999}, headers=auth_headers(admin)
    )
    assert response.status_code == 400


def test_support_desk_requires_admin(client, member):
    assert client.get("/api/admin/support", headers=auth_headers(member)).status_code == 403
