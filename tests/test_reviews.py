import pytest
from conftest import auth_headers, make_booking, make_owner, make_space, make_user

from clubicles.models_booking import Review


@pytest.fixture
def space(db):
    return make_space(db, make_owner(db))


@pytest.fixture
def member(db):
    return make_user(db)


def post_review(client, user, space, **overrides):
    payload = {"space_id": space.id, "rating": 4, "review_text": "Fast wifi and good coffee", "wifi_quality": 5}
    payload.update(overrides)
    return client.post("/api/reviews", json=payload, headers=auth_headers(user))


def test_eligibility_without_login(client, space):
    response = client.get("/api/reviews/eligibility", params={"space_id": space.id})
    assert response.status_code == 200
    assert response.json()["eligible"] is False
    assert response.json()["reason"] == "Authentication required"


def test_eligibility_requires_a_redeemed_booking(client, db, space, member):
    make_booking(db, member, space)

    body = client.get(
        "/api/reviews/eligibility", params={"space_id": space.id}, headers=auth_headers(member)
    ).json()

    assert body["eligible"] is False
    assert body["redeemed_bookings"] == []


def test_eligibility_reports_create_then_edit(client, db, space, member):
    make_booking(db, member, space, redeemed=True)
    params = {"space_id": space.id}

    body = client.get("/api/reviews/eligibility", params=params, headers=auth_headers(member)).json()
    assert body["eligible"] is True
    assert body["action_available"] == "create"
    assert len(body["redeemed_bookings"]) == 1

    post_review(client, member, space)

    body = client.get("/api/reviews/eligibility", params=params, headers=auth_headers(member)).json()
    assert body["action_available"] == "edit"
    assert body["existing_review"]["rating"] == 4


def test_create_review_notifies_owner(client, db, space, member, sent_emails):
    booking = make_booking(db, member, space, redeemed=True)

    response = post_review(client, member, space, review_text="<b>Great</b> place<script>x</script>")

    assert response.status_code == 201
    review = response.json()["review"]
    assert review["booking_id"] == booking.id
    assert review["wifi_quality"] == 5
    assert "<" not in review["review_text"]
    assert [mail["to"] for mail in sent_emails] == ["owner@example.com"]


def test_create_review_without_redeemed_booking_is_forbidden(client, db, space, member):
    make_booking(db, member, space)
    assert post_review(client, member, space).status_code == 403


def test_duplicate_review_conflicts(client, db, space, member):
    make_booking(db, member, space, redeemed=True)
    assert post_review(client, member, space).status_code == 201
    assert post_review(client, member, space).status_code == 409


def test_review_validation(client, db, space, member):
    make_booking(db, member, space, redeemed=True)
    assert post_review(client, member, space, rating=6).status_code == 422
    assert post_review(client, member, space, review_text="").status_code == 422


def test_review_for_unknown_space(client, member, space):
    response = client.post(
        "/api/reviews",
        json={"space_id": space.id + 100, "rating": 5, "review_text": "Lovely"},
        headers=auth_headers(member),
    )
    assert response.status_code == 404


def test_update_review_by_space(client, db, space, member):
    make_booking(db, member, space, redeemed=True)
    post_review(client, member, space)

    response = client.put(
        "/api/reviews",
        json={"space_id": space.id, "rating": 2, "review_text": "Got noisy"},
        headers=auth_headers(member),
    )

    assert response.status_code == 200
    assert response.json()["review"]["rating"] == 2
    assert response.json()["review"]["wifi_quality"] == 5


def test_update_by_space_without_review_is_404(client, db, space, member):
    make_booking(db, member, space, redeemed=True)
    response = client.put(
        "/api/reviews", json={"space_id": space.id, "rating": 2}, headers=auth_headers(member)
    )
    assert response.status_code == 404


def test_only_the_author_can_edit_or_delete(client, db, space, member):
    make_booking(db, member, space, redeemed=True)
    review_id = post_review(client, member, space).json()["review"]["id"]
    intruder = make_user(db, email="intruder@example.com")

    assert client.put(
        f"/api/reviews/{review_id}", json={"rating": 1}, headers=auth_headers(intruder)
    ).status_code == 404
    assert client.delete(f"/api/reviews/{review_id}", headers=auth_headers(intruder)).status_code == 404

    assert client.delete(f"/api/reviews/{review_id}", headers=auth_headers(member)).status_code == 200
    assert db.query(Review).count() == 0


def test_space_reviews_and_rating(client, db, space, member):
    make_booking(db, member, space, redeemed=True)
    post_review(client, member, space, rating=5)
    second = make_user(db, email="second@example.com", first_name="Ravi")
    make_booking(db, second, space, redeemed=True)
    post_review(client, second, space, rating=2)

    reviews = client.get(f"/api/spaces/{space.id}/reviews").json()
    assert reviews["total"] == 2
    assert {r["user_name"] for r in reviews["reviews"]} == {"Asha", "Ravi"}

    detail = client.get(f"/api/spaces/{space.id}").json()["space"]
    assert detail["rating"] == 3.5
    assert detail["total_reviews"] == 2

    mine = client.get("/api/user/reviews", headers=auth_headers(member)).json()
    assert mine["total"] == 1
    assert mine["reviews"][0]["space_name"] == space.name
