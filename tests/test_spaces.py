from conftest import auth_headers, make_booking, make_owner, make_space, make_user

from clubicles.models_booking import Space

NEW_SPACE = {
    "name": "Koramangala Loft",
    "address": "80 Feet Road",
    "city": "Bengaluru",
    "pincode": "560034",
    "total_seats": 20,
    "price_per_hour": 150,
    "amenities": ["wifi", "standing desks"],
}


# ============================================================================
# PUBLIC LISTING
# ============================================================================


def test_listing_only_shows_active_spaces_of_approved_owners(client, db):
    approved = make_owner(db)
    pending = make_owner(db, email="pending@example.com", approval_status="pending")
    visible = make_space(db, approved, name="Visible")
    make_space(db, approved, name="Archived", status="inactive")
    make_space(db, pending, name="Hidden")

    body = client.get("/api/spaces").json()

    assert body["count"] == 1
    assert body["spaces"][0]["id"] == visible.id
    assert body["spaces"][0]["business_name"] == "Hub Works"
    assert body["spaces"][0]["rating"] == 0.0


def test_listing_filters_by_city_price_and_search(client, db):
    owner = make_owner(db)
    make_space(db, owner, name="Cheap Desk", city="Pune", price_per_hour=50)
    make_space(db, owner, name="Premium Cabin", city="Bengaluru", price_per_hour=400, amenities=["parking"])

    assert [s["name"] for s in client.get("/api/spaces", params={"city": "pun"}).json()["spaces"]] == ["Cheap Desk"]
    assert [s["name"] for s in client.get("/api/spaces", params={"max_price": 100}).json()["spaces"]] == [
        "Cheap Desk"
    ]
    assert [s["name"] for s in client.get("/api/spaces", params={"min_price": 100}).json()["spaces"]] == [
        "Premium Cabin"
    ]
    assert [s["name"] for s in client.get("/api/spaces", params={"search": "PARKING"}).json()["spaces"]] == [
        "Premium Cabin"
    ]


def test_space_detail_includes_booking_stats(client, db):
    owner = make_owner(db)
    space = make_space(db, owner)
    member = make_user(db)
    make_booking(db, member, space)
    make_booking(db, member, space, redeemed=True)

    response = client.get(f"/api/spaces/{space.id}")

    assert response.status_code == 200
    stats = response.json()["space"]["booking_stats"]
    assert stats == {"total_bookings": 2, "confirmed_bookings": 1, "completed_bookings": 1}


def test_unknown_space_is_404(client):
    assert client.get("/api/spaces/404").status_code == 404
    assert client.get("/api/spaces/404/vibgyor").status_code == 404


def test_detail_hides_archived_and_unapproved_spaces(client, db):
    owner = make_owner(db)
    pending = make_owner(db, email="pending@example.com", approval_status="pending")
    archived = make_space(db, owner, name="Archived", status="inactive")
    unapproved = make_space(db, pending, name="Awaiting Review")

    for space in (archived, unapproved):
        assert client.get(f"/api/spaces/{space.id}").status_code == 404
        assert client.get(f"/api/spaces/{space.id}/reviews").status_code == 404
        assert client.get(f"/api/spaces/{space.id}/vibgyor").status_code == 404


def test_search_suggestions(client, db):
    owner = make_owner(db)
    make_space(db, owner, amenities=["wifi", "standing desks"])
    make_space(db, owner, name="Desk Archive", status="inactive")

    body = client.get("/api/spaces/search-suggestions", params={"q": "desk"}).json()

    assert [(s["type"], s["value"]) for s in body["suggestions"]] == [
        ("space", "Indiranagar Desk Club"),
        ("city", "Bengaluru"),
        ("amenity", "standing desks"),
    ]
    hub = client.get("/api/spaces/search-suggestions", params={"q": "hub"}).json()["suggestions"]
    assert hub == [{"type": "business", "value": "Hub Works", "category": "coworking", "location": "Bengaluru, India"}]
    assert client.get("/api/spaces/search-suggestions", params={"q": "d"}).json()["suggestions"] == []


def test_vibgyor_summary(client, db):
    owner = make_owner(db)
    space = make_space(db, owner, blue=3, green=1)

    body = client.get(f"/api/spaces/{space.id}/vibgyor").json()

    assert body["has_redeemed_bookings"] is True
    assert body["total"] == 4
    assert body["percentages"]["blue"] == 75
    assert body["dominant_type"]["key"] == "blue"
    assert body["space_name"] == space.name


def test_vibgyor_empty_space(client, db):
    space = make_space(db, make_owner(db))
    body = client.get(f"/api/spaces/{space.id}/vibgyor").json()
    assert body["has_redeemed_bookings"] is False
    assert body["dominant_type"] is None


# ============================================================================
# OWNER MANAGEMENT
# ============================================================================


def test_owner_creates_space(client, db):
    owner = make_owner(db)

    response = client.post("/api/owner/spaces", json=NEW_SPACE, headers=auth_headers(owner.user))

    assert response.status_code == 201
    space = response.json()["space"]
    assert space["available_seats"] == 20
    assert space["status"] == "active"
    assert space["company_name"] == "Hub Works"


def test_create_space_requires_business_info(client, db):
    owner = make_owner(db, with_business=False)
    response = client.post("/api/owner/spaces", json=NEW_SPACE, headers=auth_headers(owner.user))
    assert response.status_code == 400


def test_create_space_requires_a_price(client, db):
    owner = make_owner(db)
    payload = {**NEW_SPACE, "price_per_hour": None}
    response = client.post("/api/owner/spaces", json=payload, headers=auth_headers(owner.user))
    assert response.status_code == 400


def test_create_space_validates_fields(client, db):
    owner = make_owner(db)
    payload = {**NEW_SPACE, "total_seats": 0}
    assert client.post("/api/owner/spaces", json=payload, headers=auth_headers(owner.user)).status_code == 422

    payload = {**NEW_SPACE, "pincode": "12"}
    assert client.post("/api/owner/spaces", json=payload, headers=auth_headers(owner.user)).status_code == 422


def test_basic_plan_space_limit(client, db):
    owner = make_owner(db)
    for i in range(5):
        make_space(db, owner, name=f"Space {i}")

    response = client.post("/api/owner/spaces", json=NEW_SPACE, headers=auth_headers(owner.user))
    assert response.status_code == 403

    premium = make_owner(db, email="premium@example.com", premium_plan="premium")
    for i in range(5):
        make_space(db, premium, name=f"Premium {i}")
    response = client.post("/api/owner/spaces", json=NEW_SPACE, headers=auth_headers(premium.user))
    assert response.status_code == 201


def test_archived_spaces_do_not_count_toward_basic_limit(client, db):
    owner = make_owner(db)
    for i in range(4):
        make_space(db, owner, name=f"Space {i}")
    archived = make_space(db, owner, name="Old Space", status="inactive")

    response = client.post("/api/owner/spaces", json=NEW_SPACE, headers=auth_headers(owner.user))
    assert response.status_code == 201

    response = client.put(
        f"/api/owner/spaces/{archived.id}", json={"status": "active"}, headers=auth_headers(owner.user)
    )
    assert response.status_code == 403


def test_owner_lists_only_own_spaces(client, db):
    owner = make_owner(db)
    other = make_owner(db, email="other-owner@example.com")
    mine = make_space(db, owner)
    theirs = make_space(db, other)

    body = client.get("/api/owner/spaces", headers=auth_headers(owner.user)).json()
    assert [s["id"] for s in body["spaces"]] == [mine.id]
    assert client.get(f"/api/owner/spaces/{theirs.id}", headers=auth_headers(owner.user)).status_code == 404


def test_update_space_keeps_taken_seats(client, db):
    owner = make_owner(db)
    space = make_space(db, owner, total_seats=10, available_seats=6)

    response = client.put(
        f"/api/owner/spaces/{space.id}", json={"total_seats": 15}, headers=auth_headers(owner.user)
    )

    assert response.status_code == 200
    assert response.json()["space"]["total_seats"] == 15
    assert response.json()["space"]["available_seats"] == 11


def test_update_space_rejects_available_above_total(client, db):
    owner = make_owner(db)
    space = make_space(db, owner, total_seats=10)
    response = client.put(
        f"/api/owner/spaces/{space.id}", json={"available_seats": 12}, headers=auth_headers(owner.user)
    )
    assert response.status_code == 400


def test_delete_space_without_bookings(client, db):
    owner = make_owner(db)
    space = make_space(db, owner)

    response = client.delete(f"/api/owner/spaces/{space.id}", headers=auth_headers(owner.user))

    assert response.status_code == 200
    assert response.json()["result"] == "deleted"
    assert db.query(Space).filter(Space.id == space.id).count() == 0


def test_delete_space_with_active_bookings_is_rejected(client, db):
    owner = make_owner(db)
    space = make_space(db, owner)
    make_booking(db, make_user(db), space)

    response = client.delete(f"/api/owner/spaces/{space.id}", headers=auth_headers(owner.user))
    assert response.status_code == 400


def test_delete_space_with_history_archives_it(client, db):
    owner = make_owner(db)
    space = make_space(db, owner)
    make_booking(db, make_user(db), space, redeemed=True)

    response = client.delete(f"/api/owner/spaces/{space.id}", headers=auth_headers(owner.user))

    assert response.json()["result"] == "archived"
    db.expire_all()
    assert db.get(Space, space.id).status == "inactive"
