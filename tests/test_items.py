import uuid

import pytest

from app.models.hostel import Hostel
from app.models.item import Item
from app.models.user import User


@pytest.fixture
def market(hostels, register, make_seller, create_item):
    """Seller A lists an item in H1, buyer B lives in H1 and C in H2 of the same university."""
    seller = make_seller(hostels["H1"], name="Seller")
    item = create_item(seller["headers"])
    return {
        "seller": seller,
        "item": item,
        "buyer": register(hostels["H1"], name="Buyer"),
        "neighbour": register(hostels["H2"], name="Neighbour"),
        "outsider": register(hostels["H3"], name="Outsider"),
    }


def _item_url(market, suffix=""):
    return f"/items/{market['item']['id']}{suffix}"


# Creating listings

def test_non_seller_cannot_create_listing(client, hostels, register):
    user = register(hostels["H1"])
    response = client.post("/items", json={
        "title": "Study Lamp",
        "description": "Barely used LED study lamp",
        "category": "Electronics",
        "condition": "Good",
        "listing_type": "sell",
        "price": 100,
        "images": ["https://cdn.fretio.in/lamp.jpg"],
    }, headers=user["headers"])
    assert response.status_code == 403


def test_created_item_belongs_to_sellers_hostel(market, hostels, fetch):
    item = market["item"]
    assert item["seller_id"] == market["seller"]["id"]
    assert item["hostel_id"] == hostels["H1"]
    assert item["status"] == "available"
    assert item["is_active"] is True
    assert item["rent_duration"] is None
    assert fetch(Hostel, hostels["H1"]).total_active_items == 1


def test_rent_listing_requires_duration(client, hostels, make_seller, create_item):
    seller = make_seller(hostels["H1"])
    response = client.post("/items", json={
        "title": "Mountain Bike",
        "description": "Geared bicycle, serviced last month",
        "category": "Sports",
        "condition": "Good",
        "listing_type": "rent",
        "price": 150,
        "images": ["https://cdn.fretio.in/bike.jpg"],
    }, headers=seller["headers"])
    assert response.status_code == 422

    rental = create_item(seller["headers"], listing_type="rent", rent_duration="week", price=150)
    assert rental["rent_duration"] == "week"
    assert rental["formatted_price"] == "₹150/week"


def test_sell_listing_drops_rent_duration(market, create_item):
    item = create_item(market["seller"]["headers"], rent_duration="day")
    assert item["rent_duration"] is None


def test_listing_needs_an_image_and_a_known_category(client, market):
    base = {
        "title": "Study Lamp",
        "description": "Barely used LED study lamp",
        "category": "Electronics",
        "condition": "Good",
        "listing_type": "sell",
        "price": 100,
        "images": [],
    }
    headers = market["seller"]["headers"]
    assert client.post("/items", json=base, headers=headers).status_code == 422
    assert client.post("/items", json={**base, "images": ["x.jpg"], "category": "Spaceships"}, headers=headers).status_code == 422
    assert client.post("/items", json={**base, "images": ["x.jpg"], "price": -1}, headers=headers).status_code == 422


# Viewing

def test_views_count_other_users_only(client, market, fetch):
    client.get(_item_url(market), headers=market["seller"]["headers"])
    response = client.get(_item_url(market), headers=market["buyer"]["headers"])
    client.get(_item_url(market), headers=market["neighbour"]["headers"])

    body = response.json()
    assert body["is_owner"] is False
    assert body["is_interested"] is False
    assert body["item"]["seller"]["name"].startswith("Seller")
    assert fetch(Item, uuid.UUID(market["item"]["id"])).views == 2


def test_item_outside_university_is_forbidden(client, market):
    assert client.get(_item_url(market), headers=market["outsider"]["headers"]).status_code == 403
    assert client.post(_item_url(market, "/interest"), headers=market["outsider"]["headers"]).status_code == 403


def test_missing_item_is_404(client, market):
    assert client.get(f"/items/{uuid.uuid4()}", headers=market["buyer"]["headers"]).status_code == 404


# Interest and contact

def test_express_interest_once(client, market):
    url = _item_url(market, "/interest")

    assert client.post(url, headers=market["buyer"]["headers"]).status_code == 200
    again = client.post(url, headers=market["buyer"]["headers"])
    assert again.status_code == 409

    detail = client.get(_item_url(market), headers=market["buyer"]["headers"]).json()
    assert detail["is_interested"] is True
    assert detail["item"]["interested_count"] == 1


def test_seller_cannot_interact_with_own_item(client, market):
    headers = market["seller"]["headers"]
    assert client.post(_item_url(market, "/interest"), headers=headers).status_code == 403
    assert client.post(_item_url(market, "/contact"), headers=headers).status_code == 403
    assert client.post(_item_url(market, "/report"), json={"reason": "spam"}, headers=headers).status_code == 403


def test_contact_reveals_seller_and_records_interest(client, market):
    response = client.post(_item_url(market, "/contact"), headers=market["neighbour"]["headers"])
    assert response.status_code == 200

    data = response.json()["data"]
    assert data["seller"]["phone_number"] == "+91 98765 43210"
    assert data["hostel"] == "Sunrise Hostel"

    # contact is idempotent and leaves a single interest behind
    assert client.post(_item_url(market, "/contact"), headers=market["neighbour"]["headers"]).status_code == 200
    assert client.post(_item_url(market, "/interest"), headers=market["neighbour"]["headers"]).status_code == 409

    interests = client.get("/profile/interests", headers=market["neighbour"]["headers"]).json()["interests"]
    assert [entry["item"]["id"] for entry in interests] == [market["item"]["id"]]


# Completing transactions and ratings

def test_sale_then_rating(client, market, fetch, hostels):
    client.post(_item_url(market, "/interest"), headers=market["buyer"]["headers"])

    sold = client.patch(_item_url(market, "/mark-sold"), headers=market["seller"]["headers"])
    assert sold.status_code == 200
    assert sold.json()["item"]["status"] == "sold"
    assert sold.json()["item"]["is_active"] is False
    assert sold.json()["item"]["sold_at"] is not None

    seller = fetch(User, market["seller"]["id"])
    assert seller.items_sold == 1
    assert seller.items_rented == 0
    assert fetch(Hostel, hostels["H1"]).total_active_items == 0

    rated = client.post(_item_url(market, "/rate"), json={"rating": 4, "review": "Smooth deal"}, headers=market["buyer"]["headers"])
    assert rated.status_code == 200
    assert rated.json()["data"] == {"new_rating": 4, "total_ratings": 1}


def test_mark_sold_twice_is_invalid_state(client, market, fetch):
    url = _item_url(market, "/mark-sold")
    assert client.patch(url, headers=market["seller"]["headers"]).status_code == 200

    again = client.patch(url, headers=market["seller"]["headers"])
    assert again.status_code == 409
    assert fetch(User, market["seller"]["id"]).items_sold == 1


def test_only_seller_can_mark_sold(client, market, fetch):
    response = client.patch(_item_url(market, "/mark-sold"), headers=market["buyer"]["headers"])
    assert response.status_code == 403
    assert fetch(Item, uuid.UUID(market["item"]["id"])).status == "available"


def test_rental_completion_counts_as_rented(client, market, create_item, fetch):
    rental = create_item(market["seller"]["headers"], listing_type="rent", rent_duration="day", price=50)

    response = client.patch(f"/items/{rental['id']}/mark-sold", headers=market["seller"]["headers"])
    assert response.json()["item"]["status"] == "rented"

    seller = fetch(User, market["seller"]["id"])
    assert seller.items_rented == 1
    assert seller.items_sold == 0


def test_rating_preconditions(client, market):
    url = _item_url(market, "/rate")
    buyer = market["buyer"]["headers"]

    # still available
    client.post(_item_url(market, "/interest"), headers=buyer)
    assert client.post(url, json={"rating": 5}, headers=buyer).status_code == 409

    client.patch(_item_url(market, "/mark-sold"), headers=market["seller"]["headers"])

    # never interacted with the item
    assert client.post(url, json={"rating": 5}, headers=market["neighbour"]["headers"]).status_code == 403
    # rating yourself
    assert client.post(url, json={"rating": 5}, headers=market["seller"]["headers"]).status_code == 403
    # out of range
    assert client.post(url, json={"rating": 6}, headers=buyer).status_code == 422


def test_rating_keeps_a_running_average(client, market, fetch):
    client.post(_item_url(market, "/interest"), headers=market["buyer"]["headers"])
    client.post(_item_url(market, "/contact"), headers=market["neighbour"]["headers"])
    client.patch(_item_url(market, "/mark-sold"), headers=market["seller"]["headers"])

    client.post(_item_url(market, "/rate"), json={"rating": 5}, headers=market["buyer"]["headers"])
    response = client.post(_item_url(market, "/rate"), json={"rating": 2}, headers=market["neighbour"]["headers"])

    assert response.json()["data"] == {"new_rating": 3.5, "total_ratings": 2}
    assert fetch(User, market["seller"]["id"]).rating == pytest.approx(3.5)


def test_report_is_accepted(client, market, caplog):
    with caplog.at_level("INFO", logger="app.services.transactions"):
        response = client.post(_item_url(market, "/report"), json={"reason": "Misleading photos"}, headers=market["buyer"]["headers"])

    assert response.status_code == 200
    assert "Misleading photos" in caplog.text


# Editing and deleting

def test_only_owner_can_edit_or_delete(client, market):
    headers = market["buyer"]["headers"]
    assert client.put(_item_url(market), json={"price": 1}, headers=headers).status_code == 403
    assert client.delete(_item_url(market), headers=headers).status_code == 403


def test_owner_edits_listing(client, market):
    response = client.put(_item_url(market), json={"price": 450, "tags": [" Desk ", "LED"]}, headers=market["seller"]["headers"])

    assert response.status_code == 200
    item = response.json()["item"]
    assert item["price"] == 450
    assert item["tags"] == ["desk", "led"]
    assert item["title"] == "Study Lamp"


def test_edit_can_reserve_but_not_complete(client, market):
    headers = market["seller"]["headers"]

    assert client.put(_item_url(market), json={"status": "sold"}, headers=headers).status_code == 409

    reserved = client.put(_item_url(market), json={"status": "reserved"}, headers=headers)
    assert reserved.status_code == 200
    assert reserved.json()["item"]["status"] == "reserved"

    assert client.put(_item_url(market), json={"status": "available"}, headers=headers).status_code == 409
    assert client.patch(_item_url(market, "/mark-sold"), headers=headers).status_code == 409


def test_delete_listing(client, market, fetch, hostels):
    client.post(_item_url(market, "/interest"), headers=market["buyer"]["headers"])

    response = client.delete(_item_url(market), headers=market["seller"]["headers"])
    assert response.status_code == 200

    assert fetch(Item, uuid.UUID(market["item"]["id"])) is None
    assert fetch(Hostel, hostels["H1"]).total_active_items == 0
    assert client.get(_item_url(market), headers=market["buyer"]["headers"]).status_code == 404
    assert client.get("/profile/interests", headers=market["buyer"]["headers"]).json()["interests"] == []
