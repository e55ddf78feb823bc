from __future__ import annotations

from datetime import date, time

from src.bakery_app.bakery_app.core.enums import OrderState


def test_health(client):
    assert client.get("/health").get_json() == {"status": "ok"}


def test_api_requires_login(client):
    res = client.get("/api/storefront/orders")

    assert res.status_code == 401
    assert res.get_json()["success"] is False


def test_wrong_password(login):
    res = login("baker@vaadin.com", "nope")

    assert res.status_code == 401
    assert res.get_json()["message"] == "Wrong email or password"


def test_storefront_pages_carry_group_headers(client, login, add_order, fixed_today):
    add_order(date(2024, 6, 5), name="Past Customer")
    add_order(fixed_today, due_time=time(9, 0), name="Anna")
    add_order(fixed_today, due_time=time(12, 0), name="Bob")
    add_order(date(2024, 6, 12), name="Cecilia")
    add_order(date(2024, 7, 1), name="David")
    login("baker@vaadin.com", "baker")

    first = client.get("/api/storefront/orders").get_json()
    second = client.get("/api/storefront/orders?page=1").get_json()

    assert first["total"] == 4
    assert [(o["full_name"], o["header"]) for o in first["items"]] == [
        ("Anna", {"main": "Recent", "secondary": ""}),
        ("Bob", None),
        ("Cecilia", {"main": "This week", "secondary": ""}),
    ]
    assert second["items"][0]["header"] == {"main": "July", "secondary": "2024"}
    assert second["items"][0]["month"] == "Jul 1"

    header = client.get(f"/api/storefront/orders/{second['items'][0]['id']}/header").get_json()
    assert header["header"]["main"] == "July"


def test_storefront_filter_change_regroups(client, login, add_order, fixed_today):
    add_order(date(2024, 6, 5), name="Past Customer")
    add_order(fixed_today, name="Anna")
    login("baker@vaadin.com", "baker")
    client.get("/api/storefront/orders")

    body = client.get("/api/storefront/orders?include_past=true").get_json()

    assert body["filter"] == {"filter": "", "include_past": True}
    assert [(o["full_name"], o["header"]) for o in body["items"]] == [
        ("Past Customer", {"main": "June", "secondary": "2024"}),
        ("Anna", {"main": "Recent", "secondary": ""}),
    ]

    filtered = client.get("/api/storefront/orders?filter=ann").get_json()
    assert [o["full_name"] for o in filtered["items"]] == ["Anna"]


def test_logout_discards_storefront_view(client, login, container):
    login("baker@vaadin.com", "baker")
    client.get("/api/storefront/orders")
    assert len(container.storefront_presenters) == 1

    client.post("/logout")

    assert len(container.storefront_presenters) == 0
    assert client.get("/api/me").status_code == 401


def test_admin_endpoints_need_admin_role(client, login):
    login("barista@vaadin.com", "barista")

    assert client.get("/api/admin/users").status_code == 403
    assert client.get("/api/products").status_code == 200


def test_admin_product_duplicate_name(client, login):
    login("admin@vaadin.com", "admin")

    res = client.post("/api/admin/products", json={"name": "Strawberry Bun", "price": 100})

    assert res.status_code == 400
    assert "unique name" in res.get_json()["message"]


def test_admin_cannot_modify_locked_user(client, login, users):
    login("admin@vaadin.com", "admin")
    barista = users.get_by_email("barista@vaadin.com")

    res = client.delete(f"/api/admin/users/{barista.id}")

    assert res.status_code == 400
    assert client.get("/api/admin/users/999").status_code == 404


def test_create_order_and_change_state(client, login):
    login("barista@vaadin.com", "barista")

    res = client.post(
        "/api/orders",
        json={
            "due_date": "2024-06-11",
            "due_time": "10:15",
            "pickup_location_id": 1,
            "customer": {"full_name": "Jane Doe", "phone_number": "+358 555 0101"},
            "items": [{"product_id": 1, "quantity": 3}],
        },
    )
    assert res.status_code == 201
    order = res.get_json()["order"]
    assert order["total_price"] == 450
    assert order["history"][0]["created_by"] == "Malin Castro"

    res = client.post(f"/api/orders/{order['id']}/state", json={"state": "ready"})
    assert res.get_json()["order"]["state"] == OrderState.READY.value

    bad = client.post("/api/orders", json={"due_date": "11.06.2024"})
    assert bad.status_code == 400


def test_dashboard(client, login, add_order, fixed_today):
    add_order(fixed_today, state=OrderState.DELIVERED)
    login("baker@vaadin.com", "baker")

    data = client.get("/api/dashboard").get_json()

    assert data["delivery_stats"]["delivered_today"] == 1
    assert len(data["deliveries_this_month"]) == 30
    assert client.get("/api/dashboard?month=13").status_code == 400


def test_create_order_rejects_malformed_customer_and_items(client, login):
    login("barista@vaadin.com", "barista")
    base = {"due_date": "2024-06-11", "due_time": "10:15", "pickup_location_id": 1}

    bad_customer = client.post("/api/orders", json={**base, "customer": "Jane", "items": []})
    bad_item = client.post(
        "/api/orders",
        json={**base, "customer": {"full_name": "Jane", "phone_number": "1"}, "items": ["bun"]},
    )

    assert bad_customer.status_code == 400
    assert bad_customer.get_json()["message"] == "Customer must be an object"
    assert bad_item.status_code == 400
    assert bad_item.get_json()["message"] == "Each item must be an object"


def test_dashboard_lists_orders_due_from_today(client, login, add_order, fixed_today):
    add_order(date(2024, 6, 9), name="Yesterday Customer")
    add_order(date(2024, 6, 12), name="Later Customer")
    add_order(fixed_today, name="Today Customer")
    login("baker@vaadin.com", "baker")

    data = client.get("/api/dashboard").get_json()

    assert [o["full_name"] for o in data["upcoming_orders"]] == ["Today Customer", "Later Customer"]
    assert data["upcoming_orders"][0]["time"] == "10:00"
