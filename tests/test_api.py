from decimal import Decimal

import pytest
from sqlalchemy.exc import SQLAlchemyError

from phonedeals.data.models import OrderModel, PhoneModel
from phonedeals.repos.phone_repo import PhoneRepo

pytestmark = pytest.mark.integration


def test_health(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "database": "ok"}


class TestAuth:
    def test_missing_session_is_401(self, client, make_user):
        resp = client.get(f"/users/{make_user().id}/cart")

        assert resp.status_code == 401
        assert resp.json()["detail"]["code"] == "UNAUTHORIZED"

    def test_session_cookie_is_accepted(self, client, sessions, make_user):
        user = make_user()
        client.cookies.set("session_id", sessions.create(user.id))

        resp = client.get(f"/users/{user.id}/cart")

        assert resp.status_code == 200

    def test_other_users_cart_is_403(self, client, login, make_user):
        owner, intruder = make_user(), make_user()

        resp = client.get(f"/users/{owner.id}/cart", headers=login(intruder))

        assert resp.status_code == 403
        assert resp.json()["detail"]["code"] == "UNAUTHORIZED"

    def test_admin_can_read_any_cart(self, client, login, make_user):
        owner, admin = make_user(), make_user(role="admin")

        resp = client.get(f"/users/{owner.id}/cart", headers=login(admin))

        assert resp.status_code == 200
        assert resp.json()["user_id"] == owner.id

    def test_admin_routes_need_admin(self, client, login, make_user):
        assert client.get("/admin/orders", headers=login(make_user())).status_code == 403


class TestCartFlow:
    def test_set_quantity_and_checkout(self, client, login, make_user, make_phone, db, mailer):
        buyer = make_user()
        phone = make_phone(stock=5, price="199.99")
        headers = login(buyer)

        resp = client.put(f"/users/{buyer.id}/cart/{phone.id}", json={"quantity": 2}, headers=headers)
        assert resp.status_code == 200
        assert resp.json()["total"] == "399.98"

        resp = client.post(
            f"/users/{buyer.id}/cart/checkout",
            json={"items": [{"phone_id": phone.id, "quantity": 3}]},
            headers=headers,
        )
        assert resp.status_code == 201
        body = resp.json()
        assert body["success"] is True

        db.expire_all()
        assert db.get(PhoneModel, phone.id).stock == 2
        assert db.get(OrderModel, body["order_id"]).total_amount == Decimal("599.97")
        assert client.get(f"/users/{buyer.id}/cart", headers=headers).json()["items"] == []
        mailer.send_order_confirmation.assert_called_once_with(body["order_id"])

    def test_insufficient_stock_is_409(self, client, login, make_user, make_phone):
        buyer = make_user()
        phone = make_phone(stock=1)

        resp = client.post(
            f"/users/{buyer.id}/cart/checkout",
            json={"items": [{"phone_id": phone.id, "quantity": 2}]},
            headers=login(buyer),
        )

        assert resp.status_code == 409
        detail = resp.json()["detail"]
        assert detail["code"] == "INSUFFICIENT_STOCK"
        assert detail["phone_id"] == phone.id
        assert detail["available"] == 1

    @pytest.mark.parametrize(
        "payload",
        [
            {"items": []},
            {"items": [{"phone_id": 1, "quantity": 0}]},
            {"items": [{"phone_id": "1", "quantity": 1}]},
            {"items": [{"phone_id": 1, "quantity": 1.5}]},
            {},
        ],
    )
    def test_malformed_checkout_is_400(self, client, login, make_user, payload):
        buyer = make_user()

        resp = client.post(f"/users/{buyer.id}/cart/checkout", json=payload, headers=login(buyer))

        assert resp.status_code == 400
        assert resp.json()["detail"]["code"] == "VALIDATION_ERROR"

    def test_negative_quantity_is_400(self, client, login, make_user, make_phone):
        buyer = make_user()

        resp = client.put(f"/users/{buyer.id}/cart/{make_phone().id}", json={"quantity": -1}, headers=login(buyer))

        assert resp.status_code == 400

    def test_unknown_phone_is_404(self, client, login, make_user):
        buyer = make_user()

        resp = client.put(f"/users/{buyer.id}/cart/9999", json={"quantity": 1}, headers=login(buyer))

        assert resp.status_code == 404
        assert resp.json()["detail"]["code"] == "NOT_FOUND"


class TestWishlist:
    def test_add_duplicate_and_move(self, client, login, make_user, make_phone):
        user = make_user()
        phone = make_phone(stock=2)
        headers = login(user)
        base = f"/users/{user.id}/wishlist"

        assert client.post(f"{base}/{phone.id}", headers=headers).status_code == 201
        dup = client.post(f"{base}/{phone.id}", headers=headers)
        assert dup.status_code == 409
        assert dup.json()["detail"]["code"] == "DUPLICATE_ITEM"

        moved = client.post(f"{base}/{phone.id}/cart", headers=headers)
        assert moved.status_code == 200
        assert moved.json()["wishlist"]["items"] == []
        assert moved.json()["cart"]["items"][0]["quantity"] == 1


class TestCatalog:
    def test_search_and_detail(self, client, make_phone):
        phone = make_phone(brand="Apple", title="iPhone 11")
        make_phone(brand="Samsung", title="Galaxy S10")

        found = client.get("/phones/search", params={"term": "iphone"}).json()
        assert [p["id"] for p in found["phones"]] == [phone.id]
        assert found["brands"] == ["Apple", "Samsung"]

        detail = client.get(f"/phones/{phone.id}").json()
        assert detail["title"] == "iPhone 11"
        assert detail["reviews"] == []

    def test_review_needs_session(self, client, make_phone):
        resp = client.post(f"/phones/{make_phone().id}/reviews", json={"rating": 5, "comment": "nice"})

        assert resp.status_code == 401

    def test_add_review(self, client, login, make_user, make_phone):
        phone = make_phone()

        resp = client.post(
            f"/phones/{phone.id}/reviews", json={"rating": 4, "comment": "nice"}, headers=login(make_user())
        )

        assert resp.status_code == 201
        assert resp.json()["rating"] == 4

    def test_database_error_is_typed_503(self, client, monkeypatch):
        def reset(self, **filters):
            raise SQLAlchemyError("connection reset")

        monkeypatch.setattr(PhoneRepo, "search", reset)

        resp = client.get("/phones/search")

        assert resp.status_code == 503
        assert resp.json()["detail"]["code"] == "TRANSACTION_FAILURE"


class TestListings:
    def test_seller_lifecycle(self, client, login, make_user):
        seller = make_user()
        headers = login(seller)
        base = f"/users/{seller.id}/listings"
        listing = {"title": "Moto G", "brand": "Motorola", "image": "", "price": "80.00", "stock": 3}

        created = client.post(base, json=listing, headers=headers)
        assert created.status_code == 201
        phone_id = created.json()["id"]

        disabled = client.put(f"{base}/{phone_id}/status", json={"status": "disabled"}, headers=headers)
        assert disabled.json()["status"] == "disabled"
        assert client.get(f"/phones/{phone_id}").status_code == 404

        assert client.delete(f"{base}/{phone_id}", headers=headers).status_code == 204
        assert client.get(base, headers=headers).json() == []


class TestAdmin:
    def test_orders_export_and_status(self, client, login, make_user, make_phone):
        admin = make_user(role="admin")
        buyer = make_user(firstname="Bea", lastname="Buyer")
        phone = make_phone(stock=4, price="10.00", title="Nokia 3310")
        order_id = client.post(
            f"/users/{buyer.id}/cart/checkout",
            json={"items": [{"phone_id": phone.id, "quantity": 2}]},
            headers=login(buyer),
        ).json()["order_id"]
        headers = login(admin)

        listed = client.get("/admin/orders", params={"status": "completed"}, headers=headers).json()
        assert [o["id"] for o in listed["orders"]] == [order_id]

        export = client.get("/admin/orders/export", params={"format": "csv"}, headers=headers)
        assert export.status_code == 200
        assert export.headers["content-type"].startswith("text/csv")
        assert "Bea Buyer" in export.text

        updated = client.patch(f"/admin/orders/{order_id}/status", json={"status": "pending"}, headers=headers)
        assert updated.json()["status"] == "pending"

        bad = client.patch(f"/admin/orders/{order_id}/status", json={"status": "shipped"}, headers=headers)
        assert bad.status_code == 400

    def test_user_management(self, client, login, make_user):
        admin = make_user(role="admin")
        headers = login(admin)

        created = client.post(
            "/users", json={"firstname": "New", "lastname": "Person", "email": "New@Example.com"}, headers=headers
        )
        assert created.status_code == 201
        assert created.json()["email"] == "new@example.com"

        dup = client.post(
            "/users", json={"firstname": "Again", "lastname": "Person", "email": "new@example.com"}, headers=headers
        )
        assert dup.status_code == 409

        user_id = created.json()["id"]
        updated = client.put(f"/admin/users/{user_id}", json={"status": "inactive"}, headers=headers)
        assert updated.json()["status"] == "inactive"
        assert user_id in [u["id"] for u in client.get("/admin/users", headers=headers).json()]

    def test_delete_user_and_list_their_reviews(self, client, login, make_user, make_phone, make_review):
        admin = make_user(role="admin")
        author = make_user()
        make_review(make_phone(title="Pixel 4"), author, comment="solid")
        headers = login(admin)

        reviews = client.get(f"/admin/users/{author.id}/reviews", headers=headers)
        assert reviews.status_code == 200
        assert [r["phone_title"] for r in reviews.json()["reviews"]] == ["Pixel 4"]

        assert client.delete(f"/admin/users/{author.id}", headers=headers).status_code == 204
        assert client.get(f"/users/{author.id}", headers=headers).status_code == 404
        assert client.get(f"/admin/users/{author.id}/reviews", headers=headers).status_code == 404
        assert client.delete(f"/admin/users/{author.id}", headers=headers).status_code == 404


class TestProfile:
    def test_owner_updates_own_profile(self, client, login, make_user):
        user = make_user()

        resp = client.put(f"/users/{user.id}", json={"lastname": "Renamed"}, headers=login(user))

        assert resp.status_code == 200
        assert resp.json()["lastname"] == "Renamed"

    def test_cannot_update_someone_else(self, client, login, make_user):
        owner, intruder = make_user(), make_user()

        resp = client.put(f"/users/{owner.id}", json={"lastname": "Hacked"}, headers=login(intruder))

        assert resp.status_code == 403

    def test_profile_cannot_change_role(self, client, login, make_user):
        user = make_user()

        resp = client.put(f"/users/{user.id}", json={"role": "admin"}, headers=login(user))

        assert resp.status_code == 200
        assert resp.json()["role"] == "user"


class TestLogout:
    def test_logout_revokes_session(self, client, sessions, make_user):
        user = make_user()
        headers = {"X-Session-Id": sessions.create(user.id)}

        assert client.delete("/session", headers=headers).status_code == 204
        assert client.get(f"/users/{user.id}/cart", headers=headers).status_code == 401

    def test_logout_needs_a_session(self, client):
        assert client.delete("/session").status_code == 401
