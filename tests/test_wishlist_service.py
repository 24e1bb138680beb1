import pytest
from sqlalchemy.exc import SQLAlchemyError

from phonedeals.data.models import CartItemModel, WishlistItemModel
from phonedeals.domain import errors
from phonedeals.repos.cart_repo import CartRepo
from phonedeals.repos.wishlist_repo import WishlistRepo
from phonedeals.services.cart_service import CartService
from phonedeals.services.wishlist_service import WishlistService

pytestmark = pytest.mark.unit


def test_add_and_get(db, make_user, make_phone):
    user = make_user()
    phone = make_phone()
    svc = WishlistService(db)

    svc.add(user.id, phone.id)
    wishlist = svc.get(user.id)

    assert [i["phone_id"] for i in wishlist["items"]] == [phone.id]
    assert wishlist["items"][0]["phone"]["brand"] == phone.brand


def test_add_twice_is_duplicate(db, make_user, make_phone):
    user = make_user()
    phone = make_phone()
    svc = WishlistService(db)
    svc.add(user.id, phone.id)

    with pytest.raises(errors.DuplicateItem):
        svc.add(user.id, phone.id)


def test_add_unknown_phone(db, make_user):
    with pytest.raises(errors.NotFound):
        WishlistService(db).add(make_user().id, 999)


def test_remove_is_idempotent(db, make_user, make_phone):
    user = make_user()
    phone = make_phone()
    svc = WishlistService(db)
    svc.add(user.id, phone.id)

    assert svc.remove(user.id, phone.id)["items"] == []
    assert svc.remove(user.id, phone.id)["items"] == []


def test_database_error_on_remove_is_transaction_failure(db, make_user, make_phone, monkeypatch):
    user = make_user()
    phone = make_phone()
    svc = WishlistService(db)
    svc.add(user.id, phone.id)

    def reset(self, wishlist_id, phone_id):
        raise SQLAlchemyError("connection reset")

    monkeypatch.setattr(WishlistRepo, "delete_item", reset)

    with pytest.raises(errors.TransactionFailure):
        svc.remove(user.id, phone.id)

    monkeypatch.undo()
    assert [i["phone_id"] for i in svc.get(user.id)["items"]] == [phone.id]


class TestMoveToCart:
    def test_inserts_with_quantity_one(self, db, make_user, make_phone):
        user = make_user()
        phone = make_phone(stock=3)
        svc = WishlistService(db)
        svc.add(user.id, phone.id)

        result = svc.move_to_cart(user.id, phone.id)

        assert result["wishlist"]["items"] == []
        assert [(i["phone_id"], i["quantity"]) for i in result["cart"]["items"]] == [(phone.id, 1)]

    def test_increments_existing_cart_line(self, db, make_user, make_phone):
        user = make_user()
        phone = make_phone(stock=3)
        CartService(db).set_item_quantity(user.id, phone.id, 2)
        svc = WishlistService(db)
        svc.add(user.id, phone.id)

        result = svc.move_to_cart(user.id, phone.id)

        assert result["cart"]["items"][0]["quantity"] == 3

    def test_out_of_stock_changes_nothing(self, db, make_user, make_phone):
        user = make_user()
        phone = make_phone(stock=0)
        svc = WishlistService(db)
        svc.add(user.id, phone.id)

        with pytest.raises(errors.InsufficientStock):
            svc.move_to_cart(user.id, phone.id)

        assert [i["phone_id"] for i in svc.get(user.id)["items"]] == [phone.id]

    def test_cart_failure_keeps_wishlist_item(self, db, make_user, make_phone, monkeypatch):
        user = make_user()
        phone = make_phone(stock=3)
        svc = WishlistService(db)
        svc.add(user.id, phone.id)

        def broken(self, cart_id, old_version):
            raise SQLAlchemyError("cart write failed")

        # the wishlist delete has already run when the cart version bump fails
        monkeypatch.setattr(CartRepo, "update_cart_version", broken)

        with pytest.raises(errors.TransactionFailure):
            svc.move_to_cart(user.id, phone.id)

        db.expire_all()
        assert db.query(WishlistItemModel).filter_by(phone_id=phone.id).count() == 1
        assert db.query(CartItemModel).filter_by(phone_id=phone.id).count() == 0
