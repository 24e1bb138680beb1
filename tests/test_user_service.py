import pytest

from phonedeals.data.models import CartItemModel, OrderModel, PhoneModel, ReviewModel, UserModel, WishlistItemModel
from phonedeals.domain import errors
from phonedeals.domain.schemas import ProfileUpdate, UserCreate
from phonedeals.services.cart_service import CartService
from phonedeals.services.catalog_service import CatalogService
from phonedeals.services.checkout_service import CheckoutService
from phonedeals.services.user_service import UserService
from phonedeals.services.wishlist_service import WishlistService

pytestmark = pytest.mark.unit


class TestProfile:
    def test_update_name_and_email(self, db, make_user):
        user = make_user()

        updated = UserService(db).update_profile(user.id, ProfileUpdate(firstname="Bea", email="Bea@Example.com"))

        assert updated.firstname == "Bea"
        assert updated.lastname == user.lastname
        assert updated.email == "bea@example.com"

    def test_keeping_own_email_is_fine(self, db, make_user):
        user = make_user()

        updated = UserService(db).update_profile(user.id, ProfileUpdate(email=user.email.upper()))

        assert updated.email == user.email

    def test_email_taken_by_someone_else(self, db, make_user):
        user, other = make_user(), make_user()

        with pytest.raises(errors.DuplicateItem):
            UserService(db).update_profile(user.id, ProfileUpdate(email=other.email))

    def test_unknown_user(self, db):
        with pytest.raises(errors.NotFound):
            UserService(db).update_profile(999, ProfileUpdate(firstname="Nobody"))


class TestDeleteUser:
    def test_removes_account_and_everything_it_owns(self, db, make_user, make_phone, make_review):
        doomed, buyer = make_user(), make_user()
        listing = make_phone(seller=doomed, stock=5)
        elsewhere = make_phone(stock=5)
        make_review(elsewhere, doomed)
        make_review(listing, buyer)
        CartService(db).set_item_quantity(buyer.id, listing.id, 1)
        WishlistService(db).add(buyer.id, listing.id)
        WishlistService(db).add(doomed.id, elsewhere.id)
        order_id = CheckoutService(db).checkout(doomed.id, [{"phone_id": elsewhere.id, "quantity": 1}])["order_id"]

        summary = UserService(db).delete_user(doomed.id)

        assert summary == {"listings": 1, "reviews": 1, "orders": 1}
        db.expire_all()
        assert db.get(UserModel, doomed.id) is None
        assert db.get(PhoneModel, listing.id) is None
        assert db.query(ReviewModel).count() == 0
        assert db.query(CartItemModel).filter_by(phone_id=listing.id).count() == 0
        assert db.query(WishlistItemModel).count() == 0
        assert db.get(OrderModel, order_id).user_id is None
        assert db.get(PhoneModel, elsewhere.id).stock == 4

    def test_other_users_are_untouched(self, db, make_user):
        doomed, keeper = make_user(), make_user()

        UserService(db).delete_user(doomed.id)

        assert [u.id for u in UserService(db).list_users()] == [keeper.id]

    def test_unknown_user(self, db):
        with pytest.raises(errors.NotFound):
            UserService(db).delete_user(999)


def test_reviews_written_by_user(db, make_user, make_phone, make_review):
    author, other = make_user(), make_user()
    first, second = make_phone(title="Pixel 4"), make_phone(title="Nokia 3310")
    make_review(first, author, comment="solid")
    make_review(second, author, comment="indestructible", hidden=True)
    make_review(first, other)

    page = CatalogService(db).list_reviews(reviewer_id=author.id)

    assert page["pagination"]["total"] == 2
    assert {r["phone_title"] for r in page["reviews"]} == {"Pixel 4", "Nokia 3310"}


def test_create_user_lowercases_email(db):
    created = UserService(db).create_user(UserCreate(firstname="A", lastname="B", email="Mixed@Case.io"))

    assert created.email == "mixed@case.io"
