# phonedeals/repos/wishlist_repo.py
from sqlalchemy import select, delete
from sqlalchemy.orm import Session, selectinload

from phonedeals.data.models.wishlist import WishlistModel, WishlistItemModel


class WishlistRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_wishlist_by_user(self, user_id: int) -> WishlistModel | None:
        return self.db.execute(
            select(WishlistModel).where(WishlistModel.user_id == user_id)
        ).scalar_one_or_none()

    def get_wishlist_with_phones(self, wishlist_id: int) -> WishlistModel | None:
        return self.db.execute(
            select(WishlistModel)
            .where(WishlistModel.id == wishlist_id)
            .options(selectinload(WishlistModel.items).selectinload(WishlistItemModel.phone))
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def create_wishlist(self, wishlist: WishlistModel) -> WishlistModel:
        self.db.add(wishlist)
        self.db.commit()
        self.db.refresh(wishlist)
        return wishlist

    def has_item(self, wishlist_id: int, phone_id: int) -> bool:
        return self.db.execute(
            select(WishlistItemModel.id).where(
                WishlistItemModel.wishlist_id == wishlist_id,
                WishlistItemModel.phone_id == phone_id,
            )
        ).first() is not None

    def add_item(self, item: WishlistItemModel) -> WishlistItemModel:
        self.db.add(item)
        return item

    def delete_item(self, wishlist_id: int, phone_id: int) -> int:
        result = self.db.execute(
            delete(WishlistItemModel)
            .where(
                WishlistItemModel.wishlist_id == wishlist_id,
                WishlistItemModel.phone_id == phone_id,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def delete_items_for_phone(self, phone_id: int) -> int:
        result = self.db.execute(
            delete(WishlistItemModel)
            .where(WishlistItemModel.phone_id == phone_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def delete_wishlist_for_user(self, user_id: int) -> int:
        wishlist_ids = select(WishlistModel.id).where(WishlistModel.user_id == user_id)
        self.db.execute(
            delete(WishlistItemModel)
            .where(WishlistItemModel.wishlist_id.in_(wishlist_ids))
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(
            delete(WishlistModel)
            .where(WishlistModel.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
