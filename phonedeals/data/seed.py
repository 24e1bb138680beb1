# phonedeals/data/seed.py
from decimal import Decimal

from phonedeals.data.database import Base, SessionLocal, engine
from phonedeals.data.models import PhoneModel, ReviewModel, UserModel
from phonedeals.services.session_store import SessionStore
from phonedeals.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

USERS = [
    ("Ada", "Admin", "admin@oldphonedeals.local", "admin"),
    ("Sam", "Seller", "seller@oldphonedeals.local", "user"),
    ("Bea", "Buyer", "buyer@oldphonedeals.local", "user"),
]

PHONES = [
    ("Galaxy S10", "Samsung", "samsung.jpeg", "199.99", 5),
    ("iPhone 11", "Apple", "apple.jpeg", "349.00", 3),
    ("Pixel 4a", "Google", "google.jpeg", "129.50", 1),
    ("Nokia 3310", "Nokia", "nokia.jpeg", "19.99", 12),
]


def seed(with_sessions: bool = True):
    """Demo data for local development, only runs against an empty database."""
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        # not forcing: only seed if empty
        if db.query(UserModel).first():
            logger.info("Database already seeded, skipping")
            return

        users = [UserModel(firstname=f, lastname=l, email=e, role=r) for f, l, e, r in USERS]
        db.add_all(users)
        db.flush()
        admin, seller, buyer = users

        phones = [
            PhoneModel(title=t, brand=b, image=i, price=Decimal(p), stock=s, seller_id=seller.id)
            for t, b, i, p, s in PHONES
        ]
        db.add_all(phones)
        db.flush()

        db.add_all([
            ReviewModel(phone_id=phones[0].id, reviewer_id=buyer.id, rating=5, comment="Like new."),
            ReviewModel(phone_id=phones[0].id, reviewer_id=admin.id, rating=4, comment="Battery is fine."),
            ReviewModel(phone_id=phones[1].id, reviewer_id=buyer.id, rating=3, comment="Small scratch on the back."),
        ])
        db.commit()
        logger.info(f"Seeded {len(users)} users and {len(phones)} phones")

        if with_sessions:
            store = SessionStore()
            for user in users:
                sid = store.create(user.id, user.role, session_id=f"demo-{user.role}-{user.id}")
                logger.info(f"Session for {user.email}: {sid}")
    finally:
        db.close()


if __name__ == "__main__":
    configure_logging()
    seed()
