from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime

from phonedeals.data.database import Base

USER_ROLES = ("user", "admin", "superAdmin")
USER_STATUSES = ("active", "inactive", "pending")


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    firstname = Column(String, nullable=False)
    lastname = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True, index=True)

    role = Column(String, nullable=False, default="user")
    status = Column(String, nullable=False, default="active")
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    @property
    def full_name(self) -> str:
        return f"{self.firstname} {self.lastname}"
