"""Admin user model."""
from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class AdminUser(Base):
    """Back-office operator whose actions are recorded in the activity log."""

    __tablename__ = "admin_users"

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    api_keys = relationship("ApiKey", back_populates="admin_user")

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
