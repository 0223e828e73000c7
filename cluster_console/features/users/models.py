"""
User model for console accounts.
"""
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from cluster_console.core.database.base import Base, TimestampMixin


class User(Base, TimestampMixin):
    """
    Local console account.

    Accounts are created on first federated login (or provisioned directly)
    and keyed by their unique name. ``access_token`` holds the current
    session token and is rotated on every login.
    """
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    access_token: Mapped[str | None] = mapped_column(String(1024), nullable=True, index=True)

    # Profile fields copied from the identity provider on account creation
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    company: Mapped[str | None] = mapped_column(String(255), nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, name={self.name!r})>"
