"""
SQLAlchemy declarative base and common model utilities.

All console models (users, tenants, roles, role bindings, session tokens)
inherit from Base.
"""
from datetime import datetime
from sqlalchemy import DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base shared by every console table."""
    pass


class TimestampMixin:
    """
    Adds created_at and updated_at columns maintained by the database.

    Usage:
        class Tenant(Base, TimestampMixin):
            __tablename__ = "tenants"
            id: Mapped[int] = mapped_column(primary_key=True)
    """
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
