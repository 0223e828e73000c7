"""
Tenant model.

Tenants are the top-level isolation boundary of the cluster; tenant roles
point at them through ``Role.resource_id``.
"""
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from cluster_console.core.database.base import Base, TimestampMixin


class Tenant(Base, TimestampMixin):
    __tablename__ = "tenants"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    tenant: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    admin_roles: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    allowed_clusters: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, tenant={self.tenant!r})>"
