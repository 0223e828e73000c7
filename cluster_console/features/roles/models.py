"""
Role model for tenant-scoped RBAC.

A role grants a verb on one resource instance (a tenant, a namespace, ...).
Role names are unique per source tenant, not globally.
"""
import enum
from sqlalchemy import String, Integer, Text, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from cluster_console.core.database.base import Base, TimestampMixin


class ResourceType(str, enum.Enum):
    """Kinds of cluster resources a role can be scoped to."""
    TENANTS = "TENANTS"
    NAMESPACES = "NAMESPACES"
    TOPICS = "TOPICS"
    SCHEMAS = "SCHEMAS"
    FUNCTIONS = "FUNCTIONS"


class ResourceVerbs(str, enum.Enum):
    """Verbs a role grants on its resource."""
    ADMIN = "ADMIN"
    PRODUCE = "PRODUCE"
    CONSUME = "CONSUME"
    FUNCTION = "FUNCTION"


class Role(Base, TimestampMixin):
    """
    Named permission on a single resource.

    ``role_source`` is the tenant that owns the role; ``(role_name,
    role_source)`` is unique.
    """
    __tablename__ = "roles"
    __table_args__ = (
        UniqueConstraint("role_name", "role_source", name="uq_roles_name_source"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    role_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    role_source: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Resource the role is scoped to (for TENANTS this is the tenant id)
    resource_id: Mapped[int] = mapped_column(Integer, nullable=False)
    resource_name: Mapped[str] = mapped_column(String(255), nullable=False)
    resource_type: Mapped[ResourceType] = mapped_column(SQLEnum(ResourceType), nullable=False)
    resource_verbs: Mapped[ResourceVerbs] = mapped_column(SQLEnum(ResourceVerbs), nullable=False)

    flag: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    def __repr__(self) -> str:
        return f"<Role(id={self.id}, role_name={self.role_name!r}, role_source={self.role_source!r})>"
