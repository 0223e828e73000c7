"""
Role binding model: "this user holds this role".
"""
from sqlalchemy import String, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from cluster_console.core.database.base import Base, TimestampMixin


class RoleBinding(Base, TimestampMixin):
    """
    Assignment of a role to a user.

    At most one binding exists per ``(user_id, role_id)``. Deleting a user or
    role does not remove its bindings; callers delete bindings first.
    """
    __tablename__ = "role_bindings"
    __table_args__ = (
        UniqueConstraint("user_id", "role_id", name="uq_role_bindings_user_role"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    role_id: Mapped[int] = mapped_column(ForeignKey("roles.id"), nullable=False, index=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<RoleBinding(id={self.id}, user_id={self.user_id}, role_id={self.role_id})>"
