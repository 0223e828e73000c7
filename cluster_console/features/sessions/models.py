"""
Server-side record of the token issued to each HTTP session.
"""
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from cluster_console.core.database.base import Base, TimestampMixin


class SessionToken(Base, TimestampMixin):
    __tablename__ = "session_tokens"

    session_key: Mapped[str] = mapped_column(String(64), primary_key=True)
    token: Mapped[str] = mapped_column(String(1024), nullable=False)

    def __repr__(self) -> str:
        return f"<SessionToken(session_key={self.session_key!r})>"
