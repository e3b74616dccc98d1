"""Database tables / schema"""

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import JSON
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class DBGame(Base):
    __tablename__ = "games"
    id: Mapped[str] = mapped_column(primary_key=True)
    name: Mapped[Optional[str]]
    # NOTE: plaintext on purpose, compared verbatim on join. Not a security boundary.
    password: Mapped[Optional[str]]
    players: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    created_at: Mapped[float]
    updated_at: Mapped[datetime] = mapped_column(default=utc_now, onupdate=utc_now)
