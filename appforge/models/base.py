"""Declarative base with row timestamps."""

from datetime import datetime

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    """Base class for all models.

    Lifecycle transitions write `updated_at` explicitly; the stale-build
    window is measured from it.
    """

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        keys = ", ".join(f"{c.name}={getattr(self, c.name)!r}" for c in self.__table__.primary_key)
        return f"<{type(self).__name__} {keys}>"
