"""
Table storing the user records fetched from Paycor.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from paycor_sync.database import Base


class UserRecord(Base):
    __tablename__ = "users"
    __table_args__ = (Index("idx_users_paycor_id", "paycor_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    paycor_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    first_name: Mapped[Optional[str]] = mapped_column(String(255))
    last_name: Mapped[Optional[str]] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    # Last time the record was fetched from Paycor and written here.
    fetched_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))


__all__ = ["UserRecord"]
