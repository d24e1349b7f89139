"""Persistence for user records fetched from Paycor."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncEngine

from paycor_sync.models.user import UserRecord
from paycor_sync.schemas import PaycorUser

users_table = UserRecord.__table__

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class UserRepository:
    """Upsert and read rows of the ``users`` table."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        try:
            self._insert = _INSERT_BY_DIALECT[engine.dialect.name]
        except KeyError as exc:
            raise ValueError(
                f"Unsupported database dialect: {engine.dialect.name}"
            ) from exc

    async def upsert(self, user: PaycorUser, *, fetched_at: Optional[datetime] = None) -> None:
        """
        Insert the user, or update the names and fetch time of the existing row.

        Runs as a single statement; errors propagate unchanged.
        """
        fetched_at = fetched_at or datetime.now(timezone.utc)
        stmt = self._insert(users_table).values(
            paycor_id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            fetched_at=fetched_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["paycor_id"],
            set_={
                "first_name": stmt.excluded.first_name,
                "last_name": stmt.excluded.last_name,
                "fetched_at": stmt.excluded.fetched_at,
            },
        )

        async with self._engine.begin() as conn:
            await conn.execute(stmt)

    async def get(self, paycor_id: str) -> Optional[UserRecord]:
        async with self._engine.connect() as conn:
            result = await conn.execute(
                select(users_table).where(users_table.c.paycor_id == paycor_id)
            )
            row = result.one_or_none()
        if row is None:
            return None
        return UserRecord(**row._asdict())


__all__ = ["UserRepository"]
