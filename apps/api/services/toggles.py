"""Set-membership toggles backed by database uniqueness constraints."""

from __future__ import annotations

from typing import Any, Dict, Type

from sqlalchemy import and_, delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession


async def toggle_relation(db: AsyncSession, model: Type[Any], key: Dict[str, Any]) -> bool:
    """
    Flip the presence of the row identified by ``key`` and return the new state.

    A delete that removes a row means the relation is now absent. Otherwise an
    insert is attempted. When the insert fails integrity checks the row is
    looked up again: a concurrent request may have created it first, or the
    target may have vanished, and the stored state is what gets reported.
    """
    criteria = and_(*[getattr(model, column) == value for column, value in key.items()])
    result = await db.execute(delete(model).where(criteria))
    if result.rowcount:
        await db.commit()
        return False

    db.add(model(**key))
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        existing = await db.execute(select(model.id).where(criteria))
        return existing.first() is not None
    return True


async def insert_if_absent(db: AsyncSession, row: Any) -> bool:
    """Insert ``row``; return False when a unique constraint says it already exists."""
    db.add(row)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        return False
    return True
