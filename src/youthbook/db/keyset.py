"""Keyset ("seek") pagination over ``(sort timestamp, id)`` descending.

Pages are positioned by the last row already returned instead of an OFFSET,
so rows inserted after a page was read never shift later pages.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, TypeVar

from sqlalchemy import Select, and_, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from youthbook.cursors import decode_cursor, encode_cursor
from youthbook.logging_config import log_with_fields
from youthbook.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, PageResult, clamp_limit

RowT = TypeVar("RowT")

logger = logging.getLogger("youthbook.persistence")


async def fetch_page(
    session: AsyncSession,
    statement: Select[tuple[RowT]],
    *,
    sort_column: InstrumentedAttribute[datetime],
    id_column: InstrumentedAttribute[Any],
    limit: int | None,
    cursor: str | None,
    default_limit: int = DEFAULT_PAGE_SIZE,
    max_limit: int = MAX_PAGE_SIZE,
) -> PageResult[RowT]:
    """Run one keyset-ordered query and build a page from it.

    Args:
        session: Session to query with.
        statement: Base ``select()`` carrying the record set's filters, without
            ordering or limits.
        sort_column: Timestamp column the set is ordered by, newest first.
        id_column: Unique tie-breaker for rows sharing a timestamp.
        limit: Requested page size, clamped to ``[1, max_limit]``.
        cursor: ``next_cursor`` of the previous page, or ``None`` for the first page.

    Raises:
        InvalidCursor: if ``cursor`` cannot be decoded. No query is issued.
    """
    page_size = clamp_limit(limit, default=default_limit, maximum=max_limit)

    if cursor is not None:
        position = decode_cursor(cursor)
        statement = statement.where(
            or_(
                sort_column < position.sort_timestamp,
                and_(sort_column == position.sort_timestamp, id_column < position.id),
            )
        )

    # One extra row tells us whether another page exists.
    statement = statement.order_by(sort_column.desc(), id_column.desc()).limit(page_size + 1)
    result = await session.execute(statement)
    rows = list(result.scalars().all())

    has_more = len(rows) > page_size
    if has_more:
        rows = rows[:page_size]

    next_cursor: str | None = None
    if has_more:
        last = rows[-1]
        next_cursor = encode_cursor(
            getattr(last, sort_column.key),
            getattr(last, id_column.key),
        )

    log_with_fields(
        logger,
        logging.DEBUG,
        "keyset page fetched",
        table=sort_column.class_.__tablename__,
        limit=page_size,
        returned=len(rows),
        has_more=has_more,
    )
    return PageResult(items=rows, has_more=has_more, next_cursor=next_cursor)
