"""Rating aggregate maintenance.

``Store.average_rating`` and ``Store.total_ratings`` are derived from the
store's rating rows. Every code path that inserts, updates or deletes ratings
calls :func:`refresh_store_aggregates` inside the same transaction, after the
rating write has been flushed, so no reader can observe one without the other.
"""

import logging
from collections.abc import Iterable

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from store_rating.models.rating import Rating
from store_rating.models.store import Store

logger = logging.getLogger(__name__)


async def lock_store(session: AsyncSession, store_id: int) -> Store | None:
    """Load a store row with ``FOR UPDATE`` so writers on it serialise.

    Engines without row locks (sqlite) ignore the clause.
    """
    result = await session.execute(
        select(Store).where(Store.id == store_id).with_for_update()
    )
    return result.scalar_one_or_none()


async def refresh_store_aggregates(session: AsyncSession, store_id: int) -> None:
    """Recompute count and rounded mean of a store's ratings from live rows."""
    await session.flush()

    count_q = (
        select(func.count(Rating.id))
        .where(Rating.store_id == store_id)
        .scalar_subquery()
    )
    avg_q = (
        select(func.round(func.coalesce(func.avg(Rating.rating), 0), 1))
        .where(Rating.store_id == store_id)
        .scalar_subquery()
    )
    await session.execute(
        update(Store)
        .where(Store.id == store_id)
        .values(total_ratings=count_q, average_rating=avg_q)
        .execution_options(synchronize_session=False)
    )

    # Drop any stale in-memory copy so the next access reloads the new values
    store = await session.get(Store, store_id, populate_existing=True)
    if store is not None:
        logger.debug(
            "Store %s aggregates: total=%s average=%s",
            store_id, store.total_ratings, store.average_rating,
        )


async def refresh_many(session: AsyncSession, store_ids: Iterable[int]) -> None:
    for store_id in sorted(set(store_ids)):
        await refresh_store_aggregates(session, store_id)
