"""Read-side access to authentication attempts reported by field devices."""

from datetime import date, datetime, time, timedelta
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models.auth_log import AuthLog
from app.services.query_filters import AuthLogQuery, export_auth_logs_csv, parse_day


async def load_auth_logs(session: AsyncSession, day: Optional[str] = None) -> List[AuthLog]:
    """Fetch auth logs, restricted to one calendar day when ``day`` is given.

    The day restriction runs in the database; the same prefix filter is applied
    again in memory by AuthLogQuery, so results match either way.
    """
    day = parse_day(day)
    statement = select(AuthLog).order_by(AuthLog.timestamp.desc(), AuthLog.id.desc())
    if day:
        start = datetime.combine(date.fromisoformat(day), time.min)
        statement = statement.where(AuthLog.timestamp >= start, AuthLog.timestamp < start + timedelta(days=1))
    result = await session.execute(statement)
    return list(result.scalars().all())


async def query_auth_logs(session: AsyncSession, query: AuthLogQuery) -> Tuple[List[AuthLog], int]:
    """Return one page of filtered logs plus the filtered total."""
    records = await load_auth_logs(session, query.day)
    filtered = query.filter(records)
    return query.page_of(filtered), len(filtered)


async def export_auth_logs(session: AsyncSession, query: AuthLogQuery) -> str:
    """CSV of every log matching the filters, ignoring paging."""
    records = await load_auth_logs(session, query.day)
    return export_auth_logs_csv(query.filter(records))
