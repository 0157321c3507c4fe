"""Authentication history API routes.

Filtering and paging run server-side with the same rules the console applies
locally: day prefix, exact mode (or ALL), case-insensitive text over user id,
user name and serial.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import settings
from app.db.db import get_session
from app.services import auth_log_service
from app.services.query_filters import AuthLogQuery, csv_filename, parse_day, parse_mode
from app.utils.auth import Caller, get_current_caller
from app.utils.responses import PaginatedResponse, paginated_response
from app.api.auth_logs.schemas import AuthLogResponse

router = APIRouter(prefix="/api/auth-logs", tags=["auth-logs"])


def build_query(
    date: Optional[str] = Query(default=None, description="YYYY-MM-DD; empty means all days"),
    mode: Optional[str] = Query(default=None, description="ALL, 0, 1, 2 or a mode name"),
    search: Optional[str] = Query(default=None, description="User id, user name or device serial"),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=settings.AUTH_LOG_DEFAULT_PAGE_SIZE, ge=1, le=1000),
) -> AuthLogQuery:
    return AuthLogQuery(
        day=parse_day(date),
        mode=parse_mode(mode),
        search=search or "",
        page=page,
        page_size=page_size,
    )


@router.get("", response_model=PaginatedResponse[AuthLogResponse])
async def list_auth_logs(
    query: AuthLogQuery = Depends(build_query),
    session: AsyncSession = Depends(get_session),
    caller: Caller = Depends(get_current_caller),
):
    page, total = await auth_log_service.query_auth_logs(session, query)
    return paginated_response(
        data=[AuthLogResponse.model_validate(log) for log in page],
        page=query.page,
        limit=query.page_size,
        total=total,
        message="Auth logs retrieved successfully",
    )


@router.get("/export")
async def export_auth_logs(
    query: AuthLogQuery = Depends(build_query),
    session: AsyncSession = Depends(get_session),
    caller: Caller = Depends(get_current_caller),
):
    """Download every log matching the filters as CSV (paging is ignored)."""
    content = await auth_log_service.export_auth_logs(session, query)
    return Response(
        content=content.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{csv_filename(query.day)}"'},
    )
