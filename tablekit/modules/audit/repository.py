"""Request audit repository layer."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tablekit.modules.audit.models import RequestLog
from tablekit.modules.table.schemas import RowWindow, SortFilter
from tablekit.modules.table.sources import apply_table_window, count_rows

REQUEST_LOG_SORT_COLUMNS = {
    "created_at": RequestLog.created_at,
    "url_path": RequestLog.url_path,
    "method": RequestLog.method,
    "status_code": RequestLog.status_code,
}


class RequestLogRepository:
    """DB operations for request logs."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_request_log(
        self,
        url_path: str,
        method: str | None,
        request: dict,
    ) -> RequestLog:
        log = RequestLog(url_path=url_path, method=method, request=request)
        self.session.add(log)
        await self.session.flush()
        return log

    async def get_request_log(self, log_id: UUID) -> RequestLog | None:
        return await self.session.get(RequestLog, log_id)

    async def mark_request_failed(
        self,
        log: RequestLog,
        status_code: int,
        error: str,
    ) -> RequestLog:
        log.status_code = status_code
        log.error = error
        await self.session.flush()
        return log

    async def count_request_logs(self) -> int:
        return await count_rows(self.session, select(RequestLog))

    async def list_request_logs(self, sort: SortFilter, window: RowWindow) -> list[RequestLog]:
        stmt = apply_table_window(
            select(RequestLog),
            sort,
            window,
            REQUEST_LOG_SORT_COLUMNS,
            tie_breaker=RequestLog.id,
        )
        return list((await self.session.scalars(stmt)).all())
