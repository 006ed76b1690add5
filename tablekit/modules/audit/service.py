"""Request audit business logic layer."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tablekit.core.database import get_db_session
from tablekit.modules.audit.models import RequestLog
from tablekit.modules.audit.repository import RequestLogRepository
from tablekit.modules.audit.schemas import RequestLogCreate, RequestLogError
from tablekit.modules.table.schemas import TableResult
from tablekit.modules.table.service import TableBuilder, get_table_builder
from tablekit.shared.exceptions import NotFoundException

logger = logging.getLogger(__name__)


class RequestLogService:
    """Service for recording and listing API requests."""

    def __init__(self, repository: RequestLogRepository, table_builder: TableBuilder) -> None:
        self.repository = repository
        self.table_builder = table_builder

    async def log_request(self, payload: RequestLogCreate) -> RequestLog:
        """Record an incoming request."""
        method = payload.method.upper() if payload.method else None
        return await self.repository.create_request_log(
            url_path=payload.url_path,
            method=method,
            request=payload.request,
        )

    async def record_error(self, log_id: UUID, payload: RequestLogError) -> RequestLog:
        """Attach status code and error message to a recorded request."""
        log = await self.repository.get_request_log(log_id)
        if log is None:
            raise NotFoundException("Request log not found")
        logger.info("Request log %s failed with status %s", log_id, payload.status_code)
        return await self.repository.mark_request_failed(log, payload.status_code, payload.error)

    async def list_table(self, query: Mapping[str, str], original_url: str) -> TableResult[Any]:
        """List recorded requests as one sorted, paginated table page."""
        total = await self.repository.count_request_logs()
        return await self.table_builder.build(
            query,
            original_url,
            total,
            self.repository.list_request_logs,
        )


async def get_request_log_service(
    session: AsyncSession = Depends(get_db_session),
    table_builder: TableBuilder = Depends(get_table_builder),
) -> RequestLogService:
    """Dependency provider for request log service."""
    return RequestLogService(RequestLogRepository(session), table_builder)
