"""Request audit API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status

from tablekit.modules.audit.schemas import RequestLogCreate, RequestLogError, RequestLogRead
from tablekit.modules.audit.service import RequestLogService, get_request_log_service
from tablekit.modules.table.schemas import TableResult
from tablekit.modules.table.service import TableRequest, get_table_request

router = APIRouter(prefix="/audit", tags=["audit"])


@router.post("/requests", response_model=RequestLogRead, status_code=status.HTTP_201_CREATED)
async def create_request_log(
    payload: RequestLogCreate,
    service: RequestLogService = Depends(get_request_log_service),
) -> RequestLogRead:
    """Record an API request."""
    log = await service.log_request(payload)
    return RequestLogRead.model_validate(log)


@router.patch("/requests/{log_id}/error", response_model=RequestLogRead)
async def record_request_error(
    log_id: UUID,
    payload: RequestLogError,
    service: RequestLogService = Depends(get_request_log_service),
) -> RequestLogRead:
    """Attach error details to a recorded request."""
    log = await service.record_error(log_id, payload)
    return RequestLogRead.model_validate(log)


@router.get("/requests", response_model=TableResult[RequestLogRead])
async def list_request_logs(
    table_request: TableRequest = Depends(get_table_request),
    service: RequestLogService = Depends(get_request_log_service),
) -> TableResult[RequestLogRead]:
    """List recorded requests as a sortable, paginated table."""
    table = await service.list_table(table_request.query, table_request.original_url)
    return TableResult[RequestLogRead](
        rows=[RequestLogRead.model_validate(item) for item in table.rows],
        pagination=table.pagination,
        sorter=table.sorter,
    )
