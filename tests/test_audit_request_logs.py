from __future__ import annotations

from types import SimpleNamespace
from uuid import uuid4

import pytest
from sqlalchemy.dialects import postgresql

from tablekit.modules.audit import router as audit_router_module
from tablekit.modules.audit.repository import RequestLogRepository
from tablekit.modules.audit.schemas import RequestLogCreate, RequestLogError, RequestLogRead
from tablekit.modules.audit.service import RequestLogService
from tablekit.modules.table.config import TableConfig
from tablekit.modules.table.schemas import RowWindow
from tablekit.modules.table.service import TableBuilder, TableRequest
from tablekit.shared.exceptions import NotFoundException
from tests.fakes import FakeRequestLogRepository, make_log


def make_service(repository: FakeRequestLogRepository) -> RequestLogService:
    config = TableConfig(
        default_sort_order={"created_at": -1},
        default_rows_per_page=10,
        num_surrounding_page_links=4,
        rows_per_page_options=[10, 25],
    )
    return RequestLogService(repository, TableBuilder(config))


@pytest.mark.asyncio
async def test_log_request_normalizes_method() -> None:
    repository = FakeRequestLogRepository()
    service = make_service(repository)

    log = await service.log_request(
        RequestLogCreate(url_path="/api/v1/orders", method="post", request={"qty": 2}),
    )

    assert log.method == "POST"
    assert log.url_path == "/api/v1/orders"
    assert log.request == {"qty": 2}
    assert repository.logs == [log]


@pytest.mark.asyncio
async def test_record_error_updates_existing_log() -> None:
    existing = make_log(1)
    service = make_service(FakeRequestLogRepository([existing]))

    log = await service.record_error(existing.id, RequestLogError(status_code=502, error="upstream down"))

    assert log.status_code == 502
    assert log.error == "upstream down"


@pytest.mark.asyncio
async def test_record_error_for_unknown_log_raises_not_found() -> None:
    service = make_service(FakeRequestLogRepository([make_log(1)]))

    with pytest.raises(NotFoundException):
        await service.record_error(uuid4(), RequestLogError(status_code=500, error="boom"))


@pytest.mark.asyncio
async def test_list_table_passes_sort_and_window_to_repository() -> None:
    repository = FakeRequestLogRepository([make_log(index) for index in range(25)])
    service = make_service(repository)

    table = await service.list_table(
        {"page": "2", "sort": "url_path", "order": "desc"},
        "/api/v1/audit/requests?page=2&sort=url_path&order=desc",
    )

    sort, window = repository.list_calls[0]
    assert sort == {"url_path": -1}
    assert (window.start_index, window.end_index) == (11, 20)
    assert [row.url_path for row in table.rows][:2] == ["/api/v1/items/14", "/api/v1/items/13"]
    assert table.pagination.total_pages == 3
    assert table.pagination.total_rows == 25


@pytest.mark.asyncio
async def test_list_table_defaults_to_newest_first() -> None:
    repository = FakeRequestLogRepository([make_log(index) for index in range(3)])
    table = await make_service(repository).list_table({}, "/api/v1/audit/requests")

    assert repository.list_calls[0][0] == {"created_at": -1}
    assert [row.request["index"] for row in table.rows] == [2, 1, 0]


@pytest.mark.asyncio
async def test_router_serializes_rows_and_omits_missing_links() -> None:
    repository = FakeRequestLogRepository([make_log(index) for index in range(25)])

    table = await audit_router_module.list_request_logs(
        table_request=TableRequest(query={}, original_url="/api/v1/audit/requests"),
        service=make_service(repository),
    )

    assert all(isinstance(row, RequestLogRead) for row in table.rows)
    dumped = table.model_dump()
    pagination = dumped["pagination"]
    assert dumped["rows"][0]["error"] is None
    assert "prev_page_url" not in pagination
    assert "first_page_url" not in pagination
    assert pagination["next_page_url"] == "/api/v1/audit/requests?page=2&num_per_page=10"
    assert pagination["rows_per_page_options"] == [10, 25]


class RecordingSession:
    def __init__(self) -> None:
        self.statements: list = []

    async def scalars(self, stmt):
        self.statements.append(stmt)
        return SimpleNamespace(all=lambda: [])


def compile_postgres(stmt) -> str:
    compiled = stmt.compile(dialect=postgresql.dialect(), compile_kwargs={"literal_binds": True})
    return " ".join(str(compiled).split())


@pytest.mark.asyncio
async def test_repository_orders_by_id_after_sort_columns() -> None:
    session = RecordingSession()
    repository = RequestLogRepository(session)

    await repository.list_request_logs({"status_code": -1}, RowWindow(start_index=11, end_index=20))
    await repository.list_request_logs({"unknown": 1}, RowWindow(start_index=1, end_index=10))

    sorted_sql, fallback_sql = (compile_postgres(stmt) for stmt in session.statements)
    assert "ORDER BY request_logs.status_code DESC, request_logs.id ASC" in sorted_sql
    assert "LIMIT 10 OFFSET 10" in sorted_sql
    assert "ORDER BY request_logs.id ASC" in fallback_sql
