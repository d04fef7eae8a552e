"""API router for the log search module."""

import re

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from esreport.core.dependencies import SearchClientDep, SettingsDep
from esreport.search.renderer import to_csv, to_xlsx
from esreport.search.schemas import LogProcessResult, LogQueryRequest, SavedQuery
from esreport.search.service import LogReportService

router = APIRouter(prefix="/search", tags=["search"])


def get_log_report_service(client: SearchClientDep, settings: SettingsDep) -> LogReportService:
    return LogReportService(client, settings)


def _file_name(request: LogQueryRequest, extension: str) -> str:
    base = re.sub(r"[^A-Za-z0-9_.-]+", "_", request.title or request.index_tag).strip("_") or "logs"
    return f"{base}.{extension}"


# ===== PROCESSING ENDPOINTS =====


@router.post("/process-logs", response_model=LogProcessResult)
async def process_logs(
    request: LogQueryRequest, service: LogReportService = Depends(get_log_report_service)
) -> LogProcessResult:
    """Run the query, flatten every hit into rows and apply the table rules."""
    return await service.process_logs(request)


@router.get("/saved-query/{query_id}", response_model=SavedQuery)
async def get_saved_query(
    query_id: str, service: LogReportService = Depends(get_log_report_service)
) -> SavedQuery:
    """Resolve a saved search to its query text."""
    saved = await service.get_saved_query(query_id)
    if saved is None:
        raise HTTPException(status_code=404, detail="Saved query not found")
    return saved


# ===== EXPORT ENDPOINTS =====


@router.post("/export-csv")
async def export_csv(
    request: LogQueryRequest, service: LogReportService = Depends(get_log_report_service)
) -> Response:
    table = await service.build_table(request)
    return Response(
        content=to_csv(table),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={_file_name(request, 'csv')}"},
    )


@router.post("/export-xlsx")
async def export_xlsx(
    request: LogQueryRequest, service: LogReportService = Depends(get_log_report_service)
) -> Response:
    table = await service.build_table(request)
    return Response(
        content=to_xlsx(table, sheet_name=request.title or request.index_tag),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename={_file_name(request, 'xlsx')}"},
    )
