"""
FastAPI application for sheetpivot.

Routes delegate ingestion to the ingestion package and queries to the
PivotExecutor; workbooks live in an in-memory snapshot repository.
"""
from __future__ import annotations

import asyncio
import logging
import os
import re
import uuid
from pathlib import Path

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from .analytics import AggregationResult, PivotExecutor, QuerySpec, SheetProfile
from .config import get_settings
from .domain.workbook import Workbook
from .errors import (
    ProjectFileError,
    SheetNotFoundError,
    UnsupportedWorkbookError,
    WorkbookLoadError,
    WorkbookNotFoundError,
)
from .ingestion import get_workbook_format, load_workbook
from .repositories import WorkbookEntry, WorkbookRepository
from .storage import VizProject, load_project, save_project

logger = logging.getLogger(__name__)

app = FastAPI(title="sheetpivot", version="0.1.0", docs_url="/docs", redoc_url="/redoc", openapi_url="/openapi.json")
app.add_middleware(CORSMiddleware, allow_origins=list(get_settings().cors_origins), allow_credentials=True, allow_methods=["*"], allow_headers=["*"])


class ErrorCode:
    NOT_FOUND = "NOT_FOUND"
    INVALID_FILENAME = "INVALID_FILENAME"
    UNSUPPORTED_TYPE = "UNSUPPORTED_TYPE"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    UNREADABLE_WORKBOOK = "UNREADABLE_WORKBOOK"
    INVALID_PROJECT = "INVALID_PROJECT"


# ============================================================================
# Pydantic Models
# ============================================================================

class ColumnSummary(BaseModel):
    name: str
    column_type: str


class SheetSummary(BaseModel):
    name: str
    row_count: int
    columns: list[ColumnSummary]


class WorkbookResponse(BaseModel):
    workbook_id: str
    filename: str
    sheets: list[SheetSummary]
    skipped_sheets: list[str] = Field(default_factory=list)


class WorkbookListResponse(BaseModel):
    workbooks: list[WorkbookResponse]
    total: int


class QueryRequest(BaseModel):
    sheet: str | None = None
    query: QuerySpec = Field(default_factory=QuerySpec.empty)


class HealthResponse(BaseModel):
    status: str = "ok"


# ============================================================================
# Singletons / helpers
# ============================================================================

_repository = WorkbookRepository()
_executor = PivotExecutor(_repository)


def _repo() -> WorkbookRepository:
    return _repository


def _pivot() -> PivotExecutor:
    return _executor


def sanitize_filename(filename: str) -> str:
    """Sanitize filename to prevent path traversal and other issues."""
    filename = os.path.basename(filename)
    filename = re.sub(r'[^\w\-_\. ]', '', filename)
    if len(filename) > 255:
        name, ext = os.path.splitext(filename)
        filename = name[:255 - len(ext)] + ext
    return filename


def _sheets_to_response(workbook: Workbook) -> list[SheetSummary]:
    return [
        SheetSummary(
            name=s.name,
            row_count=s.row_count,
            columns=[ColumnSummary(name=c.name, column_type=c.column_type.value) for c in s.columns],
        )
        for s in workbook.sheets
    ]


def _entry_to_response(entry: WorkbookEntry) -> WorkbookResponse:
    return WorkbookResponse(
        workbook_id=entry.workbook_id,
        filename=entry.filename,
        sheets=_sheets_to_response(entry.workbook),
        skipped_sheets=list(entry.workbook.skipped_sheets),
    )


def _get_entry(workbook_id: str) -> WorkbookEntry:
    try:
        return _repo().get(workbook_id)
    except WorkbookNotFoundError as exc:
        raise HTTPException(404, {"code": ErrorCode.NOT_FOUND, "message": str(exc)})


def _remove_upload(file_path: Path) -> None:
    file_path.unlink(missing_ok=True)
    try:
        file_path.parent.rmdir()
    except OSError as exc:
        logger.warning("Could not remove upload directory %s: %s", file_path.parent, exc)


def _project_path(name: str) -> Path:
    safe = sanitize_filename(name).strip()
    if not safe or safe.startswith("."):
        raise HTTPException(400, {"code": ErrorCode.INVALID_FILENAME, "message": "Invalid project name"})
    return Path(get_settings().projects_dir) / f"{safe}.json"


@app.on_event("startup")
async def startup() -> None:
    s = get_settings()
    logging.basicConfig(level=s.log_level)
    Path(s.upload_dir).mkdir(parents=True, exist_ok=True)
    Path(s.projects_dir).mkdir(parents=True, exist_ok=True)


@app.get("/api/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse()


# ============================================================================
# Workbook Routes
# ============================================================================

@app.post("/api/workbooks/upload", response_model=WorkbookResponse)
async def upload_workbook(file: UploadFile = File(...)) -> WorkbookResponse:
    s = get_settings()
    if not file.filename:
        raise HTTPException(400, {"code": ErrorCode.INVALID_FILENAME, "message": "Filename is required"})
    if get_workbook_format(file.filename) is None:
        raise HTTPException(400, {"code": ErrorCode.UNSUPPORTED_TYPE, "message": "Unsupported file type. Allowed: .xlsx, .xlsm, .xls, .csv"})
    content = await file.read()
    if len(content) > s.max_upload_mb * 1024 * 1024:
        raise HTTPException(413, {"code": ErrorCode.FILE_TOO_LARGE, "message": f"File exceeds {s.max_upload_mb}MB"})

    safe_name = sanitize_filename(file.filename)
    upload_dir = Path(s.upload_dir) / uuid.uuid4().hex
    upload_dir.mkdir(parents=True, exist_ok=True)
    file_path = upload_dir / safe_name
    file_path.write_bytes(content)

    try:
        workbook = await asyncio.to_thread(load_workbook, file_path)
    except UnsupportedWorkbookError as exc:
        _remove_upload(file_path)
        raise HTTPException(400, {"code": ErrorCode.UNSUPPORTED_TYPE, "message": str(exc)})
    except WorkbookLoadError as exc:
        _remove_upload(file_path)
        logger.warning("Workbook ingestion failed for %s: %s", safe_name, exc)
        raise HTTPException(422, {"code": ErrorCode.UNREADABLE_WORKBOOK, "message": str(exc)})

    entry = _repo().register(safe_name, str(file_path), workbook)
    return _entry_to_response(entry)


@app.get("/api/workbooks", response_model=WorkbookListResponse)
async def list_workbooks() -> WorkbookListResponse:
    entries = _repo().list_workbooks()
    return WorkbookListResponse(workbooks=[_entry_to_response(e) for e in entries], total=len(entries))


@app.get("/api/workbooks/{workbook_id}", response_model=WorkbookResponse)
async def get_workbook(workbook_id: str) -> WorkbookResponse:
    return _entry_to_response(_get_entry(workbook_id))


@app.post("/api/workbooks/{workbook_id}/reload", response_model=WorkbookResponse)
async def reload_workbook(workbook_id: str) -> WorkbookResponse:
    entry = _get_entry(workbook_id)
    try:
        workbook = await asyncio.to_thread(load_workbook, entry.source_path)
    except WorkbookLoadError as exc:
        raise HTTPException(422, {"code": ErrorCode.UNREADABLE_WORKBOOK, "message": str(exc)})
    try:
        refreshed = _repo().replace(workbook_id, workbook)
    except WorkbookNotFoundError as exc:
        raise HTTPException(404, {"code": ErrorCode.NOT_FOUND, "message": str(exc)})
    return _entry_to_response(refreshed)


@app.delete("/api/workbooks/{workbook_id}")
async def delete_workbook(workbook_id: str) -> dict:
    entry = _get_entry(workbook_id)
    try:
        _repo().delete(workbook_id)
    except WorkbookNotFoundError as exc:
        raise HTTPException(404, {"code": ErrorCode.NOT_FOUND, "message": str(exc)})
    _remove_upload(Path(entry.source_path))
    return {"status": "ok", "message": f"Workbook {workbook_id} deleted"}


@app.post("/api/workbooks/{workbook_id}/query", response_model=AggregationResult)
async def query_workbook(workbook_id: str, request: QueryRequest) -> AggregationResult:
    try:
        return await asyncio.to_thread(_pivot().execute, workbook_id, request.query, request.sheet)
    except (WorkbookNotFoundError, SheetNotFoundError) as exc:
        raise HTTPException(404, {"code": ErrorCode.NOT_FOUND, "message": str(exc)})


@app.get("/api/workbooks/{workbook_id}/sheets/{sheet_name}/profile", response_model=SheetProfile)
async def profile_sheet(workbook_id: str, sheet_name: str) -> SheetProfile:
    try:
        return await asyncio.to_thread(_pivot().profile, workbook_id, sheet_name)
    except (WorkbookNotFoundError, SheetNotFoundError) as exc:
        raise HTTPException(404, {"code": ErrorCode.NOT_FOUND, "message": str(exc)})


# ============================================================================
# Project Routes
# ============================================================================

@app.put("/api/projects/{name}", response_model=VizProject)
async def put_project(name: str, project: VizProject) -> VizProject:
    path = _project_path(name)
    try:
        await asyncio.to_thread(save_project, path, project)
    except ProjectFileError as exc:
        raise HTTPException(500, {"code": ErrorCode.INVALID_PROJECT, "message": str(exc)})
    return project


@app.get("/api/projects/{name}", response_model=VizProject)
async def get_project(name: str) -> VizProject:
    path = _project_path(name)
    if not path.exists():
        raise HTTPException(404, {"code": ErrorCode.NOT_FOUND, "message": f"Project not found: {name}"})
    try:
        return await asyncio.to_thread(load_project, path)
    except ProjectFileError as exc:
        raise HTTPException(422, {"code": ErrorCode.INVALID_PROJECT, "message": str(exc)})
