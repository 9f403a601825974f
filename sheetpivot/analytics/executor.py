"""Resolve a registered sheet, validate the query and run the engine."""
from __future__ import annotations

import logging

from ..repositories.workbook_repository import WorkbookRepository
from .engine import run_query
from .models import AggregationResult, QuerySpec, SheetProfile
from .profiler import profile_worksheet
from .validator import validate_query

logger = logging.getLogger(__name__)


class PivotExecutor:
    """Runs pivot queries against workbook snapshots held by a repository."""

    def __init__(self, repository: WorkbookRepository) -> None:
        self._repo = repository

    @property
    def repository(self) -> WorkbookRepository:
        return self._repo

    def execute(self, workbook_id: str, spec: QuerySpec, sheet_name: str | None = None) -> AggregationResult:
        sheet = self._repo.resolve_sheet(workbook_id, sheet_name)
        validate_query(spec, sheet)
        result = run_query(sheet, spec)
        logger.debug(
            "Query on %s/%s produced %d row(s)", workbook_id, sheet.name, len(result.rows)
        )
        return result

    def profile(self, workbook_id: str, sheet_name: str | None = None) -> SheetProfile:
        return profile_worksheet(self._repo.resolve_sheet(workbook_id, sheet_name))
