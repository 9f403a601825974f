"""
Saved pivot projects: which workbook, which sheet, which query, which chart.
"""
from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from ..analytics.models import QuerySpec
from ..errors import ProjectFileError

logger = logging.getLogger(__name__)


class ChartType(str, Enum):
    BAR = "Bar"
    LINE = "Line"
    PIE = "Pie"
    TABLE = "Table"
    SCATTER = "Scatter"


class VizProject(BaseModel):
    workbook_path: str | None = None
    sheet: str | None = None
    query: QuerySpec = Field(default_factory=QuerySpec.empty)
    chart_type: ChartType = ChartType.TABLE

    @classmethod
    def new(cls) -> "VizProject":
        return cls()


def save_project(path: str | Path, project: VizProject) -> None:
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(project.model_dump_json(indent=2), encoding="utf-8")
    except OSError as exc:
        raise ProjectFileError(f"Cannot write project {path.name}: {exc}") from exc
    logger.info("Saved project to %s", path)


def load_project(path: str | Path) -> VizProject:
    path = Path(path)
    try:
        payload = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ProjectFileError(f"Cannot read project {path.name}: {exc}") from exc
    try:
        return VizProject.model_validate_json(payload)
    except ValidationError as exc:
        raise ProjectFileError(f"Invalid project file {path.name}: {exc}") from exc
