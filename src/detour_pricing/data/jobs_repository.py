"""Load service jobs from a CSV or XLSX export of the job sheet."""

from __future__ import annotations

import csv
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Iterator, Optional, Sequence

from openpyxl import load_workbook

from ..config import settings
from ..models.domain import Job, ServiceTier

logger = logging.getLogger(__name__)

DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%d/%m/%Y", "%Y/%m/%d", "%b %d, %Y", "%a %b %d %Y")


def parse_service_date(value: Any) -> Optional[date]:
    """Calendar day of a sheet cell; None when the cell is blank or not a date."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _required_columns() -> dict[str, str]:
    return {
        "location": settings.column_location,
        "date": settings.column_date,
        "notes": settings.column_notes,
        "technician": settings.column_technician,
    }


def _check_header(header: Sequence[Any], source: Path) -> dict[str, int]:
    header_map = {_cell_text(name): idx for idx, name in enumerate(header) if _cell_text(name)}
    wanted = list(_required_columns().values())
    if settings.column_job_id:
        wanted.append(settings.column_job_id)
    missing = [name for name in wanted if name not in header_map]
    if missing:
        raise ValueError(f"Job sheet '{source}' missing columns: {', '.join(missing)}")
    return header_map


def _rows_to_jobs(rows: Iterator[Sequence[Any]], header_map: dict[str, int], premium_keyword: str) -> list[Job]:
    columns = _required_columns()
    jobs: list[Job] = []
    # Header is sheet row 1, so data starts at row 2.
    for row_number, row in enumerate(rows, start=2):
        values = {field: row[header_map[name]] if header_map[name] < len(row) else None for field, name in columns.items()}
        technician = _cell_text(values["technician"])
        service_date = parse_service_date(values["date"])
        if not technician or service_date is None:
            logger.debug(f"Skipping row {row_number}: missing technician or valid date.")
            continue
        notes = _cell_text(values["notes"])
        job_id = str(row_number)
        if settings.column_job_id:
            id_index = header_map[settings.column_job_id]
            if id_index < len(row):
                job_id = _cell_text(row[id_index]) or job_id
        jobs.append(
            Job(
                job_id=job_id,
                location=_cell_text(values["location"]),
                tier=ServiceTier.from_notes(notes, premium_keyword),
                technician=technician,
                service_date=service_date,
                notes=notes,
                raw={name: row[idx] for name, idx in header_map.items() if idx < len(row)},
            )
        )
    return jobs


def _load_jobs_from_csv(path: Path, premium_keyword: str) -> list[Job]:
    with path.open(mode="r", encoding="utf-8-sig", newline="") as handle:
        reader = csv.reader(handle)
        header = next(reader, None)
        if not header:
            raise ValueError(f"Job sheet '{path}' is missing a header row.")
        header_map = _check_header(header, path)
        return _rows_to_jobs(reader, header_map, premium_keyword)


def _load_jobs_from_workbook(path: Path, premium_keyword: str) -> list[Job]:
    wb = load_workbook(path, data_only=True, read_only=True)
    try:
        sheet = wb.active
        rows = sheet.iter_rows(min_row=1, values_only=True)
        header = next(rows, None)
        if header is None:
            raise ValueError(f"Job sheet '{path}' is empty.")
        header_map = _check_header(header, path)
        return _rows_to_jobs(rows, header_map, premium_keyword)
    finally:
        wb.close()


def load_jobs(source: Path | None = None, premium_keyword: str | None = None) -> tuple[Job, ...]:
    """Read every usable job row, in sheet order."""
    path = source or settings.jobs_file
    if not path.exists():
        raise FileNotFoundError(f"Job sheet not found: {path}")
    keyword = premium_keyword or settings.premium_keyword
    if path.suffix.lower() in {".xlsx", ".xlsm"}:
        jobs = _load_jobs_from_workbook(path, keyword)
    else:
        jobs = _load_jobs_from_csv(path, keyword)
    logger.info(f"Loaded {len(jobs)} job(s) from {path}")
    return tuple(jobs)
