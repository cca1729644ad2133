from datetime import date, datetime
from pathlib import Path

import pytest
from openpyxl import Workbook

from detour_pricing.data.jobs_repository import load_jobs, parse_service_date
from detour_pricing.models.domain import ServiceTier


def _write_csv(path: Path, content: str) -> Path:
    path.write_text(content, encoding="utf-8")
    return path


def test_load_jobs_from_csv(tmp_path: Path):
    path = _write_csv(
        tmp_path / "jobs.csv",
        "City,Date,Value,Notes,Technician\n"
        " Hamilton ,2025-03-10,,svd,Alex\n"
        "Oshawa,03/10/2025,,,Alex\n"
        "Brampton,,,,Alex\n"
        "Markham,2025-03-10,,,\n"
        "Mississauga,2025-03-11T09:30:00,,note,Sam\n",
    )

    jobs = load_jobs(path, premium_keyword="SVD")

    assert [job.job_id for job in jobs] == ["2", "3", "6"]
    assert jobs[0].location == "Hamilton"
    assert jobs[0].tier is ServiceTier.PREMIUM
    assert jobs[1].tier is ServiceTier.NORMAL
    assert jobs[1].service_date == date(2025, 3, 10)
    assert jobs[2].service_date == date(2025, 3, 11)
    assert jobs[2].notes == "note"


def test_load_jobs_from_workbook(tmp_path: Path):
    wb = Workbook()
    sheet = wb.active
    sheet.append(["City", "Date", "Value", "Notes", "Technician"])
    sheet.append(["Hamilton", datetime(2025, 3, 10, 14, 0), None, "SVD", "Alex"])
    sheet.append(["Oshawa", datetime(2025, 3, 10, 8, 15), None, None, "Alex"])
    path = tmp_path / "jobs.xlsx"
    wb.save(path)

    jobs = load_jobs(path, premium_keyword="SVD")

    assert len(jobs) == 2
    assert jobs[0].service_date == jobs[1].service_date == date(2025, 3, 10)
    assert jobs[0].tier is ServiceTier.PREMIUM
    assert jobs[1].notes == ""


def test_load_jobs_missing_columns(tmp_path: Path):
    path = _write_csv(tmp_path / "jobs.csv", "City,Date\nHamilton,2025-03-10\n")

    with pytest.raises(ValueError, match="Technician"):
        load_jobs(path)


def test_load_jobs_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_jobs(tmp_path / "nope.csv")


def test_load_jobs_uses_configured_job_id_column(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    from detour_pricing.config import settings

    monkeypatch.setattr(settings, "column_job_id", "Ticket")
    path = _write_csv(
        tmp_path / "jobs.csv",
        "Ticket,City,Date,Notes,Technician\nT-100,Hamilton,2025-03-10,,Alex\n,Oshawa,2025-03-10,,Alex\n",
    )

    jobs = load_jobs(path)

    assert [job.job_id for job in jobs] == ["T-100", "3"]


def test_load_jobs_short_row_falls_back_to_row_number(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    from detour_pricing.config import settings

    monkeypatch.setattr(settings, "column_job_id", "Ticket")
    path = _write_csv(
        tmp_path / "jobs.csv",
        "City,Date,Notes,Technician,Ticket\nHamilton,2025-03-10,,Alex\nOshawa,2025-03-10,,Alex,T-7\n",
    )

    jobs = load_jobs(path)

    assert [job.job_id for job in jobs] == ["2", "T-7"]


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2025-03-10", date(2025, 3, 10)),
        ("Mon Mar 10 2025", date(2025, 3, 10)),
        (datetime(2025, 3, 10, 23, 59), date(2025, 3, 10)),
        (date(2025, 3, 10), date(2025, 3, 10)),
        ("", None),
        ("soon", None),
        (None, None),
    ],
)
def test_parse_service_date(value, expected):
    assert parse_service_date(value) == expected
