"""Read the first sheet of an uploaded workbook into candidate records."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any, List, Optional

import pandas as pd

from ..core.constants import IMPORT_COLUMNS

# Day zero of the Excel 1900 date system (accounts for the 1900 leap-year bug).
EXCEL_EPOCH = date(1899, 12, 30)


@dataclass(frozen=True)
class CandidateRecord:
    """One spreadsheet row before it is persisted.

    Date cells are kept as found; they are coerced when the record is built.
    """

    row_number: int
    full_name: Optional[str]
    designation: Optional[str]
    department: Optional[str]
    id_number: Optional[str]
    issue_date: Any
    expiry_date: Any
    photo_file_name: Optional[str]


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def cell_text(value: Any) -> Optional[str]:
    if _is_blank(value):
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def coerce_cell_date(value: Any) -> Optional[date]:
    """Turn whatever a date cell holds into a ``date`` (or ``None`` when empty).

    Raises ``ValueError`` for text that is not a recognisable date.
    """
    if _is_blank(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return EXCEL_EPOCH + timedelta(days=int(value))
    parsed = pd.to_datetime(str(value).strip())
    if pd.isna(parsed):
        raise ValueError(f"Invalid date value: {value!r}")
    return parsed.date()


def _read_first_sheet(path: Path) -> pd.DataFrame:
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return pd.read_csv(path, dtype=object)
    if suffix == ".xls":
        # Legacy BIFF workbooks; openpyxl only reads the OOXML formats.
        return pd.read_excel(path, sheet_name=0, dtype=object, engine="xlrd")
    return pd.read_excel(path, sheet_name=0, dtype=object)


def read_candidate_rows(path: str | Path) -> List[CandidateRecord]:
    df = _read_first_sheet(Path(path))
    df.columns = [str(c).strip() for c in df.columns]

    rows: List[CandidateRecord] = []
    for index, record in enumerate(df.to_dict(orient="records"), start=1):
        values = {col: record.get(col) for col in IMPORT_COLUMNS}
        rows.append(
            CandidateRecord(
                row_number=index,
                full_name=cell_text(values["fullName"]),
                designation=cell_text(values["designation"]),
                department=cell_text(values["department"]),
                id_number=cell_text(values["idNumber"]),
                issue_date=values["issueDate"],
                expiry_date=values["expiryDate"],
                photo_file_name=cell_text(values["photoFileName"]),
            )
        )
    return rows
