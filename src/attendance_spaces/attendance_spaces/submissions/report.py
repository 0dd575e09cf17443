from __future__ import annotations

import io
import re
from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

import pandas as pd

from ..core.constants import DEFAULT_RECORDS_LIMIT, FIXED_FIELD_EMAIL, FIXED_FIELD_NAME
from ..core.exceptions import ValidationError
from ..spaces.model import Space
from .form import normalize_field_key
from .model import AttendanceRecord
from .repository import SubmissionRepository

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@dataclass(frozen=True)
class ExportFile:
    content: bytes
    filename: str
    mimetype: str = XLSX_MIMETYPE


def export_columns(space: Space, records: Sequence[AttendanceRecord]) -> list[str]:
    """Field columns: fixed fields, then schema order, then keys only seen in records.

    Records outlive schema edits, so keys no longer in the schema still get a column.
    """

    columns: list[str] = []

    def add(key: str) -> None:
        if key not in columns:
            columns.append(key)

    add(FIXED_FIELD_NAME)
    add(FIXED_FIELD_EMAIL)
    for cf in space.required_fields:
        add(normalize_field_key(cf.name))
    for r in records:
        for key in r.fields:
            add(key)
    return columns


def export_filename(space: Space, today: date) -> str:
    safe_title = re.sub(r"[^a-zA-Z0-9]", "_", space.title)
    return f"{safe_title}_attendance_{today.isoformat()}.xlsx"


class AttendanceReportService:
    def __init__(self, submissions: SubmissionRepository, *, list_limit: int = DEFAULT_RECORDS_LIMIT):
        self._submissions = submissions
        self._list_limit = int(list_limit)

    def list_records(self, space: Space) -> Sequence[AttendanceRecord]:
        return self._submissions.list_for_space(space.space_id, limit=self._list_limit)

    def build_dataframe(self, space: Space, records: Sequence[AttendanceRecord]) -> pd.DataFrame:
        columns = export_columns(space, records)
        rows = [
            {
                "Submitted At": r.submitted_at.strftime("%Y-%m-%d %H:%M:%S"),
                "User ID": r.user_id or "Anonymous",
                **{key: r.fields.get(key, "") for key in columns},
            }
            for r in records
        ]
        return pd.DataFrame(rows, columns=["Submitted At", "User ID", *columns])

    def export_excel(self, space: Space, *, today: Optional[date] = None) -> ExportFile:
        records = self._submissions.list_for_space(space.space_id)
        if not records:
            raise ValidationError("No attendance records to export")

        df = self.build_dataframe(space, records)
        output = io.BytesIO()
        with pd.ExcelWriter(output, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="Attendance Records")

        return ExportFile(content=output.getvalue(), filename=export_filename(space, today or date.today()))
