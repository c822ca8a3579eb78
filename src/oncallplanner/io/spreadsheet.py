"""Read employee availability from an .xlsx workbook.

Expected layout (first sheet unless a sheet name is given):

    | Datum                     | Anna | Ben | Cara |
    | Montag, 3. März 2025      |  x   |     |  x   |
    | 04.03.2025                |      |  X  |      |

Column A holds the date, as a date cell, an Excel serial number, a German
long date, dd.mm.yyyy or ISO. Employee names are in the header row from
column B onwards; an "x" marks the employee as available.
"""

import logging
import re
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import BinaryIO, Optional, Union
from zipfile import BadZipFile

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from oncallplanner.domain.errors import AvailabilityImportError
from oncallplanner.domain.models import AvailabilityRecord

logger = logging.getLogger(__name__)

# Day zero of the Excel 1900 date system (accounts for the 1900 leap-year bug)
EXCEL_EPOCH = date(1899, 12, 30)

GERMAN_MONTHS = {
    "januar": 1, "jänner": 1, "februar": 2, "märz": 3, "maerz": 3, "april": 4,
    "mai": 5, "juni": 6, "juli": 7, "august": 8, "september": 9,
    "oktober": 10, "november": 11, "dezember": 12,
}

GERMAN_LONG_DATE = re.compile(
    r"^(?:[A-Za-zÄÖÜäöüß]+,\s*)?(\d{1,2})\.\s*([A-Za-zÄÖÜäöüß]+)\s+(\d{4})$"
)
DOTTED_DATE = re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{4})$")


def parse_date_cell(value) -> Optional[date]:
    """Convert a column-A cell value to a date, or None if it isn't one."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return EXCEL_EPOCH + timedelta(days=int(value))
        except (OverflowError, ValueError):
            # Out of the date range, NaN or inf
            return None
    if not isinstance(value, str):
        return None

    text = value.strip()

    match = GERMAN_LONG_DATE.match(text)
    if match:
        day, month_name, year = match.groups()
        month = GERMAN_MONTHS.get(month_name.lower())
        if month is None:
            return None
        return _safe_date(int(year), month, int(day))

    match = DOTTED_DATE.match(text)
    if match:
        day, month, year = match.groups()
        return _safe_date(int(year), int(month), int(day))

    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


class AvailabilityImporter:
    """Reads availability records from a workbook.

    Example:
        >>> importer = AvailabilityImporter()
        >>> records = importer.read("availability.xlsx")
    """

    def __init__(self, marker: str = "x"):
        self.marker = marker.strip().lower()

    def read(
        self,
        source: Union[str, Path, BinaryIO],
        sheet_name: Optional[str] = None,
    ) -> list[AvailabilityRecord]:
        """Read availability from a workbook.

        Args:
            source: Path or binary file object of the .xlsx workbook.
            sheet_name: Worksheet to read; defaults to the first sheet.

        Returns:
            Records sorted by date.

        Raises:
            AvailabilityImportError: If the workbook can't be opened, a date
                can't be parsed, or no data rows are found.
        """
        if isinstance(source, Path):
            source = str(source)
        try:
            wb = openpyxl.load_workbook(source, read_only=True, data_only=True)
        except (InvalidFileException, BadZipFile) as exc:
            raise AvailabilityImportError(
                f"Cannot open workbook: {exc}", field="availability"
            ) from exc

        try:
            if sheet_name is not None:
                if sheet_name not in wb.sheetnames:
                    raise AvailabilityImportError(
                        f"Sheet {sheet_name!r} not found (have {wb.sheetnames})",
                        field="sheet_name",
                    )
                ws = wb[sheet_name]
            else:
                ws = wb.worksheets[0]
            records = self._read_sheet(ws)
        finally:
            wb.close()

        logger.info("Imported %d days of availability", len(records))
        return records

    def _read_sheet(self, ws) -> list[AvailabilityRecord]:
        rows = ws.iter_rows(values_only=True)
        header = next(rows, None)
        if not header:
            raise AvailabilityImportError("Worksheet is empty", field="availability", row=1)

        # column index -> employee name, skipping blank header cells
        columns: dict[int, str] = {}
        for col_idx, cell in enumerate(header[1:], start=1):
            if cell is None or not str(cell).strip():
                continue
            columns[col_idx] = str(cell).strip()
        if not columns:
            raise AvailabilityImportError(
                "Header row has no employee names", field="employees", row=1
            )

        records = []
        for row_num, row in enumerate(rows, start=2):
            if not row or row[0] is None or (isinstance(row[0], str) and not row[0].strip()):
                continue

            day = parse_date_cell(row[0])
            if day is None:
                raise AvailabilityImportError(
                    f"Invalid date in row {row_num}: {row[0]!r}",
                    field="date",
                    row=row_num,
                )

            employees = {
                name: self._is_marked(row[col_idx] if col_idx < len(row) else None)
                for col_idx, name in columns.items()
            }
            records.append(AvailabilityRecord(date=day, employees=employees))

        if not records:
            raise AvailabilityImportError("No valid data found in workbook", field="availability")

        records.sort(key=lambda r: r.date)
        return records

    def _is_marked(self, value) -> bool:
        if value is None:
            return False
        return str(value).strip().lower() == self.marker
