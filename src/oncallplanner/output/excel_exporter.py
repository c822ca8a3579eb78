"""Export an on-call schedule to an .xlsx workbook."""

from pathlib import Path
from typing import Union

import openpyxl
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

from oncallplanner.domain.models import OnCallSchedule

SCHEDULE_HEADERS = ["Date", "Weekday", "Assigned Employee", "Phone"]
COLUMN_WIDTHS = [12, 10, 25, 20]

WEEKEND_FILL = PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid")
UNASSIGNED_FILL = PatternFill(start_color="FFCCCC", end_color="FFCCCC", fill_type="solid")


class ExcelExporter:
    """Writes a Schedule sheet and a Loads sheet.

    Example:
        >>> ExcelExporter().export(schedule, "rufbereitschaft.xlsx")
    """

    def build_workbook(self, schedule: OnCallSchedule) -> openpyxl.Workbook:
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = "Schedule"

        ws.append(SCHEDULE_HEADERS)
        for cell in ws[1]:
            cell.font = Font(bold=True)

        for assignment in schedule.assignments:
            ws.append([
                assignment.date.strftime("%d.%m.%Y"),
                assignment.weekday,
                assignment.display_name,
                assignment.contact_info,
            ])
            fill = None
            if assignment.is_unassigned:
                fill = UNASSIGNED_FILL
            elif assignment.is_weekend:
                fill = WEEKEND_FILL
            if fill is not None:
                for cell in ws[ws.max_row]:
                    cell.fill = fill

        for idx, width in enumerate(COLUMN_WIDTHS, start=1):
            ws.column_dimensions[get_column_letter(idx)].width = width

        loads_ws = wb.create_sheet("Loads")
        loads_ws.append(["Employee", "Shifts", "Load"])
        for cell in loads_ws[1]:
            cell.font = Font(bold=True)
        for name, load in schedule.loads.items():
            loads_ws.append([name, len(schedule.assignments_for(name)), load])
        loads_ws.column_dimensions["A"].width = 25

        return wb

    def export(self, schedule: OnCallSchedule, output_path: Union[str, Path]) -> None:
        """Write the schedule workbook to output_path."""
        wb = self.build_workbook(schedule)
        wb.save(str(output_path))
