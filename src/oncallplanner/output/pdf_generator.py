"""PDF generation for on-call rosters.

This module creates a printable roster showing:
- One row per day with weekday, assigned employee and phone number
- Weekend days shaded, unassigned days highlighted
- The contact table from the employee directory
"""

from datetime import date
from io import BytesIO
from pathlib import Path
from typing import Optional, Union

from oncallplanner.domain.directory import EmployeeDirectory
from oncallplanner.domain.models import Assignment, OnCallSchedule

# Color definitions (RGB tuples, 0-1 scale)
COLORS = {
    "header": (66 / 255, 139 / 255, 202 / 255),  # Blue
    "weekend": (198 / 255, 239 / 255, 206 / 255),  # Light green
    "unassigned": (1.0, 0.8, 0.8),  # Light red
    "grid": (0.6, 0.6, 0.6),
}

SCHEDULE_COLUMNS = [("Date", 70), ("Weekday", 70), ("Employee", 150), ("Phone", 110)]
DIRECTORY_COLUMNS = [("Name", 130), ("Position", 170), ("Phone", 110)]

ESCALATION_NOTE = "* In case of serious incidents try numbers in descending order"


class PDFGenerator:
    """Generates printable on-call roster PDFs.

    Example:
        >>> generator = PDFGenerator()
        >>> generator.generate(schedule, "rufbereitschaft.pdf", directory)
    """

    def __init__(
        self,
        page_width: float = 595.27,  # A4 portrait width
        page_height: float = 841.89,  # A4 portrait height
        margin: float = 40,
        row_height: float = 13,
    ):
        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin
        self.row_height = row_height
        self._page = 1

    def generate(
        self,
        schedule: OnCallSchedule,
        output_path: Union[str, Path],
        directory: Optional[EmployeeDirectory] = None,
        as_of: Optional[date] = None,
    ) -> None:
        """Generate PDF roster and save to file.

        Args:
            schedule: The schedule to render.
            output_path: Path to save the PDF.
            directory: Contact table printed below the roster.
            as_of: Date printed as "aktueller Stand"; defaults to today.
        """
        try:
            from reportlab.pdfgen import canvas
        except ImportError:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            )

        c = canvas.Canvas(str(output_path), pagesize=(self.page_width, self.page_height))
        self._draw(c, schedule, directory, as_of or date.today())
        c.save()

    def generate_to_buffer(
        self,
        schedule: OnCallSchedule,
        directory: Optional[EmployeeDirectory] = None,
        as_of: Optional[date] = None,
    ) -> BytesIO:
        """Generate PDF and return as bytes buffer."""
        try:
            from reportlab.pdfgen import canvas
        except ImportError:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            )

        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=(self.page_width, self.page_height))
        self._draw(c, schedule, directory, as_of or date.today())
        c.save()
        buffer.seek(0)
        return buffer

    def _draw(
        self,
        c,
        schedule: OnCallSchedule,
        directory: Optional[EmployeeDirectory],
        as_of: date,
    ) -> None:
        self._page = 1
        y = self._draw_header(c, schedule, as_of)

        rows = [self._schedule_row(a) for a in schedule.assignments]
        fills = [self._row_fill(a) for a in schedule.assignments]
        y = self._draw_table(c, SCHEDULE_COLUMNS, rows, fills, y)

        if directory is not None and len(directory) > 0:
            y -= self.row_height
            contacts = [[e.name, e.position, e.phone] for e in directory]
            y = self._draw_table(c, DIRECTORY_COLUMNS, contacts, [None] * len(contacts), y)

            y -= self.row_height
            y = self._ensure_space(c, y, 1)
            c.setFont("Helvetica-Oblique", 7)
            c.setFillColorRGB(0, 0, 0)
            c.drawString(self.margin, y, ESCALATION_NOTE)

        self._draw_page_number(c)
        c.showPage()

    def _draw_header(self, c, schedule: OnCallSchedule, as_of: date) -> float:
        """Draw title and date stamp, return the y below them."""
        top = self.page_height - self.margin
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 14)
        c.drawString(self.margin, top, f"Rufbereitschaft {schedule.month_label()}".strip())
        c.setFont("Helvetica", 8)
        c.drawString(self.margin, top - 14, f"aktueller Stand: {as_of.strftime('%d.%m.%Y')}")
        return top - 34

    def _draw_table(
        self,
        c,
        columns: list[tuple[str, float]],
        rows: list[list[str]],
        fills: list[Optional[tuple]],
        y: float,
    ) -> float:
        """Draw a grid table starting at y, paging as needed."""
        y = self._ensure_space(c, y, 2)
        self._draw_row(c, columns, [name for name, _ in columns], y, COLORS["header"], bold=True)
        y -= self.row_height

        for row, fill in zip(rows, fills):
            if y < self.margin + self.row_height:
                y = self._new_page(c)
                self._draw_row(c, columns, [name for name, _ in columns], y, COLORS["header"], bold=True)
                y -= self.row_height
            self._draw_row(c, columns, row, y, fill)
            y -= self.row_height

        return y

    def _draw_row(
        self,
        c,
        columns: list[tuple[str, float]],
        values: list[str],
        y: float,
        fill: Optional[tuple] = None,
        bold: bool = False,
    ) -> None:
        x = self.margin
        c.setStrokeColorRGB(*COLORS["grid"])
        for (_, width), value in zip(columns, values):
            if fill is not None:
                c.setFillColorRGB(*fill)
                c.rect(x, y, width, self.row_height, fill=1, stroke=1)
            else:
                c.rect(x, y, width, self.row_height, fill=0, stroke=1)

            if bold:
                c.setFillColorRGB(1, 1, 1)
                c.setFont("Helvetica-Bold", 8)
            else:
                c.setFillColorRGB(0, 0, 0)
                c.setFont("Helvetica", 7)
            c.drawString(x + 3, y + 4, self._fit(str(value), width))
            x += width

    def _schedule_row(self, assignment: Assignment) -> list[str]:
        return [
            assignment.date.strftime("%d.%m.%Y"),
            assignment.weekday,
            assignment.display_name,
            assignment.contact_info,
        ]

    def _row_fill(self, assignment: Assignment) -> Optional[tuple]:
        if assignment.is_unassigned:
            return COLORS["unassigned"]
        if assignment.is_weekend:
            return COLORS["weekend"]
        return None

    def _ensure_space(self, c, y: float, rows: int) -> float:
        if y - rows * self.row_height < self.margin:
            return self._new_page(c)
        return y

    def _new_page(self, c) -> float:
        self._draw_page_number(c)
        c.showPage()
        self._page += 1
        return self.page_height - self.margin - self.row_height

    def _draw_page_number(self, c) -> None:
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica", 7)
        c.drawCentredString(self.page_width / 2, self.margin / 2, f"Seite {self._page}")

    def _fit(self, text: str, width: float) -> str:
        # Rough fit at ~3.6pt per character for 7pt Helvetica
        max_chars = max(1, int((width - 6) / 3.6))
        if len(text) <= max_chars:
            return text
        return text[: max_chars - 2] + ".."
