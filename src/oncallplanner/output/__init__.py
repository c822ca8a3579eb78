"""Output generation for schedules (PDF, Excel, iCalendar, text)."""

from oncallplanner.output.excel_exporter import ExcelExporter
from oncallplanner.output.ics_exporter import ICSExporter
from oncallplanner.output.load_report import LoadReportGenerator
from oncallplanner.output.pdf_generator import PDFGenerator

__all__ = [
    "ExcelExporter",
    "ICSExporter",
    "LoadReportGenerator",
    "PDFGenerator",
]
