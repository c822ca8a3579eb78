"""Input readers for availability data."""

from oncallplanner.io.spreadsheet import AvailabilityImporter, parse_date_cell

__all__ = [
    "AvailabilityImporter",
    "parse_date_cell",
]
