"""Export on-call duties as iCalendar files, one calendar per employee.

Each assigned day becomes an all-day event with a display alarm the evening
before. Unassigned days are not exported.
"""

import re
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional, Union

from icalendar import Alarm, Calendar, Event

from oncallplanner.domain.models import Assignment, OnCallSchedule

PRODID = "-//oncallplanner//Rufbereitschaft//DE"
DEFAULT_TITLE = "Rufbereitschaft"
DEFAULT_ALARM_HOURS = 6


def _slug(name: str) -> str:
    return re.sub(r"[^\w-]+", "_", name, flags=re.UNICODE).strip("_") or "employee"


class ICSExporter:
    """Builds one VCALENDAR per assigned employee.

    Example:
        >>> paths = ICSExporter().export(schedule, "calendars/")
        >>> [p.name for p in paths]
        ['Anna_rufbereitschaft_2025-03.ics', 'Ben_rufbereitschaft_2025-03.ics']
    """

    def __init__(
        self,
        title: str = DEFAULT_TITLE,
        description: str = "",
        alarm_hours: Optional[int] = DEFAULT_ALARM_HOURS,
    ):
        """Initialize exporter.

        Args:
            title: Event summary prefix; the employee name is appended.
            description: Free text added to every event, e.g. a guideline link.
            alarm_hours: Alarm this many hours before the duty day starts.
                None disables the alarm.
        """
        self.title = title
        self.description = description
        self.alarm_hours = alarm_hours

    def build_calendars(
        self,
        schedule: OnCallSchedule,
        stamp: Optional[datetime] = None,
    ) -> dict[str, Calendar]:
        """Group assignments by employee, in order of their first duty."""
        stamp = stamp or datetime.now(timezone.utc)
        calendars: dict[str, Calendar] = {}

        for assignment in schedule.assignments:
            if assignment.is_unassigned:
                continue
            employee = assignment.assigned_employee
            if employee not in calendars:
                cal = Calendar()
                cal.add("prodid", PRODID)
                cal.add("version", "2.0")
                cal.add("x-wr-calname", f"{self.title} - {employee}")
                calendars[employee] = cal
            calendars[employee].add_component(self._event(assignment, stamp))

        return calendars

    def _event(self, assignment: Assignment, stamp: datetime) -> Event:
        employee = assignment.assigned_employee
        summary = f"{self.title} - {employee}"

        event = Event()
        event.add("uid", f"{assignment.date.isoformat()}-{_slug(employee)}@oncallplanner")
        event.add("dtstamp", stamp)
        event.add("dtstart", assignment.date)
        event.add("dtend", assignment.date + timedelta(days=1))
        event.add("summary", summary)
        event.add("status", "CONFIRMED")
        event.add("transp", "OPAQUE")

        lines = []
        if assignment.contact_info:
            lines.append(f"Telefon: {assignment.contact_info}")
        if self.description:
            lines.append(self.description)
        if lines:
            event.add("description", "\n".join(lines))

        if self.alarm_hours is not None:
            alarm = Alarm()
            alarm.add("action", "DISPLAY")
            alarm.add("description", summary)
            alarm.add("trigger", timedelta(hours=-self.alarm_hours))
            event.add_component(alarm)

        return event

    def to_ical(
        self,
        schedule: OnCallSchedule,
        stamp: Optional[datetime] = None,
    ) -> dict[str, bytes]:
        """Serialized calendar per employee."""
        return {
            employee: cal.to_ical()
            for employee, cal in self.build_calendars(schedule, stamp).items()
        }

    def export(
        self,
        schedule: OnCallSchedule,
        output_dir: Union[str, Path],
        basename: Optional[str] = None,
    ) -> list[Path]:
        """Write `<employee>_<basename>.ics` files into output_dir.

        Args:
            schedule: The schedule to export.
            output_dir: Target directory, created if missing.
            basename: File name suffix; defaults to rufbereitschaft_YYYY-MM of
                the first scheduled day.

        Returns:
            Paths of the written files.
        """
        if basename is None:
            basename = "rufbereitschaft"
            if schedule.assignments:
                basename += schedule.assignments[0].date.strftime("_%Y-%m")

        directory = Path(output_dir)
        directory.mkdir(parents=True, exist_ok=True)

        paths = []
        for employee, content in self.to_ical(schedule).items():
            path = directory / f"{_slug(employee)}_{basename}.ics"
            path.write_bytes(content)
            paths.append(path)
        return paths
