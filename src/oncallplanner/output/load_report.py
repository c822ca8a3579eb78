"""Plain-text load report for schedule analysis.

This module creates text output to review a generated schedule:
- Day-by-day assignments with the weight charged
- Final load per employee with a histogram
- Load metrics and collected warnings
"""

from pathlib import Path
from typing import Union

from oncallplanner.domain.models import OnCallSchedule


class LoadReportGenerator:
    """Generates a human-readable load report."""

    def __init__(self, bar_width: int = 40):
        self.bar_width = bar_width

    def generate(self, schedule: OnCallSchedule, output_path: Union[str, Path]) -> str:
        """Generate the report, save it to output_path and return it."""
        content = self.generate_to_string(schedule)
        Path(output_path).write_text(content, encoding="utf-8")
        return content

    def generate_to_string(self, schedule: OnCallSchedule) -> str:
        lines = []

        lines.append("=" * 72)
        title = f"ON-CALL LOAD REPORT - {schedule.month_label()}" if schedule.assignments else "ON-CALL LOAD REPORT"
        lines.append(title)
        lines.append("=" * 72)
        lines.append("")

        lines.append(f"Days: {len(schedule)}  Unassigned: {len(schedule.unassigned_dates)}  "
                     f"Employees: {len(schedule.loads)}  Target load: {schedule.target_load:.2f}")
        lines.append("")

        lines.extend(self._assignment_section(schedule))
        lines.extend(self._load_section(schedule))
        lines.extend(self._warning_section(schedule))

        return "\n".join(lines) + "\n"

    def _assignment_section(self, schedule: OnCallSchedule) -> list[str]:
        lines = ["-" * 72, "ASSIGNMENTS", "-" * 72]
        for a in schedule.assignments:
            marker = "*" if a.is_weekend else " "
            lines.append(
                f"{a.date.strftime('%d.%m.%Y')} {a.weekday:<11}{marker} "
                f"{a.display_name:<25} w={a.weight:g}"
            )
        lines.append("")
        return lines

    def _load_section(self, schedule: OnCallSchedule) -> list[str]:
        lines = ["-" * 72, "LOADS", "-" * 72]
        if not schedule.loads:
            lines.append("(no employees)")
            lines.append("")
            return lines

        max_load = max(schedule.loads.values()) or 1.0
        name_width = max(len(name) for name in schedule.loads) + 2
        for name, load in schedule.loads.items():
            bar = "#" * int(round(load / max_load * self.bar_width))
            shifts = len(schedule.assignments_for(name))
            lines.append(f"{name:<{name_width}}{load:>6g} ({shifts:>2} days) {bar}")

        metrics = schedule.metrics
        lines.append("")
        lines.append(f"Min: {metrics.min_load:g}  Max: {metrics.max_load:g}  "
                     f"Avg: {metrics.avg_load:.2f}  Std Dev: {metrics.load_std_dev:.2f}")
        lines.append(f"Spread: {metrics.spread:g}  Fairness Score: {metrics.fairness_score:.1f}/100")
        lines.append("")
        return lines

    def _warning_section(self, schedule: OnCallSchedule) -> list[str]:
        if not schedule.warnings:
            return []
        lines = ["-" * 72, f"WARNINGS ({len(schedule.warnings)})", "-" * 72]
        lines.extend(f"  - {w}" for w in schedule.warnings)
        lines.append("")
        return lines
