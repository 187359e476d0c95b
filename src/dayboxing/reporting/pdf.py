"""PDF reporting utilities for analyzed days."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from reportlab.lib.pagesizes import LETTER
from reportlab.lib.units import inch
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from ..schema import AdvisoryReport, Day
from ..segments import describe_segment, time_range

BODY_FONT = ("Helvetica", 10)
KIND_MARKERS = {"warning": "[!]", "suggestion": "[>]", "tip": "[i]"}


class _Writer:
    """Top-down line writer that starts a new page when the margin is reached."""

    def __init__(self, c: canvas.Canvas) -> None:
        self.c = c
        self.width, self.height = LETTER
        self.margin = 1 * inch
        self.y = self.height - self.margin

    def line(self, text: str, *, font: str = BODY_FONT[0], size: int = BODY_FONT[1], indent: float = 0.0, step: float = 0.22) -> None:
        wrapped = simpleSplit(text, font, size, self.width - 2 * self.margin - indent) or [""]
        for chunk in wrapped:
            if self.y < self.margin:
                self.c.showPage()
                self.y = self.height - self.margin
            self.c.setFont(font, size)
            self.c.drawString(self.margin + indent, self.y, chunk)
            self.y -= step * inch

    def gap(self, amount: float = 0.15) -> None:
        self.y -= amount * inch


def _advice_lines(report: AdvisoryReport) -> List[str]:
    return [f"{KIND_MARKERS.get(item.kind.value, '-')} {item.content}" for item in report.advices]


def generate_day_report(
    days: Sequence[Day],
    reports: Mapping[str, Mapping[str, AdvisoryReport]],
    output_dir: Path,
    *,
    name: Optional[str] = None,
) -> Path:
    """Render segments and advice for ``days`` into a single PDF.

    ``reports`` maps day id to ``{scope: report}`` where scope is ``overall``
    or a segment letter.
    """

    output_dir.mkdir(parents=True, exist_ok=True)
    generated = datetime.now(timezone.utc)
    pdf_path = output_dir / f"{name or 'day-report-' + generated.strftime('%Y%m%d_%H%M%S')}.pdf"

    c = canvas.Canvas(str(pdf_path), pagesize=LETTER)
    writer = _Writer(c)
    writer.line("DayBoxing - QH Advisory Report", font="Helvetica-Bold", size=16, step=0.4)
    writer.line(f"Days: {len(days)}", size=12, step=0.3)
    writer.line(f"Generated: {generated.strftime('%Y-%m-%d %H:%M UTC')}", size=12, step=0.5)

    if not days:
        writer.line("No days to report.", size=12)

    for day in days:
        writer.line(f"Day {day.id} ({day.total_hours}h)", font="Helvetica-Bold", size=13, step=0.3)
        for seg in day.qh_segments or []:
            writer.line(
                f"{seg.segment.value}  {time_range(seg.start_hour, seg.end_hour)}  {describe_segment(seg)}",
                indent=0.2 * inch,
            )
        scoped = reports.get(day.id, {})
        for scope, report in scoped.items():
            lines = _advice_lines(report)
            if not lines:
                continue
            writer.gap()
            writer.line(f"{scope}: {report.title} ({report.status.value})", font="Helvetica-Bold", size=11)
            for text in lines:
                writer.line(text, indent=0.2 * inch)
        writer.gap(0.3)

    c.showPage()
    c.save()
    return pdf_path
