"""PDF report for a computed prediction.

Layout (A4, top to bottom):
    title + generation date, student / year level, ATAR banner,
    top 4 table, bonus section (has_bonus flag), notes, SCSA footer.
"""

import io
import logging
import re
from collections.abc import Sequence
from datetime import date

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from models.responses import ScoreResult
from models.schemas.subject import SelectionEntry, YearLevel
from services.scoring import flagged_bonus_entries

logger = logging.getLogger(__name__)

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN = 57  # ~20mm
ROW_HEIGHT = 22

REPORT_TITLE = "WACE ATAR Calculator Report"

NOTES = [
    "This is an estimate based on historical scaling data.",
    "Actual ATAR depends on the cohort strength each year.",
    "Subject scaling can vary year to year.",
    "Your school marks and WACE exam results both contribute 50% to your final score.",
    "Focus on maintaining strong raw scores across all subjects.",
    "Mathematics and LOTE subjects receive 10% bonus points added to your aggregate.",
]

# x offsets of the top 4 table columns
_COLUMNS = [
    ("Subject", 0),
    ("Category", 170),
    ("Raw Score", 285),
    ("Scaled", 370),
    ("Factor", 440),
]


def _format_date(day: date) -> str:
    return f"{day.day} {day:%B %Y}"


def report_filename(student_name: str | None = None, generated_on: date | None = None) -> str:
    """e.g. ATAR_Report_Jane_Citizen_5_March_2026.pdf"""
    stamp = _format_date(generated_on or date.today()).replace(" ", "_")
    name = re.sub(r"[^\w-]", "", re.sub(r"\s+", "_", (student_name or "").strip()), flags=re.ASCII)
    if name:
        return f"ATAR_Report_{name}_{stamp}.pdf"
    return f"ATAR_Report_{stamp}.pdf"


class _Cursor:
    """Tracks the vertical write position and starts new pages when needed."""

    def __init__(self, c: canvas.Canvas) -> None:
        self.c = c
        self.y = PAGE_HEIGHT - MARGIN

    def advance(self, amount: float) -> None:
        self.y -= amount

    def ensure(
        self,
        needed: float,
        font: tuple[str, float] = ("Helvetica", 10),
        gray: float = 0,
    ) -> None:
        """Start a new page if `needed` points do not fit, restoring font and fill."""
        if self.y - needed < MARGIN:
            self.c.showPage()
            # Graphics state resets on a new page
            self.c.setFont(*font)
            self.c.setFillGray(gray)
            self.y = PAGE_HEIGHT - MARGIN


def render_report(
    result: ScoreResult,
    entries: Sequence[SelectionEntry],
    year_level: YearLevel,
    student_name: str | None = None,
    generated_on: date | None = None,
) -> bytes:
    """Render the prediction report and return the PDF bytes."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    c.setTitle(REPORT_TITLE)
    cur = _Cursor(c)

    # Header
    c.setFont("Helvetica-Bold", 22)
    c.drawCentredString(PAGE_WIDTH / 2, cur.y, REPORT_TITLE)
    cur.advance(24)
    c.setFont("Helvetica", 10)
    c.setFillGray(0.4)
    c.drawCentredString(
        PAGE_WIDTH / 2, cur.y, f"Generated: {_format_date(generated_on or date.today())}"
    )
    cur.advance(36)

    c.setFillGray(0)
    c.setFont("Helvetica", 12)
    if student_name:
        c.drawString(MARGIN, cur.y, f"Student: {student_name}")
        cur.advance(20)
    c.drawString(MARGIN, cur.y, f"Year Level: {YearLevel(year_level).value}")
    cur.advance(24)

    # ATAR banner
    banner_height = 90
    c.setFillColorRGB(59 / 255, 130 / 255, 246 / 255)
    c.rect(0, cur.y - banner_height, PAGE_WIDTH, banner_height, stroke=0, fill=1)
    c.setFillGray(1)
    c.setFont("Helvetica-Bold", 16)
    c.drawCentredString(PAGE_WIDTH / 2, cur.y - 30, "Predicted ATAR Score")
    c.setFont("Helvetica-Bold", 32)
    c.drawCentredString(PAGE_WIDTH / 2, cur.y - 72, f"{result.atar:.2f}")
    cur.advance(banner_height + 30)

    _draw_top_four(cur, result)
    _draw_bonus_section(cur, entries)
    _draw_notes(cur)

    cur.ensure(30)
    c.setFont("Helvetica", 8)
    c.setFillGray(0.47)
    c.drawCentredString(
        PAGE_WIDTH / 2,
        cur.y,
        "For official information, visit the School Curriculum and Standards Authority (SCSA)",
    )
    c.drawCentredString(PAGE_WIDTH / 2, cur.y - 11, "www.scsa.wa.edu.au")

    c.save()
    pdf = buf.getvalue()
    logger.info("Rendered ATAR report (%d bytes, ATAR %.2f)", len(pdf), result.atar)
    return pdf


def _draw_top_four(cur: _Cursor, result: ScoreResult) -> None:
    c = cur.c
    c.setFillGray(0)
    c.setFont("Helvetica-Bold", 14)
    c.drawString(MARGIN, cur.y, "Top 4 Contributing Subjects")
    cur.advance(ROW_HEIGHT)

    table_width = PAGE_WIDTH - 2 * MARGIN
    c.setFillGray(0.94)
    c.rect(MARGIN, cur.y - 6, table_width, ROW_HEIGHT, stroke=0, fill=1)
    c.setFillGray(0)
    c.setFont("Helvetica-Bold", 10)
    for label, x in _COLUMNS:
        c.drawString(MARGIN + 5 + x, cur.y, label)
    cur.advance(ROW_HEIGHT)

    c.setFont("Helvetica", 10)
    for i, ranked in enumerate(result.top_four):
        cur.ensure(ROW_HEIGHT)
        if i % 2 == 0:
            c.setFillGray(0.98)
            c.rect(MARGIN, cur.y - 6, table_width, ROW_HEIGHT, stroke=0, fill=1)
            c.setFillGray(0)
        values = [
            ranked.subject.name,
            ranked.subject.category,
            f"{ranked.raw_score:.1f}",
            f"{ranked.scaled_score:.2f}",
            f"{ranked.subject.scaling_factor:.2f}x",
        ]
        for (_, x), value in zip(_COLUMNS, values):
            c.drawString(MARGIN + 5 + x, cur.y, value)
        cur.advance(ROW_HEIGHT)
    cur.advance(18)


def _draw_bonus_section(cur: _Cursor, entries: Sequence[SelectionEntry]) -> None:
    flagged = flagged_bonus_entries(entries)
    if not flagged:
        return

    c = cur.c
    cur.ensure(ROW_HEIGHT * 2)
    c.setFillColorRGB(254 / 255, 243 / 255, 199 / 255)
    c.rect(MARGIN, cur.y - 6, PAGE_WIDTH - 2 * MARGIN, ROW_HEIGHT, stroke=0, fill=1)
    c.setFillGray(0)
    c.setFont("Helvetica-Bold", 14)
    c.drawString(MARGIN + 5, cur.y, "Bonus Points Applied")
    cur.advance(ROW_HEIGHT + 6)

    c.setFont("Helvetica", 10)
    for item in flagged:
        cur.ensure(16)
        c.drawString(
            MARGIN + 5,
            cur.y,
            f"{item.subject.name}: +{item.bonus:.2f} points (10% bonus)",
        )
        cur.advance(16)
    cur.advance(18)


def _draw_notes(cur: _Cursor) -> None:
    c = cur.c
    cur.ensure(40)
    c.setFillGray(0)
    c.setFont("Helvetica-Bold", 12)
    c.drawString(MARGIN, cur.y, "Important Notes")
    cur.advance(20)

    c.setFont("Helvetica", 9)
    c.setFillGray(0.31)
    for note in NOTES:
        cur.ensure(14, font=("Helvetica", 9), gray=0.31)
        c.drawString(MARGIN, cur.y, f"- {note}")
        cur.advance(14)
    cur.advance(24)
