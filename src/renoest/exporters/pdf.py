"""PDF estimate report rendered with reportlab."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import List
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..calculator import line_total, project_totals, room_total
from ..catalog import display_description
from ..models import Project
from ..reporting import format_money, summary_rows
from ..store import safe_title

SLATE_900 = colors.Color(15 / 255, 23 / 255, 42 / 255)
SLATE_600 = colors.Color(71 / 255, 85 / 255, 105 / 255)
SLATE_100 = colors.Color(241 / 255, 245 / 255, 249 / 255)
ROW_ALT = colors.Color(250 / 255, 250 / 255, 250 / 255)


def _styles():
    base = getSampleStyleSheet()
    return {
        "title": ParagraphStyle("EstimateTitle", parent=base["Title"], alignment=0, textColor=SLATE_900, fontSize=24),
        "meta": ParagraphStyle("EstimateMeta", parent=base["Normal"], textColor=colors.grey, fontSize=10),
        "room": ParagraphStyle("EstimateRoom", parent=base["Heading2"], textColor=SLATE_900, fontSize=14),
        "cell": ParagraphStyle("EstimateCell", parent=base["Normal"], fontSize=9, leading=11),
    }


def _room_table(rows: List[list], widths: List[float]) -> Table:
    table = Table(rows, colWidths=widths, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), SLATE_100),
                ("TEXTCOLOR", (0, 0), (-1, 0), SLATE_600),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 9),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("ALIGN", (3, 0), (3, -1), "RIGHT"),
                ("FONTNAME", (3, 1), (3, -1), "Helvetica-Bold"),
                ("ROWBACKGROUNDS", (0, 1), (-1, -2), [colors.white, ROW_ALT]),
                ("GRID", (0, 0), (-1, -2), 0.25, colors.lightgrey),
                ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
                ("ALIGN", (2, -1), (-1, -1), "RIGHT"),
            ]
        )
    )
    return table


def export_pdf(project: Project, output_dir: Path) -> Path:
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / f"{safe_title(project.title)}_estimate.pdf"

    styles = _styles()
    story: list = [
        Paragraph("Estimate Report", styles["title"]),
        Paragraph(f"Project: {escape(project.title)}", styles["meta"]),
        Paragraph(f"Address: {escape(project.address.one_line())}", styles["meta"]),
        Paragraph(f"Date: {date.today():%m/%d/%Y}", styles["meta"]),
        Spacer(1, 0.2 * inch),
    ]

    widths = [1.4 * inch, 3.2 * inch, 1.4 * inch, 1.2 * inch]
    for room in project.rooms:
        rows: List[list] = [["Category", "Description", "Payment Due", "Total (USD)"]]
        for item in room.items:
            rows.append(
                [
                    Paragraph(escape(item.category), styles["cell"]),
                    Paragraph(escape(display_description(item)), styles["cell"]),
                    Paragraph(escape(item.payment_due), styles["cell"]),
                    format_money(line_total(item)),
                ]
            )
        rows.append(["", "", "Subtotal", format_money(room_total(room))])
        story.append(Paragraph(escape(room.name), styles["room"]))
        story.append(_room_table(rows, widths))
        story.append(Spacer(1, 0.15 * inch))

    summary = [[label, format_money(amount)] for label, amount in summary_rows(project, project_totals(project))]
    summary_table = Table(summary, colWidths=[3.0 * inch, 1.6 * inch], hAlign="RIGHT")
    summary_table.setStyle(
        TableStyle(
            [
                ("FONTNAME", (0, 0), (-1, -1), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 11),
                ("TEXTCOLOR", (0, 0), (0, -1), SLATE_600),
                ("TEXTCOLOR", (1, 0), (1, -1), SLATE_900),
                ("ALIGN", (1, 0), (1, -1), "RIGHT"),
            ]
        )
    )
    story.append(Paragraph("Summary", styles["room"]))
    story.append(summary_table)

    doc = SimpleDocTemplate(
        str(path),
        pagesize=letter,
        title=f"{project.title} Estimate",
        leftMargin=0.5 * inch,
        rightMargin=0.5 * inch,
    )
    doc.build(story)
    return path
