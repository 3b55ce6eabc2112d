"""Word (.docx) estimate report built with python-docx."""

from __future__ import annotations

from datetime import date
from pathlib import Path

from docx import Document
from docx.enum.table import WD_TABLE_ALIGNMENT
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Pt

from ..calculator import line_total, project_totals, room_total
from ..catalog import display_description
from ..models import Project
from ..reporting import format_money, summary_rows
from ..store import safe_title

HEADER_FILL = "F1F5F9"
TABLE_HEADER = ("Category", "Description", "Payment Due", "Total (USD)")


def _shade(cell, fill: str) -> None:
    shading = OxmlElement("w:shd")
    shading.set(qn("w:val"), "clear")
    shading.set(qn("w:color"), "auto")
    shading.set(qn("w:fill"), fill)
    cell._tc.get_or_add_tcPr().append(shading)


def _write_cell(cell, text: str, *, bold: bool = False, size: int = 8, right: bool = False) -> None:
    paragraph = cell.paragraphs[0]
    run = paragraph.add_run(text)
    run.bold = bold
    run.font.size = Pt(size)
    if right:
        paragraph.alignment = WD_ALIGN_PARAGRAPH.RIGHT


def export_word(project: Project, output_dir: Path) -> Path:
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / f"{safe_title(project.title)}_estimate.docx"

    document = Document()
    heading = document.add_heading("Estimate Report", level=1)
    heading.alignment = WD_ALIGN_PARAGRAPH.CENTER

    meta = document.add_paragraph()
    for label, value in (
        ("Project: ", project.title),
        ("Address: ", project.address.one_line()),
        ("Date: ", f"{date.today():%m/%d/%Y}"),
    ):
        meta.add_run(label).bold = True
        meta.add_run(value).add_break()

    for room in project.rooms:
        document.add_heading(room.name, level=2)
        table = document.add_table(rows=1, cols=len(TABLE_HEADER))
        table.style = "Table Grid"
        for cell, title in zip(table.rows[0].cells, TABLE_HEADER):
            _write_cell(cell, title, bold=True)
            _shade(cell, HEADER_FILL)
        for item in room.items:
            cells = table.add_row().cells
            _write_cell(cells[0], item.category)
            _write_cell(cells[1], display_description(item))
            _write_cell(cells[2], item.payment_due)
            _write_cell(cells[3], format_money(line_total(item)), bold=True, right=True)
        cells = table.add_row().cells
        _write_cell(cells[2], "Subtotal", bold=True, right=True)
        _write_cell(cells[3], format_money(room_total(room)), bold=True, right=True)

    document.add_paragraph()
    document.add_heading("Summary", level=2)
    rows = summary_rows(project, project_totals(project))
    summary = document.add_table(rows=0, cols=2)
    summary.alignment = WD_TABLE_ALIGNMENT.RIGHT
    for label, amount in rows:
        # Headline figures use the larger size.
        size = 12 if label in {"Gross Estimate", "Final Adjusted Total"} else 10
        cells = summary.add_row().cells
        _write_cell(cells[0], label, bold=True, size=size)
        _write_cell(cells[1], format_money(amount), size=size, right=True)

    document.save(str(path))
    return path
