"""Excel workbook export with a Summary sheet and a line-item Details sheet."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import List

import pandas as pd

from ..calculator import line_total, project_totals, room_totals
from ..catalog import display_description
from ..models import Project
from ..reporting import summary_rows
from ..store import safe_title

DETAIL_HEADER = ["Room", "Category", "Description", "Payment Due", "Total (USD)"]


def _summary_frame(project: Project) -> pd.DataFrame:
    address = project.address
    rows: List[list] = [
        ["Project Title", project.title],
        ["Address", f"{address.street}, {address.city}, {address.zip}"],
        ["Date", f"{date.today():%m/%d/%Y}"],
        [None, None],
        ["Room", "Subtotal (USD)"],
    ]
    for room, amount in room_totals(project):
        rows.append([room.name, amount])
    rows.append([None, None])
    rows.extend([label, amount] for label, amount in summary_rows(project, project_totals(project)))
    return pd.DataFrame(rows)


def _details_frame(project: Project) -> pd.DataFrame:
    rows: List[list] = []
    for room, amount in room_totals(project):
        for item in room.items:
            rows.append(
                [room.name, item.category, display_description(item), item.payment_due, line_total(item)]
            )
        rows.append([None, None, None, f"{room.name} Subtotal", amount])
        rows.append([None] * len(DETAIL_HEADER))
    return pd.DataFrame(rows, columns=DETAIL_HEADER)


def export_excel(project: Project, output_dir: Path) -> Path:
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / f"{safe_title(project.title)}_estimate.xlsx"
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        _summary_frame(project).to_excel(writer, sheet_name="Summary", index=False, header=False)
        _details_frame(project).to_excel(writer, sheet_name="Details", index=False)
        for sheet_name, widths in (("Summary", (34, 18)), ("Details", (20, 28, 60, 32, 16))):
            sheet = writer.sheets[sheet_name]
            for idx, width in enumerate(widths):
                sheet.column_dimensions[chr(ord("A") + idx)].width = width
    return path
