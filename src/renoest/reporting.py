from __future__ import annotations

from typing import List, Optional, Tuple

import pandas as pd

from .calculator import ProjectTotals, line_base, line_profit, line_total, project_totals, room_totals
from .catalog import display_description
from .models import Project

LINE_ITEM_COLUMNS = [
    "ROOM",
    "CATEGORY",
    "DESCRIPTION",
    "UNIT",
    "QUANTITY",
    "UNIT_PRICE",
    "LABOR_RATE",
    "ECO_PROFIT_PCT",
    "MARKUP",
    "BASE",
    "PROFIT",
    "TOTAL",
    "PAYMENT_DUE",
]


def format_money(value: float) -> str:
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def format_pct(value: float) -> str:
    return f"{value:g}%"


def line_items_frame(project: Project) -> pd.DataFrame:
    """One row per line item with its computed base, profit and total."""

    rows = []
    for room in project.rooms:
        for item in room.items:
            rows.append(
                {
                    "ROOM": room.name,
                    "CATEGORY": item.category,
                    "DESCRIPTION": display_description(item),
                    "UNIT": item.unit,
                    "QUANTITY": item.quantity or 0.0,
                    "UNIT_PRICE": item.unit_price or 0.0,
                    "LABOR_RATE": item.labor_rate or 0.0,
                    "ECO_PROFIT_PCT": item.eco_profit or 0.0,
                    "MARKUP": item.markup or 0.0,
                    "BASE": line_base(item),
                    "PROFIT": line_profit(item),
                    "TOTAL": line_total(item),
                    "PAYMENT_DUE": item.payment_due,
                }
            )
    return pd.DataFrame(rows, columns=LINE_ITEM_COLUMNS)


def summary_rows(project: Project, totals: Optional[ProjectTotals] = None) -> List[Tuple[str, float]]:
    """
    Label/amount pairs for the closing summary of every export.

    Contingency only appears when the percentage is positive; the discount
    and final total only when the discount amount is positive.
    """

    totals = totals or project_totals(project)
    rows: List[Tuple[str, float]] = [("Project Subtotal", totals.subtotal)]
    if (project.contingency_pct or 0) > 0:
        rows.append((f"Contingency ({format_pct(project.contingency_pct)})", totals.contingency))
    rows.append(("Estimated Tax", totals.tax))
    rows.append(("Gross Estimate", totals.gross_total))
    if totals.discount > 0:
        rows.append((f"Adjustment/Discount ({format_pct(project.discount_pct)})", -totals.discount))
        rows.append(("Final Adjusted Total", totals.grand_total))
    return rows


def make_summary_text(project: Project, top_n: int = 5) -> str:
    totals = project_totals(project)
    items_df = line_items_frame(project)
    lines = [f"Project: {project.title}"]
    if project.address.street:
        lines.append(f"Address: {project.address.one_line()}")
    for room, amount in room_totals(project):
        lines.append(f"  {room.name}: {format_money(amount)} ({len(room.items)} items)")
    lines.append(f"Subtotal (incl. ECO profit): {format_money(totals.subtotal)}")
    lines.append(f"Contingency ({format_pct(project.contingency_pct)}): {format_money(totals.contingency)}")
    lines.append(f"Tax ({format_pct(project.tax_pct)}): {format_money(totals.tax)}")
    lines.append(f"Gross total: {format_money(totals.gross_total)}")
    lines.append(f"Discount ({format_pct(project.discount_pct)}): {format_money(-totals.discount)}")
    lines.append(f"Grand total: {format_money(totals.grand_total)}")
    lines.append(f"Total ECO profit: {format_money(totals.total_profit)}")
    if not items_df.empty:
        top = items_df.sort_values("TOTAL", ascending=False).head(top_n)[
            ["ROOM", "CATEGORY", "QUANTITY", "TOTAL"]
        ]
        lines.append(f"Top cost drivers:\n{top.to_string(index=False)}")
    return "\n".join(lines) + "\n"


__all__ = [
    "LINE_ITEM_COLUMNS",
    "format_money",
    "format_pct",
    "line_items_frame",
    "make_summary_text",
    "summary_rows",
]
