"""
Estimate rollups: line item -> room -> project subtotal -> contingency, tax
and discount.

Every function here is pure and recomputes from the values it is given.
Missing numbers count as zero and percentages are applied as-is (no
clamping), so a total is always produced.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Iterable, List, Tuple

from .models import LineItem, Project, Room


def _num(value: float | None) -> float:
    return value or 0.0


def line_base(item: LineItem) -> float:
    """Material plus labor cost before profit and markup."""

    quantity = _num(item.quantity)
    return quantity * _num(item.unit_price) + quantity * _num(item.labor_rate)


def line_profit(item: LineItem) -> float:
    """ECO profit earned on the material+labor base."""

    return line_base(item) * (_num(item.eco_profit) / 100)


def line_total(item: LineItem) -> float:
    """Client price for a line item: base + ECO profit + flat markup."""

    base = line_base(item)
    profit = base * (_num(item.eco_profit) / 100)
    return base + profit + _num(item.markup)


def room_total(room: Room) -> float:
    return sum((line_total(item) for item in room.items), 0.0)


def room_totals(project: Project) -> List[Tuple[Room, float]]:
    """Pair each room with its total, in project order."""

    return [(room, room_total(room)) for room in project.rooms]


def project_subtotal(project: Project) -> float:
    # Profit and markup are already inside each line total.
    return sum((room_total(room) for room in project.rooms), 0.0)


def total_profit(project: Project) -> float:
    """ECO profit across every item. Reported only; already part of the subtotal."""

    return sum((line_profit(item) for item in _iter_items(project.rooms)), 0.0)


@dataclass(frozen=True)
class ProjectTotals:
    """Project-level figures in the order they are derived."""

    subtotal: float
    contingency: float
    taxable_amount: float
    tax: float
    gross_total: float
    discount: float
    grand_total: float
    total_profit: float = 0.0

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


def adjust_subtotal(
    subtotal: float,
    *,
    contingency_pct: float | None,
    tax_pct: float | None,
    discount_pct: float | None,
    total_profit: float = 0.0,
) -> ProjectTotals:
    """
    Apply contingency, then tax on subtotal+contingency, then a discount on the
    gross amount. The order is fixed: reordering changes the result.
    """

    contingency = subtotal * (_num(contingency_pct) / 100)
    taxable_amount = subtotal + contingency
    tax = taxable_amount * (_num(tax_pct) / 100)
    gross_total = taxable_amount + tax
    discount = gross_total * (_num(discount_pct) / 100)
    grand_total = gross_total - discount
    return ProjectTotals(
        subtotal=subtotal,
        contingency=contingency,
        taxable_amount=taxable_amount,
        tax=tax,
        gross_total=gross_total,
        discount=discount,
        grand_total=grand_total,
        total_profit=total_profit,
    )


def project_totals(project: Project) -> ProjectTotals:
    """Compute every project-level total from the current project value."""

    return adjust_subtotal(
        project_subtotal(project),
        contingency_pct=project.contingency_pct,
        tax_pct=project.tax_pct,
        discount_pct=project.discount_pct,
        total_profit=total_profit(project),
    )


def _iter_items(rooms: Iterable[Room]) -> Iterable[LineItem]:
    for room in rooms:
        yield from room.items


__all__ = [
    "ProjectTotals",
    "adjust_subtotal",
    "line_base",
    "line_profit",
    "line_total",
    "project_subtotal",
    "project_totals",
    "room_total",
    "room_totals",
    "total_profit",
]
