"""Room-by-room construction estimating: totals, AI-assisted scoping and document exports."""

from .calculator import (
    ProjectTotals,
    adjust_subtotal,
    line_total,
    project_subtotal,
    project_totals,
    room_total,
    total_profit,
)
from .models import LineItem, Project, ProjectAddress, Room
from .store import ProjectStore

__all__ = [
    "LineItem",
    "Project",
    "ProjectAddress",
    "ProjectStore",
    "ProjectTotals",
    "Room",
    "adjust_subtotal",
    "line_total",
    "project_subtotal",
    "project_totals",
    "room_total",
    "total_profit",
]
