"""Project, room and line-item records plus their JSON mapping."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional


def new_id() -> str:
    return str(uuid.uuid4())


def now_iso() -> str:
    return datetime.now().astimezone().isoformat(timespec="seconds")


def to_number(value: object | None) -> float:
    """Coerce a loosely typed numeric field; anything unusable counts as zero."""

    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).replace("$", "").replace(",", "").replace("%", "").strip()
    if not text:
        return 0.0
    try:
        return float(text)
    except ValueError:
        return 0.0


def _to_text(value: object | None) -> str:
    if value is None:
        return ""
    return str(value)


@dataclass
class LineItem:
    """One billable unit of work inside a room."""

    id: str = field(default_factory=new_id)
    category: str = ""
    description: str = ""
    unit: str = ""
    quantity: float = 0.0
    unit_price: float = 0.0
    labor_rate: float = 0.0
    markup: float = 0.0
    eco_profit: float = 0.0
    notes: str = ""
    payment_due: str = ""

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "LineItem":
        return cls(
            id=_to_text(raw.get("id")) or new_id(),
            category=_to_text(raw.get("category")),
            description=_to_text(raw.get("description")),
            unit=_to_text(raw.get("unit")),
            quantity=to_number(raw.get("quantity")),
            unit_price=to_number(raw.get("unitPrice")),
            labor_rate=to_number(raw.get("laborRate")),
            markup=to_number(raw.get("markup")),
            eco_profit=to_number(raw.get("ecoProfit")),
            notes=_to_text(raw.get("notes")),
            payment_due=_to_text(raw.get("paymentDue")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "category": self.category,
            "description": self.description,
            "unit": self.unit,
            "quantity": self.quantity,
            "unitPrice": self.unit_price,
            "laborRate": self.labor_rate,
            "markup": self.markup,
            "ecoProfit": self.eco_profit,
            "notes": self.notes,
            "paymentDue": self.payment_due,
        }


@dataclass
class Room:
    """Named group of line items with its scope-of-work text."""

    id: str = field(default_factory=new_id)
    name: str = ""
    items: List[LineItem] = field(default_factory=list)
    scope_of_work: str = ""
    photo: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Room":
        return cls(
            id=_to_text(raw.get("id")) or new_id(),
            name=_to_text(raw.get("name")),
            items=[LineItem.from_dict(item) for item in raw.get("items") or []],
            scope_of_work=_to_text(raw.get("scopeOfWork")),
            photo=raw.get("photo") or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "items": [item.to_dict() for item in self.items],
            "scopeOfWork": self.scope_of_work,
        }
        if self.photo:
            data["photo"] = self.photo
        return data

    def find_item(self, item_id: str) -> Optional[LineItem]:
        return next((item for item in self.items if item.id == item_id), None)


@dataclass
class ProjectAddress:
    street: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any] | None) -> "ProjectAddress":
        raw = raw or {}
        return cls(
            street=_to_text(raw.get("street")),
            city=_to_text(raw.get("city")),
            state=_to_text(raw.get("state")),
            zip=_to_text(raw.get("zip")),
        )

    def to_dict(self) -> Dict[str, str]:
        return {"street": self.street, "city": self.city, "state": self.state, "zip": self.zip}

    def one_line(self) -> str:
        return f"{self.street}, {self.city}, {self.state} {self.zip}"


@dataclass
class Project:
    """Aggregate root: rooms plus the project-level percentage knobs."""

    id: str = field(default_factory=new_id)
    title: str = ""
    address: ProjectAddress = field(default_factory=ProjectAddress)
    rooms: List[Room] = field(default_factory=list)
    contingency_pct: float = 0.0
    tax_pct: float = 0.0
    discount_pct: float = 0.0
    created_at: str = field(default_factory=now_iso)
    updated_at: str = field(default_factory=now_iso)
    notes: str = ""

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Project":
        created_at = _to_text(raw.get("createdAt")) or now_iso()
        return cls(
            id=_to_text(raw.get("id")) or new_id(),
            title=_to_text(raw.get("title")),
            address=ProjectAddress.from_dict(raw.get("address")),
            rooms=[Room.from_dict(room) for room in raw.get("rooms") or []],
            contingency_pct=to_number(raw.get("contingencyPct")),
            tax_pct=to_number(raw.get("taxPct")),
            discount_pct=to_number(raw.get("discountPct")),
            created_at=created_at,
            updated_at=_to_text(raw.get("updatedAt")) or created_at,
            notes=_to_text(raw.get("notes")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "address": self.address.to_dict(),
            "rooms": [room.to_dict() for room in self.rooms],
            "contingencyPct": self.contingency_pct,
            "taxPct": self.tax_pct,
            "discountPct": self.discount_pct,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "notes": self.notes,
        }

    def find_room(self, room_id: str) -> Optional[Room]:
        return next((room for room in self.rooms if room.id == room_id), None)

    def touch(self) -> None:
        self.updated_at = now_iso()


__all__ = ["LineItem", "Room", "ProjectAddress", "Project", "new_id", "now_iso", "to_number"]
