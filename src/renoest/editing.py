"""Project lifecycle and in-place edits of rooms and line items."""

from __future__ import annotations

import base64
import logging
from io import BytesIO
from pathlib import Path
from typing import Any, Iterable, List, Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from .catalog import (
    CATEGORIES,
    CATEGORY_DESCRIPTIONS,
    DEFAULT_ECO_PROFIT,
    DEFAULT_UNIT,
    PAYMENT_TERMS,
    normalize_category,
    normalize_payment_term,
)
from .errors import EntityNotFoundError, InvalidPhotoError
from .models import LineItem, Project, ProjectAddress, Room, new_id, to_number

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Untitled Estimate"
DEFAULT_ROOM_NAME = "New Space"
PHOTO_SIZE = (600, 600)
PHOTO_QUALITY = 80

_NUMERIC_FIELDS = {"quantity", "unit_price", "labor_rate", "markup", "eco_profit"}
_ITEM_FIELDS = {
    "category",
    "description",
    "unit",
    "notes",
    "payment_due",
} | _NUMERIC_FIELDS


def new_project(
    title: str = DEFAULT_TITLE,
    *,
    contingency_pct: float = 10.0,
    tax_pct: float = 0.0,
    discount_pct: float = 0.0,
) -> Project:
    """Start an empty project with the default percentage knobs."""

    return Project(
        title=title or DEFAULT_TITLE,
        contingency_pct=contingency_pct,
        tax_pct=tax_pct,
        discount_pct=discount_pct,
    )


def get_room(project: Project, room_id: str) -> Room:
    room = project.find_room(room_id)
    if room is None:
        raise EntityNotFoundError(f"Room '{room_id}' not found in project '{project.title}'.")
    return room


def get_item(project: Project, room_id: str, item_id: str) -> LineItem:
    room = get_room(project, room_id)
    item = room.find_item(item_id)
    if item is None:
        raise EntityNotFoundError(f"Line item '{item_id}' not found in room '{room.name}'.")
    return item


def add_room(project: Project, name: str = DEFAULT_ROOM_NAME) -> Room:
    room = Room(name=name.strip() or DEFAULT_ROOM_NAME)
    project.rooms.append(room)
    project.touch()
    logger.debug("Added room %s (%s)", room.name, room.id)
    return room


def rename_room(project: Project, room_id: str, name: str) -> Room:
    room = get_room(project, room_id)
    # Blank names are ignored, matching the inline editor.
    if name.strip():
        room.name = name.strip()
        project.touch()
    return room


def update_room_scope(project: Project, room_id: str, scope_of_work: str) -> Room:
    room = get_room(project, room_id)
    room.scope_of_work = scope_of_work
    project.touch()
    return room


def set_room_photo(project: Project, room_id: str, photo: Optional[str]) -> Room:
    room = get_room(project, room_id)
    room.photo = photo or None
    project.touch()
    return room


def load_room_photo(path: Path) -> str:
    """
    Read an image file and return it as a JPEG data URL.

    The image is center-cropped to a 600x600 square and re-encoded at
    quality 80.
    """

    path = Path(path)
    try:
        with Image.open(path) as img:
            img = ImageOps.exif_transpose(img)
            square = ImageOps.fit(img.convert("RGB"), PHOTO_SIZE, method=Image.LANCZOS)
    except FileNotFoundError as exc:
        raise InvalidPhotoError(f"Photo not found: {path}") from exc
    except UnidentifiedImageError as exc:
        raise InvalidPhotoError(f"Not an image file: {path}") from exc
    except OSError as exc:
        raise InvalidPhotoError(f"Unable to read photo {path}: {exc}") from exc

    buffer = BytesIO()
    square.save(buffer, format="JPEG", quality=PHOTO_QUALITY)
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    logger.debug("Encoded %s as %d byte JPEG", path, buffer.tell())
    return f"data:image/jpeg;base64,{encoded}"


def delete_room(project: Project, room_id: str) -> Room:
    room = get_room(project, room_id)
    project.rooms.remove(room)
    project.touch()
    return room


def add_item(project: Project, room_id: str, **fields: Any) -> LineItem:
    """
    Append a line item to a room.

    Unspecified fields take the add-item form defaults: first category,
    quantity 1, unit ``ea``, 20% ECO profit and the first payment milestone.
    A blank description falls back to the category description.
    """

    room = get_room(project, room_id)
    _reject_unknown_fields(fields)
    category = fields.get("category") or CATEGORIES[0]
    description = fields.get("description") or CATEGORY_DESCRIPTIONS.get(category, "")
    quantity = fields.get("quantity")
    eco_profit = fields.get("eco_profit")
    item = LineItem(
        category=category,
        description=description,
        unit=fields.get("unit") or DEFAULT_UNIT,
        quantity=1.0 if quantity is None else to_number(quantity),
        unit_price=to_number(fields.get("unit_price")),
        labor_rate=to_number(fields.get("labor_rate")),
        markup=to_number(fields.get("markup")),
        eco_profit=DEFAULT_ECO_PROFIT if eco_profit is None else to_number(eco_profit),
        notes=fields.get("notes") or "",
        payment_due=fields.get("payment_due") or PAYMENT_TERMS[0],
    )
    room.items.append(item)
    project.touch()
    return item


def update_item(project: Project, room_id: str, item_id: str, **changes: Any) -> LineItem:
    item = get_item(project, room_id, item_id)
    _reject_unknown_fields(changes)
    for name, value in changes.items():
        setattr(item, name, to_number(value) if name in _NUMERIC_FIELDS else value)
    project.touch()
    return item


def delete_item(project: Project, room_id: str, item_id: str) -> LineItem:
    room = get_room(project, room_id)
    item = get_item(project, room_id, item_id)
    room.items.remove(item)
    project.touch()
    return item


def set_address(project: Project, address: ProjectAddress) -> None:
    project.address = address
    project.touch()


def set_percentages(
    project: Project,
    *,
    contingency_pct: float | None = None,
    tax_pct: float | None = None,
    discount_pct: float | None = None,
) -> None:
    """Update whichever knobs are given; values are stored unclamped."""

    if contingency_pct is not None:
        project.contingency_pct = contingency_pct
    if tax_pct is not None:
        project.tax_pct = tax_pct
    if discount_pct is not None:
        project.discount_pct = discount_pct
    project.touch()


def merge_suggested_items(project: Project, room_id: str, items: Iterable[LineItem]) -> List[LineItem]:
    """Append AI-proposed items to a room with fresh ids and the default ECO profit."""

    room = get_room(project, room_id)
    merged: List[LineItem] = []
    for suggestion in items:
        suggestion.id = new_id()
        suggestion.eco_profit = DEFAULT_ECO_PROFIT
        suggestion.category = normalize_category(suggestion.category)
        suggestion.payment_due = normalize_payment_term(suggestion.payment_due)
        merged.append(suggestion)
    if merged:
        room.items.extend(merged)
        project.touch()
    return merged


def _reject_unknown_fields(fields: dict) -> None:
    unknown = set(fields) - _ITEM_FIELDS
    if unknown:
        raise TypeError(f"Unknown line item field(s): {', '.join(sorted(unknown))}")


__all__ = [
    "DEFAULT_ROOM_NAME",
    "DEFAULT_TITLE",
    "add_item",
    "add_room",
    "delete_item",
    "delete_room",
    "get_item",
    "get_room",
    "load_room_photo",
    "merge_suggested_items",
    "new_project",
    "rename_room",
    "set_address",
    "set_percentages",
    "set_room_photo",
    "update_item",
    "update_room_scope",
]
