from __future__ import annotations

import base64
from io import BytesIO

import pytest
from PIL import Image

from renoest import editing
from renoest.calculator import project_totals, room_total
from renoest.catalog import (
    CATEGORIES,
    CATEGORY_DESCRIPTIONS,
    PAYMENT_TERMS,
    display_description,
    normalize_category,
    normalize_payment_term,
)
from renoest.errors import EntityNotFoundError, InvalidPhotoError
from renoest.models import LineItem, ProjectAddress


def test_new_project_defaults():
    project = editing.new_project()
    assert project.title == "Untitled Estimate"
    assert project.rooms == []
    assert (project.contingency_pct, project.tax_pct, project.discount_pct) == (10.0, 0.0, 0.0)
    assert project_totals(project).grand_total == 0


def test_add_item_uses_form_defaults():
    project = editing.new_project("Demo")
    room = editing.add_room(project, "Kitchen")
    item = editing.add_item(project, room.id, unit_price=100)

    assert item.category == CATEGORIES[0]
    assert item.description == CATEGORY_DESCRIPTIONS[CATEGORIES[0]]
    assert item.quantity == 1.0
    assert item.unit == "ea"
    assert item.eco_profit == 20.0
    assert item.payment_due == PAYMENT_TERMS[0]
    assert room_total(room) == pytest.approx(120.0)


def test_add_item_keeps_explicit_zero_profit():
    project = editing.new_project()
    room = editing.add_room(project)
    item = editing.add_item(project, room.id, quantity=2, unit_price=10, eco_profit=0)
    assert item.eco_profit == 0.0
    assert room.name == "New Space"


def test_update_and_delete_item(sample_project):
    room = sample_project.rooms[0]
    item = room.items[0]
    editing.update_item(sample_project, room.id, item.id, quantity="20", description="Backsplash")
    assert item.quantity == 20.0
    assert item.description == "Backsplash"

    with pytest.raises(TypeError):
        editing.update_item(sample_project, room.id, item.id, colour="red")

    editing.delete_item(sample_project, room.id, item.id)
    assert room.items == []
    assert room_total(room) == 0


def test_room_edits(sample_project):
    room = sample_project.rooms[1]
    editing.rename_room(sample_project, room.id, "  Hall Bath ")
    assert room.name == "Hall Bath"
    editing.rename_room(sample_project, room.id, "   ")
    assert room.name == "Hall Bath"

    editing.update_room_scope(sample_project, room.id, "Swap vanity")
    assert room.scope_of_work == "Swap vanity"

    editing.set_room_photo(sample_project, room.id, "data:image/png;base64,AA==")
    assert room.photo.startswith("data:image/png")
    editing.set_room_photo(sample_project, room.id, "")
    assert room.photo is None

    editing.delete_room(sample_project, room.id)
    assert [r.name for r in sample_project.rooms] == ["Kitchen"]


def test_unknown_ids_raise(sample_project):
    with pytest.raises(EntityNotFoundError):
        editing.delete_room(sample_project, "nope")
    with pytest.raises(EntityNotFoundError):
        editing.update_item(sample_project, sample_project.rooms[0].id, "nope", quantity=1)
    with pytest.raises(KeyError):
        editing.add_item(sample_project, "nope")


def test_edits_bump_updated_at(sample_project, monkeypatch):
    monkeypatch.setattr("renoest.models.now_iso", lambda: "2030-01-01T00:00:00+00:00")
    editing.set_address(sample_project, ProjectAddress(zip="10001"))
    assert sample_project.updated_at == "2030-01-01T00:00:00+00:00"
    assert sample_project.address.zip == "10001"


def test_set_percentages_partial(sample_project):
    editing.set_percentages(sample_project, tax_pct=8.25)
    assert sample_project.tax_pct == 8.25
    assert sample_project.contingency_pct == 10
    editing.set_percentages(sample_project, discount_pct=150)
    assert sample_project.discount_pct == 150


def test_merge_suggested_items(sample_project):
    room = sample_project.rooms[1]
    suggestions = [
        LineItem(id="ai-1", category="plumbing", eco_profit=35, payment_due="whenever", quantity=1, unit_price=50),
        LineItem(id="ai-2", category="tile / stone", eco_profit=0, payment_due="Upon final approval"),
    ]
    merged = editing.merge_suggested_items(sample_project, room.id, suggestions)

    assert len(room.items) == 3
    assert all(item.eco_profit == 20.0 for item in merged)
    assert {item.id for item in merged}.isdisjoint({"ai-1", "ai-2"})
    assert merged[0].category == "Custom Work"
    assert merged[0].payment_due == PAYMENT_TERMS[0]
    assert merged[1].category == "Tile / Stone"
    assert merged[1].payment_due == "Upon final approval"


def test_catalog_normalization():
    assert normalize_category("Roofing") == "Roofing"
    assert normalize_category("  finishes (paint,trim) ") == "Finishes (Paint, Trim)"
    assert normalize_category(None) == "Custom Work"
    assert normalize_payment_term("upon FINAL approval") == "Upon final approval"
    assert normalize_payment_term("net 30") == PAYMENT_TERMS[0]


def test_display_description_fallbacks():
    assert display_description(LineItem(category="Roofing", description="Tear-off")) == "Tear-off"
    assert display_description(LineItem(category="Roofing")) == CATEGORY_DESCRIPTIONS["Roofing"]
    assert display_description(LineItem(category="Mystery")) == "Mystery"


def test_load_room_photo_crops_to_square_jpeg(tmp_path):
    source = tmp_path / "kitchen.png"
    Image.new("RGB", (1200, 800), color=(200, 30, 30)).save(source)

    photo = editing.load_room_photo(source)

    prefix = "data:image/jpeg;base64,"
    assert photo.startswith(prefix)
    with Image.open(BytesIO(base64.b64decode(photo[len(prefix):]))) as decoded:
        assert decoded.format == "JPEG"
        assert decoded.size == (600, 600)


def test_load_room_photo_rejects_non_images(tmp_path):
    notes = tmp_path / "notes.txt"
    notes.write_text("x" * 4096, encoding="utf-8")
    with pytest.raises(InvalidPhotoError, match="Not an image file"):
        editing.load_room_photo(notes)
    with pytest.raises(InvalidPhotoError, match="Photo not found"):
        editing.load_room_photo(tmp_path / "missing.jpg")
