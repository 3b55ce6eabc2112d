from __future__ import annotations

import logging

import pytest

from PIL import Image

from renoest import cli
from renoest.ai import PriceSuggestion
from renoest.models import LineItem, ProjectAddress
from renoest.store import ProjectStore


@pytest.fixture
def run(tmp_path, monkeypatch, caplog):
    for name in ("RENOEST_STATE_FILE", "RENOEST_OUTPUT_DIR", "RENOEST_DEFAULT_CONTINGENCY", "RENOEST_DEFAULT_TAX"):
        monkeypatch.delenv(name, raising=False)
    caplog.set_level(logging.INFO)
    state_file = tmp_path / "state.json"
    output_dir = tmp_path / "out"

    def _run(*argv: str) -> int:
        return cli.main(["--state-file", str(state_file), "--output-dir", str(output_dir), *argv])

    _run.store = ProjectStore(state_file)
    _run.output_dir = output_dir
    return _run


def test_new_project_with_rooms(run):
    assert run("new", "--title", "Lake House", "--room", "Kitchen", "--room", "Den", "--tax", "6") == 0
    project = run.store.load()
    assert project.title == "Lake House"
    assert [room.name for room in project.rooms] == ["Kitchen", "Den"]
    assert (project.contingency_pct, project.tax_pct, project.discount_pct) == (10.0, 6.0, 0.0)


def test_commands_require_a_project(run, caplog):
    assert run("totals") == 1
    assert "No current project" in caplog.text


def test_edit_and_totals_flow(run, caplog):
    run("new", "--title", "Lake House", "--room", "Kitchen")
    room_id = run.store.load().rooms[0].id

    assert run(
        "add-item", room_id,
        "--category", "tile / stone",
        "--quantity", "10",
        "--unit-price", "5",
        "--labor-rate", "3",
        "--markup", "15",
    ) == 0
    item = run.store.load().rooms[0].items[0]
    assert item.category == "Tile / Stone"
    assert item.eco_profit == 20.0
    assert "$111.00" in caplog.text

    assert run("update-item", room_id, item.id, "--quantity", "20") == 0
    assert run.store.load().rooms[0].items[0].quantity == 20.0

    assert run("settings", "--contingency", "0", "--discount", "5", "--notes", "Client prefers matte") == 0
    project = run.store.load()
    assert project.contingency_pct == 0.0
    assert project.notes == "Client prefers matte"

    caplog.clear()
    assert run("totals") == 0
    assert "Kitchen: $207.00 (1 items)" in caplog.text

    caplog.clear()
    assert run("show") == 0
    assert item.id in caplog.text

    assert run("delete-item", room_id, item.id) == 0
    assert run.store.load().rooms[0].items == []


def test_room_commands(run, tmp_path, caplog):
    run("new", "--room", "Kitchen")
    assert run("add-room", "Garage") == 0
    project = run.store.load()
    kitchen, garage = project.rooms

    assert run("rename-room", garage.id, "Workshop") == 0
    assert run("scope", garage.id, "Epoxy floor") == 0
    photo = tmp_path / "garage.png"
    Image.new("RGB", (900, 400), color="gray").save(photo)
    assert run("photo", garage.id, str(photo)) == 0

    workshop = run.store.load().rooms[1]
    assert workshop.name == "Workshop"
    assert workshop.scope_of_work == "Epoxy floor"
    assert workshop.photo.startswith("data:image/jpeg;base64,")

    assert run("delete-room", kitchen.id) == 0
    assert [room.name for room in run.store.load().rooms] == ["Workshop"]

    caplog.clear()
    assert run("delete-room", "missing") == 1
    assert "Room 'missing' not found" in caplog.text


def test_analyze_merges_suggestions(run, monkeypatch):
    captured = {}

    class StubAnalyzer:
        def __init__(self, config):
            captured["config"] = config

        def analyze(self, scope_text, room_name, zip_code):
            captured["args"] = (scope_text, room_name, zip_code)
            return [LineItem(category="Roofing", quantity=1, unit_price=100, eco_profit=50)]

    monkeypatch.setattr(cli, "ScopeAnalyzer", StubAnalyzer)
    run("new", "--room", "Attic")
    room_id = run.store.load().rooms[0].id

    assert run("analyze", room_id) == 0
    assert "args" not in captured

    run("scope", room_id, "Replace roof decking")
    assert run("analyze", room_id) == 0
    assert captured["args"] == ("Replace roof decking", "Attic", "")
    items = run.store.load().rooms[0].items
    assert [item.category for item in items] == ["Roofing"]
    assert items[0].eco_profit == 20.0


def test_address_and_price(run, monkeypatch, caplog):
    class StubResolver:
        def __init__(self, config):
            pass

        def resolve(self, query):
            return ProjectAddress(street="1 Main St", city="Austin", state="TX", zip="78701")

    class StubAdvisor:
        def __init__(self, config):
            pass

        def estimate(self, description, zip_code, category):
            return PriceSuggestion(
                material_price=4.5,
                labor_price=3,
                unit="sq ft",
                reasoning=f"{category} near {zip_code}",
                sources=["https://example.com/tile"],
            )

    monkeypatch.setattr(cli, "AddressResolver", StubResolver)
    monkeypatch.setattr(cli, "PriceAdvisor", StubAdvisor)
    run("new")

    assert run("address", "downtown austin") == 0
    assert run.store.load().address.zip == "78701"

    caplog.clear()
    assert run("price", "Porcelain tile", "--category", "tile / stone") == 0
    assert "Material: $4.50 / sq ft" in caplog.text
    assert "Tile / Stone near 78701" in caplog.text
    assert "https://example.com/tile" in caplog.text


def test_export_and_save_json(run, tmp_path, caplog):
    run("new", "--title", "Lake House", "--room", "Kitchen")
    room_id = run.store.load().rooms[0].id
    run("add-item", room_id, "--quantity", "2", "--unit-price", "50")

    assert run("export", "--format", "word") == 0
    assert (run.output_dir / "Lake_House_estimate.docx").exists()
    assert "[renoest:01] Rendering word export" in caplog.text

    assert run("export") == 0
    for suffix in ("pdf", "xlsx", "docx"):
        assert (run.output_dir / f"Lake_House_estimate.{suffix}").exists()

    assert run("save-json") == 0
    exported = run.output_dir / "Lake_House_data.json"
    assert exported.exists()

    fresh = tmp_path / "other-state.json"
    assert cli.main(["--state-file", str(fresh), "import", str(exported)]) == 0
    assert ProjectStore(fresh).load() == run.store.load()


def test_import_rejects_invalid_file(run, tmp_path, caplog):
    bad = tmp_path / "bad.json"
    bad.write_text('{"title": "x"}', encoding="utf-8")
    assert run("import", str(bad)) == 1
    assert "'rooms' is a required property" in caplog.text
    assert not run.store.exists


def test_new_with_preset_rooms(run):
    assert run("new", "--presets", "--room", "Attic") == 0
    names = [room.name for room in run.store.load().rooms]
    assert names[0] == "Kitchen"
    assert names[-1] == "Attic"
    assert len(names) == 9


def test_photo_errors_are_reported_in_one_line(run, tmp_path, caplog):
    run("new", "--room", "Kitchen")
    room_id = run.store.load().rooms[0].id
    notes = tmp_path / "notes.txt"
    notes.write_text("not a picture", encoding="utf-8")

    caplog.clear()
    assert run("photo", room_id, str(notes)) == 1
    assert "Error: Not an image file" in caplog.text

    caplog.clear()
    assert run("photo", room_id, str(tmp_path / "nope.jpg")) == 1
    assert "Error: Photo not found" in caplog.text
    assert "Traceback" not in caplog.text
    assert run.store.load().rooms[0].photo is None


def test_item_payment_due_is_normalized(run):
    run("new", "--room", "Kitchen")
    room_id = run.store.load().rooms[0].id

    run("add-item", room_id, "--payment-due", "upon FINAL approval")
    run("add-item", room_id, "--payment-due", "net 30")
    items = run.store.load().rooms[0].items
    assert [item.payment_due for item in items] == ["Upon final approval", "Upon contract signing"]

    run("update-item", room_id, items[1].id, "--payment-due", "upon passing rough inspection")
    assert run.store.load().rooms[0].items[1].payment_due == "Upon passing rough inspection"
