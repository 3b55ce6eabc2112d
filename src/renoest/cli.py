import argparse
import logging
import os
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from dotenv import load_dotenv

from . import editing
from .ai import AddressResolver, PriceAdvisor, ScopeAnalyzer
from .calculator import line_total, project_totals, room_totals
from .catalog import CATEGORIES, DEFAULT_ROOMS, normalize_category, normalize_payment_term
from .config import Config
from .config import load_config as load_runtime_config
from .errors import RenoestError
from .exporters import EXPORTERS, export_project
from .models import Project
from .reporting import format_money, make_summary_text
from .store import ProjectStore, export_project_json, import_project

logger = logging.getLogger(__name__)

Handler = Callable[[argparse.Namespace, Config, ProjectStore], int]

_ITEM_OPTIONS = (
    ("--category", "category", str, "Work category (see CATEGORIES)"),
    ("--description", "description", str, "Client-facing description"),
    ("--unit", "unit", str, "Unit label, e.g. ea, sq ft, lft"),
    ("--quantity", "quantity", float, "Quantity"),
    ("--unit-price", "unit_price", float, "Material cost per unit"),
    ("--labor-rate", "labor_rate", float, "Labor cost per unit"),
    ("--eco-profit", "eco_profit", float, "ECO profit percentage"),
    ("--markup", "markup", float, "Flat markup amount"),
    ("--payment-due", "payment_due", str, "Payment milestone"),
    ("--notes", "notes", str, "Internal notes"),
)


class NoProjectError(RenoestError):
    """Raised when a command needs a current project and none is stored."""


def _require_project(store: ProjectStore) -> Project:
    project = store.load()
    if project is None:
        raise NoProjectError(
            f"No current project at {store.state_file}. Run 'renoest new' or 'renoest import' first."
        )
    return project


def _item_fields(args: argparse.Namespace) -> Dict[str, object]:
    fields = {dest: getattr(args, dest) for _, dest, _, _ in _ITEM_OPTIONS if getattr(args, dest) is not None}
    if "category" in fields:
        fields["category"] = normalize_category(str(fields["category"]))
    if "payment_due" in fields:
        fields["payment_due"] = normalize_payment_term(str(fields["payment_due"]))
    return fields


def cmd_new(args: argparse.Namespace, cfg: Config, store: ProjectStore) -> int:
    project = editing.new_project(
        args.title or editing.DEFAULT_TITLE,
        contingency_pct=cfg.default_contingency_pct if args.contingency is None else args.contingency,
        tax_pct=cfg.default_tax_pct if args.tax is None else args.tax,
        discount_pct=cfg.default_discount_pct if args.discount is None else args.discount,
    )
    names = [*DEFAULT_ROOMS, *(args.room or [])] if args.presets else args.room or []
    for name in names:
        editing.add_room(project, name)
    store.save(project)
    logger.info("Started project '%s' (%s)", project.title, project.id)
    return 0


def cmd_import(args: argparse.Namespace, cfg: Config, store: ProjectStore) -> int:
    project = import_project(Path(args.path).expanduser())
    store.save(project)
    return 0


def cmd_save_json(args: argparse.Namespace, cfg: Config, store: ProjectStore) -> int:
    project = _require_project(store)
    path = export_project_json(project, cfg.output_dir)
    logger.info("Project data written to %s", path)
    return 0


def cmd_show(args: argparse.Namespace, cfg: Config, store: ProjectStore) -> int:
    project = _require_project(store)
    logger.info("%s [%s]", project.title, project.id)
    for room, amount in room_totals(project):
        logger.info("Room %s [%s]: %s", room.name, room.id, format_money(amount))
        for item in room.items:
            logger.info(
                "  - [%s] %s | %s x %s %s | %s",
                item.id,
                item.category,
                f"{item.quantity:g}",
                format_money((item.unit_price or 0) + (item.labor_rate or 0)),
                item.unit,
                format_money(line_total(item)),
            )
    return 0


def cmd_totals(args: argparse.Namespace, cfg: Config, store: ProjectStore) -> int:
    project = _require_project(store)
    logger.info(make_summary_text(project).rstrip())
    return 0


def cmd_add_room(args: argparse.Namespace, cfg: Config, store: ProjectStore) -> int:
    project = _require_project(store)
    room = editing.add_room(project, args.name or editing.DEFAULT_ROOM_NAME)
    store.save(project)
    logger.info("Added room '%s' (%s)", room.name, room.id)
    return 0


def cmd_rename_room(args: argparse.Namespace, cfg: Config, store: ProjectStore) -> int:
    project = _require_project(store)
    editing.rename_room(project, args.room_id, args.name)
    store.save(project)
    return 0


def cmd_delete_room(args: argparse.Namespace, cfg: Config, store: ProjectStore) -> int:
    project = _require_project(store)
    room = editing.delete_room(project, args.room_id)
    store.save(project)
    logger.info("Deleted room '%s'", room.name)
    return 0


def cmd_scope(args: argparse.Namespace, cfg: Config, store: ProjectStore) -> int:
    project = _require_project(store)
    editing.update_room_scope(project, args.room_id, args.text)
    store.save(project)
    return 0


def cmd_photo(args: argparse.Namespace, cfg: Config, store: ProjectStore) -> int:
    project = _require_project(store)
    photo: Optional[str] = None
    if args.path:
        photo = editing.load_room_photo(Path(args.path).expanduser())
    editing.set_room_photo(project, args.room_id, photo)
    store.save(project)
    return 0


def cmd_add_item(args: argparse.Namespace, cfg: Config, store: ProjectStore) -> int:
    project = _require_project(store)
    item = editing.add_item(project, args.room_id, **_item_fields(args))
    store.save(project)
    logger.info("Added line item %s: %s", item.id, format_money(line_total(item)))
    return 0


def cmd_update_item(args: argparse.Namespace, cfg: Config, store: ProjectStore) -> int:
    project = _require_project(store)
    item = editing.update_item(project, args.room_id, args.item_id, **_item_fields(args))
    store.save(project)
    logger.info("Updated line item %s: %s", item.id, format_money(line_total(item)))
    return 0


def cmd_delete_item(args: argparse.Namespace, cfg: Config, store: ProjectStore) -> int:
    project = _require_project(store)
    editing.delete_item(project, args.room_id, args.item_id)
    store.save(project)
    return 0


def cmd_settings(args: argparse.Namespace, cfg: Config, store: ProjectStore) -> int:
    project = _require_project(store)
    if args.title:
        project.title = args.title
    if args.notes is not None:
        project.notes = args.notes
    editing.set_percentages(
        project,
        contingency_pct=args.contingency,
        tax_pct=args.tax,
        discount_pct=args.discount,
    )
    store.save(project)
    totals = project_totals(project)
    logger.info("Grand total: %s", format_money(totals.grand_total))
    return 0


def cmd_analyze(args: argparse.Namespace, cfg: Config, store: ProjectStore) -> int:
    project = _require_project(store)
    room = editing.get_room(project, args.room_id)
    if not room.scope_of_work.strip():
        logger.warning("Room '%s' has no scope of work to analyze.", room.name)
        return 0
    analyzer = ScopeAnalyzer(cfg.ai)
    suggestions = analyzer.analyze(room.scope_of_work, room.name, project.address.zip)
    merged = editing.merge_suggested_items(project, room.id, suggestions)
    if merged:
        store.save(project)
    logger.info("Added %d suggested line items to '%s'", len(merged), room.name)
    return 0


def cmd_address(args: argparse.Namespace, cfg: Config, store: ProjectStore) -> int:
    project = _require_project(store)
    address = AddressResolver(cfg.ai).resolve(args.query)
    if address is None:
        logger.warning("Address could not be resolved for %r", args.query)
        return 0
    editing.set_address(project, address)
    store.save(project)
    logger.info("Address set to %s", address.one_line())
    return 0


def cmd_price(args: argparse.Namespace, cfg: Config, store: ProjectStore) -> int:
    zip_code = args.zip
    if zip_code is None:
        project = store.load()
        zip_code = project.address.zip if project else ""
    suggestion = PriceAdvisor(cfg.ai).estimate(args.description, zip_code, normalize_category(args.category))
    logger.info("Material: %s / %s", format_money(suggestion.material_price), suggestion.unit)
    logger.info("Labor: %s / %s", format_money(suggestion.labor_price), suggestion.unit)
    if suggestion.reasoning:
        logger.info("Reasoning: %s", suggestion.reasoning)
    for url in suggestion.sources:
        logger.info(" - %s", url)
    return 0


def cmd_export(args: argparse.Namespace, cfg: Config, store: ProjectStore) -> int:
    project = _require_project(store)
    formats: List[str] = list(EXPORTERS) if args.format == "all" else [args.format]
    stage = 0
    for fmt in formats:
        stage += 1
        logger.info("[renoest:%02d] Rendering %s export", stage, fmt)
        path = export_project(project, fmt, cfg.output_dir)
        logger.info("           %s", path)
    logger.info("Grand total: %s", format_money(project_totals(project).grand_total))
    return 0


def _add_item_options(parser: argparse.ArgumentParser) -> None:
    for flag, dest, kind, text in _ITEM_OPTIONS:
        parser.add_argument(flag, dest=dest, type=kind, help=text)


def _add_pct_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--contingency", type=float, help="Contingency percentage")
    parser.add_argument("--tax", type=float, help="Tax percentage")
    parser.add_argument("--discount", type=float, help="Discount percentage")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Room-by-room construction estimates")
    parser.add_argument("--state-file", help="Path to the current project JSON")
    parser.add_argument("--output-dir", help="Directory for exported documents")
    parser.add_argument("--disable-ai", action="store_true", help="Disable OpenAI-backed assistants")
    parser.add_argument("--model", help="Override the OpenAI model used for address and price lookups")
    parser.add_argument("-v", "--verbose", action="store_true", help="Increase logging verbosity")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("new", help="Start a new project")
    p.add_argument("--title", help="Project title")
    p.add_argument("--room", action="append", help="Room to create (repeatable)")
    p.add_argument("--presets", action="store_true", help="Start with the preset rooms")
    _add_pct_options(p)
    p.set_defaults(handler=cmd_new)

    p = sub.add_parser("import", help="Load a project JSON file as the current project")
    p.add_argument("path")
    p.set_defaults(handler=cmd_import)

    p = sub.add_parser("save-json", help="Write the current project to <title>_data.json")
    p.set_defaults(handler=cmd_save_json)

    p = sub.add_parser("show", help="List rooms and line items with their ids")
    p.set_defaults(handler=cmd_show)

    p = sub.add_parser("totals", help="Print room and project totals")
    p.set_defaults(handler=cmd_totals)

    p = sub.add_parser("add-room", help="Add a room")
    p.add_argument("name", nargs="?")
    p.set_defaults(handler=cmd_add_room)

    p = sub.add_parser("rename-room", help="Rename a room")
    p.add_argument("room_id")
    p.add_argument("name")
    p.set_defaults(handler=cmd_rename_room)

    p = sub.add_parser("delete-room", help="Delete a room and its line items")
    p.add_argument("room_id")
    p.set_defaults(handler=cmd_delete_room)

    p = sub.add_parser("scope", help="Set a room's scope of work")
    p.add_argument("room_id")
    p.add_argument("text")
    p.set_defaults(handler=cmd_scope)

    p = sub.add_parser("photo", help="Attach (or clear) a room reference photo")
    p.add_argument("room_id")
    p.add_argument("path", nargs="?")
    p.set_defaults(handler=cmd_photo)

    p = sub.add_parser("add-item", help="Add a line item to a room")
    p.add_argument("room_id")
    _add_item_options(p)
    p.set_defaults(handler=cmd_add_item)

    p = sub.add_parser("update-item", help="Change fields of a line item")
    p.add_argument("room_id")
    p.add_argument("item_id")
    _add_item_options(p)
    p.set_defaults(handler=cmd_update_item)

    p = sub.add_parser("delete-item", help="Remove a line item")
    p.add_argument("room_id")
    p.add_argument("item_id")
    p.set_defaults(handler=cmd_delete_item)

    p = sub.add_parser("settings", help="Update title, notes and project percentages")
    p.add_argument("--title")
    p.add_argument("--notes")
    _add_pct_options(p)
    p.set_defaults(handler=cmd_settings)

    p = sub.add_parser("analyze", help="Suggest line items from a room's scope of work")
    p.add_argument("room_id")
    p.set_defaults(handler=cmd_analyze)

    p = sub.add_parser("address", help="Resolve and store the project address")
    p.add_argument("query")
    p.set_defaults(handler=cmd_address)

    p = sub.add_parser("price", help="Suggest unit prices for a task")
    p.add_argument("description")
    p.add_argument("--category", default=CATEGORIES[-1])
    p.add_argument("--zip", help="Zip code (defaults to the project address)")
    p.set_defaults(handler=cmd_price)

    p = sub.add_parser("export", help="Export the estimate document(s)")
    p.add_argument("--format", choices=[*EXPORTERS, "all"], default="all")
    p.set_defaults(handler=cmd_export)

    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv()
    args = parse_args(argv)
    runtime_cfg = load_runtime_config(os.environ, args)
    log_level = logging.DEBUG if runtime_cfg.verbose else logging.INFO
    logging.basicConfig(level=log_level, format="%(message)s")
    store = ProjectStore(runtime_cfg.state_file)
    handler: Handler = args.handler
    try:
        return handler(args, runtime_cfg, store)
    except RenoestError as exc:
        logger.error("Error: %s", exc)
        return 1
    except Exception:  # pragma: no cover
        logger.exception("Fatal error while running '%s'", args.command)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
