"""
RV Planner CLI entrypoint.

A terminal front end to the same bucket list the web page shows. Read-only commands print
the views (`list`, `pins`, `discover`, `quality-report`); mutating commands run the
interactive flows of `rvplanner.bucketlist.controller` with console dialogs. `--yes`
answers every confirmation with yes.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from rvplanner.bucketlist.controller import BucketListController
from rvplanner.bucketlist.dialogs import ConsoleDialogs
from rvplanner.bucketlist.service import BucketListService
from rvplanner.config.settings import get_settings
from rvplanner.core.logging import configure_logging
from rvplanner.domain.errors import PlannerError
from rvplanner.domain.models import Destination, FilterState, type_label
from rvplanner.quality.report import build_quality_report
from rvplanner.render.map_view import GeoJsonCanvas
from rvplanner.transfer.backup import dump_export, export_filename


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _service() -> BucketListService:
    return BucketListService.from_settings(get_settings())


def _controller(args: argparse.Namespace, service: BucketListService) -> BucketListController:
    return BucketListController(service, ConsoleDialogs(assume_yes=bool(args.yes)))


def _filters(args: argparse.Namespace) -> FilterState:
    return FilterState(folder=args.folder, type=args.type, region=args.region, search=args.search)


def _line(d: Destination) -> str:
    mark = "[x]" if d.visited else "[ ]"
    where = f" ({d.state})" if d.state else ""
    return f"{mark} {d.id}  {d.name}{where}  <{type_label(d.type)}>"


def _done(changed: bool) -> int:
    if not changed:
        print("Nothing changed.")
    return 0


def _cmd_list(args: argparse.Namespace) -> int:
    service = _service()
    filters = _filters(args)
    if args.json:
        _print_json(service.list_view(filters).as_dict())
        return 0
    stats = service.stats()
    print(f"{stats['total']} destinations, {stats['visited']} visited, {stats['wishlist']} on the wishlist")
    view = service.list_view(filters)
    if view.empty:
        print(view.empty_message)
        return 0
    for d in service.working_set(filters).destinations:
        print(_line(d))
    return 0


def _cmd_pins(args: argparse.Namespace) -> int:
    service = _service()
    if args.geojson:
        canvas = GeoJsonCanvas()
        service.render_map(canvas, _filters(args))
        _print_json(canvas.feature_collection())
        return 0
    for pin in service.map_pins(_filters(args)):
        print(f"{pin.color_class:<8} {pin.lat:>9.4f} {pin.lon:>10.4f}  {pin.id}  {pin.name}")
    return 0


def _cmd_add(args: argparse.Namespace) -> int:
    service = _service()
    if args.name is None:
        return _done(asyncio.run(_controller(args, service).add_custom()))
    fields = {
        "name": args.name,
        "state": args.state or "",
        "type": args.type or "other",
        "region": args.region,
        "notes": args.notes,
        "latitude": args.lat,
        "longitude": args.lon,
    }
    d = service.add_custom(fields)
    print(_line(d))
    return 0


def _cmd_adopt(args: argparse.Namespace) -> int:
    service = _service()
    d = service.adopt_from_map(args.id) if args.visited else service.add_to_wishlist(args.id)
    print(_line(d))
    return 0


def _cmd_visit(args: argparse.Namespace) -> int:
    service = _service()
    d = service.require(args.id)
    if args.date is not None or args.notes is not None:
        print(_line(service.mark_visited(args.id, date=args.date, notes=args.notes)))
        return 0
    if d.visited:
        print(f"{d.name} is already marked as visited.")
        return 0
    return _done(asyncio.run(_controller(args, service).toggle_visited(args.id)))


def _cmd_unvisit(args: argparse.Namespace) -> int:
    service = _service()
    d = service.require(args.id)
    if not d.visited:
        print(f"{d.name} is already on the wishlist.")
        return 0
    return _done(asyncio.run(_controller(args, service).toggle_visited(args.id)))


def _cmd_edit(args: argparse.Namespace) -> int:
    service = _service()
    return _done(asyncio.run(_controller(args, service).edit(args.id)))


def _cmd_delete(args: argparse.Namespace) -> int:
    service = _service()
    return _done(asyncio.run(_controller(args, service).delete(args.id)))


def _cmd_folders(args: argparse.Namespace) -> int:
    service = _service()
    controller = _controller(args, service)
    action = args.action

    if action == "list":
        for s in service.sidebar():
            prefix = "*" if s.builtin else " "
            print(f"{prefix} {s.id:<24} {s.name} ({s.count})")
        return 0
    if action == "create":
        folder = service.create_folder(args.name) if args.name else asyncio.run(controller.create_folder())
        if folder is None:
            return _done(False)
        print(f"{folder.id}  {folder.name}")
        return 0
    if action == "rename":
        if args.name:
            folder = service.rename_folder(args.folder_id, args.name)
        else:
            folder = asyncio.run(controller.rename_folder(args.folder_id))
        if folder is None:
            return _done(False)
        print(f"{folder.id}  {folder.name}")
        return 0
    if action == "delete":
        return _done(asyncio.run(controller.delete_folder(args.folder_id)))
    if action == "assign":
        if args.folder_id is None and not args.unfile:
            return _done(asyncio.run(controller.add_to_folder(args.destination_id)))
        service.assign_folder(args.destination_id, None if args.unfile else args.folder_id)
        return 0
    raise ValueError(f"Unknown folders action '{action}'")


def _cmd_discover(args: argparse.Namespace) -> int:
    service = _service()
    if not args.region and not args.type:
        regions = ", ".join(service.catalog.regions())
        print(f"Choose --region or --type to discover destinations. Regions: {regions}")
        return 0
    entries = service.discover(region=args.region, type=args.type)
    if args.json:
        _print_json([e.model_dump(mode="json", by_alias=True) for e in entries])
        return 0
    if not entries:
        print("No new destinations found for this selection.")
    for e in entries:
        print(f"{e.id:<24} {e.name} ({e.state})  <{type_label(e.type)}>")
    return 0


def _cmd_export(args: argparse.Namespace) -> int:
    service = _service()
    text = dump_export(service.export())
    if args.output == "-":
        print(text)
        return 0
    settings = service.settings
    out = Path(args.output or export_filename(settings.export.filename_pattern, tz_name=settings.app.timezone))
    out.write_text(text + "\n", encoding="utf-8")
    print(f"Exported {service.stats()['total']} destinations to {out}")
    return 0


def _cmd_import(args: argparse.Namespace) -> int:
    service = _service()
    text = Path(args.path).read_text(encoding="utf-8")
    return _done(asyncio.run(_controller(args, service).import_text(text)))


def _cmd_quality_report(_: argparse.Namespace) -> int:
    service = _service()
    report = build_quality_report(service.store.destinations(), service.store.folders(), service.settings)
    _print_json(report)
    return 0


def _add_filter_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--folder", default=None, help="all | wishlist | visited | <folder id>")
    p.add_argument("--type", default=None)
    p.add_argument("--region", default=None)
    p.add_argument("--search", default=None)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the RV Planner CLI."""
    parser = argparse.ArgumentParser(prog="rvplanner")
    parser.add_argument("--yes", "-y", action="store_true", help="Answer yes to every confirmation.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    ls = sub.add_parser("list", help="List destinations (filters apply).")
    _add_filter_args(ls)
    ls.add_argument("--json", action="store_true", help="Output the rendered cards as JSON")
    ls.set_defaults(func=_cmd_list)

    pins = sub.add_parser("pins", help="Map pins: filtered destinations plus curated catalog entries.")
    _add_filter_args(pins)
    pins.add_argument("--geojson", action="store_true")
    pins.set_defaults(func=_cmd_pins)

    add = sub.add_parser("add", help="Add a custom destination (interactive without --name).")
    add.add_argument("--name", default=None)
    add.add_argument("--state", default=None)
    add.add_argument("--type", default=None)
    add.add_argument("--region", default=None)
    add.add_argument("--notes", default=None)
    add.add_argument("--lat", type=float, default=None)
    add.add_argument("--lon", type=float, default=None)
    add.set_defaults(func=_cmd_add)

    adopt = sub.add_parser("adopt", help="Add a catalog entry to the collection.")
    adopt.add_argument("id")
    adopt.add_argument("--visited", action="store_true", help="Add as visited (like a map click).")
    adopt.set_defaults(func=_cmd_adopt)

    visit = sub.add_parser("visit", help="Mark as visited (prompts for date/notes unless given).")
    visit.add_argument("id")
    visit.add_argument("--date", default=None)
    visit.add_argument("--notes", default=None)
    visit.set_defaults(func=_cmd_visit)

    unvisit = sub.add_parser("unvisit", help="Move back to the wishlist (discards visit notes).")
    unvisit.add_argument("id")
    unvisit.set_defaults(func=_cmd_unvisit)

    edit = sub.add_parser("edit", help="Edit a destination (interactive form).")
    edit.add_argument("id")
    edit.set_defaults(func=_cmd_edit)

    delete = sub.add_parser("delete", help="Delete a destination.")
    delete.add_argument("id")
    delete.set_defaults(func=_cmd_delete)

    folders = sub.add_parser("folders", help="Manage folders.")
    fsub = folders.add_subparsers(dest="action", required=True)
    fsub.add_parser("list")
    fc = fsub.add_parser("create")
    fc.add_argument("name", nargs="?", default=None)
    fr = fsub.add_parser("rename")
    fr.add_argument("folder_id")
    fr.add_argument("name", nargs="?", default=None)
    fd = fsub.add_parser("delete", help="Delete a folder; its destinations are unfiled.")
    fd.add_argument("folder_id")
    fa = fsub.add_parser("assign", help="Put a destination in a folder (prompts without a folder id).")
    fa.add_argument("destination_id")
    fa.add_argument("folder_id", nargs="?", default=None)
    fa.add_argument("--unfile", action="store_true")
    folders.set_defaults(func=_cmd_folders)

    disc = sub.add_parser("discover", help="Catalog entries for a region/type not yet in the collection.")
    disc.add_argument("--region", default=None)
    disc.add_argument("--type", default=None)
    disc.add_argument("--json", action="store_true")
    disc.set_defaults(func=_cmd_discover)

    exp = sub.add_parser("export", help="Export the collection as a JSON backup.")
    exp.add_argument("--output", "-o", default=None, help="File path, or '-' for stdout.")
    exp.set_defaults(func=_cmd_export)

    imp = sub.add_parser("import", help="Replace the collection with a JSON backup.")
    imp.add_argument("path")
    imp.set_defaults(func=_cmd_import)

    q = sub.add_parser("quality-report", help="Offline data quality report (collection + catalog).")
    q.set_defaults(func=_cmd_quality_report)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m rvplanner.cli`."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging("DEBUG" if args.verbose else None)
    func: Any = getattr(args, "func")
    try:
        return int(func(args))
    except PlannerError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
