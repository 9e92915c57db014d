import argparse
import json
import logging
import sys
from pathlib import Path

from pinforge.allocator import AllocationResult, allocate_pins, allocation_to_dict
from pinforge.catalog import CatalogResult, load_catalog
from pinforge.codegen import SPEED_PRESETS, build_spl_code
from pinforge.config import DEFAULT_HOST, DEFAULT_PORT
from pinforge.project import ProjectError, parse_project, resolve_project, validate_project
from pinforge.reports import (
    build_bom_csv, build_hardware_json, build_pinmap_csv, build_pinmap_json, build_wiring_csv,
)


log = logging.getLogger("pinforge.cli")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="pinforge", description="MCU pin allocation for sensor projects")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    a = sub.add_parser("allocate", help="Allocate pins for a project file and write reports")
    a.add_argument("project", help="Path to project.json")
    a.add_argument("--out", default=None, help="Output directory for reports (optional)")
    a.add_argument("--format", choices=("json", "csv", "c"), default="json",
                   help="Report format (c writes SPL starter code)")
    a.add_argument("--speed", choices=tuple(SPEED_PRESETS), default="standard",
                   help="Bus speed preset for --format c")
    a.add_argument("--catalog", default=None, help="Directory of extra catalog *.json files")

    ls = sub.add_parser("list", help="List catalog entries")
    ls.add_argument("kind", choices=("mcus", "sensors", "constraints"))
    ls.add_argument("--catalog", default=None, help="Directory of extra catalog *.json files")

    sv = sub.add_parser("serve", help="Start the HTTP API server")
    sv.add_argument("--host", default=DEFAULT_HOST, help="Host to bind")
    sv.add_argument("--port", type=int, default=DEFAULT_PORT, help="Port to bind")

    return p


def _catalog(arg: str | None) -> CatalogResult:
    return load_catalog(Path(arg) if arg else None)


def _print_summary(mcu_id: str, result: AllocationResult) -> None:
    print(f"MCU: {mcu_id}")
    for a in result.allocations:
        pins = ", ".join(f"{sig}={pin}" for sig, pin in a.assigned_pins.items())
        bus = f" [{a.bus_id}]" if a.bus_id else ""
        print(f"  ok   {a.sensor_name} ({a.interface}){bus}: {pins}")
    for c in result.conflicts:
        print(f"  FAIL {c.sensor_name}: {c.code}" + (f" ({c.detail})" if c.detail else ""))
    for w in result.warnings:
        print(f"  warn {w.sensor_name}: {w.code}" + (f" ({w.detail})" if w.detail else ""))


def _write_reports(out_dir: Path, fmt: str, resolved, result: AllocationResult,
                   speed: str = "standard") -> list[Path]:
    out_dir.mkdir(parents=True, exist_ok=True)
    if fmt == "c":
        files = {
            "pinforge_init.c": build_spl_code(resolved.mcu, result, speed, resolved.sensors),
        }
    elif fmt == "csv":
        files = {
            "pinmap.csv": build_pinmap_csv(resolved.mcu, result),
            "wiring.csv": build_wiring_csv(result),
            "bom.csv": build_bom_csv(resolved.sensors),
        }
    else:
        files = {
            "allocation.json": json.dumps(allocation_to_dict(result), indent=2),
            "pinmap.json": json.dumps(build_pinmap_json(resolved.mcu, result), indent=2),
            "hardware.json": json.dumps(
                build_hardware_json(resolved.mcu, result, resolved.sensors), indent=2),
        }
    written = []
    for name, text in files.items():
        path = out_dir / name
        path.write_text(text, encoding="utf-8")
        written.append(path)
    return written


def _cmd_allocate(args) -> int:
    path = Path(args.project)
    try:
        project = parse_project(json.loads(path.read_text(encoding="utf-8")))
    except (OSError, json.JSONDecodeError) as exc:
        print(f"Cannot read {path}: {exc}", file=sys.stderr)
        return 2
    except ProjectError as exc:
        print(str(exc), file=sys.stderr)
        return 2

    catalog = _catalog(args.catalog)
    for msg in validate_project(project, catalog):
        print(f"warning: {msg}", file=sys.stderr)

    resolved = resolve_project(project, catalog)
    result = allocate_pins(resolved.mcu, resolved.sensors, resolved.pin_locks, resolved.constraints)
    _print_summary(resolved.mcu.id, result)

    if args.out:
        out_dir = Path(args.out).resolve()
        written = _write_reports(out_dir, args.format, resolved, result, args.speed)
        log.info("Wrote %d report files to %s", len(written), out_dir)
        print(f"Reports written to: {out_dir}")

    return 0 if result.ok else 1


def _cmd_list(args) -> int:
    catalog = _catalog(args.catalog)
    if args.kind == "mcus":
        for m in catalog.mcus:
            print(f"{m.id:<14} {m.series:<3} {m.package:<10} {m.name}")
    elif args.kind == "sensors":
        for s in catalog.sensors:
            print(f"{s.id:<14} {s.interface:<9} {s.name}")
    else:
        for c in catalog.constraints:
            pins = ",".join(c.pins)
            print(f"{c.id:<14} {c.level:<5} {pins:<12} {c.describe()}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.cmd == "allocate":
        return _cmd_allocate(args)

    if args.cmd == "list":
        return _cmd_list(args)

    if args.cmd == "serve":
        from pinforge.web.server import main as serve_main
        serve_main(host=args.host, port=args.port)
        return 0

    return 2
