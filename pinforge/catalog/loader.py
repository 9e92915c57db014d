"""Catalog loader — built-in catalog plus catalog/*.json documents.

A catalog document looks like::

    {"schema_version": 1, "kind": "sensors", "sensors": [...]}

and may carry any of the ``mcus`` / ``sensors`` / ``constraints`` lists.
Imported items replace built-in items with the same id.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pinforge.config import ALLOCATOR_RULES, CATALOG_DIR

from .builtin import builtin_mcus, builtin_sensors, default_constraints
from .models import (
    MCU, PinConstraint, Sensor, ValidationError, CatalogResult,
)
from .parsing import parse_mcu, parse_sensor, parse_constraint


log = logging.getLogger("pinforge.catalog")

_REQUIRED_ROLES = {
    "i2c": ("SCL", "SDA"),
    "spi": ("SCK", "MISO", "MOSI"),
    "uart": ("TX", "RX"),
}

_SECTIONS = ("mcus", "sensors", "constraints")


# ── Validation ─────────────────────────────────────────────────────

def _validate_mcu(mcu: MCU) -> list[ValidationError]:
    errs: list[ValidationError] = []
    mid = mcu.id

    if mcu.series not in ALLOCATOR_RULES.series:
        errs.append(ValidationError(mid, "series", f"Unknown series '{mcu.series}'"))

    seen: set[str] = set()
    for pin in mcu.pins:
        if pin.id in seen:
            errs.append(ValidationError(mid, f"pins.{pin.id}", "Duplicate pin ID"))
        seen.add(pin.id)

    for kind in ("i2c", "spi", "uart"):
        for bus in getattr(mcu, kind):
            for role in _REQUIRED_ROLES[kind]:
                if not bus.candidates(role):
                    errs.append(ValidationError(mid, f"buses.{kind}.{bus.id}",
                                                f"No candidate pins for {role}"))
            for role, pins in bus.pins.items():
                for pid in pins:
                    if pid not in seen:
                        errs.append(ValidationError(mid, f"buses.{kind}.{bus.id}.{role}",
                                                    f"References unknown pin '{pid}'"))

    for field_name in ("analog_pins", "pwm_pins", "reserved_pins"):
        for pid in getattr(mcu, field_name):
            if pid not in seen:
                errs.append(ValidationError(mid, field_name, f"References unknown pin '{pid}'"))

    return errs


def _validate_sensor(sensor: Sensor) -> list[ValidationError]:
    errs: list[ValidationError] = []
    if not sensor.name.strip():
        errs.append(ValidationError(sensor.id, "name", "Must not be empty"))
    if sensor.interface in ("I2C", "SPI", "UART"):
        missing = [s for s in sensor.default_signals if s not in sensor.signals]
        if missing:
            errs.append(ValidationError(sensor.id, "signals",
                                        f"Missing {sensor.interface} signals {missing}"))
    return errs


def _validate_constraint(constraint: PinConstraint) -> list[ValidationError]:
    errs: list[ValidationError] = []
    if not constraint.pins:
        errs.append(ValidationError(constraint.id, "pins", "Must list at least one pin"))
    for s in constraint.series or []:
        if s not in ALLOCATOR_RULES.series:
            errs.append(ValidationError(constraint.id, "series", f"Unknown series '{s}'"))
    return errs


def _check_duplicates(kind: str, ids: list[str]) -> list[ValidationError]:
    counts: dict[str, int] = {}
    for item_id in ids:
        counts[item_id] = counts.get(item_id, 0) + 1
    return [
        ValidationError(item_id, "id", f"Duplicate {kind} ID (appears {count} times)")
        for item_id, count in counts.items()
        if count > 1
    ]


# ── Loading ────────────────────────────────────────────────────────

def load_document(raw: dict, source: str = "") -> CatalogResult:
    """Parse and validate one catalog document (already JSON-decoded)."""
    result = CatalogResult(mcus=[], sensors=[], constraints=[])
    name = source or "_document"

    if not isinstance(raw, dict):
        result.errors.append(ValidationError(name, "json", "Expected a JSON object"))
        return result

    version = raw.get("schema_version", raw.get("schemaVersion", 0))
    if version not in (0, ALLOCATOR_RULES.schema_version):
        result.errors.append(ValidationError(
            name, "schema_version",
            f"Unsupported schema version {version}, expected {ALLOCATOR_RULES.schema_version}"))
        return result

    if not any(key in raw for key in _SECTIONS):
        result.errors.append(ValidationError(name, "kind", "No mcus, sensors or constraints listed"))
        return result

    parsers = (
        ("mcus", parse_mcu, _validate_mcu, result.mcus),
        ("sensors", parse_sensor, _validate_sensor, result.sensors),
        ("constraints", parse_constraint, _validate_constraint, result.constraints),
    )
    for key, parse, validate, target in parsers:
        items = raw.get(key, [])
        if not isinstance(items, list):
            result.errors.append(ValidationError(
                name, key, f"Expected a list, got {type(items).__name__}"))
            continue
        for i, item in enumerate(items):
            try:
                parsed = parse(item)
                errors = validate(parsed)
            except (KeyError, TypeError, ValueError, AttributeError) as exc:
                item_id = item.get("id") if isinstance(item, dict) else None
                if not isinstance(item_id, str):
                    item_id = f"{key}[{i}]"
                result.errors.append(ValidationError(
                    item_id, "parse", f"Missing/invalid field: {exc}"))
                continue
            result.errors.extend(errors)
            target.append(parsed)

    return result


def _merge(base: list, extra: list) -> list:
    by_id = {item.id: item for item in base}
    order = [item.id for item in base]
    for item in extra:
        if item.id not in by_id:
            order.append(item.id)
        by_id[item.id] = item
    return [by_id[i] for i in order]


def builtin_catalog() -> CatalogResult:
    return CatalogResult(
        mcus=builtin_mcus(),
        sensors=builtin_sensors(),
        constraints=default_constraints(),
    )


def load_catalog(catalog_dir: Path | None = None, *, include_builtin: bool = True) -> CatalogResult:
    """Load the built-in catalog and merge every catalog_dir/*.json over it.

    A missing directory is not an error.  Files that fail to parse are
    skipped (error recorded); items that parse but fail validation are
    still included.
    """
    d = catalog_dir or CATALOG_DIR
    result = builtin_catalog() if include_builtin else CatalogResult([], [], [])
    imported = CatalogResult([], [], [])

    json_files = sorted(d.glob("*.json")) if d.is_dir() else []
    for path in json_files:
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            imported.errors.append(ValidationError(path.stem, "json", f"Parse error: {exc}"))
            continue
        except OSError as exc:
            imported.errors.append(ValidationError(path.stem, "file", f"Read error: {exc}"))
            continue

        doc = load_document(raw, source=path.stem)
        imported.mcus.extend(doc.mcus)
        imported.sensors.extend(doc.sensors)
        imported.constraints.extend(doc.constraints)
        imported.errors.extend(doc.errors)

    imported.errors.extend(_check_duplicates("MCU", [m.id for m in imported.mcus]))
    imported.errors.extend(_check_duplicates("sensor", [s.id for s in imported.sensors]))
    imported.errors.extend(_check_duplicates("constraint", [c.id for c in imported.constraints]))

    merged = CatalogResult(
        mcus=_merge(result.mcus, imported.mcus),
        sensors=_merge(result.sensors, imported.sensors),
        constraints=_merge(result.constraints, imported.constraints),
        errors=imported.errors,
    )
    log.info("Catalog: %d MCUs, %d sensors, %d constraints (%d files, %d errors)",
             len(merged.mcus), len(merged.sensors), len(merged.constraints),
             len(json_files), len(merged.errors))
    for err in merged.errors:
        log.warning("Catalog error %s", err)
    return merged


def get_mcu(catalog: list[MCU] | CatalogResult, mcu_id: str) -> MCU | None:
    """Look up an MCU by ID. Returns None if not found."""
    mcus = catalog.mcus if isinstance(catalog, CatalogResult) else catalog
    return next((m for m in mcus if m.id == mcu_id), None)


def get_sensor(catalog: list[Sensor] | CatalogResult, sensor_id: str) -> Sensor | None:
    """Look up a sensor by ID. Returns None if not found."""
    sensors = catalog.sensors if isinstance(catalog, CatalogResult) else catalog
    return next((s for s in sensors if s.id == sensor_id), None)


def default_mcu_for_series(catalog: list[MCU] | CatalogResult, series: str) -> MCU | None:
    """First MCU of a series, or the first MCU at all when the series is unknown."""
    mcus = catalog.mcus if isinstance(catalog, CatalogResult) else catalog
    return next((m for m in mcus if m.series == series), mcus[0] if mcus else None)
