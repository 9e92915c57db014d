"""Project validation and resolution — check a ProjectFile against the catalog."""

from __future__ import annotations

import logging
from dataclasses import replace

from pinforge.catalog.loader import default_mcu_for_series
from pinforge.catalog.models import MCU, CatalogResult, Sensor
from pinforge.config import ALLOCATOR_RULES

from .models import ProjectFile, ResolvedProject


log = logging.getLogger("pinforge.project")

# Single-pin interfaces accept either spelling for their one signal.
_SIGNAL_ALIASES = {"GPIO": {"GPIO", "DQ"}, "ONE_WIRE": {"GPIO", "DQ"}}


def _mcu_map(project: ProjectFile, catalog: CatalogResult) -> dict[str, MCU]:
    mcus = {m.id: m for m in catalog.mcus}
    mcus.update({m.id: m for m in project.custom_mcus})
    return mcus


def _sensor_map(project: ProjectFile, catalog: CatalogResult) -> dict[str, Sensor]:
    sensors = {s.id: s for s in catalog.sensors}
    sensors.update({s.id: s for s in project.custom_sensors})
    return sensors


def _lock_signals(sensor: Sensor) -> set[str]:
    signals = set(sensor.signals) | set(sensor.default_signals)
    return signals | _SIGNAL_ALIASES.get(sensor.interface, set())


def validate_project(project: ProjectFile, catalog: CatalogResult) -> list[str]:
    """Validate a ProjectFile against the catalog. Returns error messages (empty = valid).

    None of these problems stop ``resolve_project``: unknown ids are
    dropped or replaced by defaults.  The messages tell the user what
    was dropped.
    """
    errors: list[str] = []
    mcus = _mcu_map(project, catalog)
    sensors = _sensor_map(project, catalog)

    # ── Series / MCU ──
    if project.series not in ALLOCATOR_RULES.series:
        errors.append(f"Unknown series '{project.series}'")
    mcu = mcus.get(project.mcu_id)
    if mcu is None:
        errors.append(f"Unknown MCU '{project.mcu_id}'")

    # ── Selected sensors ──
    seen: set[str] = set()
    for sid in project.selected_sensors:
        if sid not in sensors:
            errors.append(f"Unknown sensor '{sid}'")
        if sid in seen:
            errors.append(f"Sensor '{sid}' selected more than once")
        seen.add(sid)

    # ── Pin locks ──
    pin_ids = set(mcu.pin_ids) if mcu else set()
    for sid, locks in project.pin_locks.items():
        if sid not in seen:
            errors.append(f"Pin locks for unselected sensor '{sid}'")
            continue
        sensor = sensors.get(sid)
        if sensor is None:
            continue  # already reported
        valid_signals = _lock_signals(sensor)
        for signal, pin_id in locks.items():
            if signal not in valid_signals:
                errors.append(f"Sensor '{sid}': lock for unknown signal '{signal}'")
            if mcu is not None and pin_id not in pin_ids:
                errors.append(f"Sensor '{sid}': {signal} locked to '{pin_id}', not a pin of {mcu.id}")

    return errors


def prune_project(project: ProjectFile, catalog: CatalogResult) -> ProjectFile:
    """Drop unknown or repeated sensor selections and locks for unselected sensors."""
    sensors = _sensor_map(project, catalog)
    selected: list[str] = []
    for sid in project.selected_sensors:
        if sid in sensors and sid not in selected:
            selected.append(sid)
    locks = {sid: dict(l) for sid, l in project.pin_locks.items() if sid in selected}
    return replace(project, selected_sensors=selected, pin_locks=locks)


def resolve_project(project: ProjectFile, catalog: CatalogResult) -> ResolvedProject:
    """Look up the project's MCU, sensors and constraints.

    An unknown MCU falls back to the first MCU of the project's series.
    Projects without their own constraints use the catalog's.
    """
    pruned = prune_project(project, catalog)
    mcus = _mcu_map(project, catalog)
    sensors = _sensor_map(project, catalog)

    mcu = mcus.get(project.mcu_id)
    if mcu is None:
        mcu = default_mcu_for_series(list(mcus.values()), project.series)
        if mcu is None:
            raise LookupError("Catalog has no MCUs")
        log.warning("Unknown MCU '%s', using %s", project.mcu_id, mcu.id)

    constraints = (
        project.pin_constraints
        if project.pin_constraints is not None
        else list(catalog.constraints)
    )

    return ResolvedProject(
        mcu=mcu,
        sensors=[sensors[sid] for sid in pruned.selected_sensors],
        pin_locks=pruned.pin_locks,
        constraints=constraints,
    )
