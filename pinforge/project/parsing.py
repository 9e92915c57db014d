"""Project parsing — convert raw dicts/JSON into a ProjectFile."""

from __future__ import annotations

from pinforge.catalog.parsing import parse_constraint, parse_mcu, parse_sensor

from .models import PROJECT_VERSION, ProjectError, ProjectFile


def _parse_locks(data: object) -> dict[str, dict[str, str]]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ProjectError("pin_locks", "expected an object of sensor_id -> {signal: pin}")
    locks: dict[str, dict[str, str]] = {}
    for sensor_id, signals in data.items():
        if not isinstance(signals, dict):
            raise ProjectError(f"pin_locks.{sensor_id}", "expected an object of signal -> pin")
        locks[sensor_id] = {
            str(sig).upper(): str(pin).strip()
            for sig, pin in signals.items()
            if pin
        }
    return locks


def parse_project(data: dict) -> ProjectFile:
    """Parse a project document.

    Accepts the snake_case keys written by ``project_to_dict`` and the
    camelCase keys of older exports (``mcuId``, ``pinLocks`` ...).
    Raises ProjectError for documents that cannot be used at all.
    """
    if not isinstance(data, dict):
        raise ProjectError("_root", "expected a JSON object")

    def get(key: str, alias: str):
        return data[key] if key in data else data.get(alias)

    version = data.get("version", PROJECT_VERSION)
    if version != PROJECT_VERSION:
        raise ProjectError("version", f"unsupported version {version!r}, expected {PROJECT_VERSION}")

    mcu_id = get("mcu_id", "mcuId")
    if not mcu_id or not isinstance(mcu_id, str):
        raise ProjectError("mcu_id", "missing MCU id")

    selected = get("selected_sensors", "selectedSensors") or []
    if not isinstance(selected, list):
        raise ProjectError("selected_sensors", "expected a list of sensor ids")

    raw_constraints = get("pin_constraints", "pinConstraints")
    try:
        custom_sensors = [parse_sensor(s) for s in get("custom_sensors", "customSensors") or []]
        custom_mcus = [parse_mcu(m) for m in get("custom_mcus", "customMcus") or []]
        constraints = [parse_constraint(c) for c in raw_constraints] if raw_constraints else None
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise ProjectError("catalog", f"missing/invalid field: {exc}") from exc

    return ProjectFile(
        version=version,
        series=str(data.get("series") or "F1").upper(),
        mcu_id=mcu_id,
        selected_sensors=[str(s) for s in selected],
        custom_sensors=custom_sensors,
        custom_mcus=custom_mcus,
        pin_locks=_parse_locks(get("pin_locks", "pinLocks")),
        pin_constraints=constraints,
    )
