"""Export builders — pin maps, wiring lists and BOMs from an allocation.

CSV output is produced with the ``csv`` module into a string; JSON
payloads are plain dicts stamped with a UTC ``generated_at``.
"""

from __future__ import annotations

import csv
import io
from collections import Counter
from datetime import datetime, timezone

from pinforge.allocator.models import AllocationResult
from pinforge.allocator.serialization import allocation_to_dict
from pinforge.catalog.models import MCU, Pin, Sensor
from pinforge.catalog.serialization import mcu_to_dict, sensor_to_dict


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _write_csv(header: list[str], rows: list[list]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return buf.getvalue()


def _pin_order(pin: Pin) -> tuple[str, int, str]:
    return (pin.port, pin.index, pin.id)


# ── Pin map ────────────────────────────────────────────────────────

def build_pinmap_json(mcu: MCU, result: AllocationResult) -> dict:
    """Pin map of one MCU plus the full allocation result.

    ``pins`` lists every pin with its final status and label; the
    allocation keys (allocations, conflicts, warnings, buses, pin_usage)
    are those of ``allocation_to_dict``.
    """
    pins = []
    for pin in sorted(mcu.pins, key=_pin_order):
        usage = result.pin_usage.get(pin.id)
        pins.append({
            "pin": pin.id,
            "label": pin.label,
            "port": pin.port,
            "status": usage.status if usage else "available",
            "usage": usage.label if usage else None,
        })
    return {
        "generated_at": _now(),
        "mcu": {"id": mcu.id, "name": mcu.name, "series": mcu.series, "package": mcu.package},
        **allocation_to_dict(result),
        "pins": pins,
    }


def build_pinmap_csv(mcu: MCU, result: AllocationResult) -> str:
    rows = []
    for pin in sorted(mcu.pins, key=_pin_order):
        usage = result.pin_usage.get(pin.id)
        rows.append([
            pin.id,
            usage.status if usage else "available",
            (usage.label or "") if usage else "",
        ])
    return _write_csv(["pin", "status", "label"], rows)


# ── Wiring / BOM ───────────────────────────────────────────────────

def build_wiring_csv(result: AllocationResult) -> str:
    """One row per bound signal, in allocation order."""
    rows = []
    for a in result.allocations:
        for signal, pin_id in a.assigned_pins.items():
            rows.append([a.sensor_name, a.interface, a.bus_id or "", signal, pin_id])
    return _write_csv(["sensor_name", "interface", "bus_id", "signal", "pin_id"], rows)


def build_bom_csv(sensors: list[Sensor]) -> str:
    counts = Counter((s.name, s.interface) for s in sensors)
    rows = [[name, iface, n] for (name, iface), n in sorted(counts.items())]
    return _write_csv(["name", "interface", "count"], rows)


# ── Hardware bundle ────────────────────────────────────────────────

def build_hardware_json(mcu: MCU, result: AllocationResult, sensors: list[Sensor]) -> dict:
    """Everything a firmware or PCB step needs: MCU, sensors and bindings."""
    return {
        "generated_at": _now(),
        "mcu": mcu_to_dict(mcu),
        "sensors": [sensor_to_dict(s) for s in sensors],
        "allocation": allocation_to_dict(result),
    }
