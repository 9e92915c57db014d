"""Catalog serialization — convert dataclasses to JSON-safe dicts."""

from __future__ import annotations

from typing import Any

from pinforge.config import ALLOCATOR_RULES

from .models import MCU, Pin, BusDefinition, PinConstraint, Sensor, CatalogResult


def catalog_to_dict(result: CatalogResult) -> dict:
    """Serialize a CatalogResult to a JSON-safe dict for the web API."""
    return {
        "ok": result.ok,
        "schema_version": ALLOCATOR_RULES.schema_version,
        "mcus": [mcu_to_dict(m) for m in result.mcus],
        "sensors": [sensor_to_dict(s) for s in result.sensors],
        "constraints": [constraint_to_dict(c) for c in result.constraints],
        "errors": [{"item_id": e.item_id, "field": e.field, "message": e.message}
                   for e in result.errors],
    }


def _pin_to_dict(p: Pin) -> dict:
    d: dict[str, Any] = {
        "id": p.id,
        "label": p.label,
        "port": p.port,
        "index": p.index,
        "functions": [
            {
                "name": f.name,
                **({"interface": f.interface} if f.interface else {}),
                **({"signal": f.signal} if f.signal else {}),
                **({"bus": f.bus} if f.bus else {}),
            }
            for f in p.functions
        ],
    }
    if p.reserved:
        d["reserved"] = True
    if p.power:
        d["power"] = True
    if p.notes:
        d["notes"] = p.notes
    return d


def _bus_to_dict(b: BusDefinition) -> dict:
    return {"id": b.id, **{role.lower(): list(pins) for role, pins in b.pins.items()}}


def mcu_to_dict(m: MCU) -> dict:
    """Serialize an MCU topology; ``parse_mcu`` reads it back."""
    d: dict[str, Any] = {
        "id": m.id,
        "name": m.name,
        "series": m.series,
        "package": m.package,
        "pins": [_pin_to_dict(p) for p in m.pins],
        "buses": {
            "i2c": [_bus_to_dict(b) for b in m.i2c],
            "spi": [_bus_to_dict(b) for b in m.spi],
            "uart": [_bus_to_dict(b) for b in m.uart],
        },
        "analog_pins": list(m.analog_pins),
        "pwm_pins": list(m.pwm_pins),
        "reserved_pins": list(m.reserved_pins),
    }
    if m.notes:
        d["notes"] = m.notes
    return d


def sensor_to_dict(s: Sensor) -> dict:
    d: dict[str, Any] = {
        "id": s.id,
        "name": s.name,
        "interface": s.interface,
        "signals": list(s.signals),
        "description": s.description,
    }
    address = getattr(s, "i2c_address", None)
    if address is not None:
        d["i2c_address"] = address
    bus_id = getattr(s, "required_bus_id", None)
    if bus_id:
        d["required_bus_id"] = bus_id
    return d


def constraint_to_dict(c: PinConstraint) -> dict:
    d: dict[str, Any] = {
        "id": c.id,
        "label": c.label,
        "pins": list(c.pins),
        "level": c.level,
        "enabled": c.enabled,
        "reason": c.reason,
    }
    if c.source:
        d["source"] = c.source
    if c.series is not None:
        d["series"] = list(c.series)
    if c.mcu_ids is not None:
        d["mcu_ids"] = list(c.mcu_ids)
    return d
