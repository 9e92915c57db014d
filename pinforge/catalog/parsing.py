"""Catalog parsing — convert raw dicts/JSON into catalog dataclasses.

Keys are snake_case; the camelCase spellings used by older PinForge
exports (``i2cAddress``, ``requiredBusId``, ``analogPins`` ...) are
accepted as aliases.  Parse functions raise ``KeyError`` / ``TypeError``
/ ``ValueError`` on malformed input; the loader turns those into
``ValidationError`` entries.
"""

from __future__ import annotations

import re
from typing import Any

from pinforge.config import ALLOCATOR_RULES

from .models import (
    BusDefinition, MCU, Pin, PinFunction, PinConstraint, Sensor, SENSOR_TYPES,
)


_PIN_ID_RE = re.compile(r"^P([A-Z])(\d+)$")
_POWER_RE = re.compile(r"^(VD|VSS)", re.IGNORECASE)
_SPLIT_RE = re.compile(r"[\s,;|]+")

_INTERFACE_ALIASES = {
    "1WIRE": "ONE_WIRE",
    "1-WIRE": "ONE_WIRE",
    "ONEWIRE": "ONE_WIRE",
}


def _get(data: dict, key: str, alias: str | None = None, default: Any = None) -> Any:
    if key in data:
        return data[key]
    if alias and alias in data:
        return data[alias]
    return default


def _text(data: dict, key: str) -> str:
    """Required string field; raises TypeError for non-string values."""
    value = data[key]
    if not isinstance(value, str):
        raise TypeError(f"'{key}' must be a string, got {type(value).__name__}")
    return value


def split_list(value: str | list[str] | None) -> list[str]:
    """Accept either a list or a "PA0, PA1 | PA2" style string."""
    if value is None:
        return []
    if isinstance(value, str):
        return [item for item in _SPLIT_RE.split(value) if item]
    return [str(item).strip() for item in value if str(item).strip()]


def normalize_interface(value: str) -> str:
    iface = value.strip().upper()
    iface = _INTERFACE_ALIASES.get(iface, iface)
    if iface not in SENSOR_TYPES:
        raise ValueError(f"Unknown interface '{value}'")
    return iface


def parse_i2c_address(value: int | str | None) -> int | None:
    """Parse ``0x76`` / ``"0x76"`` / ``"118"``; ``None`` or ``""`` means unset."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        text = value.strip()
        addr = int(text, 16) if text.lower().startswith("0x") else int(text, 10)
    else:
        addr = int(value)
    if addr < 0 or addr > ALLOCATOR_RULES.max_i2c_address:
        raise ValueError(f"I2C address {value!r} out of range (0x00-0x7F)")
    return addr


def slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_")


# ── Pins & buses ───────────────────────────────────────────────────


def pin_from_id(pin_id: str) -> Pin:
    """Build a Pin from a bare id: "PB6" is GPIO, anything else is a SYS pin."""
    pid = pin_id.strip()
    if not pid:
        raise ValueError("Empty pin id")
    m = _PIN_ID_RE.match(pid)
    if m:
        return Pin(
            id=pid, label=pid, port=f"P{m.group(1)}", index=int(m.group(2)),
            functions=[PinFunction("GPIO", "GPIO")],
        )
    return Pin(
        id=pid, label=pid, port=ALLOCATOR_RULES.system_port, index=0,
        functions=[PinFunction(pid)],
        reserved=True, power=bool(_POWER_RE.match(pid)), notes=pid,
    )


def _parse_function(data: dict) -> PinFunction:
    return PinFunction(
        name=data["name"],
        interface=data.get("interface"),
        signal=data.get("signal"),
        bus=data.get("bus"),
    )


def _parse_pin(data: dict | str) -> Pin:
    if isinstance(data, str):
        return pin_from_id(data)
    return Pin(
        id=data["id"],
        label=data.get("label", data["id"]),
        port=data["port"],
        index=int(data.get("index", 0)),
        functions=[_parse_function(f) for f in data.get("functions", [])],
        reserved=bool(data.get("reserved", False)),
        power=bool(data.get("power", False)),
        notes=data.get("notes"),
    )


def _parse_bus(data: dict) -> BusDefinition:
    roles = {
        key.upper(): split_list(value)
        for key, value in data.items()
        if key != "id"
    }
    return BusDefinition(id=data["id"], pins=roles)


def parse_mcu(data: dict) -> MCU:
    buses = data.get("buses", {})
    series = str(data["series"]).strip().upper()
    mcu_id = _text(data, "id")
    return MCU(
        id=mcu_id,
        name=data.get("name", mcu_id),
        series=series,
        package=data.get("package", ""),
        pins=[_parse_pin(p) for p in data["pins"]],
        i2c=[_parse_bus(b) for b in buses.get("i2c", [])],
        spi=[_parse_bus(b) for b in buses.get("spi", [])],
        uart=[_parse_bus(b) for b in buses.get("uart", [])],
        analog_pins=split_list(_get(data, "analog_pins", "analogPins", [])),
        pwm_pins=split_list(_get(data, "pwm_pins", "pwmPins", [])),
        reserved_pins=split_list(_get(data, "reserved_pins", "reservedPins", [])),
        notes=data.get("notes"),
    )


# ── Sensors ────────────────────────────────────────────────────────


def parse_sensor(data: dict) -> Sensor:
    """Parse one sensor into its interface-specific dataclass."""
    name = _text(data, "name")
    iface = normalize_interface(_text(data, "interface"))
    cls = SENSOR_TYPES[iface]

    kwargs: dict[str, Any] = {
        "id": _text(data, "id") if data.get("id") else slugify(name),
        "name": name,
        "description": data.get("description", ""),
        "signals": [s.upper() for s in split_list(data.get("signals"))],
    }

    address = parse_i2c_address(_get(data, "i2c_address", "i2cAddress"))
    bus_id = _get(data, "required_bus_id", "requiredBusId")
    bus_id = bus_id.strip() if isinstance(bus_id, str) else bus_id

    if address is not None:
        if iface != "I2C":
            raise ValueError(f"i2c_address is only valid for I2C sensors, not {iface}")
        kwargs["i2c_address"] = address
    if bus_id:
        if iface != "UART":
            raise ValueError(f"required_bus_id is only valid for UART sensors, not {iface}")
        kwargs["required_bus_id"] = bus_id

    return cls(**kwargs)


# ── Constraints ────────────────────────────────────────────────────


def parse_constraint(data: dict) -> PinConstraint:
    level = str(data.get("level", "hard")).strip().lower()
    if level not in ("hard", "soft"):
        raise ValueError(f"Unknown constraint level '{data.get('level')}'")
    series = _get(data, "series")
    mcu_ids = _get(data, "mcu_ids", "mcuIds")
    constraint_id = _text(data, "id")
    # An explicit empty scope list matches no MCU; only a missing one matches all.
    return PinConstraint(
        id=constraint_id,
        label=data.get("label", constraint_id),
        pins=split_list(data["pins"]),
        level=level,
        reason=data.get("reason", ""),
        enabled=data.get("enabled", True) is not False,
        source=data.get("source"),
        series=[s.upper() for s in split_list(series)] if series is not None else None,
        mcu_ids=split_list(mcu_ids) if mcu_ids is not None else None,
    )
