"""Allocation serialization — JSON conversion."""

from __future__ import annotations

from .models import (
    AllocationResult, AllocationWarning, BusUsage, Conflict, I2CBus, PinUsage,
    SensorAllocation, SPIBus, UARTBus,
)


def allocation_to_dict(result: AllocationResult) -> dict:
    """Serialize an AllocationResult to a JSON-safe dict."""
    return {
        "ok": result.ok,
        "allocations": [
            {
                "sensor_id": a.sensor_id,
                "sensor_name": a.sensor_name,
                "interface": a.interface,
                "bus_id": a.bus_id,
                "assigned_pins": dict(a.assigned_pins),
            }
            for a in result.allocations
        ],
        "conflicts": [
            {"sensor_id": c.sensor_id, "sensor_name": c.sensor_name,
             "code": c.code, "detail": c.detail}
            for c in result.conflicts
        ],
        "warnings": [
            {"sensor_id": w.sensor_id, "sensor_name": w.sensor_name,
             "code": w.code, "detail": w.detail}
            for w in result.warnings
        ],
        "buses": {
            "i2c": [
                {"id": b.id, "scl": b.scl, "sda": b.sda, "sensors": list(b.sensors)}
                for b in result.buses.i2c
            ],
            "spi": [
                {"id": b.id, "sck": b.sck, "miso": b.miso, "mosi": b.mosi,
                 "cs_pins": list(b.cs_pins), "sensors": list(b.sensors)}
                for b in result.buses.spi
            ],
            "uart": [
                {"id": b.id, "tx": b.tx, "rx": b.rx, "sensor": b.sensor}
                for b in result.buses.uart
            ],
        },
        "pin_usage": {
            pin_id: {
                "status": u.status,
                **({"label": u.label} if u.label is not None else {}),
            }
            for pin_id, u in result.pin_usage.items()
        },
    }


def parse_allocation(data: dict) -> AllocationResult:
    """Parse an allocation dict back into an AllocationResult."""
    allocations = [
        SensorAllocation(
            sensor_id=a["sensor_id"],
            sensor_name=a["sensor_name"],
            interface=a["interface"],
            assigned_pins=dict(a["assigned_pins"]),
            bus_id=a.get("bus_id"),
        )
        for a in data.get("allocations", [])
    ]
    conflicts = [
        Conflict(c["sensor_id"], c["sensor_name"], c["code"], c.get("detail"))
        for c in data.get("conflicts", [])
    ]
    warnings = [
        AllocationWarning(w["sensor_id"], w["sensor_name"], w["code"], w.get("detail"))
        for w in data.get("warnings", [])
    ]

    buses_data = data.get("buses", {})
    buses = BusUsage(
        i2c=[
            I2CBus(id=b["id"], scl=b["scl"], sda=b["sda"], sensors=list(b.get("sensors", [])))
            for b in buses_data.get("i2c", [])
        ],
        spi=[
            SPIBus(id=b["id"], sck=b["sck"], miso=b["miso"], mosi=b["mosi"],
                   cs_pins=list(b.get("cs_pins", [])), sensors=list(b.get("sensors", [])))
            for b in buses_data.get("spi", [])
        ],
        uart=[
            UARTBus(id=b["id"], tx=b["tx"], rx=b["rx"], sensor=b["sensor"])
            for b in buses_data.get("uart", [])
        ],
    )

    pin_usage = {
        pin_id: PinUsage(status=u["status"], label=u.get("label"))
        for pin_id, u in data.get("pin_usage", {}).items()
    }

    return AllocationResult(
        allocations=allocations,
        conflicts=conflicts,
        warnings=warnings,
        buses=buses,
        pin_usage=pin_usage,
    )
