"""Post-analysis — warnings derived from a finished allocation.

Neither pass changes the allocations or conflicts it reads.
"""

from __future__ import annotations

from pinforge.catalog.models import Sensor

from .constraints import ConstraintIndex
from .models import (
    AllocationWarning, SensorAllocation, SOFT_CONSTRAINT, I2C_ADDR_COLLISION,
)


def soft_constraint_warnings(
    allocations: list[SensorAllocation],
    index: ConstraintIndex,
) -> list[AllocationWarning]:
    """One warning per (sensor, soft constraint) touching any bound pin.

    When several of a sensor's pins fall under the same constraint only
    the first one, in signal order, is named.
    """
    warnings: list[AllocationWarning] = []
    seen: set[tuple[str, str]] = set()

    for alloc in allocations:
        for pin_id in alloc.assigned_pins.values():
            for constraint in index.soft_for(pin_id):
                key = (alloc.sensor_id, constraint.id)
                if key in seen:
                    continue
                seen.add(key)
                warnings.append(AllocationWarning(
                    sensor_id=alloc.sensor_id,
                    sensor_name=alloc.sensor_name,
                    code=SOFT_CONSTRAINT,
                    detail=f"{pin_id} ({constraint.describe()})",
                ))

    return warnings


def address_collision_warnings(
    allocations: list[SensorAllocation],
    sensors: list[Sensor],
) -> list[AllocationWarning]:
    """One warning per (I2C bus, address) shared by two or more sensors."""
    addresses = {
        s.id: s.i2c_address
        for s in sensors
        if getattr(s, "i2c_address", None) is not None
    }

    # bus_id -> address -> sensor names, in first-seen order
    by_bus: dict[str, dict[int, list[str]]] = {}
    for alloc in allocations:
        if alloc.interface != "I2C" or not alloc.bus_id:
            continue
        addr = addresses.get(alloc.sensor_id)
        if addr is None:
            continue
        by_bus.setdefault(alloc.bus_id, {}).setdefault(addr, []).append(alloc.sensor_name)

    warnings: list[AllocationWarning] = []
    for bus_id, by_addr in by_bus.items():
        for addr, names in by_addr.items():
            if len(names) < 2:
                continue
            warnings.append(AllocationWarning(
                sensor_id=f"i2c:{bus_id}:{addr}",
                sensor_name=bus_id,
                code=I2C_ADDR_COLLISION,
                detail=f"0x{addr:x} -> {', '.join(names)}",
            ))
    return warnings
