"""Main allocation engine — greedy per-sensor pin and bus assignment."""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Callable

from pinforge.catalog.models import (
    MCU, BusDefinition, PinConstraint, Sensor, UARTSensor,
)
from pinforge.config import ALLOCATOR_RULES

from .analysis import address_collision_warnings, soft_constraint_warnings
from .constraints import ConstraintIndex, apply_constraints
from .models import (
    AllocationResult, BusUsage, Conflict, I2CBus, PinLockMap, PinUsage,
    SensorAllocation, SPIBus, UARTBus,
    CONSTRAINT_RESERVED, LOCKED_DUPLICATE, LOCKED_MISMATCH, LOCKED_UNAVAILABLE,
    NO_ADC, NO_GPIO, NO_I2C, NO_PWM, NO_SPI, NO_SPI_CS, NO_UART, UART_EXCLUSIVE,
    STATUS_AVAILABLE, STATUS_BUS, STATUS_SENSOR,
)
from .pools import ANALOG, GPIO, PWM, PinLedger


log = logging.getLogger("pinforge.allocator")


I2C_ROLES = ("SCL", "SDA")
SPI_ROLES = ("SCK", "MISO", "MOSI")
UART_ROLES = ("TX", "RX")

# interface -> (pool, bound signal, lock keys tried in order, exhaustion code)
SINGLE_PIN_RULES: dict[str, tuple[str, str, tuple[str, ...], str]] = {
    "ADC": (ANALOG, "AIN", ("AIN",), NO_ADC),
    "PWM": (PWM, "PWM", ("PWM",), NO_PWM),
    "GPIO": (GPIO, "GPIO", ("GPIO", "DQ"), NO_GPIO),
    "ONE_WIRE": (GPIO, "DQ", ("DQ", "GPIO"), NO_GPIO),
}


@dataclass
class _Run:
    """Working state of one allocate_pins() call."""

    mcu: MCU
    ledger: PinLedger
    index: ConstraintIndex
    buses: BusUsage = field(default_factory=BusUsage)
    uart_owner: dict[str, str] = field(default_factory=dict)    # bus id -> sensor name


# ── Lock helpers ───────────────────────────────────────────────────


def _normalize_locks(raw: dict[str, str] | None) -> dict[str, str]:
    """Upper-case signal names and drop empty entries."""
    if not raw:
        return {}
    return {sig.upper(): pin for sig, pin in raw.items() if pin}


def _locked_roles(locks: dict[str, str], roles: tuple[str, ...]) -> dict[str, str]:
    return {role: locks[role] for role in roles if role in locks}


def _hard_lock_conflict(
    run: _Run, sensor: Sensor, locks: dict[str, str], signals: tuple[str, ...],
) -> Conflict | None:
    """Conflict for the first signal locked onto a hard-constrained pin."""
    for signal in signals:
        pin_id = locks.get(signal)
        constraint = run.index.hard_for(pin_id)
        if constraint is not None:
            return Conflict(
                sensor.id, sensor.name, CONSTRAINT_RESERVED,
                _constraint_detail(sensor, signal, pin_id, constraint),
            )
    return None


def _constraint_detail(sensor: Sensor, signal: str, pin_id: str, constraint: PinConstraint) -> str:
    return f"{sensor.name} {signal} -> {pin_id} ({constraint.describe()})"


def _has_duplicate(locked: dict[str, str]) -> bool:
    return len(set(locked.values())) != len(locked)


# ── Bus search ─────────────────────────────────────────────────────


def _pick_bus_pins(
    ledger: PinLedger,
    bus: BusDefinition,
    roles: tuple[str, ...],
    locked: dict[str, str],
) -> dict[str, str] | None:
    """First free, distinct pin per role on this bus, honoring locks.

    A locked pin must be one of the bus's candidates for its role.
    Unlocked roles are filled in candidate order; the first combination
    whose pins are all free and distinct wins.
    """
    for role, pin_id in locked.items():
        if pin_id not in bus.candidates(role):
            return None

    options = [[locked[r]] if r in locked else bus.candidates(r) for r in roles]
    for combo in itertools.product(*options):
        if len(set(combo)) != len(combo):
            continue
        if all(ledger.is_free(p) for p in combo):
            return dict(zip(roles, combo))
    return None


def _claim_new_bus(
    run: _Run,
    definitions: list[BusDefinition],
    roles: tuple[str, ...],
    locked: dict[str, str],
    usable: Callable[[BusDefinition], bool] | None = None,
    mark_locked: bool = True,
) -> tuple[BusDefinition, dict[str, str]] | None:
    """Scan bus definitions in declared order and claim the first match.

    Locked pins get the lock suffix unless ``mark_locked`` is false (UART).
    """
    for bus in definitions:
        if usable is not None and not usable(bus):
            continue
        picked = _pick_bus_pins(run.ledger, bus, roles, locked)
        if picked is None:
            continue
        for role, pin_id in picked.items():
            label = f"{bus.id} {role}"
            if mark_locked and role in locked:
                label = ALLOCATOR_RULES.locked(label)
            run.ledger.claim(pin_id, STATUS_BUS, label)
        return bus, picked
    return None


def _matches_locks(record: object, locked: dict[str, str]) -> bool:
    return all(getattr(record, role.lower()) == pin_id for role, pin_id in locked.items())


def _ensure_i2c_bus(run: _Run, locked: dict[str, str]) -> I2CBus | None:
    for existing in run.buses.i2c:
        if _matches_locks(existing, locked):
            return existing

    claimed = _claim_new_bus(run, run.mcu.i2c, I2C_ROLES, locked)
    if claimed is None:
        return None
    bus, pins = claimed
    record = I2CBus(id=bus.id, scl=pins["SCL"], sda=pins["SDA"])
    run.buses.i2c.append(record)
    return record


def _ensure_spi_bus(run: _Run, locked: dict[str, str]) -> SPIBus | None:
    for existing in run.buses.spi:
        if _matches_locks(existing, locked):
            return existing

    claimed = _claim_new_bus(run, run.mcu.spi, SPI_ROLES, locked)
    if claimed is None:
        return None
    bus, pins = claimed
    record = SPIBus(id=bus.id, sck=pins["SCK"], miso=pins["MISO"], mosi=pins["MOSI"])
    run.buses.spi.append(record)
    return record


# ── Single-pin pools ───────────────────────────────────────────────


def _reserve_from_pool(run: _Run, pool: str, label: str, locked_pin: str | None) -> str | None:
    """Claim a locked pin (must be pooled and free) or the lowest free one."""
    ledger = run.ledger
    if locked_pin:
        if not ledger.in_pool(pool, locked_pin) or not ledger.is_free(locked_pin):
            return None
        ledger.claim(locked_pin, STATUS_SENSOR, ALLOCATOR_RULES.locked(label))
        return locked_pin

    pin_id = ledger.lowest_free(pool)
    if pin_id is None:
        return None
    ledger.claim(pin_id, STATUS_SENSOR, label)
    return pin_id


# ── Per-interface rules ────────────────────────────────────────────


def _allocate_i2c(run: _Run, sensor: Sensor, locks: dict[str, str]) -> SensorAllocation | Conflict:
    conflict = _hard_lock_conflict(run, sensor, locks, I2C_ROLES)
    if conflict:
        return conflict
    locked = _locked_roles(locks, I2C_ROLES)
    if _has_duplicate(locked):
        return Conflict(sensor.id, sensor.name, LOCKED_DUPLICATE)

    bus = _ensure_i2c_bus(run, locked)
    if bus is None:
        return Conflict(sensor.id, sensor.name, LOCKED_MISMATCH if locked else NO_I2C)

    bus.sensors.append(sensor.name)
    return SensorAllocation(
        sensor.id, sensor.name, sensor.interface,
        assigned_pins={"SCL": bus.scl, "SDA": bus.sda},
        bus_id=bus.id,
    )


def _allocate_spi(run: _Run, sensor: Sensor, locks: dict[str, str]) -> SensorAllocation | Conflict:
    conflict = _hard_lock_conflict(run, sensor, locks, (*SPI_ROLES, "CS"))
    if conflict:
        return conflict
    locked = _locked_roles(locks, SPI_ROLES)
    if _has_duplicate(_locked_roles(locks, (*SPI_ROLES, "CS"))):
        return Conflict(sensor.id, sensor.name, LOCKED_DUPLICATE)

    bus = _ensure_spi_bus(run, locked)
    if bus is None:
        return Conflict(sensor.id, sensor.name, LOCKED_MISMATCH if locked else NO_SPI)

    # No rollback: the SCK/MISO/MOSI triple stays claimed if CS fails.
    lock_cs = locks.get("CS")
    cs_pin = _reserve_from_pool(run, GPIO, f"{sensor.name} CS", lock_cs)
    if cs_pin is None:
        return Conflict(sensor.id, sensor.name, LOCKED_UNAVAILABLE if lock_cs else NO_SPI_CS)

    bus.cs_pins.append(cs_pin)
    bus.sensors.append(sensor.name)
    return SensorAllocation(
        sensor.id, sensor.name, sensor.interface,
        assigned_pins={"SCK": bus.sck, "MISO": bus.miso, "MOSI": bus.mosi, "CS": cs_pin},
        bus_id=bus.id,
    )


def _allocate_uart(run: _Run, sensor: UARTSensor, locks: dict[str, str]) -> SensorAllocation | Conflict:
    conflict = _hard_lock_conflict(run, sensor, locks, UART_ROLES)
    if conflict:
        return conflict
    locked = _locked_roles(locks, UART_ROLES)
    if _has_duplicate(locked):
        return Conflict(sensor.id, sensor.name, LOCKED_DUPLICATE)

    required = (sensor.required_bus_id or "").strip() or None
    if required and required in run.uart_owner:
        return Conflict(
            sensor.id, sensor.name, UART_EXCLUSIVE,
            f"{required} already used by {run.uart_owner[required]}",
        )

    def usable(bus: BusDefinition) -> bool:
        if required and bus.id != required:
            return False
        return bus.id not in run.uart_owner

    claimed = _claim_new_bus(run, run.mcu.uart, UART_ROLES, locked, usable, mark_locked=False)
    if claimed is None:
        if locked:
            code = LOCKED_MISMATCH
        elif required:
            code = UART_EXCLUSIVE
        else:
            code = NO_UART
        return Conflict(sensor.id, sensor.name, code)

    bus, pins = claimed
    run.buses.uart.append(UARTBus(id=bus.id, tx=pins["TX"], rx=pins["RX"], sensor=sensor.name))
    run.uart_owner[bus.id] = sensor.name
    return SensorAllocation(
        sensor.id, sensor.name, sensor.interface,
        assigned_pins={"TX": pins["TX"], "RX": pins["RX"]},
        bus_id=bus.id,
    )


def _allocate_single(run: _Run, sensor: Sensor, locks: dict[str, str]) -> SensorAllocation | Conflict:
    pool, signal, lock_keys, exhausted = SINGLE_PIN_RULES[sensor.interface]
    locked_pin = next((locks[k] for k in lock_keys if k in locks), None)

    constraint = run.index.hard_for(locked_pin)
    if constraint is not None:
        return Conflict(
            sensor.id, sensor.name, CONSTRAINT_RESERVED,
            _constraint_detail(sensor, signal, locked_pin, constraint),
        )

    pin_id = _reserve_from_pool(run, pool, f"{sensor.name} {signal}", locked_pin)
    if pin_id is None:
        return Conflict(sensor.id, sensor.name, LOCKED_UNAVAILABLE if locked_pin else exhausted)

    return SensorAllocation(
        sensor.id, sensor.name, sensor.interface,
        assigned_pins={signal: pin_id},
    )


_HANDLERS = {
    "I2C": _allocate_i2c,
    "SPI": _allocate_spi,
    "UART": _allocate_uart,
    "ADC": _allocate_single,
    "PWM": _allocate_single,
    "GPIO": _allocate_single,
    "ONE_WIRE": _allocate_single,
}


# ── Main allocation function ──────────────────────────────────────


def allocate_pins(
    mcu: MCU,
    sensors: list[Sensor],
    pin_locks: PinLockMap | None = None,
    constraints: list[PinConstraint] | None = None,
) -> AllocationResult:
    """Assign MCU pins and buses to every sensor, in input order.

    Power, reserved and hard-constrained pins are taken out first.  Each
    sensor then either receives a complete binding or a conflict; the
    function never raises for an unsatisfiable request.  Soft-constraint
    and I2C address warnings are derived from the finished allocation.

    Parameters
    ----------
    mcu : MCU
        Target topology (read only).
    sensors : list[Sensor]
        Peripherals to place.  Order matters for bus sharing and pool
        draining.
    pin_locks : PinLockMap, optional
        ``sensor_id -> signal -> pin_id`` user overrides.
    constraints : list[PinConstraint], optional
        Hard/soft pin constraints; out-of-scope entries are ignored.

    Returns
    -------
    AllocationResult
        Bindings, conflicts, warnings, realized buses and the status of
        every MCU pin.
    """
    pin_locks = pin_locks or {}
    ledger = PinLedger.for_mcu(mcu)
    index = apply_constraints(constraints or [], mcu, ledger)
    run = _Run(mcu=mcu, ledger=ledger, index=index)

    allocations: list[SensorAllocation] = []
    conflicts: list[Conflict] = []

    for sensor in sensors:
        handler = _HANDLERS.get(sensor.interface)
        if handler is None:
            raise TypeError(f"Unsupported sensor type {type(sensor).__name__}")
        outcome = handler(run, sensor, _normalize_locks(pin_locks.get(sensor.id)))
        if isinstance(outcome, Conflict):
            log.debug("Conflict for %s (%s): %s %s",
                      sensor.id, sensor.interface, outcome.code, outcome.detail or "")
            conflicts.append(outcome)
        else:
            allocations.append(outcome)

    pin_usage: dict[str, PinUsage] = {
        pin.id: ledger.usage.get(pin.id, PinUsage(status=STATUS_AVAILABLE))
        for pin in mcu.pins
    }
    for pin_id, usage in ledger.usage.items():
        pin_usage.setdefault(pin_id, usage)

    warnings = soft_constraint_warnings(allocations, index)
    warnings.extend(address_collision_warnings(allocations, sensors))

    log.info("Allocated %d/%d sensors on %s (%d conflicts, %d warnings)",
             len(allocations), len(sensors), mcu.id, len(conflicts), len(warnings))

    return AllocationResult(
        allocations=allocations,
        conflicts=conflicts,
        warnings=warnings,
        buses=run.buses,
        pin_usage=pin_usage,
    )
