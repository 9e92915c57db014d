"""Allocator output dataclasses and reason codes."""

from __future__ import annotations

from dataclasses import dataclass, field


# ── Reason codes ───────────────────────────────────────────────────

# Conflicts: terminal, the sensor gets no binding.
CONSTRAINT_RESERVED = "constraint_reserved"
LOCKED_DUPLICATE = "locked_duplicate"
LOCKED_MISMATCH = "locked_mismatch"
LOCKED_UNAVAILABLE = "locked_unavailable"
NO_I2C = "no_i2c"
NO_SPI = "no_spi"
NO_SPI_CS = "no_spi_cs"
NO_UART = "no_uart"
UART_EXCLUSIVE = "uart_exclusive"
NO_ADC = "no_adc"
NO_PWM = "no_pwm"
NO_GPIO = "no_gpio"

# Warnings: informational, attached to successful allocations.
SOFT_CONSTRAINT = "soft_constraint"
I2C_ADDR_COLLISION = "i2c_addr_collision"

# Pin usage status values.
STATUS_AVAILABLE = "available"
STATUS_RESERVED = "reserved"
STATUS_POWER = "power"
STATUS_BUS = "bus"
STATUS_SENSOR = "sensor"


PinLockMap = dict[str, dict[str, str]]     # sensor_id -> signal -> pin_id


# ── Output dataclasses ─────────────────────────────────────────────


@dataclass
class PinUsage:
    status: str                         # available | reserved | power | bus | sensor
    label: str | None = None


@dataclass
class SensorAllocation:
    """A sensor whose every required signal is bound to a pin."""

    sensor_id: str
    sensor_name: str
    interface: str
    assigned_pins: dict[str, str]       # "SCL" -> "PB6"
    bus_id: str | None = None


@dataclass
class Conflict:
    """A sensor that could not be placed."""

    sensor_id: str
    sensor_name: str
    code: str
    detail: str | None = None


@dataclass
class AllocationWarning:
    """A non-blocking advisory on an otherwise successful allocation."""

    sensor_id: str
    sensor_name: str
    code: str
    detail: str | None = None


@dataclass
class I2CBus:
    id: str
    scl: str
    sda: str
    sensors: list[str] = field(default_factory=list)


@dataclass
class SPIBus:
    id: str
    sck: str
    miso: str
    mosi: str
    cs_pins: list[str] = field(default_factory=list)
    sensors: list[str] = field(default_factory=list)


@dataclass
class UARTBus:
    id: str
    tx: str
    rx: str
    sensor: str                         # exclusive owner


@dataclass
class BusUsage:
    i2c: list[I2CBus] = field(default_factory=list)
    spi: list[SPIBus] = field(default_factory=list)
    uart: list[UARTBus] = field(default_factory=list)


@dataclass
class AllocationResult:
    """Complete allocation result for one (mcu, sensors, locks, constraints)."""

    allocations: list[SensorAllocation]
    conflicts: list[Conflict]
    warnings: list[AllocationWarning]
    buses: BusUsage
    pin_usage: dict[str, PinUsage]

    @property
    def ok(self) -> bool:
        return len(self.conflicts) == 0

    def allocation_for(self, sensor_id: str) -> SensorAllocation | None:
        return next((a for a in self.allocations if a.sensor_id == sensor_id), None)

    def conflict_for(self, sensor_id: str) -> Conflict | None:
        return next((c for c in self.conflicts if c.sensor_id == sensor_id), None)
