"""Catalog dataclasses — MCU topologies, sensors and pin constraints."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Union


INTERFACES = ("I2C", "SPI", "UART", "ADC", "PWM", "GPIO", "ONE_WIRE")


# ── MCU topology ───────────────────────────────────────────────────


@dataclass(frozen=True)
class PinFunction:
    name: str                           # "I2C1_SCL", "TIM4_CH1", "GPIO"
    interface: str | None = None        # one of INTERFACES
    signal: str | None = None           # "SCL", "AIN", "PWM"
    bus: str | None = None              # "I2C1"


@dataclass(frozen=True)
class Pin:
    id: str
    label: str
    port: str                           # "PA" .. "PF", or "SYS"
    index: int
    functions: list[PinFunction] = field(default_factory=list)
    reserved: bool = False
    power: bool = False
    notes: str | None = None


@dataclass(frozen=True)
class BusDefinition:
    """One bus instance and its candidate pins per signal role.

    ``pins`` maps an upper-case role ("SCL", "MOSI", "TX") to the pins
    that can carry it, in preference order.
    """
    id: str
    pins: dict[str, list[str]] = field(default_factory=dict)

    def candidates(self, role: str) -> list[str]:
        return self.pins.get(role, [])


@dataclass(frozen=True)
class MCU:
    id: str
    name: str
    series: str                         # "F1" | "F4" | "G0" | "H7"
    package: str
    pins: list[Pin]
    i2c: list[BusDefinition] = field(default_factory=list)
    spi: list[BusDefinition] = field(default_factory=list)
    uart: list[BusDefinition] = field(default_factory=list)
    analog_pins: list[str] = field(default_factory=list)
    pwm_pins: list[str] = field(default_factory=list)
    reserved_pins: list[str] = field(default_factory=list)
    notes: str | None = None

    @property
    def pin_ids(self) -> list[str]:
        return [p.id for p in self.pins]

    def get_pin(self, pin_id: str) -> Pin | None:
        return next((p for p in self.pins if p.id == pin_id), None)


# ── Sensors (tagged union over interface type) ─────────────────────


@dataclass
class SensorBase:
    id: str
    name: str
    description: str = ""
    signals: list[str] = field(default_factory=list)

    interface: ClassVar[str] = ""
    default_signals: ClassVar[tuple[str, ...]] = ()

    def __post_init__(self) -> None:
        if not self.signals:
            self.signals = list(self.default_signals)


@dataclass
class I2CSensor(SensorBase):
    i2c_address: int | None = None      # 7-bit, used for collision warnings only

    interface: ClassVar[str] = "I2C"
    default_signals: ClassVar[tuple[str, ...]] = ("SCL", "SDA")


@dataclass
class SPISensor(SensorBase):
    interface: ClassVar[str] = "SPI"
    default_signals: ClassVar[tuple[str, ...]] = ("SCK", "MISO", "MOSI", "CS")


@dataclass
class UARTSensor(SensorBase):
    required_bus_id: str | None = None  # forces one named bus

    interface: ClassVar[str] = "UART"
    default_signals: ClassVar[tuple[str, ...]] = ("TX", "RX")


@dataclass
class ADCSensor(SensorBase):
    interface: ClassVar[str] = "ADC"
    default_signals: ClassVar[tuple[str, ...]] = ("AIN",)


@dataclass
class PWMSensor(SensorBase):
    interface: ClassVar[str] = "PWM"
    default_signals: ClassVar[tuple[str, ...]] = ("PWM",)


@dataclass
class GPIOSensor(SensorBase):
    interface: ClassVar[str] = "GPIO"
    default_signals: ClassVar[tuple[str, ...]] = ("GPIO",)


@dataclass
class OneWireSensor(SensorBase):
    interface: ClassVar[str] = "ONE_WIRE"
    default_signals: ClassVar[tuple[str, ...]] = ("DQ",)


Sensor = Union[
    I2CSensor, SPISensor, UARTSensor, ADCSensor, PWMSensor, GPIOSensor, OneWireSensor,
]

SENSOR_TYPES: dict[str, type] = {
    cls.interface: cls
    for cls in (I2CSensor, SPISensor, UARTSensor, ADCSensor, PWMSensor, GPIOSensor, OneWireSensor)
}


# ── Constraints ────────────────────────────────────────────────────


@dataclass(frozen=True)
class PinConstraint:
    id: str
    label: str
    pins: list[str]
    level: str                          # "hard" | "soft"
    reason: str = ""
    enabled: bool = True
    source: str | None = None           # "default" | "import" | "custom" | "project"
    series: list[str] | None = None
    mcu_ids: list[str] | None = None

    @property
    def is_hard(self) -> bool:
        return self.level == "hard"

    def describe(self) -> str:
        return f"{self.label} - {self.reason}" if self.reason else self.label


# ── Catalog ────────────────────────────────────────────────────────


@dataclass
class ValidationError:
    item_id: str
    field: str
    message: str

    def __str__(self) -> str:
        return f"[{self.item_id}] {self.field}: {self.message}"


@dataclass
class CatalogResult:
    """Result of loading the catalog — items + any validation errors."""
    mcus: list[MCU]
    sensors: list[Sensor]
    constraints: list[PinConstraint]
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return len(self.errors) == 0
