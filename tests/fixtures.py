"""Allocator test fixtures — hand-built MCUs and sensor sets.

Two kinds of MCU are used across the tests:

  - the built-in ``stm32f103c8`` (Blue Pill), with the default
    constraints applied: PA13/PA14 (SWD) and PC14/PC15 (LSE) are taken
    out before any sensor is placed, so the lowest free GPIO is PA0,
    the lowest analog pin PA0 and the lowest PWM pin PA8;
  - a "tiny" MCU built on demand with only the pins and buses a test
    needs, for pool exhaustion and failure-code cases.

stm32f103c8 buses:
  I2C1   SCL PB6/PB8, SDA PB7/PB9        I2C2  PB10/PB11
  SPI1   PA5 / PA6 / PA7                 SPI2  PB13 / PB14 / PB15
  USART1 PA9/PA10   USART2 PA2/PA3       USART3 PB10/PB11
"""

from __future__ import annotations

from pinforge.catalog.builtin import default_constraints, stm32f103c8
from pinforge.catalog.models import (
    BusDefinition, MCU, Pin, PinConstraint,
    I2CSensor, SPISensor, UARTSensor, ADCSensor, PWMSensor, GPIOSensor, OneWireSensor,
)


def make_f103() -> MCU:
    return stm32f103c8()


def make_constraints() -> list[PinConstraint]:
    return default_constraints()


def make_tiny_mcu(
    gpio: tuple[str, ...] = ("PA0", "PA1", "PA2"),
    *,
    i2c: list[BusDefinition] | None = None,
    spi: list[BusDefinition] | None = None,
    uart: list[BusDefinition] | None = None,
    analog: tuple[str, ...] = (),
    pwm: tuple[str, ...] = (),
    series: str = "F1",
) -> MCU:
    """MCU with the given port pins plus one power pin (VDD)."""
    pins = [Pin(pid, pid, pid[:2], int(pid[2:])) for pid in gpio]
    pins.append(Pin("VDD", "VDD", "SYS", 0, power=True, notes="3.3V"))
    return MCU(
        id="tiny", name="Tiny", series=series, package="TEST",
        pins=pins,
        i2c=i2c or [], spi=spi or [], uart=uart or [],
        analog_pins=list(analog), pwm_pins=list(pwm),
    )


def i2c(sid: str, address: int | None = None) -> I2CSensor:
    return I2CSensor(sid, sid.upper(), i2c_address=address)


def spi(sid: str) -> SPISensor:
    return SPISensor(sid, sid.upper())


def uart(sid: str, bus: str | None = None) -> UARTSensor:
    return UARTSensor(sid, sid.upper(), required_bus_id=bus)


def adc(sid: str) -> ADCSensor:
    return ADCSensor(sid, sid.upper())


def pwm(sid: str) -> PWMSensor:
    return PWMSensor(sid, sid.upper())


def gpio(sid: str) -> GPIOSensor:
    return GPIOSensor(sid, sid.upper())


def one_wire(sid: str) -> OneWireSensor:
    return OneWireSensor(sid, sid.upper())


def soft(cid: str, pins: list[str], reason: str = "") -> PinConstraint:
    return PinConstraint(id=cid, label=cid.upper(), pins=pins, level="soft", reason=reason)


def hard(cid: str, pins: list[str], reason: str = "", **scope) -> PinConstraint:
    return PinConstraint(id=cid, label=cid.upper(), pins=pins, level="hard", reason=reason, **scope)


def make_weather_station() -> list:
    """A mixed project touching every interface once."""
    return [
        I2CSensor("bme280", "BME280", i2c_address=0x76),
        SPISensor("w25q64", "W25Q64"),
        UARTSensor("neo6m", "NEO-6M"),
        ADCSensor("soil", "Soil Moisture"),
        PWMSensor("sg90", "SG90 Servo"),
        GPIOSensor("button", "Button"),
        OneWireSensor("ds18b20", "DS18B20"),
    ]
