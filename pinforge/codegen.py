"""SPL starter code — C skeleton for an allocation on STM32 Standard
Peripheral Library targets.

The output is a single C source: a pin map comment block, GPIO clock and
alternate-function init, one init routine per allocated bus, helper stubs
for I2C and ADC/PWM, and an init/read template per allocated sensor.
Everything past the pin configuration is a stub for the firmware author
to fill in.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from pinforge.allocator.models import AllocationResult, SensorAllocation
from pinforge.catalog.models import MCU, Sensor


_PIN_ID_RE = re.compile(r"^P([A-Z])(\d+)$")
_NON_IDENT_RE = re.compile(r"[^A-Z0-9]+")


@dataclass(frozen=True)
class SeriesConfig:
    header: str
    clock_fn: str | None = None
    clock_prefix: str | None = None


@dataclass(frozen=True)
class SpeedPreset:
    i2c_clock: int
    spi_prescaler: str
    uart_baud: int


SERIES_CONFIG: dict[str, SeriesConfig] = {
    "F1": SeriesConfig("stm32f10x.h", "RCC_APB2PeriphClockCmd", "RCC_APB2Periph_GPIO"),
    "F4": SeriesConfig("stm32f4xx.h", "RCC_AHB1PeriphClockCmd", "RCC_AHB1Periph_GPIO"),
    "G0": SeriesConfig("stm32g0xx.h"),
    "H7": SeriesConfig("stm32h7xx.h"),
}

SPEED_PRESETS: dict[str, SpeedPreset] = {
    "standard": SpeedPreset(100000, "SPI_BaudRatePrescaler_16", 115200),
    "fast": SpeedPreset(400000, "SPI_BaudRatePrescaler_8", 230400),
}


def sanitize_ident(value: str) -> str:
    """Upper-case C identifier; never empty, never starts with a digit."""
    cleaned = _NON_IDENT_RE.sub("_", value.strip().upper()).strip("_")
    if not cleaned:
        return "SENSOR"
    if cleaned[0].isdigit():
        return f"_{cleaned}"
    return cleaned


def _used_pins(result: AllocationResult) -> list[str]:
    pins: dict[str, None] = {}
    for bus in result.buses.i2c:
        pins.update(dict.fromkeys((bus.scl, bus.sda)))
    for bus in result.buses.spi:
        pins.update(dict.fromkeys((bus.sck, bus.miso, bus.mosi, *bus.cs_pins)))
    for bus in result.buses.uart:
        pins.update(dict.fromkeys((bus.tx, bus.rx)))
    for a in result.allocations:
        pins.update(dict.fromkeys(a.assigned_pins.values()))
    return list(pins)


# ── Sections ───────────────────────────────────────────────────────

def _gpio_mode_lines(series: str) -> list[str]:
    if series == "F1":
        return ["  gpio.GPIO_Mode = GPIO_Mode_AF_PP;",
                "  gpio.GPIO_Speed = GPIO_Speed_50MHz;"]
    if series == "F4":
        return ["  gpio.GPIO_Mode = GPIO_Mode_AF;",
                "  gpio.GPIO_OType = GPIO_OType_PP;",
                "  gpio.GPIO_PuPd = GPIO_PuPd_NOPULL;",
                "  gpio.GPIO_Speed = GPIO_Speed_50MHz;"]
    return ["  /* TODO: adjust GPIO init for this MCU series. */",
            "  gpio.GPIO_Mode = GPIO_Mode_AF_PP;",
            "  gpio.GPIO_Speed = GPIO_Speed_50MHz;"]


def _bus_init(bus_id: str, kind: str, var: str, setting: str) -> list[str]:
    return [
        f"void PinForge_Init{bus_id}(void) {{",
        f"  {kind}_InitTypeDef {var};",
        f"  {kind}_StructInit(&{var});",
        f"  {var}.{setting};",
        f"  {kind}_Init({bus_id}, &{var});",
        f"  {kind}_Cmd({bus_id}, ENABLE);",
        "}",
        "",
    ]


def _i2c_helpers() -> list[str]:
    lines = ["/* I2C Helper Stubs (SPL-only) */"]
    for name, data_type, verb, sequence in (
        ("WriteBytes", "const uint8_t", "write", "START + ADDR + DATA + STOP"),
        ("ReadBytes", "uint8_t", "read", "START + ADDR + READ + STOP"),
    ):
        lines += [
            f"int PinForge_I2C_{name}(I2C_TypeDef *I2Cx, uint8_t addr7, {data_type} *data, int length) {{",
            "  (void)I2Cx;",
            "  (void)addr7;",
            "  (void)data;",
            "  (void)length;",
            f"  /* TODO: implement I2C {verb} sequence using SPL ({sequence}). */",
            "  return 0;",
            "}",
            "",
        ]
    return lines


def _sensor_template(ident: str, a: SensorAllocation, address: int | None) -> list[str]:
    lines = [f"// {a.sensor_name} ({a.interface})"]
    if a.bus_id:
        lines.append(f"// Bus: {a.bus_id}")
    pins = ", ".join(f"{signal}={pin}" for signal, pin in a.assigned_pins.items())
    lines.append(f"// Pins: {pins}")
    if a.interface == "I2C":
        lines.append(f"#define SENSOR_{ident}_I2C_ADDR 0x{address or 0:02X}")
    lines += [
        f"void PinForge_{ident}_Init(void) {{",
        "  /* TODO: configure sensor registers using SPL calls. */",
        "}",
        f"int PinForge_{ident}_Read(void *buffer, int length) {{",
        "  (void)buffer;",
        "  (void)length;",
        "  /* TODO: implement read sequence using SPL calls. */",
        "  return 0;",
        "}",
        "",
    ]
    return lines


# ── Entry point ────────────────────────────────────────────────────

def build_spl_code(
    mcu: MCU,
    result: AllocationResult,
    speed_preset: str = "standard",
    sensors: list[Sensor] | None = None,
) -> str:
    """Generate an SPL C starter file for an allocation.

    Parameters
    ----------
    mcu : MCU
        The MCU the allocation was computed for; its series picks the
        device header, the GPIO clock call and the GPIO mode lines.
    result : AllocationResult
        Output of ``allocate_pins``.  Only allocated sensors and claimed
        buses appear in the code.
    speed_preset : str
        ``"standard"`` or ``"fast"``; sets the I2C clock, SPI prescaler
        and UART baud rate.
    sensors : list[Sensor] | None
        Optional sensor definitions.  When given, I2C templates carry the
        sensor's address instead of ``0x00``.

    Raises
    ------
    ValueError
        If ``speed_preset`` is not a known preset.
    """
    preset = SPEED_PRESETS.get(speed_preset)
    if preset is None:
        raise ValueError(f"Unknown speed preset '{speed_preset}' "
                         f"(expected one of {', '.join(SPEED_PRESETS)})")
    config = SERIES_CONFIG.get(mcu.series, SeriesConfig(f"stm32{mcu.series.lower()}xx.h"))
    addresses = {s.id: getattr(s, "i2c_address", None) for s in sensors or []}

    port_map: dict[str, list[int]] = {}
    pin_comments = []
    for pin_id in _used_pins(result):
        m = _PIN_ID_RE.match(pin_id)
        if not m:
            continue
        port_map.setdefault(m.group(1), []).append(int(m.group(2)))
        usage = result.pin_usage.get(pin_id)
        label = usage.label if usage and usage.label is not None else "Assigned"
        pin_comments.append(f"// {pin_id} - {label}")
    ports = sorted(port_map)

    lines = [
        "/* PinForge SPL Starter */",
        f'#include "{config.header}"',
        "#include <stdint.h>",
        "",
        f"/* Speed preset: {speed_preset} */",
        "",
        "/* Pin Map */",
        *sorted(pin_comments),
        "",
    ]

    if config.clock_fn and config.clock_prefix:
        lines.append("void PinForge_InitClocks(void) {")
        if ports:
            macros = " | ".join(f"{config.clock_prefix}{port}" for port in ports)
            lines.append(f"  {config.clock_fn}({macros}, ENABLE);")
        else:
            lines.append("  // No GPIO ports detected.")
        lines.append("}")
    else:
        lines.append("/* TODO: configure GPIO clocks for this MCU series. */")
    lines.append("")

    lines += ["void PinForge_InitGPIO(void) {",
              "  GPIO_InitTypeDef gpio;",
              "  GPIO_StructInit(&gpio);",
              *_gpio_mode_lines(mcu.series)]
    for port in ports:
        mask = " | ".join(f"GPIO_Pin_{i}" for i in sorted(set(port_map[port])))
        lines += [f"  // GPIO{port}",
                  f"  gpio.GPIO_Pin = {mask};",
                  f"  GPIO_Init(GPIO{port}, &gpio);"]
    lines += ["}", ""]

    for bus in result.buses.i2c:
        lines += _bus_init(bus.id, "I2C", "i2c", f"I2C_ClockSpeed = {preset.i2c_clock}")
    for bus in result.buses.spi:
        lines += _bus_init(bus.id, "SPI", "spi", f"SPI_BaudRatePrescaler = {preset.spi_prescaler}")
    for bus in result.buses.uart:
        lines += _bus_init(bus.id, "USART", "usart", f"USART_BaudRate = {preset.uart_baud}")

    if result.buses.i2c:
        lines += _i2c_helpers()

    interfaces = {a.interface for a in result.allocations if a.assigned_pins}
    if "ADC" in interfaces:
        lines += ["void PinForge_InitADC(void) {",
                  "  /* TODO: configure ADC channels for assigned analog pins. */",
                  "}", ""]
    if "PWM" in interfaces:
        lines += ["void PinForge_InitPWM(void) {",
                  "  /* TODO: configure timers for PWM outputs. */",
                  "}", ""]

    if result.allocations:
        idents = []
        lines.append("/* Sensor Templates */")
        for a in result.allocations:
            ident = sanitize_ident(f"{a.sensor_name}_{a.sensor_id}")
            idents.append(ident)
            lines += _sensor_template(ident, a, addresses.get(a.sensor_id))
        lines.append("void PinForge_InitSensors(void) {")
        lines += [f"  PinForge_{ident}_Init();" for ident in idents]
        lines += ["}", ""]

    return "\n".join(lines)
