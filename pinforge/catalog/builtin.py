"""Built-in demo catalog — four STM32 parts, default constraints, sensors.

The MCU entries are deliberately partial: they list the alternate
functions the allocator needs and nothing more.  Verify against the
datasheet before committing a board to them.
"""

from __future__ import annotations

from .models import (
    BusDefinition, MCU, Pin, PinFunction, PinConstraint,
    I2CSensor, SPISensor, UARTSensor, ADCSensor, PWMSensor, GPIOSensor, OneWireSensor,
    Sensor,
)


_GPIO = PinFunction("GPIO", "GPIO")


def _fn(name: str, interface: str | None = None, signal: str | None = None,
        bus: str | None = None) -> PinFunction:
    return PinFunction(name=name, interface=interface, signal=signal, bus=bus)


def _i2c(bus: str, signal: str) -> PinFunction:
    return _fn(f"{bus}_{signal}", "I2C", signal, bus)


def _spi(bus: str, signal: str) -> PinFunction:
    return _fn(f"{bus}_{signal}", "SPI", signal, bus)


def _uart(bus: str, signal: str) -> PinFunction:
    return _fn(f"{bus}_{signal}", "UART", signal, bus)


def _pwm(timer_channel: str) -> PinFunction:
    return _fn(timer_channel, "PWM", "PWM")


def _adc(channel: int) -> PinFunction:
    return _fn(f"ADC_IN{channel}", "ADC", "AIN")


_SWD = {
    "PA13": ([_fn("SWDIO")], "SWDIO"),
    "PA14": ([_fn("SWCLK")], "SWCLK"),
}


def _build_pins(
    ports: dict[str, list[int]],
    alternates: dict[str, list[PinFunction]],
    system: list[tuple[str, str, bool]],
) -> list[Pin]:
    """Expand port/index ranges into Pin records.

    ``alternates`` adds functions on top of GPIO; ``system`` lists
    (id, notes, is_power) for the SYS port pins appended at the end.
    """
    pins: list[Pin] = []
    for port, indexes in ports.items():
        for index in indexes:
            pid = f"{port}{index}"
            if pid in _SWD:
                functions, notes = _SWD[pid]
                pins.append(Pin(pid, pid, port, index, list(functions), notes=notes))
                continue
            functions = [_GPIO, *alternates.get(pid, [])]
            pins.append(Pin(pid, pid, port, index, functions))

    for index, (pid, notes, power) in enumerate(system):
        pins.append(Pin(
            id=pid, label=pid, port="SYS", index=index,
            functions=[_fn(pid)],
            reserved=not power, power=power, notes=notes,
        ))
    return pins


def _bus(bus_id: str, **roles: list[str]) -> BusDefinition:
    return BusDefinition(id=bus_id, pins={k.upper(): list(v) for k, v in roles.items()})


_ALL16 = list(range(16))
_DEMO_NOTE = "Demo subset. Verify with datasheet before tape-out."


def stm32f103c8() -> MCU:
    alternates = {
        "PB13": [_spi("SPI2", "SCK")],
        "PB14": [_spi("SPI2", "MISO")],
        "PB15": [_spi("SPI2", "MOSI")],
        "PB6": [_i2c("I2C1", "SCL"), _pwm("TIM4_CH1")],
        "PB7": [_i2c("I2C1", "SDA"), _pwm("TIM4_CH2")],
        "PB8": [_i2c("I2C1", "SCL"), _pwm("TIM4_CH3")],
        "PB9": [_i2c("I2C1", "SDA"), _pwm("TIM4_CH4")],
        "PB10": [_i2c("I2C2", "SCL"), _uart("USART3", "TX")],
        "PB11": [_i2c("I2C2", "SDA"), _uart("USART3", "RX")],
        "PA9": [_uart("USART1", "TX"), _pwm("TIM1_CH2")],
        "PA10": [_uart("USART1", "RX"), _pwm("TIM1_CH3")],
        "PA2": [_uart("USART2", "TX"), _pwm("TIM2_CH3"), _adc(2)],
        "PA3": [_uart("USART2", "RX"), _pwm("TIM2_CH4"), _adc(3)],
        "PA0": [_adc(0)],
        "PA1": [_adc(1)],
        "PA4": [_adc(4)],
        "PA5": [_spi("SPI1", "SCK"), _adc(5)],
        "PA6": [_spi("SPI1", "MISO"), _adc(6)],
        "PA7": [_spi("SPI1", "MOSI"), _adc(7)],
        "PB0": [_adc(8), _pwm("TIM3_CH3")],
        "PB1": [_adc(9), _pwm("TIM3_CH4")],
        "PA8": [_pwm("TIM1_CH1")],
        "PA11": [_pwm("TIM1_CH4")],
    }
    pins = _build_pins(
        {"PA": _ALL16, "PB": _ALL16, "PC": [13, 14, 15]},
        alternates,
        [("VDD", "3.3V", True), ("VSS", "GND", True),
         ("NRST", "Reset", False), ("BOOT0", "Boot mode", False)],
    )
    return MCU(
        id="stm32f103c8", name="STM32F103C8", series="F1", package="LQFP48",
        pins=pins,
        i2c=[_bus("I2C1", scl=["PB6", "PB8"], sda=["PB7", "PB9"]),
             _bus("I2C2", scl=["PB10"], sda=["PB11"])],
        spi=[_bus("SPI1", sck=["PA5"], miso=["PA6"], mosi=["PA7"]),
             _bus("SPI2", sck=["PB13"], miso=["PB14"], mosi=["PB15"])],
        uart=[_bus("USART1", tx=["PA9"], rx=["PA10"]),
              _bus("USART2", tx=["PA2"], rx=["PA3"]),
              _bus("USART3", tx=["PB10"], rx=["PB11"])],
        analog_pins=["PA0", "PA1", "PA2", "PA3", "PA4", "PA5", "PA6", "PA7", "PB0", "PB1"],
        pwm_pins=["PA8", "PA9", "PA10", "PA11", "PB6", "PB7", "PB8", "PB9", "PB0", "PB1"],
        notes=_DEMO_NOTE,
    )


def stm32f407vg() -> MCU:
    alternates = {
        "PB6": [_i2c("I2C1", "SCL"), _pwm("TIM4_CH1")],
        "PB7": [_i2c("I2C1", "SDA"), _pwm("TIM4_CH2")],
        "PB10": [_i2c("I2C2", "SCL"), _uart("USART3", "TX")],
        "PB11": [_i2c("I2C2", "SDA"), _uart("USART3", "RX")],
        "PA8": [_i2c("I2C3", "SCL"), _pwm("TIM1_CH1")],
        "PC9": [_i2c("I2C3", "SDA"), _pwm("TIM3_CH4")],
        "PA5": [_spi("SPI1", "SCK"), _adc(5)],
        "PA6": [_spi("SPI1", "MISO"), _adc(6)],
        "PA7": [_spi("SPI1", "MOSI"), _adc(7)],
        "PB13": [_spi("SPI2", "SCK")],
        "PB14": [_spi("SPI2", "MISO")],
        "PB15": [_spi("SPI2", "MOSI")],
        "PC10": [_spi("SPI3", "SCK")],
        "PC11": [_spi("SPI3", "MISO")],
        "PC12": [_spi("SPI3", "MOSI")],
        "PA9": [_uart("USART1", "TX"), _pwm("TIM1_CH2")],
        "PA10": [_uart("USART1", "RX"), _pwm("TIM1_CH3")],
        "PA2": [_uart("USART2", "TX"), _adc(2)],
        "PA3": [_uart("USART2", "RX"), _adc(3)],
        "PA0": [_uart("UART4", "TX"), _adc(0)],
        "PA1": [_uart("UART4", "RX"), _adc(1)],
        "PB0": [_adc(8), _pwm("TIM3_CH3")],
        "PB1": [_adc(9), _pwm("TIM3_CH4")],
        "PC6": [_pwm("TIM3_CH1")],
        "PC7": [_pwm("TIM3_CH2")],
        "PC8": [_pwm("TIM3_CH3")],
    }
    pins = _build_pins(
        {"PA": _ALL16, "PB": _ALL16, "PC": _ALL16, "PD": _ALL16, "PE": _ALL16},
        alternates,
        [("VDD", "3.3V", True), ("VSS", "GND", True),
         ("VDDA", "Analog 3.3V", True), ("VSSA", "Analog GND", True),
         ("NRST", "Reset", False)],
    )
    return MCU(
        id="stm32f407vg", name="STM32F407VG", series="F4", package="LQFP100",
        pins=pins,
        i2c=[_bus("I2C1", scl=["PB6"], sda=["PB7"]),
             _bus("I2C2", scl=["PB10"], sda=["PB11"]),
             _bus("I2C3", scl=["PA8"], sda=["PC9"])],
        spi=[_bus("SPI1", sck=["PA5"], miso=["PA6"], mosi=["PA7"]),
             _bus("SPI2", sck=["PB13"], miso=["PB14"], mosi=["PB15"]),
             _bus("SPI3", sck=["PC10"], miso=["PC11"], mosi=["PC12"])],
        uart=[_bus("USART1", tx=["PA9"], rx=["PA10"]),
              _bus("USART2", tx=["PA2"], rx=["PA3"]),
              _bus("USART3", tx=["PB10"], rx=["PB11"]),
              _bus("UART4", tx=["PA0"], rx=["PA1"])],
        analog_pins=["PA0", "PA1", "PA2", "PA3", "PA4", "PA5", "PA6", "PA7",
                     "PB0", "PB1", "PC0", "PC1", "PC2", "PC3", "PC4", "PC5"],
        pwm_pins=["PA8", "PA9", "PA10", "PA11", "PB6", "PB7", "PB8", "PB9",
                  "PC6", "PC7", "PC8", "PC9"],
        notes=_DEMO_NOTE,
    )


def stm32g071rb() -> MCU:
    alternates = {
        "PB6": [_i2c("I2C1", "SCL"), _pwm("TIM4_CH1")],
        "PB7": [_i2c("I2C1", "SDA"), _pwm("TIM4_CH2")],
        "PB10": [_i2c("I2C2", "SCL"), _uart("LPUART1", "TX")],
        "PB11": [_i2c("I2C2", "SDA"), _uart("LPUART1", "RX")],
        "PA7": [_i2c("I2C3", "SCL"), _spi("SPI1", "MOSI")],
        "PA8": [_i2c("I2C3", "SDA"), _pwm("TIM1_CH1")],
        "PA5": [_spi("SPI1", "SCK")],
        "PA6": [_spi("SPI1", "MISO")],
        "PB13": [_spi("SPI2", "SCK")],
        "PB14": [_spi("SPI2", "MISO")],
        "PB15": [_spi("SPI2", "MOSI")],
        "PA9": [_uart("USART1", "TX")],
        "PA10": [_uart("USART1", "RX")],
        "PA2": [_uart("USART2", "TX"), _adc(2)],
        "PA3": [_uart("USART2", "RX"), _adc(3)],
        "PA0": [_adc(0)],
        "PA1": [_adc(1)],
        "PB0": [_adc(8)],
        "PB1": [_adc(9)],
    }
    pins = _build_pins(
        {"PA": _ALL16, "PB": _ALL16, "PC": _ALL16},
        alternates,
        [("VDD", "3.3V", True), ("VSS", "GND", True),
         ("NRST", "Reset", False), ("BOOT0", "Boot mode", False)],
    )
    return MCU(
        id="stm32g071rb", name="STM32G071RB", series="G0", package="LQFP64",
        pins=pins,
        i2c=[_bus("I2C1", scl=["PB6"], sda=["PB7"]),
             _bus("I2C2", scl=["PB10"], sda=["PB11"]),
             _bus("I2C3", scl=["PA7"], sda=["PA8"])],
        spi=[_bus("SPI1", sck=["PA5"], miso=["PA6"], mosi=["PA7"]),
             _bus("SPI2", sck=["PB13"], miso=["PB14"], mosi=["PB15"])],
        uart=[_bus("USART1", tx=["PA9"], rx=["PA10"]),
              _bus("USART2", tx=["PA2"], rx=["PA3"]),
              _bus("LPUART1", tx=["PB10"], rx=["PB11"])],
        analog_pins=["PA0", "PA1", "PA2", "PA3", "PA4", "PA5", "PA6", "PA7",
                     "PB0", "PB1", "PC0", "PC1", "PC2", "PC3", "PC4", "PC5"],
        pwm_pins=["PA8", "PA9", "PA10", "PA11", "PB6", "PB7", "PB8", "PB9",
                  "PC6", "PC7", "PC8", "PC9"],
        notes=_DEMO_NOTE,
    )


def stm32h743zi() -> MCU:
    alternates = {
        "PB6": [_i2c("I2C1", "SCL"), _pwm("TIM4_CH1")],
        "PB7": [_i2c("I2C1", "SDA"), _pwm("TIM4_CH2")],
        "PF1": [_i2c("I2C2", "SCL")],
        "PF0": [_i2c("I2C2", "SDA")],
        "PD12": [_i2c("I2C4", "SCL"), _pwm("TIM4_CH1")],
        "PD13": [_i2c("I2C4", "SDA"), _pwm("TIM4_CH2")],
        "PA5": [_spi("SPI1", "SCK")],
        "PA6": [_spi("SPI1", "MISO")],
        "PA7": [_spi("SPI1", "MOSI")],
        "PB13": [_spi("SPI2", "SCK")],
        "PB14": [_spi("SPI2", "MISO")],
        "PB15": [_spi("SPI2", "MOSI")],
        "PC10": [_spi("SPI3", "SCK")],
        "PC11": [_spi("SPI3", "MISO")],
        "PC12": [_spi("SPI3", "MOSI")],
        "PA9": [_uart("USART1", "TX"), _pwm("TIM1_CH2")],
        "PA10": [_uart("USART1", "RX"), _pwm("TIM1_CH3")],
        "PD5": [_uart("USART2", "TX")],
        "PD6": [_uart("USART2", "RX")],
        "PB10": [_uart("USART3", "TX")],
        "PB11": [_uart("USART3", "RX")],
        "PA0": [_uart("UART4", "TX"), _adc(0)],
        "PA1": [_uart("UART4", "RX"), _adc(1)],
        "PA2": [_adc(2)],
        "PA3": [_adc(3)],
        "PB0": [_adc(8), _pwm("TIM3_CH3")],
        "PB1": [_adc(9), _pwm("TIM3_CH4")],
        "PC6": [_pwm("TIM3_CH1")],
        "PC7": [_pwm("TIM3_CH2")],
        "PC8": [_pwm("TIM3_CH3")],
        "PC9": [_pwm("TIM3_CH4")],
    }
    pins = _build_pins(
        {port: _ALL16 for port in ("PA", "PB", "PC", "PD", "PE", "PF")},
        alternates,
        [("VDD", "3.3V", True), ("VSS", "GND", True), ("VDDIO", "I/O Supply", True),
         ("NRST", "Reset", False), ("BOOT0", "Boot mode", False)],
    )
    return MCU(
        id="stm32h743zi", name="STM32H743ZI", series="H7", package="LQFP144",
        pins=pins,
        i2c=[_bus("I2C1", scl=["PB6"], sda=["PB7"]),
             _bus("I2C2", scl=["PF1"], sda=["PF0"]),
             _bus("I2C4", scl=["PD12"], sda=["PD13"])],
        spi=[_bus("SPI1", sck=["PA5"], miso=["PA6"], mosi=["PA7"]),
             _bus("SPI2", sck=["PB13"], miso=["PB14"], mosi=["PB15"]),
             _bus("SPI3", sck=["PC10"], miso=["PC11"], mosi=["PC12"])],
        uart=[_bus("USART1", tx=["PA9"], rx=["PA10"]),
              _bus("USART2", tx=["PD5"], rx=["PD6"]),
              _bus("USART3", tx=["PB10"], rx=["PB11"]),
              _bus("UART4", tx=["PA0"], rx=["PA1"])],
        analog_pins=["PA0", "PA1", "PA2", "PA3", "PA4", "PA5", "PA6", "PA7",
                     "PB0", "PB1", "PC0", "PC1", "PC2", "PC3", "PC4", "PC5"],
        pwm_pins=["PA8", "PA9", "PA10", "PA11", "PB6", "PB7", "PB8", "PB9",
                  "PC6", "PC7", "PC8", "PC9", "PD12", "PD13", "PD14", "PD15"],
        notes=_DEMO_NOTE,
    )


def builtin_mcus() -> list[MCU]:
    return [stm32f103c8(), stm32f407vg(), stm32g071rb(), stm32h743zi()]


def default_constraints() -> list[PinConstraint]:
    return [
        PinConstraint(
            id="swd", label="SWD Debug", pins=["PA13", "PA14"], level="hard",
            reason="Keep debug pins free for SWD programming.",
            source="default", series=["F1", "F4", "G0", "H7"],
        ),
        PinConstraint(
            id="boot", label="BOOT Strap", pins=["BOOT0"], level="hard",
            reason="BOOT pin controls boot mode.",
            source="default", series=["F1", "G0", "H7"],
        ),
        PinConstraint(
            id="reset", label="NRST", pins=["NRST"], level="hard",
            reason="Reset pin should remain dedicated.",
            source="default", series=["F1", "F4", "G0", "H7"],
        ),
        PinConstraint(
            id="lse", label="LSE Oscillator", pins=["PC14", "PC15"], level="hard",
            reason="Low-speed external oscillator pins.",
            source="default", series=["F1", "F4", "G0", "H7"],
        ),
    ]


def builtin_sensors() -> list[Sensor]:
    return [
        I2CSensor("bme280", "BME280", "Temperature / humidity / pressure", i2c_address=0x76),
        I2CSensor("ssd1306", "SSD1306", "128x64 OLED display", i2c_address=0x3C),
        I2CSensor("mpu6050", "MPU6050", "6-axis IMU", i2c_address=0x68),
        I2CSensor("bh1750", "BH1750", "Ambient light sensor", i2c_address=0x23),
        SPISensor("w25q64", "W25Q64", "64 Mbit SPI flash"),
        SPISensor("max31865", "MAX31865", "RTD-to-digital converter"),
        UARTSensor("neo6m", "NEO-6M", "GPS receiver"),
        UARTSensor("esp8266", "ESP8266", "Wi-Fi module (AT firmware)"),
        ADCSensor("pot10k", "Potentiometer", "10k linear potentiometer"),
        ADCSensor("soil", "Soil Moisture", "Capacitive soil moisture probe"),
        PWMSensor("sg90", "SG90 Servo", "Micro servo"),
        PWMSensor("buzzer", "Buzzer", "Passive piezo buzzer"),
        GPIOSensor("button", "Button", "Momentary push button"),
        GPIOSensor("pir", "HC-SR501", "PIR motion sensor"),
        OneWireSensor("ds18b20", "DS18B20", "1-Wire temperature probe"),
    ]
