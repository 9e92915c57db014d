"""Tests for report builders and allocation serialization."""

from __future__ import annotations

import csv
import io
import json
import unittest

from pinforge.allocator import allocate_pins, allocation_to_dict, parse_allocation
from pinforge.catalog import builtin_mcus, get_mcu
from pinforge.codegen import build_spl_code, sanitize_ident
from pinforge.reports import (
    build_bom_csv, build_hardware_json, build_pinmap_csv, build_pinmap_json, build_wiring_csv,
)
from tests.fixtures import make_f103, make_constraints, make_weather_station, gpio, uart


def _rows(text: str) -> list[dict]:
    return list(csv.DictReader(io.StringIO(text)))


class TestReports(unittest.TestCase):

    def setUp(self):
        self.mcu = make_f103()
        self.sensors = make_weather_station() + [gpio("led"), uart("u1"), uart("u2"), uart("u3")]
        self.result = allocate_pins(self.mcu, self.sensors, {}, make_constraints())

    def test_pinmap_csv(self):
        rows = _rows(build_pinmap_csv(self.mcu, self.result))
        self.assertEqual(len(rows), len(self.mcu.pins))
        by_pin = {r["pin"]: r for r in rows}
        self.assertEqual(by_pin["PB6"]["status"], "bus")
        self.assertEqual(by_pin["PB6"]["label"], "I2C1 SCL")
        self.assertEqual(by_pin["PA13"]["status"], "reserved")
        self.assertEqual(by_pin["PA15"]["label"], "")
        # port, then numeric index
        order = [r["pin"] for r in rows]
        self.assertLess(order.index("PA2"), order.index("PA10"))
        self.assertLess(order.index("PA15"), order.index("PB0"))

    def test_pinmap_json(self):
        data = build_pinmap_json(self.mcu, self.result)
        self.assertIn("generated_at", data)
        self.assertEqual(data["mcu"]["id"], "stm32f103c8")
        pa0 = next(p for p in data["pins"] if p["pin"] == "PA0")
        self.assertEqual(pa0["usage"], "W25Q64 CS")
        self.assertEqual(data["pin_usage"]["PA0"]["label"], "W25Q64 CS")
        self.assertEqual(len(data["allocations"]), len(self.result.allocations))
        self.assertEqual([c["sensor_id"] for c in data["conflicts"]],
                         [c.sensor_id for c in self.result.conflicts])
        self.assertEqual(data["buses"]["i2c"][0]["id"], "I2C1")
        self.assertEqual(data["warnings"], [])
        self.assertFalse(data["ok"])
        json.dumps(data)

    def test_wiring_csv(self):
        rows = _rows(build_wiring_csv(self.result))
        bme = [r for r in rows if r["sensor_name"] == "BME280"]
        self.assertEqual([(r["signal"], r["pin_id"]) for r in bme], [("SCL", "PB6"), ("SDA", "PB7")])
        self.assertEqual(bme[0]["bus_id"], "I2C1")
        servo = next(r for r in rows if r["sensor_name"] == "SG90 Servo")
        self.assertEqual(servo["bus_id"], "")
        # conflicted sensors have no rows
        self.assertTrue(self.result.conflicts)
        failed = {c.sensor_name for c in self.result.conflicts}
        self.assertFalse(failed & {r["sensor_name"] for r in rows})

    def test_bom_csv(self):
        rows = _rows(build_bom_csv(self.sensors + [gpio("led")]))
        led = next(r for r in rows if r["name"] == "LED")
        self.assertEqual(led["count"], "2")
        names = [r["name"] for r in rows]
        self.assertEqual(names, sorted(names))

    def test_hardware_json(self):
        data = build_hardware_json(self.mcu, self.result, self.sensors)
        self.assertEqual(data["mcu"]["id"], "stm32f103c8")
        self.assertEqual(len(data["sensors"]), len(self.sensors))
        self.assertEqual(data["allocation"]["ok"], self.result.ok)
        json.dumps(data)


class TestSplCode(unittest.TestCase):

    def setUp(self):
        self.mcu = make_f103()
        self.sensors = make_weather_station()
        self.result = allocate_pins(self.mcu, self.sensors, {}, make_constraints())

    def _code(self, mcu_id: str, sensors: list) -> str:
        mcu = get_mcu(builtin_mcus(), mcu_id)
        return build_spl_code(mcu, allocate_pins(mcu, sensors, {}, make_constraints()))

    def test_f1_header_clocks_and_gpio(self):
        code = build_spl_code(self.mcu, self.result)
        lines = code.split("\n")
        self.assertEqual(lines[0], "/* PinForge SPL Starter */")
        self.assertEqual(lines[1], '#include "stm32f10x.h"')
        self.assertIn("/* Speed preset: standard */", lines)
        self.assertIn("  RCC_APB2PeriphClockCmd(RCC_APB2Periph_GPIOA | RCC_APB2Periph_GPIOB, ENABLE);", lines)
        self.assertIn("  gpio.GPIO_Mode = GPIO_Mode_AF_PP;", lines)
        self.assertIn("  gpio.GPIO_Pin = GPIO_Pin_0 | GPIO_Pin_1 | GPIO_Pin_2 | GPIO_Pin_3 | GPIO_Pin_5"
                      " | GPIO_Pin_6 | GPIO_Pin_7 | GPIO_Pin_8 | GPIO_Pin_9 | GPIO_Pin_10;", lines)
        self.assertIn("  GPIO_Init(GPIOB, &gpio);", lines)

    def test_pin_map_comments_are_sorted(self):
        lines = build_spl_code(self.mcu, self.result).split("\n")
        start = lines.index("/* Pin Map */") + 1
        comments = lines[start:lines.index("", start)]
        self.assertEqual(comments, sorted(comments))
        self.assertIn("// PB6 - I2C1 SCL", comments)
        self.assertIn("// PA0 - W25Q64 CS", comments)
        self.assertEqual(len(comments), 12)

    def test_bus_inits_follow_speed_preset(self):
        code = build_spl_code(self.mcu, self.result)
        self.assertIn("void PinForge_InitI2C1(void) {", code)
        self.assertIn("  i2c.I2C_ClockSpeed = 100000;", code)
        self.assertIn("  spi.SPI_BaudRatePrescaler = SPI_BaudRatePrescaler_16;", code)
        self.assertIn("  usart.USART_BaudRate = 115200;", code)
        self.assertIn("  USART_Cmd(USART1, ENABLE);", code)
        self.assertIn("int PinForge_I2C_ReadBytes(", code)
        fast = build_spl_code(self.mcu, self.result, "fast")
        self.assertIn("  i2c.I2C_ClockSpeed = 400000;", fast)
        self.assertIn("  usart.USART_BaudRate = 230400;", fast)
        with self.assertRaises(ValueError):
            build_spl_code(self.mcu, self.result, "turbo")

    def test_sensor_templates(self):
        code = build_spl_code(self.mcu, self.result)
        self.assertIn("void PinForge_InitADC(void) {", code)
        self.assertIn("void PinForge_InitPWM(void) {", code)
        self.assertIn("// BME280 (I2C)\n// Bus: I2C1\n// Pins: SCL=PB6, SDA=PB7\n", code)
        self.assertIn("#define SENSOR_BME280_BME280_I2C_ADDR 0x00", code)
        self.assertIn("void PinForge_SG90_SERVO_SG90_Init(void) {", code)
        self.assertIn("int PinForge_NEO_6M_NEO6M_Read(void *buffer, int length) {", code)
        self.assertTrue(code.endswith("  PinForge_DS18B20_DS18B20_Init();\n}\n"))
        with_sensors = build_spl_code(self.mcu, self.result, sensors=self.sensors)
        self.assertIn("#define SENSOR_BME280_BME280_I2C_ADDR 0x76", with_sensors)

    def test_series_without_clock_call(self):
        code = self._code("stm32g071rb", [gpio("btn")])
        self.assertIn('#include "stm32g0xx.h"', code)
        self.assertIn("/* TODO: configure GPIO clocks for this MCU series. */", code)
        self.assertNotIn("PinForge_InitClocks", code)
        self.assertIn("  /* TODO: adjust GPIO init for this MCU series. */", code)

    def test_f4_gpio_mode(self):
        code = self._code("stm32f407vg", [gpio("btn")])
        self.assertIn("RCC_AHB1PeriphClockCmd(RCC_AHB1Periph_GPIOA, ENABLE);", code)
        self.assertIn("  gpio.GPIO_PuPd = GPIO_PuPd_NOPULL;", code)

    def test_empty_allocation(self):
        code = build_spl_code(self.mcu, allocate_pins(self.mcu, [], {}, make_constraints()))
        self.assertIn("  // No GPIO ports detected.", code)
        self.assertNotIn("Sensor Templates", code)
        self.assertNotIn("PinForge_InitI2C", code)
        self.assertNotIn("GPIO_Init(", code)

    def test_sanitize_ident(self):
        self.assertEqual(sanitize_ident(" NEO-6M_neo6m "), "NEO_6M_NEO6M")
        self.assertEqual(sanitize_ident("1wire"), "_1WIRE")
        self.assertEqual(sanitize_ident("--"), "SENSOR")


class TestAllocationSerialization(unittest.TestCase):

    def test_round_trip(self):
        result = allocate_pins(make_f103(), make_weather_station(), {}, make_constraints())
        data = json.loads(json.dumps(allocation_to_dict(result)))
        self.assertEqual(parse_allocation(data), result)

    def test_dict_shape(self):
        result = allocate_pins(make_f103(), [uart("a", "USART1"), uart("b", "USART1")],
                               {}, make_constraints())
        data = allocation_to_dict(result)
        self.assertFalse(data["ok"])
        self.assertEqual(data["conflicts"][0]["code"], "uart_exclusive")
        self.assertEqual(data["buses"]["uart"][0], {"id": "USART1", "tx": "PA9", "rx": "PA10", "sensor": "A"})
        self.assertEqual(data["pin_usage"]["PA0"], {"status": "available"})
        self.assertEqual(data["pin_usage"]["VDD"], {"status": "power", "label": "3.3V"})


if __name__ == "__main__":
    unittest.main()
