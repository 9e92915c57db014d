"""Tests for project files — parsing, validation, resolution, serialization."""

from __future__ import annotations

import unittest

from pinforge.allocator import allocate_pins
from pinforge.catalog import builtin_catalog
from pinforge.project import (
    ProjectError, ProjectFile, parse_project, project_to_dict,
    prune_project, resolve_project, validate_project,
)


def _doc(**overrides) -> dict:
    doc = {
        "version": 1,
        "series": "F1",
        "mcu_id": "stm32f103c8",
        "selected_sensors": ["bme280", "ds18b20"],
        "pin_locks": {"ds18b20": {"DQ": "PB5"}},
    }
    doc.update(overrides)
    return doc


class TestParseProject(unittest.TestCase):

    def test_snake_case(self):
        p = parse_project(_doc())
        self.assertEqual(p.mcu_id, "stm32f103c8")
        self.assertEqual(p.selected_sensors, ["bme280", "ds18b20"])
        self.assertEqual(p.pin_locks, {"ds18b20": {"DQ": "PB5"}})
        self.assertIsNone(p.pin_constraints)

    def test_camel_case(self):
        p = parse_project({
            "mcuId": "stm32f407vg", "series": "f4",
            "selectedSensors": ["gps"],
            "customSensors": [{"id": "gps", "name": "GPS", "interface": "UART"}],
            "pinLocks": {"gps": {"tx": "PA9", "rx": ""}},
            "pinConstraints": [{"id": "led", "pins": ["PD12"], "level": "soft"}],
        })
        self.assertEqual(p.series, "F4")
        self.assertEqual(p.custom_sensors[0].interface, "UART")
        self.assertEqual(p.pin_locks, {"gps": {"TX": "PA9"}})
        self.assertEqual([c.id for c in p.pin_constraints], ["led"])

    def test_empty_constraint_list_means_defaults(self):
        self.assertIsNone(parse_project(_doc(pin_constraints=[])).pin_constraints)

    def test_structural_errors(self):
        bad = [
            [],
            _doc(version=2),
            _doc(mcu_id=""),
            _doc(selected_sensors="bme280"),
            _doc(pin_locks=["bme280"]),
            _doc(custom_sensors=[{"name": "X", "interface": "CAN"}]),
        ]
        for doc in bad:
            with self.assertRaises(ProjectError):
                parse_project(doc)

    def test_error_names_field(self):
        with self.assertRaises(ProjectError) as ctx:
            parse_project(_doc(version=3))
        self.assertEqual(ctx.exception.field, "version")

    def test_round_trip(self):
        p = parse_project(_doc(pin_constraints=[{"id": "led", "pins": ["PC13"], "level": "soft"}]))
        self.assertEqual(parse_project(project_to_dict(p)), p)


class TestValidateProject(unittest.TestCase):

    def setUp(self):
        self.catalog = builtin_catalog()

    def test_valid_project(self):
        self.assertEqual(validate_project(parse_project(_doc()), self.catalog), [])

    def test_reports_problems(self):
        p = parse_project(_doc(
            series="X1",
            selected_sensors=["bme280", "nope", "bme280"],
            pin_locks={
                "bme280": {"MOSI": "PB6", "SCL": "PZ9"},
                "button": {"GPIO": "PA0"},
            },
        ))
        errors = validate_project(p, self.catalog)
        self.assertIn("Unknown series 'X1'", errors)
        self.assertIn("Unknown sensor 'nope'", errors)
        self.assertIn("Sensor 'bme280' selected more than once", errors)
        self.assertIn("Pin locks for unselected sensor 'button'", errors)
        self.assertIn("Sensor 'bme280': lock for unknown signal 'MOSI'", errors)
        self.assertTrue(any("PZ9" in e for e in errors))

    def test_unknown_mcu(self):
        errors = validate_project(parse_project(_doc(mcu_id="stm32l4")), self.catalog)
        self.assertEqual(errors, ["Unknown MCU 'stm32l4'"])

    def test_gpio_lock_alias(self):
        p = parse_project(_doc(pin_locks={"ds18b20": {"GPIO": "PB5"}}))
        self.assertEqual(validate_project(p, self.catalog), [])


class TestResolveProject(unittest.TestCase):

    def setUp(self):
        self.catalog = builtin_catalog()

    def test_resolve(self):
        r = resolve_project(parse_project(_doc()), self.catalog)
        self.assertEqual(r.mcu.id, "stm32f103c8")
        self.assertEqual([s.id for s in r.sensors], ["bme280", "ds18b20"])
        self.assertEqual([c.id for c in r.constraints], ["swd", "boot", "reset", "lse"])

        result = allocate_pins(r.mcu, r.sensors, r.pin_locks, r.constraints)
        self.assertEqual(result.allocation_for("ds18b20").assigned_pins, {"DQ": "PB5"})

    def test_unknown_mcu_falls_back_to_series(self):
        r = resolve_project(parse_project(_doc(mcu_id="stm32f411", series="F4")), self.catalog)
        self.assertEqual(r.mcu.id, "stm32f407vg")

    def test_custom_items_override_catalog(self):
        p = parse_project(_doc(
            selected_sensors=["bme280"],
            custom_sensors=[{"id": "bme280", "name": "My BME", "interface": "I2C"}],
            pin_constraints=[{"id": "mine", "pins": ["PB6"], "level": "hard"}],
        ))
        r = resolve_project(p, self.catalog)
        self.assertEqual(r.sensors[0].name, "My BME")
        self.assertEqual([c.id for c in r.constraints], ["mine"])

    def test_prune(self):
        p = ProjectFile(
            mcu_id="stm32f103c8",
            selected_sensors=["bme280", "nope", "bme280", "button"],
            pin_locks={"nope": {"GPIO": "PA0"}, "button": {"GPIO": "PA1"}},
        )
        pruned = prune_project(p, self.catalog)
        self.assertEqual(pruned.selected_sensors, ["bme280", "button"])
        self.assertEqual(pruned.pin_locks, {"button": {"GPIO": "PA1"}})
        # original untouched
        self.assertEqual(len(p.selected_sensors), 4)


if __name__ == "__main__":
    unittest.main()
