"""MCU / sensor / constraint catalog — models, built-ins, loading, serialization."""

from .models import (
    INTERFACES, PinFunction, Pin, BusDefinition, MCU,
    SensorBase, I2CSensor, SPISensor, UARTSensor, ADCSensor, PWMSensor,
    GPIOSensor, OneWireSensor, Sensor, SENSOR_TYPES,
    PinConstraint, ValidationError, CatalogResult,
)
from .builtin import builtin_mcus, builtin_sensors, default_constraints
from .loader import (
    load_catalog, load_document, builtin_catalog,
    get_mcu, get_sensor, default_mcu_for_series,
)
from .parsing import parse_mcu, parse_sensor, parse_constraint
from .serialization import catalog_to_dict, mcu_to_dict, sensor_to_dict, constraint_to_dict

__all__ = [
    # Models
    "INTERFACES", "PinFunction", "Pin", "BusDefinition", "MCU",
    "SensorBase", "I2CSensor", "SPISensor", "UARTSensor", "ADCSensor", "PWMSensor",
    "GPIOSensor", "OneWireSensor", "Sensor", "SENSOR_TYPES",
    "PinConstraint", "ValidationError", "CatalogResult",
    # Built-ins
    "builtin_mcus", "builtin_sensors", "default_constraints",
    # Loader
    "load_catalog", "load_document", "builtin_catalog",
    "get_mcu", "get_sensor", "default_mcu_for_series",
    # Parsing
    "parse_mcu", "parse_sensor", "parse_constraint",
    # Serialization
    "catalog_to_dict", "mcu_to_dict", "sensor_to_dict", "constraint_to_dict",
]
