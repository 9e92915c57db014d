"""Allocator — assigns MCU pins and buses to sensors.

Submodules:
  models        Output dataclasses and reason codes.
  pools         Call-local used-pin set and GPIO/analog/PWM pools.
  constraints   Hard/soft constraint scoping and per-pin index.
  engine        Main allocation algorithm (greedy, input order).
  analysis      Soft-constraint and I2C address-collision warnings.
  serialization JSON conversion (allocation_to_dict, parse_allocation).
"""

from .models import (
    PinLockMap, PinUsage, SensorAllocation, Conflict, AllocationWarning,
    I2CBus, SPIBus, UARTBus, BusUsage, AllocationResult,
)
from .engine import allocate_pins
from .constraints import ConstraintIndex, apply_constraints, constraint_applies
from .pools import compare_pin_ids, pin_sort_key
from .serialization import allocation_to_dict, parse_allocation

__all__ = [
    # Models
    "PinLockMap", "PinUsage", "SensorAllocation", "Conflict", "AllocationWarning",
    "I2CBus", "SPIBus", "UARTBus", "BusUsage", "AllocationResult",
    # Engine
    "allocate_pins",
    # Constraints / pools
    "ConstraintIndex", "apply_constraints", "constraint_applies",
    "compare_pin_ids", "pin_sort_key",
    # Serialization
    "allocation_to_dict", "parse_allocation",
]
