"""Pin pools — the call-local "used" set and the three free-pin pools.

Handles:
  - Pin ordering ("PA2" < "PA10" < "PB0"; non-port ids by raw string)
  - Initial power / reserved pin marking
  - Claiming a pin (removes it from every pool at once)
  - Lowest-free-pin selection per pool
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import cmp_to_key

from pinforge.catalog.models import MCU
from pinforge.config import ALLOCATOR_RULES

from .models import PinUsage, STATUS_POWER, STATUS_RESERVED


_PIN_ID_RE = re.compile(r"^P([A-Z])(\d+)$")

GPIO = "gpio"
ANALOG = "analog"
PWM = "pwm"


def _parse_pin_id(pin_id: str) -> tuple[str, int] | None:
    m = _PIN_ID_RE.match(pin_id)
    if m is None:
        return None
    return (m.group(1), int(m.group(2)))


def compare_pin_ids(left: str, right: str) -> int:
    """Order by port letter, then numeric index.

    If either id is not of the ``P<port><index>`` form both are compared
    as raw strings.
    """
    if left == right:
        return 0
    pl = _parse_pin_id(left)
    pr = _parse_pin_id(right)
    if pl is None or pr is None:
        return -1 if left < right else 1
    if pl[0] != pr[0]:
        return -1 if pl[0] < pr[0] else 1
    return pl[1] - pr[1]


pin_sort_key = cmp_to_key(compare_pin_ids)


@dataclass
class PinLedger:
    """Mutable allocation state owned by a single allocate_pins() call."""

    used: set[str] = field(default_factory=set)
    usage: dict[str, PinUsage] = field(default_factory=dict)
    # pool name -> free pin ids
    pools: dict[str, set[str]] = field(default_factory=dict)

    @classmethod
    def for_mcu(cls, mcu: MCU) -> PinLedger:
        """Mark power and reserved pins, then build the GPIO/analog/PWM pools."""
        ledger = cls()
        reserved_ids = set(mcu.reserved_pins)

        for pin in mcu.pins:
            if pin.power:
                ledger.mark(pin.id, STATUS_POWER, pin.notes or ALLOCATOR_RULES.power_label)
            elif pin.reserved or pin.id in reserved_ids:
                ledger.mark(pin.id, STATUS_RESERVED, pin.notes or ALLOCATOR_RULES.reserved_label)

        ledger.pools = {
            GPIO: {
                p.id for p in mcu.pins
                if p.port != ALLOCATOR_RULES.system_port and not p.reserved and not p.power
            },
            ANALOG: set(mcu.analog_pins),
            PWM: set(mcu.pwm_pins),
        }
        for pool in ledger.pools.values():
            pool -= ledger.used
        return ledger

    def is_free(self, pin_id: str) -> bool:
        return pin_id not in self.used

    def is_marked(self, pin_id: str) -> bool:
        return pin_id in self.usage

    def mark(self, pin_id: str, status: str, label: str) -> None:
        self.used.add(pin_id)
        self.usage[pin_id] = PinUsage(status=status, label=label)

    def claim(self, pin_id: str, status: str, label: str) -> None:
        """Mark a pin used and drop it from every pool."""
        self.mark(pin_id, status, label)
        for pool in self.pools.values():
            pool.discard(pin_id)

    def in_pool(self, pool: str, pin_id: str) -> bool:
        return pin_id in self.pools.get(pool, set())

    def lowest_free(self, pool: str) -> str | None:
        """Lowest-ordered free pin of a pool, or None when it is drained."""
        candidates = [pid for pid in self.pools.get(pool, set()) if self.is_free(pid)]
        if not candidates:
            return None
        # sorted() first so the result never depends on set iteration order
        return min(sorted(candidates), key=pin_sort_key)
