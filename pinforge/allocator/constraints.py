"""Constraint engine — scope constraints to an MCU and index them by pin."""

from __future__ import annotations

from dataclasses import dataclass, field

from pinforge.catalog.models import MCU, PinConstraint
from pinforge.config import ALLOCATOR_RULES

from .models import STATUS_RESERVED
from .pools import PinLedger


def constraint_applies(constraint: PinConstraint, mcu: MCU) -> bool:
    """True if the constraint's series / MCU-id scope includes this MCU."""
    if constraint.mcu_ids is not None and mcu.id not in constraint.mcu_ids:
        return False
    if constraint.series is not None and mcu.series not in constraint.series:
        return False
    return True


@dataclass
class ConstraintIndex:
    """Registration table: pin id -> constraints covering it, in input order."""

    by_pin: dict[str, list[PinConstraint]] = field(default_factory=dict)

    def register(self, pin_id: str, constraint: PinConstraint) -> None:
        self.by_pin.setdefault(pin_id, []).append(constraint)

    def hard_for(self, pin_id: str | None) -> PinConstraint | None:
        if not pin_id:
            return None
        return next(
            (c for c in self.by_pin.get(pin_id, []) if c.is_hard and c.enabled),
            None,
        )

    def soft_for(self, pin_id: str | None) -> list[PinConstraint]:
        if not pin_id:
            return []
        return [c for c in self.by_pin.get(pin_id, []) if not c.is_hard and c.enabled]


def apply_constraints(
    constraints: list[PinConstraint],
    mcu: MCU,
    ledger: PinLedger,
) -> ConstraintIndex:
    """Register every in-scope constraint and claim hard-constrained pins.

    Pins the MCU does not have are skipped: constraint catalogs are shared
    across series and not every pin exists on every part.  A hard pin that
    is already marked (power, reserved) keeps its existing status.
    """
    index = ConstraintIndex()
    pin_ids = set(mcu.pin_ids)

    for constraint in constraints:
        if not constraint.enabled or not constraint_applies(constraint, mcu):
            continue
        for pin_id in constraint.pins:
            if pin_id not in pin_ids:
                continue
            index.register(pin_id, constraint)
            if constraint.is_hard and not ledger.is_marked(pin_id):
                ledger.claim(pin_id, STATUS_RESERVED,
                             ALLOCATOR_RULES.constraint_label(constraint.label))

    return index
