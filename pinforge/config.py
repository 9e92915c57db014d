"""Shared constants for the pin allocator and its surrounding tools.

The allocator, the catalog loader and the report builders all read their
labels and limits from ``ALLOCATOR_RULES`` so the text that ends up in
``pin_usage`` and in exported files stays consistent.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class AllocatorRules:
    """Labels and limits used while allocating pins."""

    lock_suffix: str = " (Locked)"
    """Appended to a pin-usage label when the user pinned the signal."""

    constraint_prefix: str = "Constraint: "
    """Prefix of the label given to pins claimed by a hard constraint."""

    power_label: str = "Power"
    """Fallback label for power pins without notes."""

    reserved_label: str = "Reserved"
    """Fallback label for reserved pins without notes."""

    system_port: str = "SYS"
    """Port name of non-GPIO system pins (supply, reset, boot)."""

    series: tuple[str, ...] = ("F1", "F4", "G0", "H7")
    """MCU series the catalog knows about."""

    schema_version: int = 1
    """Version written to, and accepted from, catalog JSON documents."""

    max_i2c_address: int = 0x7F
    """Largest valid 7-bit I2C device address."""

    def locked(self, label: str) -> str:
        return f"{label}{self.lock_suffix}"

    def constraint_label(self, label: str) -> str:
        return f"{self.constraint_prefix}{label}"


# Module-level singleton, importable everywhere.
ALLOCATOR_RULES = AllocatorRules()


ROOT = Path(__file__).resolve().parent.parent

# Extra catalog documents (*.json) merged over the built-in catalog.
CATALOG_DIR = Path(os.environ.get("PINFORGE_CATALOG_DIR", ROOT / "catalog"))

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000
DEFAULT_MCU_ID = "stm32f103c8"
