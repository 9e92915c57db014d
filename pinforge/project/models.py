"""Project file dataclasses — what a saved PinForge project contains."""

from __future__ import annotations

from dataclasses import dataclass, field

from pinforge.allocator.models import PinLockMap
from pinforge.catalog.models import MCU, PinConstraint, Sensor


PROJECT_VERSION = 1


@dataclass
class ProjectFile:
    mcu_id: str
    series: str = "F1"
    selected_sensors: list[str] = field(default_factory=list)   # sensor ids, allocation order
    custom_sensors: list[Sensor] = field(default_factory=list)
    custom_mcus: list[MCU] = field(default_factory=list)
    pin_locks: PinLockMap = field(default_factory=dict)
    pin_constraints: list[PinConstraint] | None = None          # None -> default constraints
    version: int = PROJECT_VERSION


@dataclass
class ResolvedProject:
    """A project with every id looked up — the allocator's four inputs."""
    mcu: MCU
    sensors: list[Sensor]
    pin_locks: PinLockMap
    constraints: list[PinConstraint]


class ProjectError(Exception):
    """Raised when a project document is structurally unusable."""

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid project ({field}): {reason}")
