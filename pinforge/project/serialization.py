"""Project serialization — convert a ProjectFile to a JSON-safe dict."""

from __future__ import annotations

from pinforge.catalog.serialization import constraint_to_dict, mcu_to_dict, sensor_to_dict

from .models import ProjectFile


def project_to_dict(project: ProjectFile) -> dict:
    """Convert a ProjectFile to a JSON-serializable dict."""
    return {
        "version": project.version,
        "series": project.series,
        "mcu_id": project.mcu_id,
        "selected_sensors": list(project.selected_sensors),
        "custom_sensors": [sensor_to_dict(s) for s in project.custom_sensors],
        "custom_mcus": [mcu_to_dict(m) for m in project.custom_mcus],
        "pin_locks": {sid: dict(locks) for sid, locks in project.pin_locks.items()},
        **({"pin_constraints": [constraint_to_dict(c) for c in project.pin_constraints]}
           if project.pin_constraints is not None else {}),
    }
