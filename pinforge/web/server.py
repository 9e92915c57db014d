"""
FastAPI web server — catalog browsing, pin allocation and report export.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pydantic import BaseModel, Field

from pinforge.allocator import allocate_pins, allocation_to_dict
from pinforge.catalog import (
    CatalogResult, catalog_to_dict, constraint_to_dict, get_mcu, load_catalog,
    mcu_to_dict, sensor_to_dict,
)
from pinforge.config import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_MCU_ID
from pinforge.project import ProjectError, parse_project, resolve_project, validate_project
from pinforge.codegen import SPEED_PRESETS, build_spl_code
from pinforge.reports import build_bom_csv, build_hardware_json, build_pinmap_csv, build_wiring_csv


log = logging.getLogger("pinforge.server")

# ── .env loader ────────────────────────────────────────────────────

ROOT = Path(__file__).resolve().parents[2]


def _load_env():
    for name in (".env", ".env.local"):
        p = ROOT / name
        if p.exists():
            for line in p.read_text(encoding="utf-8").splitlines():
                line = line.strip()
                if line and "=" in line and not line.startswith("#"):
                    k, v = line.split("=", 1)
                    k = k.strip()
                    v = v.strip().strip('"').strip("'")
                    if k and k not in os.environ:
                        os.environ[k] = v

_load_env()

# ── App ────────────────────────────────────────────────────────────

app = FastAPI(title="PinForge")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache(maxsize=1)
def get_catalog() -> CatalogResult:
    """Catalog shared by every request, loaded on first use."""
    catalog_dir = os.environ.get("PINFORGE_CATALOG_DIR")
    return load_catalog(Path(catalog_dir) if catalog_dir else None)


# ── Models ─────────────────────────────────────────────────────────

class ProjectRequest(BaseModel):
    version: int = 1
    series: str = "F1"
    mcu_id: str = DEFAULT_MCU_ID
    selected_sensors: list[str] = Field(default_factory=list)
    custom_sensors: list[dict[str, Any]] = Field(default_factory=list)
    custom_mcus: list[dict[str, Any]] = Field(default_factory=list)
    pin_locks: dict[str, dict[str, str]] = Field(default_factory=dict)
    pin_constraints: list[dict[str, Any]] | None = None


REPORT_KINDS = ("pinmap_csv", "wiring_csv", "bom_csv", "hardware_json", "spl_c")


def _run(req: ProjectRequest):
    """Parse, validate, resolve and allocate a project request."""
    try:
        project = parse_project(req.model_dump())
    except ProjectError as exc:
        raise HTTPException(400, str(exc))
    catalog = get_catalog()
    messages = validate_project(project, catalog)
    resolved = resolve_project(project, catalog)
    result = allocate_pins(resolved.mcu, resolved.sensors, resolved.pin_locks, resolved.constraints)
    return resolved, result, messages


# ── Routes ─────────────────────────────────────────────────────────

@app.get("/api/catalog")
def get_full_catalog():
    """Return the whole catalog, including load errors."""
    return catalog_to_dict(get_catalog())


@app.get("/api/mcus")
def list_mcus():
    return [mcu_to_dict(m) for m in get_catalog().mcus]


@app.get("/api/mcus/{mcu_id}")
def get_mcu_by_id(mcu_id: str):
    mcu = get_mcu(get_catalog(), mcu_id)
    if mcu is None:
        raise HTTPException(404, f"MCU '{mcu_id}' not found.")
    return mcu_to_dict(mcu)


@app.get("/api/sensors")
def list_sensors():
    return [sensor_to_dict(s) for s in get_catalog().sensors]


@app.get("/api/constraints")
def list_constraints():
    return [constraint_to_dict(c) for c in get_catalog().constraints]


@app.post("/api/allocate")
def allocate(req: ProjectRequest):
    """Allocate pins for a project; the body mirrors a saved project file."""
    resolved, result, messages = _run(req)
    log.info("Allocate %s: %d sensors, %d conflicts",
             resolved.mcu.id, len(resolved.sensors), len(result.conflicts))
    return {
        "mcu_id": resolved.mcu.id,
        "validation": messages,
        **allocation_to_dict(result),
    }


@app.post("/api/reports/{kind}")
def export_report(kind: str, req: ProjectRequest, speed: str = "standard"):
    """Allocate, then return one export file.

    ``speed`` picks the SPL speed preset and only applies to ``spl_c``.
    """
    if kind not in REPORT_KINDS:
        raise HTTPException(404, f"Unknown report '{kind}'. Expected one of: {', '.join(REPORT_KINDS)}")
    if kind == "spl_c" and speed not in SPEED_PRESETS:
        raise HTTPException(400, f"Unknown speed preset '{speed}'. Expected one of: {', '.join(SPEED_PRESETS)}")
    resolved, result, _ = _run(req)

    if kind == "spl_c":
        return Response(
            content=build_spl_code(resolved.mcu, result, speed, resolved.sensors),
            media_type="text/x-csrc",
            headers={"Content-Disposition": "attachment; filename=pinforge_init.c"},
        )

    if kind == "hardware_json":
        return build_hardware_json(resolved.mcu, result, resolved.sensors)

    if kind == "pinmap_csv":
        text = build_pinmap_csv(resolved.mcu, result)
    elif kind == "wiring_csv":
        text = build_wiring_csv(result)
    else:
        text = build_bom_csv(resolved.sensors)
    filename = kind.replace("_csv", ".csv")
    return Response(
        content=text,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


def main(host: str = DEFAULT_HOST, port: int = DEFAULT_PORT):
    import uvicorn
    uvicorn.run("pinforge.web.server:app", host=host, port=port, reload=False)


if __name__ == "__main__":
    main()
