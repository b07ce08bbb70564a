"""Telemetry ingest routes used by the state producer."""

from datetime import datetime
from typing import Any

import structlog
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from shared.schemas import HardwareConfiguration, RobotMetrics, RobotState, SystemFault

logger = structlog.get_logger()

router = APIRouter()


class PublishResponse(BaseModel):
    """Response for a publish."""

    status: str = "published"
    sequence: int


class StoreStatus(BaseModel):
    """Publish and fault tracking status."""

    published: bool
    sequence: int | None
    published_at: datetime | None
    active_faults: int
    historical_faults: int


@router.put("/robot-state", response_model=PublishResponse)
async def publish_robot_state(state: RobotState) -> PublishResponse:
    """Publish a new robot state snapshot."""
    from server.api.main import get_state_store

    snapshot = get_state_store().publish_state(state)
    return PublishResponse(sequence=snapshot.sequence)


@router.put("/metrics", response_model=PublishResponse)
async def publish_metrics(metrics: RobotMetrics) -> PublishResponse:
    """Publish new robot metrics."""
    from server.api.main import get_state_store

    snapshot = get_state_store().publish_metrics(metrics)
    return PublishResponse(sequence=snapshot.sequence)


@router.put("/hardware-configuration", response_model=PublishResponse)
async def publish_hardware_configuration(config: HardwareConfiguration) -> PublishResponse:
    """Publish a new hardware configuration."""
    from server.api.main import get_state_store

    snapshot = get_state_store().publish_hardware_configuration(config)
    logger.info("hardware_configuration_published", links=len(config.skeleton.links))
    return PublishResponse(sequence=snapshot.sequence)


@router.post("/faults", status_code=201, response_model=PublishResponse)
async def report_fault(fault: SystemFault) -> PublishResponse:
    """Report an active fault."""
    from server.api.main import get_state_store

    snapshot = get_state_store().report_fault(fault)
    return PublishResponse(sequence=snapshot.sequence)


@router.delete("/faults/{uid}")
async def clear_fault(uid: int, cleared_at: datetime | None = None) -> dict[str, Any]:
    """Mark an active fault cleared."""
    from server.api.main import get_state_store

    try:
        cleared = get_state_store().clear_fault(uid, cleared_at)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    if not cleared:
        raise HTTPException(status_code=404, detail=f"Active fault {uid} not found")

    return {"status": "cleared", "uid": uid}


@router.post("/refresh", response_model=PublishResponse)
async def refresh() -> PublishResponse:
    """Republish current data, pruning expired historical faults."""
    from server.api.main import get_state_store

    snapshot = get_state_store().refresh()
    return PublishResponse(status="refreshed", sequence=snapshot.sequence)


@router.get("/status", response_model=StoreStatus)
async def get_status() -> StoreStatus:
    """Get publish and fault tracking status."""
    from server.api.main import get_state_store

    store = get_state_store()
    snapshot = store.snapshot() if store.has_snapshot else None

    return StoreStatus(
        published=snapshot is not None,
        sequence=snapshot.sequence if snapshot else None,
        published_at=snapshot.published_at if snapshot else None,
        active_faults=store.faults.active_count,
        historical_faults=store.faults.historical_count,
    )
