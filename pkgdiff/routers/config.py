"""Configuration API endpoints"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from pkgdiff.models.registry import LimitsResponse, LimitsUpdateRequest
from pkgdiff.services.config_manager import ConfigManager
from pkgdiff.services.package_diff import reset_package_diff_service

router = APIRouter()


@router.get("/limits", response_model=LimitsResponse)
async def get_limits() -> LimitsResponse:
    """Get current extraction limits"""
    config = ConfigManager.get_instance().get_config()
    return LimitsResponse(**config["limits"])


@router.put("/limits", response_model=LimitsResponse)
async def update_limits(request: LimitsUpdateRequest) -> LimitsResponse:
    """Update extraction limits"""
    config_manager = ConfigManager.get_instance()
    current_config = config_manager.get_config()

    # Update only provided fields
    updates = request.model_dump(exclude_none=True)
    if any(value <= 0 for value in updates.values()):
        raise HTTPException(status_code=400, detail="Limits must be positive integers")

    limits = current_config["limits"]
    limits.update(updates)

    try:
        config_manager.save_config({"limits": limits})
    except RuntimeError as e:
        raise HTTPException(status_code=500, detail=str(e))

    # Next request builds a service with the new caps
    reset_package_diff_service()
    return LimitsResponse(**limits)
