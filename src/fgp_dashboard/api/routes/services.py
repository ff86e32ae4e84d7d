"""Service listing, health detail and start/stop endpoints."""

from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Request

from fgp_dashboard.api.envelope import ApiResponse
from fgp_dashboard.registry.registry import ServiceRegistry

router = APIRouter(tags=["services"])


def get_registry(request: Request) -> ServiceRegistry:
    return request.app.state.registry


@router.get("/services")
async def list_services(
    registry: ServiceRegistry = Depends(get_registry),
) -> ApiResponse[List[Dict[str, Any]]]:
    records = await registry.list_services()
    return ApiResponse.success([r.to_dict() for r in records])


@router.get("/health/{service}")
async def service_health(
    service: str, registry: ServiceRegistry = Depends(get_registry)
) -> ApiResponse[Dict[str, Any]]:
    detail = await registry.get_service_health(service)
    return ApiResponse.success(detail.payload)


@router.post("/start/{service}")
async def start_service(
    service: str, registry: ServiceRegistry = Depends(get_registry)
) -> ApiResponse[Dict[str, str]]:
    outcome = await registry.start_service(service)
    return ApiResponse.success(outcome.to_dict())


@router.post("/stop/{service}")
async def stop_service(
    service: str, registry: ServiceRegistry = Depends(get_registry)
) -> ApiResponse[Dict[str, str]]:
    outcome = await registry.stop_service(service)
    return ApiResponse.success(outcome.to_dict())
