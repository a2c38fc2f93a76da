"""Hub request endpoint. Authentication happens in front of this route."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Request
from fastapi.responses import JSONResponse

from server.services.hub_service import HubService, HubServiceError

router = APIRouter(tags=["hub"])


def get_hub_service(request: Request) -> HubService:
    return request.app.state.hub_service


@router.post("/hub-store")
async def hub_request(request: Request, body: Any = Body(...)) -> JSONResponse:
    """Dispatch a Write, CommitQuery or ObjectQuery request."""
    service = get_hub_service(request)
    try:
        response = await service.service_request(body)
    except HubServiceError as e:
        return JSONResponse(status_code=e.status_code, content=e.response.to_json())
    return JSONResponse(status_code=200, content=response.to_json())
