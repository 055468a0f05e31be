"""FastAPI router for the webhook management API."""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from bountyhook.models import WebhookDelivery
from bountyhook.service import RelayService

from .schemas import (
    HealthResponse,
    PollResponse,
    WebhookCreateRequest,
    WebhookResponse,
    WebhookUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# Service instance (set by app lifespan)
_service: RelayService | None = None


def set_service(service: RelayService | None) -> None:
    """Set the global service instance."""
    global _service
    _service = service


async def get_service() -> RelayService:
    """Dependency to get the RelayService instance."""
    if _service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service not initialized",
        )
    return _service


ServiceDep = Annotated[RelayService, Depends(get_service)]


@router.get("/health", response_model=HealthResponse, tags=["system"])
async def health_check() -> HealthResponse:
    """Report registered webhooks, tracked bounties and log size."""
    if _service is None:
        return HealthResponse(status="unavailable")
    return HealthResponse(**_service.health())


@router.get("/webhooks", response_model=list[WebhookResponse], tags=["webhooks"])
async def list_webhooks(service: ServiceDep) -> list[WebhookResponse]:
    """List all registered webhooks."""
    return [WebhookResponse.from_endpoint(e) for e in service.registry.list_webhooks()]


@router.post(
    "/webhooks",
    response_model=WebhookResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["webhooks"],
)
async def create_webhook(
    request: WebhookCreateRequest,
    service: ServiceDep,
) -> WebhookResponse:
    """Register a webhook.

    New webhooks are active immediately and receive events from the
    next poll cycle on.

    Raises:
        ValidationError: If the URL or an event type is invalid (400).
    """
    endpoint = service.registry.create(
        url=request.url,
        events=request.events,
        secret=request.secret,
    )
    return WebhookResponse.from_endpoint(endpoint)


@router.get("/webhooks/{webhook_id}", response_model=WebhookResponse, tags=["webhooks"])
async def get_webhook(webhook_id: str, service: ServiceDep) -> WebhookResponse:
    """Get a webhook by ID."""
    return WebhookResponse.from_endpoint(service.registry.get(webhook_id))


@router.patch("/webhooks/{webhook_id}", response_model=WebhookResponse, tags=["webhooks"])
async def update_webhook(
    webhook_id: str,
    request: WebhookUpdateRequest,
    service: ServiceDep,
) -> WebhookResponse:
    """Update url, events, active flag or secret of a webhook."""
    changes = request.model_dump(exclude_unset=True)
    endpoint = service.registry.update(webhook_id, **changes)
    logger.info("Updated webhook %s (%s)", webhook_id, ", ".join(sorted(changes)) or "no changes")
    return WebhookResponse.from_endpoint(endpoint)


@router.delete(
    "/webhooks/{webhook_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    tags=["webhooks"],
)
async def delete_webhook(webhook_id: str, service: ServiceDep) -> Response:
    """Delete a webhook."""
    service.registry.delete(webhook_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/deliveries", response_model=list[WebhookDelivery], tags=["deliveries"])
async def list_deliveries(
    service: ServiceDep,
    limit: Annotated[int, Query(ge=1, le=1000)] = 50,
) -> list[WebhookDelivery]:
    """Most recent delivery log entries, oldest first."""
    return service.state.recent_deliveries(limit)


@router.post("/poll", response_model=PollResponse, tags=["system"])
async def trigger_poll(service: ServiceDep) -> PollResponse:
    """Run a poll cycle now.

    Waits for a cycle already in progress to finish, then runs a new one.
    """
    result = await service.trigger_poll()
    return PollResponse(**asdict(result))
