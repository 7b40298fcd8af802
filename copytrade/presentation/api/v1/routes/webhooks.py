"""Brokerage webhook ingress."""

import hmac
import logging

from fastapi import APIRouter, HTTPException, status
from pydantic import ValidationError

from copytrade.application.ingestion import TRADES_PLACED
from copytrade.presentation.api.dependencies import IngestWebhookTradesHandlerDep, SettingsDep
from copytrade.presentation.api.v1.schemas import (
    BrokerageWebhookPayload,
    ErrorResponse,
    WebhookResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


@router.post(
    "/brokerage",
    response_model=WebhookResponse,
    summary="Receive brokerage push events",
    description="""
    Receives push events of the brokerage aggregator.

    **Flow**:
    1. Validate payload (pydantic)
    2. Compare `webhookSecret` з налаштованим секретом
    3. TRADES_PLACED → leader trades queue; інші події тільки логуються

    **Returns**:
    - 200: Event acknowledged
    - 401: Invalid webhook secret
    - 422: Malformed payload
    - 500: Webhook secret not configured
    """,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid webhook secret"},
        500: {"model": ErrorResponse, "description": "Webhook secret not configured"},
    },
)
async def receive_brokerage_webhook(
    payload: BrokerageWebhookPayload,
    handler: IngestWebhookTradesHandlerDep,
    settings: SettingsDep,
) -> WebhookResponse:
    if not settings.webhook_secret:
        logger.error("api.webhook.secret_not_configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Webhook secret not configured",
        )

    if not hmac.compare_digest(
        payload.webhook_secret.encode(), settings.webhook_secret.encode()
    ):
        logger.warning("api.webhook.invalid_secret", extra={"user_ref": payload.user_id})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid webhook secret",
        )

    logger.info(
        "api.webhook.received",
        extra={
            "event_type": payload.event_type,
            "webhook_id": payload.webhook_id,
            "user_ref": payload.user_id,
        },
    )

    try:
        command = payload.to_command()
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.errors(include_url=False, include_context=False),
        ) from e

    summary = await handler.handle(command)

    if payload.event_type != TRADES_PLACED:
        message = "Event received and acknowledged"
    elif not command.trades:
        message = "No trades to process"
    else:
        message = "Trades processed successfully"

    return WebhookResponse(
        success=True,
        message=message,
        event_type=payload.event_type,
        result=summary.to_dict() if payload.event_type == TRADES_PLACED else None,
    )
