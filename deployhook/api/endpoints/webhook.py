"""
GitHub webhook handler for push-to-deploy.

Flow for POST /:
1. Decode the body (JSON or form-encoded) into payload + signed bytes
2. Verify X-Hub-Signature-256 against the signed bytes
3. push to a deploy branch -> start deploy in the background, answer at once
4. ping -> pong
5. anything else -> acknowledged and ignored

Deploy results never reach GitHub; they are only logged.
"""

import logging
from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from deployhook.core.config import Settings
from deployhook.core.deps import get_dispatcher, get_settings
from deployhook.core.dispatch import DeployDispatcher
from deployhook.core.security import verify_signature
from deployhook.schemas.webhook import (
    DeploymentStartedResponse,
    EventIgnoredResponse,
    PongResponse,
    WebhookEvent,
)
from deployhook.services.decoder import DecodeError, decode_body

router = APIRouter(tags=["GitHub Webhook"])
logger = logging.getLogger(__name__)


@router.post("/")
async def github_webhook(
    request: Request,
    settings: Settings = Depends(get_settings),
    dispatcher: DeployDispatcher = Depends(get_dispatcher),
    signature: str = Header("", alias="x-hub-signature-256"),
    event_type: str = Header("", alias="x-github-event"),
    delivery_id: str = Header("", alias="x-github-delivery"),
    content_type: str = Header("", alias="content-type"),
):
    """
    Handle GitHub webhook deliveries.

    Security: Validates the HMAC-SHA256 signature using GITHUB_WEBHOOK_SECRET.
    An empty secret rejects every delivery.
    """
    body = await request.body()

    try:
        payload, canonical_body = decode_body(content_type, body)
    except DecodeError as e:
        logger.error(f"Invalid webhook payload (delivery: {delivery_id}): {e}", extra={"delivery_id": delivery_id})
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid payload")

    if not verify_signature(canonical_body, signature, settings.GITHUB_WEBHOOK_SECRET):
        if not settings.GITHUB_WEBHOOK_SECRET:
            logger.error("Invalid signature: GITHUB_WEBHOOK_SECRET is not configured")
        else:
            logger.error(f"Invalid signature (delivery: {delivery_id})", extra={"delivery_id": delivery_id})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    event = WebhookEvent(
        event_type=event_type,
        delivery_id=delivery_id,
        raw_body=canonical_body,
        signature_header=signature,
        payload=payload,
    )
    logger.info(
        f"Received {event.event_type} event (delivery: {event.delivery_id})",
        extra={"delivery_id": event.delivery_id},
    )

    if event.event_type == "push" and event.ref in settings.deploy_refs:
        repository = event.repository_name
        if repository is None:
            logger.error(f"Push event without repository name (delivery: {event.delivery_id})")
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing repository name")

        dispatcher.submit(repository, event.branch)
        return DeploymentStartedResponse(repository=repository, branch=event.branch)

    if event.event_type == "ping":
        return PongResponse()

    logger.info(f"Ignoring {event.event_type} event for ref {event.ref}")
    return EventIgnoredResponse(event=event.event_type, ref=event.ref)
