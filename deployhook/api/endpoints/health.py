"""
Liveness endpoint for the webhook listener.
"""

from fastapi import APIRouter, status
from fastapi.responses import PlainTextResponse

router = APIRouter(tags=["Health"])


@router.get("/health", status_code=status.HTTP_200_OK, response_class=PlainTextResponse)
async def health_check() -> str:
    """
    Basic health check endpoint.

    Returns 200 OK if the listener is running. Does not check the deployed
    services themselves.
    """
    return "OK"
