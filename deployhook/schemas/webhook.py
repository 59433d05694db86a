"""
Pydantic schemas for webhook deliveries and deploy results.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, Optional


class DeployTarget(BaseModel):
    """A repository this service knows how to deploy"""
    model_config = ConfigDict(frozen=True)

    repository_name: str
    service_name: str
    repo_path: str
    health_url: str


class WebhookEvent(BaseModel):
    """
    A single verified GitHub delivery.

    raw_body is the canonical body: the exact bytes the sender signed,
    which for form-encoded deliveries is the `payload` field, not the
    outer form body.
    """
    event_type: str
    delivery_id: str
    raw_body: bytes
    signature_header: str
    payload: Dict[str, Any] = Field(default_factory=dict)

    @property
    def ref(self) -> Optional[str]:
        ref = self.payload.get("ref")
        return ref if isinstance(ref, str) else None

    @property
    def repository_name(self) -> Optional[str]:
        repository = self.payload.get("repository")
        if not isinstance(repository, dict):
            return None
        name = repository.get("name")
        return name if isinstance(name, str) and name else None

    @property
    def branch(self) -> Optional[str]:
        if self.ref is None:
            return None
        return self.ref.split("/")[-1]


class DeployOutcome(BaseModel):
    """Result of one deploy run (logged, never persisted)"""
    success: bool
    message: str


class DeploymentStartedResponse(BaseModel):
    message: str = "Deployment started"
    repository: str
    branch: str


class PongResponse(BaseModel):
    message: str = "pong"


class EventIgnoredResponse(BaseModel):
    message: str = "Event ignored"
    event: str
    ref: Optional[str] = None
