from pydantic_settings import BaseSettings
from typing import Dict, List, Mapping, Union
from types import MappingProxyType
from pydantic import field_validator
import json

from deployhook.schemas.webhook import DeployTarget


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    PROJECT_NAME: str = "deployhook"

    # Listener Settings
    HOST: str = "0.0.0.0"
    PORT: int = 9000

    # Shared secret configured on the GitHub webhook. Empty rejects everything.
    GITHUB_WEBHOOK_SECRET: str = ""

    # Backend repository
    BACKEND_REPO_NAME: str = "Backend"
    BACKEND_SERVICE: str = "api"
    BACKEND_PATH: str = ""
    BACKEND_HEALTH_URL: str = "http://api:4000/health"

    # Frontend repository
    FRONTEND_REPO_NAME: str = "Frontend"
    FRONTEND_SERVICE: str = "frontend"
    FRONTEND_PATH: str = ""
    FRONTEND_HEALTH_URL: str = "http://frontend:3000"

    # Docker Compose Settings
    DEPLOYMENT_DIR: str = "/opt/deployment"
    DOCKER_BINARY: str = "/usr/bin/docker"
    GIT_BINARY: str = "git"

    # Migrations only run for the data-backed service
    MIGRATION_SERVICE: str = "api"
    MIGRATION_COMMAND: str = "bunx prisma migrate deploy"

    # Branches that trigger a deploy - can be set as JSON string in .env
    DEPLOY_BRANCHES: Union[List[str], str] = ["main", "master"]

    # Timing
    HEALTH_CHECK_DELAY_SECONDS: float = 10.0
    HEALTH_CHECK_TIMEOUT_SECONDS: float = 10.0
    COMMAND_TIMEOUT_SECONDS: float = 600.0
    DEPLOY_WORKERS: int = 4

    # Logging
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = True

    @field_validator("DEPLOY_BRANCHES", mode="before")
    @classmethod
    def parse_deploy_branches(cls, v: Union[List[str], str]) -> List[str]:
        """Parse deploy branches from JSON string or list"""
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                # If not valid JSON, split by comma
                return [branch.strip() for branch in v.split(",") if branch.strip()]
        return v

    @property
    def backend_path(self) -> str:
        return self.BACKEND_PATH or f"/opt/{self.BACKEND_REPO_NAME}"

    @property
    def frontend_path(self) -> str:
        return self.FRONTEND_PATH or f"/opt/{self.FRONTEND_REPO_NAME}"

    @property
    def deploy_refs(self) -> List[str]:
        return [f"refs/heads/{branch}" for branch in self.DEPLOY_BRANCHES]

    class Config:
        env_file = ".env"
        case_sensitive = True


def build_targets(settings: Settings) -> Mapping[str, DeployTarget]:
    """
    Build the read-only repository -> deploy target table.

    Raises:
        ValueError: If two repository names only differ by case
    """
    targets = [
        DeployTarget(
            repository_name=settings.BACKEND_REPO_NAME,
            service_name=settings.BACKEND_SERVICE,
            repo_path=settings.backend_path,
            health_url=settings.BACKEND_HEALTH_URL,
        ),
        DeployTarget(
            repository_name=settings.FRONTEND_REPO_NAME,
            service_name=settings.FRONTEND_SERVICE,
            repo_path=settings.frontend_path,
            health_url=settings.FRONTEND_HEALTH_URL,
        ),
    ]

    table: Dict[str, DeployTarget] = {}
    folded: Dict[str, str] = {}
    for target in targets:
        key = target.repository_name.casefold()
        if key in folded:
            raise ValueError(
                f"Repository names {folded[key]!r} and {target.repository_name!r} "
                "collide case-insensitively"
            )
        folded[key] = target.repository_name
        table[target.repository_name] = target

    return MappingProxyType(table)


settings = Settings()
