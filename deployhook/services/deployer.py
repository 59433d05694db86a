"""
Deploy orchestration for a single repository push.

Sequence for a resolved target:
1. git pull the pushed branch into the checkout
2. run database migrations (data-backed service only)
3. rebuild and restart the compose service (--no-deps)
4. wait, then probe the service health endpoint (advisory)

A failure in 1-3 restarts the service from its existing image (rollback).
"""

import logging
import shlex
import threading
import time
from typing import Callable, Dict, List, Mapping, Optional

import httpx

from deployhook.core.config import Settings
from deployhook.schemas.webhook import DeployOutcome, DeployTarget
from deployhook.services.commands import CommandRunner
from deployhook.services.resolver import UnknownRepository, resolve_target

logger = logging.getLogger(__name__)


class Deployer:
    """Runs the deploy sequence against the configured targets."""

    def __init__(
        self,
        targets: Mapping[str, DeployTarget],
        settings: Settings,
        runner: Optional[CommandRunner] = None,
        http_get: Callable[..., httpx.Response] = httpx.get,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.targets = targets
        self.settings = settings
        self.runner = runner or CommandRunner(timeout=settings.COMMAND_TIMEOUT_SECONDS)
        self.http_get = http_get
        self.sleep = sleep

        # One lock per compose service so overlapping pushes don't interleave
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _compose(self, *args: str) -> List[str]:
        return [self.settings.DOCKER_BINARY, "compose", *args]

    def _lock_for(self, service_name: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(service_name, threading.Lock())

    def deploy(self, repository_name: str, branch: str) -> DeployOutcome:
        """
        Deploy a repository branch.

        Never raises: every failure becomes a failed DeployOutcome.
        """
        logger.info(f"Deploying {repository_name} from {branch} branch...")

        try:
            target = resolve_target(repository_name, self.targets)
        except UnknownRepository as e:
            logger.error(f"Deployment failed: {e}")
            return DeployOutcome(success=False, message=f"Deployment failed: {e}")

        with self._lock_for(target.service_name):
            try:
                self._sync(target, branch)
                if target.service_name == self.settings.MIGRATION_SERVICE:
                    self._migrate(target)
                self._restart(target)
            except Exception as e:
                logger.error(
                    f"Deployment of {target.service_name} failed: {e}",
                    exc_info=True,
                    extra={"service": target.service_name},
                )
                self._rollback(target)
                return DeployOutcome(success=False, message=f"Deployment failed: {e}")

            self._health_check(target)

        logger.info(f"Successfully deployed {target.service_name}", extra={"service": target.service_name})
        return DeployOutcome(success=True, message=f"Deployed {target.service_name} successfully")

    def _sync(self, target: DeployTarget, branch: str) -> None:
        logger.info(f"Pulling latest code for {target.service_name}...")
        self.runner.run(
            [self.settings.GIT_BINARY, "pull", "origin", branch],
            cwd=target.repo_path,
        )

    def _migrate(self, target: DeployTarget) -> None:
        logger.info("Running database migrations...")
        self.runner.run(
            self._compose("run", "--rm", target.service_name, *shlex.split(self.settings.MIGRATION_COMMAND)),
            cwd=self.settings.DEPLOYMENT_DIR,
        )

    def _restart(self, target: DeployTarget) -> None:
        logger.info(f"Restarting {target.service_name} service...")
        self.runner.run(
            self._compose("up", "-d", "--no-deps", "--build", target.service_name),
            cwd=self.settings.DEPLOYMENT_DIR,
        )

    def _health_check(self, target: DeployTarget) -> None:
        """Probe the service once. Failures are logged, never raised."""
        logger.info("Waiting for service to be healthy...")
        self.sleep(self.settings.HEALTH_CHECK_DELAY_SECONDS)

        try:
            response = self.http_get(
                target.health_url,
                timeout=self.settings.HEALTH_CHECK_TIMEOUT_SECONDS,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(
                f"Health check for {target.service_name} failed ({e}), but service may still be running",
                extra={"service": target.service_name},
            )
            return

        if not response.is_success:
            logger.warning(
                f"Health check for {target.service_name} returned {response.status_code}, "
                "but service may still be running",
                extra={"service": target.service_name},
            )
            return

        logger.info(f"Health check for {target.service_name} passed")

    def _rollback(self, target: DeployTarget) -> None:
        """Restart the service from its current image without rebuilding."""
        logger.info(f"Attempting rollback of {target.service_name}...")
        try:
            self.runner.run(
                self._compose("up", "-d", "--no-deps", target.service_name),
                cwd=self.settings.DEPLOYMENT_DIR,
                quiet=True,
            )
        except Exception as e:
            logger.error(f"Rollback of {target.service_name} failed: {e}", extra={"service": target.service_name})
            return

        logger.info(f"Rolled back {target.service_name}")
