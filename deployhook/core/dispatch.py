"""
Fire-and-forget execution of deploys.

Deploys take tens of seconds (pull, build, settle delay), so the webhook
handler hands them to a thread pool and answers GitHub immediately.
Results are only visible in the logs.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Optional, Set

from deployhook.schemas.webhook import DeployOutcome
from deployhook.services.deployer import Deployer

logger = logging.getLogger(__name__)


class DeployDispatcher:
    """Submits deploys to a background thread pool."""

    def __init__(self, deployer: Deployer, max_workers: int = 4):
        self.deployer = deployer
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="deploy")
        self._pending: Set[Future] = set()
        self._lock = threading.Lock()

    def submit(self, repository_name: str, branch: str) -> "Future[DeployOutcome]":
        """
        Start a deploy without waiting for it.

        Returns:
            Future resolving to the DeployOutcome
        """
        future = self._executor.submit(self.deployer.deploy, repository_name, branch)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(lambda f: self._on_done(repository_name, branch, f))
        return future

    def _on_done(self, repository_name: str, branch: str, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

        exc = future.exception()
        if exc is not None:
            # Deployer.deploy converts failures itself; this is a bug guard
            logger.error(f"Deploy of {repository_name}@{branch} crashed: {exc}", exc_info=exc)
            return

        outcome = future.result()
        log = logger.info if outcome.success else logger.error
        log(f"Deployment result for {repository_name}@{branch}: {outcome.model_dump()}")

    def drain(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for every submitted deploy to finish.

        Returns:
            bool: True if nothing is left running
        """
        with self._lock:
            pending = set(self._pending)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def shutdown(self, wait_for_deploys: bool = True) -> None:
        self._executor.shutdown(wait=wait_for_deploys)
