"""
Pytest configuration and fixtures for testing.

This file provides reusable test fixtures for:
- Settings with a known webhook secret and no settle delay
- A recording command runner (no git / docker is ever executed)
- A fake health probe
- FastAPI test client wired to the fakes through dependency overrides
"""

import threading

import httpx
import pytest
from fastapi.testclient import TestClient

from deployhook.core.config import Settings, build_targets
from deployhook.core.deps import get_dispatcher, get_settings
from deployhook.core.dispatch import DeployDispatcher
from deployhook.services.commands import CommandFailure
from deployhook.services.deployer import Deployer
from main import app

WEBHOOK_SECRET = "test-webhook-secret"


def step_of(args) -> str:
    """Classify a recorded command by deploy step."""
    if "pull" in args:
        return "sync"
    if "run" in args:
        return "migrate"
    if "--build" in args:
        return "restart"
    if "up" in args:
        return "rollback"
    return "unknown"


class RecordingRunner:
    """
    Stand-in for CommandRunner that records calls instead of running them.

    fail_on: step names ("sync", "migrate", "restart", "rollback") that should fail
    block_on: step name that waits for `release` before returning
    """

    def __init__(self, fail_on=(), error=None, block_on=None):
        self.calls = []
        self.fail_on = set(fail_on)
        self.error = error
        self.block_on = block_on
        self.started = threading.Event()
        self.release = threading.Event()
        self._lock = threading.Lock()

    def run(self, args, cwd=None, quiet=False):
        step = step_of(args)
        with self._lock:
            self.calls.append({"args": list(args), "cwd": cwd, "quiet": quiet, "step": step})
        self.started.set()

        if step == self.block_on:
            self.release.wait(timeout=5)

        if step in self.fail_on:
            if self.error is not None:
                raise self.error
            raise CommandFailure(args, "exited with status 1", returncode=1)
        return ""

    @property
    def steps(self):
        return [call["step"] for call in self.calls]


class FakeProbe:
    """Stand-in for httpx.get used by the health check."""

    def __init__(self, status_code=200, error=None):
        self.status_code = status_code
        self.error = error
        self.urls = []

    def __call__(self, url, timeout=None):
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code)


@pytest.fixture
def test_settings():
    """Settings with a known secret, docker on PATH and no settle delay"""
    return Settings(
        _env_file=None,
        GITHUB_WEBHOOK_SECRET=WEBHOOK_SECRET,
        BACKEND_REPO_NAME="Backend",
        FRONTEND_REPO_NAME="Frontend",
        DOCKER_BINARY="docker",
        HEALTH_CHECK_DELAY_SECONDS=0,
    )


@pytest.fixture
def targets(test_settings):
    return build_targets(test_settings)


@pytest.fixture
def runner():
    return RecordingRunner()


@pytest.fixture
def probe():
    return FakeProbe()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def deployer(targets, test_settings, runner, probe, sleeps):
    return Deployer(targets, test_settings, runner=runner, http_get=probe, sleep=sleeps.append)


@pytest.fixture
def dispatcher(deployer, runner):
    dispatcher = DeployDispatcher(deployer, max_workers=2)
    yield dispatcher
    # Never leave a blocked fake command behind
    runner.release.set()
    dispatcher.shutdown(wait_for_deploys=True)


@pytest.fixture
def client(test_settings, dispatcher):
    """
    FastAPI test client with overridden settings and dispatcher.
    """
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
