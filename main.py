from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager

from deployhook.core.config import settings, build_targets
from deployhook.core.dispatch import DeployDispatcher
from deployhook.core.logging_config import get_logger, setup_logging
from deployhook.services.deployer import Deployer
from deployhook.api.endpoints import health, webhook

setup_logging(log_level=settings.LOG_LEVEL, json_logs=settings.JSON_LOGS)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    # Startup
    targets = build_targets(settings)
    app.state.dispatcher = DeployDispatcher(
        Deployer(targets, settings),
        max_workers=settings.DEPLOY_WORKERS,
    )

    logger.info(f"Webhook server running on port {settings.PORT}")
    logger.info(f"Webhook secret is {'configured' if settings.GITHUB_WEBHOOK_SECRET else 'NOT configured'}")
    logger.info(f"Configured repositories: {list(targets)}")

    yield

    # Shutdown - let running deploys finish, they are not cancellable
    logger.info("Shutting down webhook server, waiting for running deploys...")
    app.state.dispatcher.shutdown(wait_for_deploys=True)


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    description="GitHub push-to-deploy webhook receiver",
    lifespan=lifespan,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
    redirect_slashes=False,
)


@app.exception_handler(StarletteHTTPException)
async def not_found_handler(request: Request, exc: StarletteHTTPException):
    """Only POST / and GET /health exist; wrong methods look like missing routes."""
    if exc.status_code == 405:
        return JSONResponse({"detail": "Not Found"}, status_code=404)
    return await http_exception_handler(request, exc)


app.include_router(health.router)
app.include_router(webhook.router)


def run() -> None:
    import uvicorn
    uvicorn.run(
        app,
        host=settings.HOST,
        port=settings.PORT,
        log_config=None,
    )


if __name__ == "__main__":
    run()
