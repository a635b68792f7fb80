"""amexecutor - FastAPI application running commands for Alertmanager webhooks."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from amexecutor.config import Settings, get_settings
from amexecutor.dispatcher import AlertDispatcher
from amexecutor.exceptions import RequestBodyTooLargeError
from amexecutor.executor import CommandExecutor
from amexecutor.handlers import HandlerResolver, load_handlers_config
from amexecutor.models.alert import Event

logger = logging.getLogger(__name__)

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application for *settings* (environment settings by default)."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan handler for startup/shutdown."""
        logging.basicConfig(
            level=settings.log_level.upper(),
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
        logging.getLogger().setLevel(settings.log_level.upper())

        # Serving without a valid configuration is not an option; let
        # loading errors abort startup.
        try:
            handlers_config = load_handlers_config(settings.handlers_config_path)
        except Exception as e:
            logger.critical(f"Configuration error, aborting: {e}")
            raise

        for name, spec in handlers_config.handlers.items():
            logger.info(f"Found handler {name} => {spec.command!r} (status {spec.status_filter})")

        resolver = HandlerResolver(handlers_config)
        executor = CommandExecutor(
            timeout=settings.timeout.total_seconds(),
            debug=settings.debug,
            max_concurrent=settings.max_concurrent_commands,
        )
        app.state.resolver = resolver
        app.state.dispatcher = AlertDispatcher(resolver, executor)
        if settings.debug:
            logger.warning("Debug mode: handler commands will not be executed")
        logger.info("amexecutor started")

        yield

        logger.info("amexecutor stopped")

    app = FastAPI(
        title="amexecutor",
        description="Runs configured commands for Prometheus Alertmanager webhook alerts",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    @app.get("/handlers")
    async def list_handlers(request: Request) -> dict[str, list[dict]]:
        """List configured handlers."""
        resolver: HandlerResolver = request.app.state.resolver
        return {
            "handlers": [
                {"name": name, "command": spec.command, "status": spec.status_filter}
                for name, spec in resolver.handlers.items()
            ]
        }

    # Every path other than the endpoints above receives webhooks.
    @app.api_route("/{path:path}", methods=ALL_METHODS)
    async def alertmanager_webhook(request: Request, path: str) -> PlainTextResponse:
        """Receive an Alertmanager webhook and run the handlers of its alerts."""
        if request.method != "POST":
            return PlainTextResponse("Bad request method.\n", status_code=status.HTTP_400_BAD_REQUEST)

        try:
            body = await _read_body(request, settings.max_body_size)
        except RequestBodyTooLargeError as e:
            logger.warning(e.message)
            return PlainTextResponse(
                f"{e.message}\n",
                status_code=status.HTTP_400_BAD_REQUEST,
            )

        if settings.verbose:
            logger.info(f"Request Body: {body.decode(errors='replace')!r}")

        try:
            event = Event.model_validate_json(body)
        except ValidationError as e:
            logger.error(f"Error parsing request JSON: {e}")
            return PlainTextResponse(
                f"Error parsing JSON: {e}\n", status_code=status.HTTP_400_BAD_REQUEST
            )

        logger.info(
            f"Received webhook: receiver={event.receiver}, status={event.status}, "
            f"alerts={len(event.alerts)}"
        )
        dispatcher: AlertDispatcher = request.app.state.dispatcher
        result = await dispatcher.dispatch(event)

        if settings.verbose and result.output:
            logger.info(f"Response body: {result.output.decode(errors='replace')!r}")

        return PlainTextResponse(
            result.output,
            status_code=status.HTTP_200_OK if result.ok else status.HTTP_400_BAD_REQUEST,
        )

    return app


async def _read_body(request: Request, limit: int) -> bytes:
    body = bytearray()
    async for chunk in request.stream():
        body += chunk
        if len(body) >= limit:
            raise RequestBodyTooLargeError(limit)
    return bytes(body)


def run() -> None:
    """Run the application using uvicorn, with settings overridable by flags."""
    settings = Settings(_cli_parse_args=True)
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
