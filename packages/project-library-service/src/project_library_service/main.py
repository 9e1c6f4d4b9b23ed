"""Entry point - starts the FastAPI server."""

import asyncio
import signal

import structlog
import uvicorn

from project_library_service.log_config import configure_logging
from project_library_service.rest.app import create_app
from project_library_service.settings import settings

logger = structlog.get_logger()


async def main() -> None:
    configure_logging(settings.log_level, settings.log_format)

    app = create_app()
    config = uvicorn.Config(
        app,
        host=settings.rest_host,
        port=settings.rest_port,
        log_level=settings.log_level.lower(),
    )
    server = uvicorn.Server(config)

    logger.info("starting_service", rest_host=settings.rest_host, rest_port=settings.rest_port)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, server.handle_exit, sig, None)

    await server.serve()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
