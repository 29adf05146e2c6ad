"""Entry point for the chart series pipeline service.

Loads AppSettings, configures logging and serves the FastAPI app with
uvicorn's programmatic API on a single asyncio event loop.
"""

import asyncio

import uvicorn

from chartseries.api.app import create_app
from chartseries.config import AppSettings
from chartseries.logging import get_logger, setup_logging


async def run() -> None:
    """Run the HTTP service until interrupted."""
    settings = AppSettings()

    setup_logging(settings.log_level, settings.log_format)
    logger = get_logger("chartseries.main")

    app = create_app(settings.pipeline)
    app.state.settings = settings

    logger.info(
        "starting_series_service",
        host=settings.api.host,
        port=settings.api.port,
        sma_period=settings.pipeline.sma_period,
        ema_period=settings.pipeline.ema_period,
        rsi_period=settings.pipeline.rsi_period,
        strict=settings.pipeline.strict,
    )

    config = uvicorn.Config(
        app,
        host=settings.api.host,
        port=settings.api.port,
        log_level="warning",  # Suppress uvicorn access logs
    )
    server = uvicorn.Server(config)
    await server.serve()

    logger.info("series_service_stopped")


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
