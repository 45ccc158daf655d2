"""Entry point for the trade position calculator dashboard.

Wiring order:
1. AppSettings (configuration)
2. Logging setup
3. FastAPI dashboard (templates + PositionCalculator)
4. uvicorn server
"""

import asyncio

import uvicorn

from tradecalc.config import AppSettings
from tradecalc.dashboard.app import create_dashboard_app
from tradecalc.logging import get_logger, setup_logging


async def run() -> None:
    """Serve the calculator dashboard until interrupted."""
    settings = AppSettings()

    setup_logging(settings.log_level, settings.log_format)
    logger = get_logger("tradecalc.main")

    app = create_dashboard_app(settings)

    logger.info(
        "starting_dashboard",
        host=settings.dashboard.host,
        port=settings.dashboard.port,
        tolerance=str(settings.calculator.tolerance),
    )

    config = uvicorn.Config(
        app,
        host=settings.dashboard.host,
        port=settings.dashboard.port,
        log_config=None,  # keep the handlers installed by setup_logging
    )
    server = uvicorn.Server(config)
    await server.serve()

    logger.info("dashboard_stopped")


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
