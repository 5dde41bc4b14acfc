"""Background worker entrypoint. Initializes the database and runs the job scheduler."""
import asyncio
import logging
import signal

from portfolio_analytics.app_context import get_app_context
from portfolio_analytics.config import setup_logging

logger = logging.getLogger("portfolio_analytics.entrypoint")


async def _run() -> None:
    context = get_app_context()
    context.initialize()
    scheduler = context.scheduler

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, scheduler.stop)
        except NotImplementedError:
            # Not available on Windows event loops; Ctrl+C still interrupts asyncio.run
            pass

    try:
        await scheduler.run_forever()
    finally:
        context.close()


def main() -> None:
    setup_logging()
    logger.info("Starting portfolio analytics worker")
    asyncio.run(_run())


if __name__ == "__main__":
    main()
