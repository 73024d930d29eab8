from __future__ import annotations
import asyncio
import logging
from typing import Dict, List, Optional

from roombot.channels import run_telegram_bot, create_telegram_app
from roombot.config import get_config
from roombot.exceptions import RoomBotError
from roombot.services import OccupancySweeper
from roombot.tools import get_sweeper

logging.basicConfig(format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=logging.INFO)
logger = logging.getLogger(__name__)


async def sweep_once(sweeper: OccupancySweeper) -> Optional[Dict[str, List[str]]]:
    """One sweep pass off the event loop. Failures are logged, never raised."""
    try:
        return await asyncio.to_thread(sweeper.sweep)
    except RoomBotError as e:
        logger.error(f"Sweep failed: {e}")
    except Exception as e:
        logger.error(f"Sweep crashed: {e}", exc_info=True)
    return None


async def run_sweeper(interval_seconds: int) -> None:
    """Runs the occupancy sweep forever, one pass every `interval_seconds`."""
    sweeper = get_sweeper()
    logger.info(f"Occupancy sweeper running every {interval_seconds}s")
    while True:
        await sweep_once(sweeper)
        await asyncio.sleep(interval_seconds)


async def run_parallel(app):
    interval = get_config().get_sweep_interval_seconds()
    logger.info("Starting bot and sweeper...")
    await asyncio.gather(
        run_telegram_bot(app),
        run_sweeper(interval),
    )


def main():
    try:
        app = create_telegram_app()
        asyncio.run(run_parallel(app))
    except KeyboardInterrupt:
        logger.info("Stopped by user")
    except Exception as e:
        logger.error(f"System Error: {e}", exc_info=True)


if __name__ == "__main__":
    main()
