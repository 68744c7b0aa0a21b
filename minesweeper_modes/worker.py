"""Temporal worker for Minesweeper mode games."""
import asyncio
import logging

from temporalio.worker import Worker

from minesweeper_modes.activities import place_mines_activity
from minesweeper_modes.client_provider import get_task_queue, get_temporal_client
from minesweeper_modes.workflows import ModeGameWorkflow

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def main():
    """Start the Temporal worker."""
    client = await get_temporal_client()
    task_queue = get_task_queue()

    worker = Worker(
        client,
        task_queue=task_queue,
        workflows=[ModeGameWorkflow],
        activities=[place_mines_activity],
    )

    logger.info("Worker started, connected to Temporal")
    logger.info(f"Listening on task queue: {task_queue}")

    await worker.run()


if __name__ == "__main__":
    asyncio.run(main())
