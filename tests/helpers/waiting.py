import asyncio
from typing import Callable


async def wait_until(predicate: Callable[[], bool], timeout_s: float = 5, delay_s: float = 0.01):
    async def poll():
        while not predicate():
            await asyncio.sleep(delay_s)

    await asyncio.wait_for(poll(), timeout=timeout_s)
