import asyncio

import aiohttp
from aiohttp import ClientConnectorError
from rtry import retry

from etherna_devstack.errors import AddressDiscoveryError
from etherna_devstack.helpers.countdown_counter import CountdownCounterKeeper

ADDRESSES_PATH = '/addresses'
POLL_DELAY_S = 0.5
REQUEST_TIMEOUT_S = 10
LOOPBACK_MARKERS = ('/ip4/127.', '/ip6/::1/')


def is_loopback(address: str) -> bool:
    return any(marker in address for marker in LOOPBACK_MARKERS)


@retry(attempts=10, delay=1, swallow=ClientConnectorError)
async def fetch_underlay(session: aiohttp.ClientSession, base_url: str) -> list[str]:
    url = f'{base_url}{ADDRESSES_PATH}'
    async with session.get(url) as response:
        if response.status >= 400:
            raise AddressDiscoveryError(
                f'Failed to fetch addresses from {base_url}: {response.status} {response.reason}'
            )
        body = await response.json(content_type=None)

    underlay = body.get('underlay') if isinstance(body, dict) else None
    return underlay if isinstance(underlay, list) else []


async def poll_underlay_address(base_url: str, attempts: int | None = None, delay: float = POLL_DELAY_S) -> str:
    """
    Poll ``{base_url}/addresses`` until the node publishes an underlay
    address and return the first non-loopback one.

    An empty list is retried every ``delay`` seconds, ``attempts=None``
    polls without limit. Error responses, broken connections and bodies
    that are not JSON raise ``AddressDiscoveryError`` without retry.
    """
    counter = CountdownCounterKeeper(attempts)
    timeout = aiohttp.ClientTimeout(total=REQUEST_TIMEOUT_S)
    async with aiohttp.ClientSession(timeout=timeout) as session:
        while True:
            try:
                underlay = await fetch_underlay(session, base_url)
            except ClientConnectorError as e:
                raise AddressDiscoveryError(f"Can't connect to {base_url}: {e}") from e
            except aiohttp.ClientError as e:
                raise AddressDiscoveryError(f'Request to {base_url} failed: {type(e).__name__}: {e}') from e
            except asyncio.TimeoutError as e:
                raise AddressDiscoveryError(f'No response from {base_url} in {REQUEST_TIMEOUT_S}s') from e
            except ValueError as e:
                raise AddressDiscoveryError(f'Malformed addresses response from {base_url}: {e}') from e

            if underlay:
                break

            counter.tick()
            if counter.is_done():
                raise AddressDiscoveryError(
                    f'No underlay address published by {base_url} after {attempts} attempts'
                )
            await asyncio.sleep(delay)

    address = next((address for address in underlay if not is_loopback(address)), None)
    if address is None:
        raise AddressDiscoveryError(f'No valid underlay address found in response from {base_url}: {underlay}')
    return address
