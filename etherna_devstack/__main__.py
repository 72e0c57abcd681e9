import argparse
import asyncio
import signal

from rich.text import Text

from etherna_devstack.core.session import DevSession
from etherna_devstack.core.session import StackOptions
from etherna_devstack.output.console import CONSOLE
from etherna_devstack.output.styles import Style

SERVICE_GROUPS = [
    field for field in StackOptions._fields if field not in ('https', 'envs')
]
STOP_TIMEOUT_S = 30


def parse_options(argv=None) -> StackOptions:
    parser = argparse.ArgumentParser(prog='etherna_devstack', description='Run the etherna development services')
    parser.add_argument('--https', action='store_true', help='Serve backends over https')
    parser.add_argument('--skip', action='append', default=[], choices=SERVICE_GROUPS,
                        help='Do not start this service group (repeatable)')
    args = parser.parse_args(argv)
    return StackOptions(https=args.https, **{group: group not in args.skip for group in SERVICE_GROUPS})


async def run(options: StackOptions) -> None:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    async with DevSession(options) as session:
        starting = asyncio.create_task(session.start())
        await stop.wait()
        CONSOLE.print(Text('Stopping services ...', style=Style.info))
        session.shutdown()
        await starting
        await session.wait_stopped(timeout=STOP_TIMEOUT_S)


def main(argv=None):
    asyncio.run(run(parse_options(argv)))


if __name__ == '__main__':
    main()
