import asyncio

from rich.text import Text

from etherna_devstack.output.console import CONSOLE
from etherna_devstack.output.styles import Style


async def process_output_till_done(process: asyncio.subprocess.Process,
                                   echo_prefix: str | None = None) -> tuple[str, str]:
    """
    Drain stdout and stderr of a short-lived command and wait for its exit.

    Lines are echoed to the console as they arrive when ``echo_prefix`` is set.
    """

    async def read_stream(stream: asyncio.StreamReader, channel: str) -> list[str]:
        lines = []
        async for raw in stream:
            line = raw.decode('utf-8', errors='replace').rstrip('\r\n')
            if echo_prefix is not None:
                CONSOLE.print(Text(f'{echo_prefix} {channel}> {line}', style=Style.context))
            lines.append(line)
        return lines

    stdout, stderr = await asyncio.gather(
        read_stream(process.stdout, 'out'),
        read_stream(process.stderr, 'err'),
    )
    await process.wait()
    return '\n'.join(stdout), '\n'.join(stderr)
