import asyncio
import os
import signal
from typing import AsyncIterator

from etherna_devstack.errors import SpawnError

# container logs can carry long JSON records on a single line
STREAM_LIMIT = 2 ** 20


class ProcessHandle:
    def __init__(self, name: str, process: asyncio.subprocess.Process):
        self.name = name
        self._process = process
        self._terminate_requested = False

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def returncode(self) -> int | None:
        return self._process.returncode

    def stdout_lines(self) -> AsyncIterator[str]:
        return self._read_lines(self._process.stdout)

    def stderr_lines(self) -> AsyncIterator[str]:
        return self._read_lines(self._process.stderr)

    async def _read_lines(self, stream: asyncio.StreamReader) -> AsyncIterator[str]:
        while True:
            try:
                line = await stream.readuntil(b'\n')
            except asyncio.IncompleteReadError as e:
                line = e.partial
            except asyncio.LimitOverrunError as e:
                # a line longer than STREAM_LIMIT yields its head, the rest of it is skipped
                line = await stream.read(e.consumed)
                await self._skip_line(stream)
            if not line:
                break
            yield line.decode('utf-8', errors='replace').rstrip('\r\n')

    @staticmethod
    async def _skip_line(stream: asyncio.StreamReader) -> None:
        while True:
            try:
                await stream.readuntil(b'\n')
                return
            except asyncio.IncompleteReadError:
                return
            except asyncio.LimitOverrunError as e:
                await stream.read(e.consumed)

    async def wait(self) -> int | None:
        """Exit code of the process, ``None`` when it was killed by a signal."""
        returncode = await self._process.wait()
        if returncode < 0:
            return None
        return returncode

    def terminate(self) -> None:
        if self._terminate_requested or self._process.returncode is not None:
            return
        self._terminate_requested = True
        try:
            self._process.send_signal(signal.SIGTERM)
        except ProcessLookupError:
            ...

    def __repr__(self):
        return f'ProcessHandle(name="{self.name}", pid={self.pid}, returncode={self.returncode})'


async def spawn(command: str, arguments: list[str], env: dict[str, str] | None = None,
                name: str | None = None) -> ProcessHandle:
    execution_env = None
    if env is not None:
        execution_env = os.environ | env

    try:
        process = await asyncio.create_subprocess_exec(
            command, *arguments,
            env=execution_env,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            limit=STREAM_LIMIT,
        )
    except (FileNotFoundError, PermissionError) as e:
        raise SpawnError(name or command, f"can't spawn {command}: {e}") from e

    return ProcessHandle(name or command, process)
