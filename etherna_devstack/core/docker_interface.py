import asyncio
import shlex

from rich.text import Text
from rtry import retry

from etherna_devstack.core.config import Config
from etherna_devstack.core.utils.process_command_output import process_output_till_done
from etherna_devstack.errors import SpawnError
from etherna_devstack.helpers.jobs_result import JobResult
from etherna_devstack.helpers.jobs_result import OperationError
from etherna_devstack.output.console import CONSOLE
from etherna_devstack.output.styles import Style


class DockerShellInterface:
    def __init__(self, docker_binary: str = None, verbose: bool = None):
        cfg = Config()
        self.docker_binary = docker_binary if docker_binary is not None else cfg.docker_binary
        self.verbose_docker_commands = verbose if verbose is not None else cfg.verbose_docker_commands

    async def _run(self, *args: str) -> tuple[JobResult | OperationError, str, str]:
        try:
            process = await asyncio.create_subprocess_exec(
                self.docker_binary, *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except (FileNotFoundError, PermissionError) as e:
            raise SpawnError(self.docker_binary, f"can't run {shlex.join(args)}: {e}") from e

        echo_prefix = None
        if self.verbose_docker_commands:
            CONSOLE.print(Text(shlex.join([self.docker_binary, *args]), style=Style.context))
            echo_prefix = f'  {args[0]}'
        stdout, stderr = await process_output_till_done(process, echo_prefix)

        if process.returncode != 0:
            return OperationError(
                f'Stdout:\n{stdout}\n\nStderr:\n{stderr}',
                exit_code=process.returncode,
            ), stdout, stderr

        return JobResult.GOOD, stdout, stderr

    @retry(attempts=3, delay=1, until=lambda x: x[0] == JobResult.BAD)
    async def _ps(self, name: str) -> tuple[JobResult | OperationError, str, str]:
        # the name filter is a regex matched anywhere in "/<name>"
        return await self._run('ps', '-a', '--filter', f'name=^/?{name}$', '--format', '{{.Names}}')

    async def is_container_name_in_use(self, name: str) -> bool:
        job_result, stdout, _ = await self._ps(name)
        if job_result != JobResult.GOOD:
            CONSOLE.print(Text(f"Can't check containers named {name}: {job_result}", style=Style.suspicious))
            return False
        names = [line.strip().lstrip('/') for line in stdout.splitlines()]
        return name in names

    async def stop(self, name: str) -> JobResult | OperationError:
        job_result, _, _ = await self._run('stop', name)
        return job_result

    async def volume_create(self, name: str) -> JobResult | OperationError:
        job_result, _, _ = await self._run('volume', 'create', name)
        return job_result

    async def network_create(self, name: str) -> JobResult | OperationError:
        job_result, _, _ = await self._run('network', 'create', name)
        return job_result

    async def exec(self, name: str, *cmd: str) -> JobResult | OperationError:
        job_result, _, _ = await self._run('exec', name, *cmd)
        return job_result
