import asyncio
import os
from typing import AsyncIterator
from typing import Awaitable
from typing import Callable

from etherna_devstack.core.docker_interface import DockerShellInterface
from etherna_devstack.core.process_runner import ProcessHandle
from etherna_devstack.core.process_runner import spawn
from etherna_devstack.core.provisioner import Provisioner
from etherna_devstack.core.readiness import Classification
from etherna_devstack.core.readiness import Readiness
from etherna_devstack.core.readiness import ReadinessMatcher
from etherna_devstack.core.readiness import exit_message
from etherna_devstack.core.service_types import HostFile
from etherna_devstack.core.service_types import RunningService
from etherna_devstack.core.service_types import ServiceSpec
from etherna_devstack.core.service_types import ServiceState
from etherna_devstack.errors import ProvisioningError
from etherna_devstack.helpers.jobs_result import JobResult
from etherna_devstack.output.reporting import log_error
from etherna_devstack.output.reporting import log_loading
from etherna_devstack.output.reporting import log_notice
from etherna_devstack.output.reporting import log_success

PULLING_IMAGE = 'Pulling from'

Spawner = Callable[..., Awaitable[ProcessHandle]]
SpawnedCallback = Callable[[RunningService], None]
ExitCallback = Callable[[RunningService, int | None], None]


def ensure_host_file(host_file: HostFile) -> None:
    if not host_file.path.parent.exists():
        host_file.path.parent.mkdir(parents=True, exist_ok=True)
        os.chmod(host_file.path.parent, host_file.directory_mode)
    if not host_file.path.exists():
        host_file.path.write_text(host_file.content, encoding='utf-8')
        os.chmod(host_file.path, host_file.mode)


class ContainerLauncher:
    def __init__(self, docker: DockerShellInterface = None, spawner: Spawner = spawn):
        self._docker = docker or DockerShellInterface()
        self._provisioner = Provisioner(self._docker)
        self._spawn = spawner

    async def prepare(self, spec: ServiceSpec) -> None:
        if await self._docker.is_container_name_in_use(spec.name):
            log_notice(spec.name, 'Stopping previous container')
            result = await self._docker.stop(spec.name)
            if result == JobResult.BAD:
                log_notice(spec.name, f"Can't stop previous container: {result.log}")

        for host_file in spec.host_files:
            try:
                ensure_host_file(host_file)
            except OSError as e:
                raise ProvisioningError(spec.name, f"can't prepare {host_file.path}: {e}") from e

        if spec.network and spec.managed_network:
            await self._provisioner.ensure_network(spec.network)
        await asyncio.gather(*[
            self._provisioner.ensure_volume(volume.source) for volume in spec.volumes
        ])

    async def launch(self, spec: ServiceSpec,
                     on_spawned: SpawnedCallback = None,
                     on_exit: ExitCallback = None) -> RunningService:
        """
        Start the container described by ``spec`` and wait until its output
        says it is ready or failed, or until the process exits.

        ``on_spawned`` receives the RunningService as soon as the process
        exists, before readiness is known. Spawn and provisioning errors
        propagate to the caller.
        """
        await self.prepare(spec)

        handle = await self._spawn(self._docker.docker_binary, spec.run_args(), name=spec.name)
        service = RunningService(spec=spec, handle=handle, state=ServiceState.STARTING)
        if on_spawned is not None:
            on_spawned(service)

        resolved: asyncio.Future[Classification] = asyncio.get_running_loop().create_future()
        matcher = ReadinessMatcher(spec.readiness)
        pulling_reported = False

        def handle_line(line: str) -> None:
            nonlocal pulling_reported
            if not pulling_reported and PULLING_IMAGE in line:
                pulling_reported = True
                log_loading(spec.name)

            if resolved.done():
                return
            classification = matcher.feed(line)
            if classification.state.is_terminal:
                resolved.set_result(classification)

        async def drain(lines: AsyncIterator[str]) -> None:
            async for line in lines:
                handle_line(line)

        async def watch_exit() -> None:
            try:
                await asyncio.gather(drain(handle.stdout_lines()), drain(handle.stderr_lines()))
            except Exception as e:
                log_error(spec.name, f"Can't read container output: {e}")
                handle.terminate()
            exit_code = await handle.wait()
            service.exit_code = exit_code
            service.exited = True
            if not resolved.done():
                resolved.set_result(matcher.process_exited(exit_code))
            elif on_exit is not None:
                on_exit(service, exit_code)

        watcher = asyncio.create_task(watch_exit(), name=f'watch-{spec.name}')
        service.tasks.add(watcher)
        watcher.add_done_callback(service.tasks.discard)

        classification = await resolved
        self._resolve(service, classification)
        return service

    def _resolve(self, service: RunningService, classification: Classification) -> None:
        spec = service.spec
        if service.state == ServiceState.KILLED:
            log_notice(spec.name, 'Stopped before it was ready')
            return

        if classification.state == Readiness.READY:
            service.state = ServiceState.READY
            service.diagnostic = None
            if spec.report_url:
                log_success(spec.name, spec.protocol, spec.port)
            if spec.trust_certificate:
                trust = asyncio.create_task(self.trust_certificate(spec.name))
                service.tasks.add(trust)
                trust.add_done_callback(service.tasks.discard)
            return

        service.state = ServiceState.FAILED
        service.diagnostic = classification.diagnostic or exit_message(service.exit_code)
        log_error(spec.name, service.diagnostic)

    async def trust_certificate(self, name: str) -> None:
        try:
            result = await self._docker.exec(name, 'update-ca-certificates')
        except Exception as e:
            log_error(name, f'Error trusting certificate in container: {e}')
            return
        if result == JobResult.BAD:
            log_error(name, f'Error trusting certificate in container:\n{result.log}')
