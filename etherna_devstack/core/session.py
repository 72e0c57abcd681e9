import asyncio
from enum import Enum
from typing import Awaitable
from typing import Callable
from typing import NamedTuple

import aiohttp
from rich.text import Text

from etherna_devstack.core.address_discovery import poll_underlay_address
from etherna_devstack.core.config import Config
from etherna_devstack.core.docker_interface import DockerShellInterface
from etherna_devstack.core.launcher import ContainerLauncher
from etherna_devstack.core.readiness import exit_message
from etherna_devstack.core.service_types import Mode
from etherna_devstack.core.service_types import RunningService
from etherna_devstack.core.service_types import ServiceSpec
from etherna_devstack.core.service_types import ServiceState
from etherna_devstack.env_description import envs
from etherna_devstack.errors import AddressDiscoveryError
from etherna_devstack.errors import CertificateError
from etherna_devstack.errors import ServiceLaunchError
from etherna_devstack.output.console import CONSOLE
from etherna_devstack.output.reporting import ReportBlock
from etherna_devstack.output.reporting import log_error
from etherna_devstack.output.reporting import log_notice
from etherna_devstack.output.styles import Style
from etherna_devstack.services import catalog
from etherna_devstack.tls.certificate import ensure_certificate

AddressDiscovery = Callable[..., Awaitable[str]]


class SessionState(Enum):
    IDLE = 'idle'
    LAUNCHING = 'launching'
    RUNNING = 'running'
    SHUTTING_DOWN = 'shutting_down'
    STOPPED = 'stopped'


class StackOptions(NamedTuple):
    https: bool = False
    mongo: bool = True
    elastic: bool = True
    bee: bool = True
    sso: bool = True
    index: bool = True
    credit: bool = True
    beehive: bool = True
    gateway: bool = True
    validator: bool = True
    interceptor: bool = True
    # service name -> environment overrides
    envs: dict[str, dict[str, str]] = {}

    def overrides(self, name: str) -> dict[str, str]:
        return self.envs.get(name, {})


class DevSession:
    """
    One development session: owns every process it started.

    Independent services are launched concurrently. The storage chain is
    sequenced: chain node, then the edge node, then (once the edge node is
    ready and has published its underlay address) the worker nodes.
    ``shutdown()`` terminates everything that was spawned, including
    services that never became ready.
    """

    def __init__(self,
                 options: StackOptions = StackOptions(),
                 config: Config = None,
                 launcher: ContainerLauncher = None,
                 discover_address: AddressDiscovery = poll_underlay_address):
        self._config = config or Config()
        self._options = options
        self._launcher = launcher or ContainerLauncher(
            DockerShellInterface(self._config.docker_binary, self._config.verbose_docker_commands)
        )
        self._discover_address = discover_address
        self._discovery: asyncio.Task | None = None

        self.state = SessionState.IDLE
        self.mode = Mode.HTTPS if options.https else Mode.HTTP
        self.registry: list[RunningService] = []
        self.services: dict[str, RunningService] = {}

    async def __aenter__(self) -> 'DevSession':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()

    @property
    def is_stopping(self) -> bool:
        return self.state in (SessionState.SHUTTING_DOWN, SessionState.STOPPED)

    def independent_specs(self) -> list[ServiceSpec]:
        options = self._options
        specs = []
        if options.mongo:
            specs += [catalog.mongodb_spec(options.overrides(envs.MONGODB))]
        if options.elastic:
            specs += [catalog.elastic_spec(options.overrides(envs.ELASTIC))]

        backends = [
            (options.beehive, envs.BEEHIVE),
            (options.index, envs.INDEX),
            (options.sso, envs.SSO),
            (options.gateway, envs.GATEWAY),
            (options.validator, envs.VALIDATOR),
            (options.credit, envs.CREDIT),
        ]
        for enabled, name in backends:
            if enabled:
                specs += [catalog.backend_spec(name, self.mode, self._config, options.overrides(name))]

        if options.interceptor:
            specs += [catalog.interceptor_spec(self.mode, options.overrides(envs.INTERCEPTOR))]
        return specs

    async def _prepare_certificate(self) -> None:
        try:
            await ensure_certificate(catalog.certificate_dir(self._config))
        except CertificateError as e:
            CONSOLE.print(Text(f'  HTTPS not available ({e.message}). Falling back to HTTP.', style=Style.suspicious))
            self.mode = Mode.HTTP

    async def start(self) -> dict[str, RunningService]:
        assert self.state == SessionState.IDLE, f'Session already {self.state.value}'
        self.state = SessionState.LAUNCHING

        if self.mode == Mode.HTTPS:
            await self._prepare_certificate()

        launches = [self._launch_service(spec) for spec in self.independent_specs()]
        if self._options.bee:
            launches += [self._launch_storage_chain()]
        await asyncio.gather(*launches)

        if self.state == SessionState.LAUNCHING:
            self.state = SessionState.RUNNING
            self.print_summary()
        return self.services

    def _register(self, service: RunningService) -> None:
        self.registry.append(service)
        if self.is_stopping:
            service.state = ServiceState.KILLED
            service.handle.terminate()

    def _on_exit(self, service: RunningService, exit_code: int | None) -> None:
        if self.is_stopping:
            return
        log_notice(service.name, f'Container stopped: {exit_message(exit_code)}')

    async def _launch_service(self, spec: ServiceSpec) -> RunningService | None:
        if self.is_stopping:
            return None

        try:
            service = await self._launcher.launch(spec, on_spawned=self._register, on_exit=self._on_exit)
        except ServiceLaunchError as e:
            log_error(spec.name, e.reason)
            service = RunningService(spec=spec, state=ServiceState.FAILED, diagnostic=e.reason)

        self.services[spec.name] = service
        return service

    def _mark_not_started(self, spec: ServiceSpec, reason: str) -> None:
        log_error(spec.name, reason)
        self.services[spec.name] = RunningService(spec=spec, state=ServiceState.FAILED, diagnostic=reason)

    def _skip_workers(self, workers: range, reason: str) -> None:
        for worker in workers:
            self._mark_not_started(
                catalog.bee_node_spec(self.mode, worker, bootnode='-', overrides=self._options.overrides(envs.BEE)),
                reason,
            )

    async def _launch_storage_chain(self) -> None:
        options = self._options
        await self._launch_service(catalog.blockchain_spec(self.mode, self._config, options.overrides(envs.BLOCKCHAIN)))

        edge = await self._launch_service(catalog.bee_node_spec(self.mode, overrides=options.overrides(envs.BEE)))
        workers = range(1, self._config.bee_workers + 1)
        if edge is None or not workers:
            return

        if edge.state != ServiceState.READY:
            self._skip_workers(workers, f'Not started, {edge.name} is {edge.state.value}')
            return

        self._discovery = asyncio.create_task(self._discover_address(
            f'http://localhost:{envs.BEE_PORT}',
            attempts=self._config.address_discovery_attempts,
            delay=self._config.address_discovery_delay_s,
        ))
        try:
            bootnode = await self._discovery
        except asyncio.CancelledError:
            if self._discovery.cancelled() and self.is_stopping:
                return
            raise
        except AddressDiscoveryError as e:
            self._skip_workers(workers, f"Not started, can't discover {edge.name} address: {e.message}")
            return
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError, ValueError) as e:
            self._skip_workers(workers, f"Not started, can't discover {edge.name} address: {type(e).__name__}: {e}")
            return
        finally:
            self._discovery = None

        await asyncio.gather(*[
            self._launch_service(
                catalog.bee_node_spec(self.mode, worker, bootnode=bootnode, overrides=options.overrides(envs.BEE))
            )
            for worker in workers
        ])

    def shutdown(self) -> None:
        if self.is_stopping:
            return
        self.state = SessionState.SHUTTING_DOWN

        if self._discovery is not None:
            self._discovery.cancel()

        for service in self.registry:
            if not service.state.is_terminal:
                service.state = ServiceState.KILLED
            service.handle.terminate()

        self.state = SessionState.STOPPED

    async def wait_stopped(self, timeout: float | None = None) -> None:
        tasks = [task for service in self.registry for task in service.tasks]
        if tasks:
            await asyncio.wait(tasks, timeout=timeout)

    def print_summary(self) -> None:
        block = ReportBlock()
        ready = [service for service in self.services.values() if service.state == ServiceState.READY]
        if len(ready) == len(self.services):
            block.add(Text(' ✔ All services up', style=Style.mark_neutral))
        else:
            block.add(Text(f' ✗ {len(self.services) - len(ready)} of {len(self.services)} services not ready:',
                           style=Style.bad))
        for service in self.services.values():
            block.add(service.as_rich_text())
        block.print()
