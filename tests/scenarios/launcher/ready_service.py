import asyncio

import vedro

from config import Config
from contexts.fake_docker import fake_docker
from etherna_devstack.core.docker_interface import DockerShellInterface
from etherna_devstack.core.launcher import ContainerLauncher
from etherna_devstack.core.service_types import ServiceState
from helpers.specs import search_spec
from schemas.running_service import RunningServiceSchema


class Scenario(vedro.Scenario):
    subject = 'service printing its success line resolves ready'

    def given_fake_docker(self):
        self.docker = fake_docker()

    def given_service_printing_success_line(self):
        self.spec = search_spec()
        self.docker.container_output(self.spec.name, stdout=['booting', 'listening on :9200'], linger=True)

    def given_launcher(self):
        self.launcher = ContainerLauncher(DockerShellInterface(str(self.docker.binary), verbose=False))
        self.registered = []

    async def when_service_launched(self):
        self.service = await asyncio.wait_for(
            self.launcher.launch(self.spec, on_spawned=self.registered.append),
            timeout=Config.LAUNCH_TIMEOUT_S,
        )
        vedro.defer(self.service.handle.terminate)

    def then_it_should_be_ready(self):
        assert self.service.as_json() == RunningServiceSchema % {
            'name': 'fake-search',
            'state': 'ready',
            'diagnostic': None,
        }

    def and_it_should_be_registered_once(self):
        assert self.registered == [self.service]

    def and_process_should_still_run(self):
        assert self.service.state == ServiceState.READY
        assert self.service.handle.returncode is None

    def and_volume_should_be_created_before_run(self):
        calls = self.docker.calls()
        assert calls[0] == 'ps -a --filter name=^/?fake-search$ --format {{.Names}}'
        assert calls[1] == 'volume create etherna_fake-search-volume'
        assert calls[2].startswith('run --rm --name fake-search --mount '
                                   'type=volume,source=etherna_fake-search-volume,target=/data')
        assert calls[2].endswith('fake/search:latest')
