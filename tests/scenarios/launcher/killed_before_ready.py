import asyncio

import vedro

from config import Config
from contexts.fake_docker import fake_docker
from etherna_devstack.core.docker_interface import DockerShellInterface
from etherna_devstack.core.launcher import ContainerLauncher
from etherna_devstack.core.service_types import ServiceState
from helpers.specs import search_spec
from helpers.waiting import wait_until


class Scenario(vedro.Scenario):
    subject = 'terminating a starting container resolves its launch as killed'

    def given_fake_docker(self):
        self.docker = fake_docker()

    def given_slow_service(self):
        self.spec = search_spec()
        self.docker.container_output(self.spec.name, stdout=['warming up'], linger=True)
        self.registered = []

    async def given_service_launching(self):
        launcher = ContainerLauncher(DockerShellInterface(str(self.docker.binary), verbose=False))
        self.launch = asyncio.create_task(launcher.launch(self.spec, on_spawned=self.registered.append))
        await wait_until(lambda: self.registered)

    async def when_process_terminated(self):
        self.registered[0].state = ServiceState.KILLED
        self.registered[0].handle.terminate()
        self.service = await asyncio.wait_for(self.launch, timeout=Config.LAUNCH_TIMEOUT_S)

    def then_it_should_stay_killed(self):
        assert self.service.state == ServiceState.KILLED

    def and_container_should_be_gone(self):
        assert not self.docker.is_running(self.spec.name)
