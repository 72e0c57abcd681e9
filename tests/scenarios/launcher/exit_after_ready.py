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
    subject = 'service exiting after it was ready keeps its ready state'

    def given_fake_docker(self):
        self.docker = fake_docker()

    def given_service_exiting_after_success_line(self):
        self.spec = search_spec()
        self.docker.container_output(self.spec.name, stdout=['listening on :9200', 'level=error shutting down'],
                                     exit_code=1)

    async def when_service_launched(self):
        self.exits = []
        launcher = ContainerLauncher(DockerShellInterface(str(self.docker.binary), verbose=False))
        self.service = await asyncio.wait_for(
            launcher.launch(self.spec, on_exit=lambda service, code: self.exits.append((service, code))),
            timeout=Config.LAUNCH_TIMEOUT_S,
        )
        await wait_until(lambda: self.service.exited)

    def then_it_should_stay_ready(self):
        assert self.service.state == ServiceState.READY
        assert self.service.diagnostic is None

    def and_exit_should_be_reported_once(self):
        assert self.exits == [(self.service, 1)]
        assert self.service.exit_code == 1
