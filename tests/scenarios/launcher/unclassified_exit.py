import asyncio

import vedro

from config import Config
from contexts.fake_docker import fake_docker
from etherna_devstack.core.docker_interface import DockerShellInterface
from etherna_devstack.core.launcher import ContainerLauncher
from etherna_devstack.core.service_types import ServiceState
from helpers.specs import search_spec


class Scenario(vedro.Scenario):
    subject = 'container exiting without readiness line: {subject_case}'

    @vedro.params('last line as diagnostic', ['starting node', 'out of memory'], 'out of memory')
    @vedro.params('no output', [], 'process exited with code 137')
    def __init__(self, subject_case, output, diagnostic):
        self.subject_case = subject_case
        self.output = output
        self.diagnostic = diagnostic

    def given_fake_docker(self):
        self.docker = fake_docker()

    def given_container_exiting(self):
        self.spec = search_spec()
        self.docker.container_output(self.spec.name, stdout=self.output, exit_code=137)

    async def when_service_launched(self):
        launcher = ContainerLauncher(DockerShellInterface(str(self.docker.binary), verbose=False))
        self.service = await asyncio.wait_for(launcher.launch(self.spec), timeout=Config.LAUNCH_TIMEOUT_S)

    def then_it_should_be_failed(self):
        assert self.service.state == ServiceState.FAILED

    def and_diagnostic_should_be_synthesized(self):
        assert self.service.diagnostic == self.diagnostic

    def and_exit_code_should_be_recorded(self):
        assert self.service.exit_code == 137
