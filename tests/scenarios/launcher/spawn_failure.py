import vedro

from contexts.cache_dir import cache_dir
from etherna_devstack.core.docker_interface import DockerShellInterface
from etherna_devstack.core.launcher import ContainerLauncher
from etherna_devstack.errors import SpawnError
from helpers.specs import search_spec


class Scenario(vedro.Scenario):
    subject = 'missing container binary fails the launch immediately'

    def given_missing_binary(self):
        self.binary = str(cache_dir() / 'no-such-docker')

    async def when_service_launched(self):
        launcher = ContainerLauncher(DockerShellInterface(self.binary, verbose=False))
        try:
            await launcher.launch(search_spec())
        except SpawnError as e:
            self.error = e
        else:
            self.error = None

    def then_it_should_raise_spawn_error(self):
        assert isinstance(self.error, SpawnError)

    def and_error_should_name_binary(self):
        assert self.binary in self.error.message
