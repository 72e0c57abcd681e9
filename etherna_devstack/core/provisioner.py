from etherna_devstack.core.docker_interface import DockerShellInterface
from etherna_devstack.errors import ProvisioningError
from etherna_devstack.helpers.jobs_result import JobResult

NAMESPACE = 'etherna'
ALREADY_EXISTS = 'already exists'


def volume_name(logical_name: str) -> str:
    return f'{NAMESPACE}_{logical_name}-volume'


def network_name(logical_name: str) -> str:
    return f'{NAMESPACE}_{logical_name}_network'


class Provisioner:
    def __init__(self, docker: DockerShellInterface):
        self._docker = docker

    async def ensure_volume(self, name: str) -> None:
        result = await self._docker.volume_create(name)
        if result == JobResult.BAD and ALREADY_EXISTS not in result:
            raise ProvisioningError(name, f"can't create volume:\n{result.log}")

    async def ensure_network(self, name: str) -> None:
        result = await self._docker.network_create(name)
        if result == JobResult.BAD and ALREADY_EXISTS not in result:
            raise ProvisioningError(name, f"can't create network:\n{result.log}")
