import os
from pathlib import Path

MAX_BEE_WORKERS = 4


def _optional_int(value: str | None) -> int | None:
    if value in (None, ''):
        return None
    return int(value)


class Config:
    def __init__(self):
        self.docker_binary: str = os.environ.get('DEVSTACK_DOCKER_BINARY', 'docker')
        self.cache_dir: Path = Path(os.environ.get('DEVSTACK_CACHE_DIR', Path.cwd() / '.etherna')).absolute()
        self.verbose_docker_commands = bool(os.environ.get('DEVSTACK_VERBOSE_DOCKER_COMMANDS', False))
        # unset means poll until the edge node publishes an address
        self.address_discovery_attempts: int | None = _optional_int(
            os.environ.get('DEVSTACK_ADDRESS_DISCOVERY_ATTEMPTS')
        )
        self.address_discovery_delay_s = float(os.environ.get('DEVSTACK_ADDRESS_DISCOVERY_DELAY', 0.5))
        self.bee_workers = int(os.environ.get('DEVSTACK_BEE_WORKERS', 1))
        assert 0 <= self.bee_workers <= MAX_BEE_WORKERS, \
            f'DEVSTACK_BEE_WORKERS should be between 0 and {MAX_BEE_WORKERS}'

    def resolve_path(self, *paths: str | Path) -> Path:
        return self.cache_dir.joinpath(*paths)
