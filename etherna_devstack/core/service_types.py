from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from pathlib import Path
from typing import NamedTuple

from rich.text import Text

from etherna_devstack.core.process_runner import ProcessHandle
from etherna_devstack.core.readiness import ReadinessRule
from etherna_devstack.output.styles import Style


class Mode:
    HTTP = 'http'
    HTTPS = 'https'


class ServiceKind(Enum):
    DATABASE = 'database'
    SEARCH_INDEX = 'search_index'
    BACKEND = 'backend'
    CHAIN_NODE = 'chain_node'
    EDGE_NODE = 'edge_node'
    WORKER_NODE = 'worker_node'
    PROXY = 'proxy'


class ServiceState(Enum):
    PENDING = 'pending'
    STARTING = 'starting'
    READY = 'ready'
    FAILED = 'failed'
    KILLED = 'killed'

    @property
    def is_terminal(self) -> bool:
        return self in (ServiceState.READY, ServiceState.FAILED, ServiceState.KILLED)


class VolumeMount(NamedTuple):
    source: str
    target: str


class BindMount(NamedTuple):
    source: Path
    target: str
    read_only: bool = True


class PortMapping(NamedTuple):
    host: int
    container: int


class HostFile(NamedTuple):
    path: Path
    content: str
    mode: int = 0o644
    directory_mode: int = 0o777


def escape_mount_path(path: Path) -> str:
    # drive letters would be read as the host/container separator
    return str(path).replace(':', '/')


class ServiceSpec(NamedTuple):
    name: str
    image: str
    kind: ServiceKind
    readiness: ReadinessRule
    env: dict[str, str] = {}
    volumes: tuple[VolumeMount, ...] = ()
    binds: tuple[BindMount, ...] = ()
    network: str | None = None
    # the network is created before launch unless it is a builtin one
    managed_network: bool = False
    ports: tuple[PortMapping, ...] = ()
    extra_args: tuple[str, ...] = ()
    command: tuple[str, ...] = ()
    host_files: tuple[HostFile, ...] = ()
    trust_certificate: bool = False
    protocol: str = Mode.HTTP
    port: int | None = None
    report_url: bool = True

    def launch_args(self) -> list[str]:
        args = []
        for key, value in self.env.items():
            args += ['-e', f'{key}={value}']
        for volume in self.volumes:
            args += ['--mount', f'type=volume,source={volume.source},target={volume.target}']
        for bind in self.binds:
            suffix = ':ro' if bind.read_only else ''
            args += ['-v', f'{escape_mount_path(bind.source)}:{bind.target}{suffix}']
        if self.network:
            args += ['--network', self.network]
        for port in self.ports:
            args += ['-p', f'{port.host}:{port.container}']
        args += list(self.extra_args)
        return args

    def run_args(self) -> list[str]:
        return ['run', '--rm', '--name', self.name, *self.launch_args(), self.image, *self.command]

    def __repr__(self):
        return f'ServiceSpec({self.name}, {self.image}, {self.kind.value})'


@dataclass
class RunningService:
    spec: ServiceSpec
    handle: ProcessHandle | None = None
    state: ServiceState = ServiceState.PENDING
    diagnostic: str | None = None
    exit_code: int | None = None
    exited: bool = False
    tasks: set = field(default_factory=set, repr=False)

    @property
    def name(self) -> str:
        return self.spec.name

    def as_json(self) -> dict:
        return {
            'name': self.name,
            'image': self.spec.image,
            'kind': self.spec.kind.value,
            'state': self.state.value,
            'diagnostic': self.diagnostic,
            'exit_code': self.exit_code,
        }

    def as_rich_text(self, style: Style = Style()) -> Text:
        service_string = Text('     ')
        service_string.append(Text(f'{self.name:{30}}', style=style.regular))

        match self.state:
            case ServiceState.READY:
                style_result = style.good
            case ServiceState.KILLED | ServiceState.STARTING | ServiceState.PENDING:
                style_result = style.suspicious
            case _:
                style_result = style.bad
        service_string.append(Text(f'{self.state.value:{12}}', style=style_result))
        if self.diagnostic:
            service_string.append(Text(self.diagnostic, style=style.context))
        return service_string
