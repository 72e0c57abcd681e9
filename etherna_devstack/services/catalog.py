"""
ServiceSpec of every service the dev stack knows how to run.

Readiness patterns are the contract with each image's log format and have to
follow the images when they change what they print on startup.
"""
from pathlib import Path
from typing import Mapping

from etherna_devstack.core.config import Config
from etherna_devstack.core.provisioner import network_name
from etherna_devstack.core.provisioner import volume_name
from etherna_devstack.core.readiness import ReadinessRule
from etherna_devstack.core.service_types import BindMount
from etherna_devstack.core.service_types import HostFile
from etherna_devstack.core.service_types import Mode
from etherna_devstack.core.service_types import PortMapping
from etherna_devstack.core.service_types import ServiceKind
from etherna_devstack.core.service_types import ServiceSpec
from etherna_devstack.core.service_types import VolumeMount
from etherna_devstack.env_description import envs
from etherna_devstack.env_description.envs import get_env

HOST_NETWORK = 'host'
BEE_NETWORK = network_name('bee')
DAEMON_ERROR = r'Error response from daemon'

BLOCKCHAIN_ACCOUNT = '0xCEeE442a149784faa65C35e328CCd64d874F9a02'
BLOCKCHAIN_PASSWORD = 'toTheSun'
BLOCKCHAIN_APIS = '"debug,web3,eth,txpool,net,personal"'

MONGODB_READINESS = ReadinessRule(r'mongod startup complete', failures=[DAEMON_ERROR])
ELASTIC_READINESS = ReadinessRule(r'"message": "started"', failures=[DAEMON_ERROR])
ASP_READINESS = ReadinessRule(
    r'Now listening on: https?://(localhost|\[::\]):\d+',
    failures=[r'Exception:.+', DAEMON_ERROR],
    exclusions=[
        r'Current db does not support change stream',
        r'is only supported on replica sets\.',
        r'Failed to process the job',
    ],
)
BLOCKCHAIN_READINESS = ReadinessRule(r'HTTP server started', failures=[r'Error:.+', DAEMON_ERROR])
BEE_READINESS = ReadinessRule(
    r'"address"="\[::\]:\d+"',
    failures=[r'"level"="error"', DAEMON_ERROR],
    exclusions=[r'"logger"="node/storageincentives"'],
)
INTERCEPTOR_READINESS = ReadinessRule(r'starting in full mode', failures=[r'"level"="error"', DAEMON_ERROR])

BACKEND_IMAGES = {
    envs.SSO: 'etherna/etherna-sso:latest',
    envs.INDEX: 'etherna/etherna-index:latest',
    envs.CREDIT: 'etherna/etherna-credit:latest',
    envs.GATEWAY: 'etherna/etherna-gateway-dashboard:latest',
    envs.VALIDATOR: 'etherna/etherna-gateway-validator:latest',
    envs.BEEHIVE: 'etherna/beehive-manager:latest',
}


def certificate_dir(config: Config) -> Path:
    return config.resolve_path('certs')


def blockchain_password_file(config: Config) -> Path:
    return config.resolve_path('.ethereum', 'password')


def mongodb_spec(overrides: Mapping[str, str] = None) -> ServiceSpec:
    return ServiceSpec(
        name=envs.MONGODB,
        image='mongo:latest',
        kind=ServiceKind.DATABASE,
        readiness=MONGODB_READINESS,
        env=get_env(envs.MONGODB, Mode.HTTP, overrides),
        volumes=(
            VolumeMount(volume_name(f'{envs.MONGODB}-db'), '/data/db'),
            VolumeMount(volume_name(f'{envs.MONGODB}-configdb'), '/data/configdb'),
        ),
        network=HOST_NETWORK,
        protocol='mongodb',
        port=envs.MONGODB_PORT,
    )


def elastic_spec(overrides: Mapping[str, str] = None) -> ServiceSpec:
    return ServiceSpec(
        name=envs.ELASTIC,
        image='elasticsearch:7.17.24',
        kind=ServiceKind.SEARCH_INDEX,
        readiness=ELASTIC_READINESS,
        env=get_env(envs.ELASTIC, Mode.HTTP, overrides),
        volumes=(VolumeMount(volume_name(f'{envs.ELASTIC}-data'), '/usr/share/elasticsearch/data'),),
        network=HOST_NETWORK,
        extra_args=('--memory=512m',),
        port=envs.ELASTIC_PORT,
    )


def backend_spec(name: str, mode: str, config: Config,
                 overrides: Mapping[str, str] = None, image: str = None) -> ServiceSpec:
    env = get_env(name, mode, overrides)
    # first of ASPNETCORE_URLS, e.g. "https://localhost:42610;http://..."
    port = env['ASPNETCORE_URLS'].split(';')[0].rsplit(':', 1)[-1]
    binds = ()
    if mode == Mode.HTTPS:
        binds = (BindMount(certificate_dir(config), f'{envs.CONTAINER_CERTS_DIR}/'),)

    return ServiceSpec(
        name=name,
        image=image or BACKEND_IMAGES[name],
        kind=ServiceKind.BACKEND,
        readiness=ASP_READINESS,
        env=env,
        binds=binds,
        network=HOST_NETWORK,
        trust_certificate=mode == Mode.HTTPS,
        protocol=mode,
        port=int(port) if port.isdigit() else None,
    )


def blockchain_spec(mode: str, config: Config, overrides: Mapping[str, str] = None) -> ServiceSpec:
    password_file = blockchain_password_file(config)
    port = envs.BLOCKCHAIN_PORT
    return ServiceSpec(
        name=envs.BLOCKCHAIN,
        image='fairdatasociety/fdp-play-blockchain:latest',
        kind=ServiceKind.CHAIN_NODE,
        readiness=BLOCKCHAIN_READINESS,
        env=get_env(envs.BLOCKCHAIN, mode, overrides),
        volumes=(VolumeMount(volume_name('blockchain'), '/root/.ethereum'),),
        binds=(BindMount(password_file.parent, '/root/extra'),),
        network=BEE_NETWORK,
        managed_network=True,
        ports=(PortMapping(port, port), PortMapping(port + 1, port + 1)),
        command=(
            '--allow-insecure-unlock',
            f'--unlock={BLOCKCHAIN_ACCOUNT}',
            '--password=/root/extra/password',
            '--mine',
            f'--miner.etherbase={BLOCKCHAIN_ACCOUNT}',
            '--http',
            f'--http.api={BLOCKCHAIN_APIS}',
            '--http.corsdomain=*',
            f'--http.port={port}',
            '--http.addr=0.0.0.0',
            '--http.vhosts=*',
            '--ws',
            f'--ws.api={BLOCKCHAIN_APIS}',
            f'--ws.port={port + 1}',
            '--ws.origins=*',
            '--maxpeers=0',
            f'--networkid={envs.BLOCKCHAIN_NETWORK_ID}',
            '--authrpc.vhosts=*',
            '--authrpc.addr=0.0.0.0',
        ),
        host_files=(HostFile(password_file, BLOCKCHAIN_PASSWORD, mode=0o644, directory_mode=0o777),),
        protocol=Mode.HTTP,
        port=port,
    )


def bee_worker_name(worker: int) -> str:
    return f'{envs.BEE}_worker_{worker}'


def bee_node_spec(mode: str, worker: int | None = None, bootnode: str | None = None,
                  overrides: Mapping[str, str] = None) -> ServiceSpec:
    """The edge (queen) node when ``worker`` is None, a worker node joining ``bootnode`` otherwise."""
    env = get_env(envs.BEE, mode, overrides)
    if worker is None:
        env.pop('BEE_BOOTNODE', None)
        env['BEE_BOOTNODE_MODE'] = 'false'
        name = envs.BEE
        image = 'fairdatasociety/fdp-play-queen:latest'
        kind = ServiceKind.EDGE_NODE
        host_port, host_p2p_port = envs.BEE_PORT, envs.BEE_P2P_PORT
    else:
        assert bootnode, 'worker nodes need the edge node underlay address'
        env.pop('BEE_BOOTNODE_MODE', None)
        env['BEE_BOOTNODE'] = bootnode
        name = bee_worker_name(worker)
        image = f'fairdatasociety/fdp-play-worker-{worker}'
        kind = ServiceKind.WORKER_NODE
        host_port = envs.BEE_PORT + worker * 10000
        host_p2p_port = envs.BEE_P2P_PORT + worker * 10000

    logical_volume = 'bee' if worker is None else f'bee_worker_{worker}'
    return ServiceSpec(
        name=name,
        image=image,
        kind=kind,
        readiness=BEE_READINESS,
        env=env,
        volumes=(VolumeMount(volume_name(logical_volume), '/home/bee/.bee'),),
        network=BEE_NETWORK,
        managed_network=True,
        ports=(PortMapping(host_port, envs.BEE_PORT), PortMapping(host_p2p_port, envs.BEE_P2P_PORT)),
        command=('start',),
        protocol=mode,
        port=host_port,
        report_url=worker is None,
    )


def interceptor_spec(mode: str, overrides: Mapping[str, str] = None) -> ServiceSpec:
    return ServiceSpec(
        name=envs.INTERCEPTOR,
        image='etherna/etherna-gateway-interceptor:latest',
        kind=ServiceKind.PROXY,
        readiness=INTERCEPTOR_READINESS,
        env=get_env(envs.INTERCEPTOR, mode, overrides),
        network=HOST_NETWORK,
        report_url=False,
    )
