from typing import Mapping

from etherna_devstack.core.service_types import Mode

APP_PORT = 5173
APP_HTTPS_PORT = 5371

MONGODB_PORT = 27017
ELASTIC_PORT = 9200
BEE_PORT = 1633
BEE_P2P_PORT = 1634
BLOCKCHAIN_PORT = 9545
BLOCKCHAIN_NETWORK_ID = 4020

SSO_HTTP_PORT = 32610
SSO_HTTPS_PORT = 42610

INDEX_HTTP_PORT = 32620
INDEX_HTTPS_PORT = 42620

CREDIT_HTTP_PORT = 32630
CREDIT_HTTPS_PORT = 42630

GATEWAY_HTTP_PORT = 32640
GATEWAY_HTTPS_PORT = 42640

VALIDATOR_HTTP_PORT = 32650
VALIDATOR_HTTPS_PORT = 42650

BEEHIVE_HTTP_PORT = 12610

CONTAINER_CERTS_DIR = '/usr/local/share/ca-certificates/etherna'
CERTIFICATE_PFX_NAME = 'etherna.pfx'
CERTIFICATE_PASSWORD = 'etherna'

SSO = 'etherna-sso'
INDEX = 'etherna-index'
CREDIT = 'etherna-credit'
GATEWAY = 'etherna-gateway-dashboard'
VALIDATOR = 'etherna-gateway-validator'
BEEHIVE = 'etherna-beehive-manager'
MONGODB = 'etherna-mongodb'
ELASTIC = 'elastic'
BLOCKCHAIN = 'etherna-blockchain'
BEE = 'etherna-bee'
INTERCEPTOR = 'etherna-interceptor'

BEE_STATIC_ENV = {
    'BEE_WARMUP_TIME': '10s',
    'BEE_DEBUG_API_ENABLE': 'true',
    'BEE_VERBOSITY': '4',
    'BEE_SWAP_ENABLE': 'true',
    'BEE_MAINNET': 'false',
    'BEE_PASSWORD': 'password',
    'BEE_SWAP_FACTORY_ADDRESS': '0xCfEB869F69431e42cdB54A4F4f105C19C080A601',
    'BEE_POSTAGE_STAMP_ADDRESS': '0x254dffcd3277C0b1660F6d42EFbB754edaBAbC2B',
    'BEE_PRICE_ORACLE_ADDRESS': '0x5b1869D9A4C187F2EAa108f3062412ecf0526b24',
    'BEE_REDISTRIBUTION_ADDRESS': '0x9561C133DD8580860B6b7E504bC5Aa500f0f06a7',
    'BEE_STAKING_ADDRESS': '0xD833215cBcc3f914bD1C9ece3EE7BF8B14f841bb',
    'BEE_POSTAGE_STAMP_START_BLOCK': '1',
    'BEE_NETWORK_ID': str(BLOCKCHAIN_NETWORK_ID),
    'BEE_FULL_NODE': 'true',
    'BEE_CORS_ALLOWED_ORIGINS': '*',
    'BEE_ALLOW_PRIVATE_CIDRS': 'true',
}

STATIC_ENVS: dict[str, dict[str, str]] = {
    SSO: {
        'IdServer:SsoServer:AllowUnsafeConnection': 'true',
    },
    INDEX: {
        'SsoServer:AllowUnsafeConnection': 'true',
    },
    CREDIT: {
        'SsoServer:AllowUnsafeConnection': 'true',
    },
    GATEWAY: {
        'ForwardedHeaders:KnownNetworks:0': '0.0.0.0/0',
        'SsoServer:AllowUnsafeConnection': 'true',
    },
    VALIDATOR: {
        'ForwardedHeaders:KnownNetworks:0': '0.0.0.0/0',
        'SsoServer:AllowUnsafeConnection': 'true',
    },
    BEEHIVE: {
        'SeedDb:BeeNodes:0:Hostname': 'localhost',
    },
    MONGODB: {},
    ELASTIC: {
        'discovery.type': 'single-node',
        'xpack.security.enabled': 'false',
        'ES_JAVA_OPTS': '-Xms256m -Xmx256m',
    },
    BLOCKCHAIN: {},
    BEE: BEE_STATIC_ENV,
    INTERCEPTOR: {
        'BASE_HOST': 'localhost',
        'RESOLVER': '127.0.0.1',
    },
}


def _by_mode(mode: str, http_port: int, https_port: int) -> int:
    return http_port if mode == Mode.HTTP else https_port


def service_ports(mode: str) -> dict[str, int]:
    return {
        'app': _by_mode(mode, APP_PORT, APP_HTTPS_PORT),
        SSO: _by_mode(mode, SSO_HTTP_PORT, SSO_HTTPS_PORT),
        INDEX: _by_mode(mode, INDEX_HTTP_PORT, INDEX_HTTPS_PORT),
        CREDIT: _by_mode(mode, CREDIT_HTTP_PORT, CREDIT_HTTPS_PORT),
        GATEWAY: _by_mode(mode, GATEWAY_HTTP_PORT, GATEWAY_HTTPS_PORT),
        VALIDATOR: _by_mode(mode, VALIDATOR_HTTP_PORT, VALIDATOR_HTTPS_PORT),
        BEEHIVE: BEEHIVE_HTTP_PORT,
        MONGODB: MONGODB_PORT,
        ELASTIC: ELASTIC_PORT,
        BLOCKCHAIN: BLOCKCHAIN_PORT,
        BEE: BEE_PORT,
    }


def service_url(name: str, mode: str) -> str:
    return f'{mode}://localhost:{service_ports(mode)[name]}'


def _asp_env(mode: str, url: str) -> dict[str, str]:
    env = {
        'ASPNETCORE_ENVIRONMENT': 'Development',
        'ASPNETCORE_URLS': url,
        'Elastic:Urls:0': f'http://localhost:{ELASTIC_PORT}',
    }
    if mode == Mode.HTTPS:
        env |= {
            'ASPNETCORE_Kestrel__Certificates__Default__Path': f'{CONTAINER_CERTS_DIR}/{CERTIFICATE_PFX_NAME}',
            'ASPNETCORE_Kestrel__Certificates__Default__Password': CERTIFICATE_PASSWORD,
        }
    return env


def _mongodb_connections(**databases: str) -> dict[str, str]:
    mongodb_url = f'mongodb://localhost:{MONGODB_PORT}'
    return {f'ConnectionStrings:{key}': f'{mongodb_url}/{db}' for key, db in databases.items()}


def session_env(name: str, mode: str) -> dict[str, str]:
    """Values computed for this session: ports, protocol and dependency URLs."""
    ports = service_ports(mode)
    app_url = f'{mode}://localhost:{ports["app"]}'
    sso_url = service_url(SSO, mode)
    credit_url = service_url(CREDIT, mode)
    gateway_url = service_url(GATEWAY, mode)
    index_url = service_url(INDEX, mode)
    beehive_url = service_url(BEEHIVE, mode)

    match name:
        case 'etherna-sso':
            return _asp_env(mode, sso_url) | {
                'IdServer:SsoServer:BaseUrl': sso_url,
                'IdServer:Clients:EthernaCredit:BaseUrl': credit_url,
                'IdServer:Clients:EthernaGateway:BaseUrls:0': gateway_url,
                'IdServer:Clients:EthernaIndex:BaseUrl': index_url,
                'IdServer:Clients:EthernaDapp:BaseUrl': app_url,
            } | _mongodb_connections(
                DataProtectionDb='ethernaSSODataProtectionDev',
                HangfireDb='ethernaSSOHangfireDev',
                ServiceSharedDb='ethernaServiceSharedDev',
                SSOServerDb='ethernaSSODev',
            )
        case 'etherna-index':
            return _asp_env(mode, index_url) | {
                'SsoServer:BaseUrl': sso_url,
            } | _mongodb_connections(
                DataProtectionDb='ethernaSharedDataProtectionDev',
                HangfireDb='ethernaIndexHangfireDev',
                IndexDb='ethernaIndexDev',
                ServiceSharedDb='ethernaServiceSharedDev',
            )
        case 'etherna-credit':
            return _asp_env(mode, credit_url) | {
                'SsoServer:BaseUrl': sso_url,
            } | _mongodb_connections(
                DataProtectionDb='ethernaSharedDataProtectionDev',
                HangfireDb='ethernaCreditHangfireDev',
                CreditDb='ethernaCreditDev',
                ServiceSharedDb='ethernaServiceSharedDev',
            )
        case 'etherna-gateway-dashboard' | 'etherna-gateway-validator':
            return _asp_env(mode, service_url(name, mode)) | {
                'SsoServer:BaseUrl': sso_url,
                'SsoServer:Clients:Credit:BaseUrl': credit_url,
                'BeehiveManager:Url': beehive_url,
            } | _mongodb_connections(
                DataProtectionDb='ethernaSharedDataProtectionDev',
                HangfireDb='ethernaGatewayHangfireDev',
                GatewayDb='ethernaGatewayDev',
                ServiceSharedDb='ethernaServiceSharedDev',
            )
        case 'etherna-beehive-manager':
            return _asp_env(mode, beehive_url) | _mongodb_connections(
                DataProtectionDb='beehiveManagerDataProtectionDev',
                HangfireDb='beehiveManagerHangfireDev',
                BeehiveManagerDb='beehiveManagerDev',
            )
        case 'etherna-bee':
            return {
                'BEE_SWAP_ENDPOINT': f'http://localhost:{BLOCKCHAIN_PORT}',
                'BEE_API_ADDR': f'0.0.0.0:{BEE_PORT}',
                'BEE_P2P_ADDR': f'0.0.0.0:{BEE_P2P_PORT}',
            }
        case 'etherna-interceptor':
            return {
                'BASE_HOST_PREFERRED_SCHEMA': mode,
                'BEENODE_CACHED_HOST': f'localhost:{BEE_PORT}',
                'BEENODE_CACHED_SCHEME': mode,
                'BEENODE_DIRECT_HOST': f'localhost:{BEE_PORT}',
                'BEENODE_DIRECT_SCHEME': mode,
                'DASHBOARD_HOST': f'localhost:{ports[GATEWAY]}',
                'VALIDATOR_HOST': f'localhost:{ports[VALIDATOR]}',
                'VALIDATOR_SCHEME': mode,
            }
    return {}


def compose_env(static: Mapping[str, str] | None,
                session: Mapping[str, str] | None,
                overrides: Mapping[str, str] | None) -> dict[str, str]:
    """Caller overrides win over session values, which win over static defaults."""
    env = {}
    for layer in (static, session, overrides):
        if layer:
            env |= {key: str(value) for key, value in layer.items()}
    return env


def get_env(name: str, mode: str, overrides: Mapping[str, str] | None = None) -> dict[str, str]:
    return compose_env(STATIC_ENVS.get(name), session_env(name, mode), overrides)
