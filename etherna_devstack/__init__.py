from etherna_devstack.core.config import Config
from etherna_devstack.core.launcher import ContainerLauncher
from etherna_devstack.core.readiness import Readiness
from etherna_devstack.core.readiness import ReadinessRule
from etherna_devstack.core.service_types import Mode
from etherna_devstack.core.service_types import RunningService
from etherna_devstack.core.service_types import ServiceSpec
from etherna_devstack.core.service_types import ServiceState
from etherna_devstack.core.session import DevSession
from etherna_devstack.core.session import SessionState
from etherna_devstack.core.session import StackOptions
from etherna_devstack.version import get_version

__version__ = get_version()
__all__ = (
    'DevSession', 'SessionState', 'StackOptions', 'Config',
    'ContainerLauncher', 'ServiceSpec', 'RunningService', 'ServiceState',
    'ReadinessRule', 'Readiness', 'Mode',
)
