from etherna_devstack.env_description.envs import compose_env
from etherna_devstack.env_description.envs import get_env
from etherna_devstack.env_description.envs import service_ports

__all__ = ('compose_env', 'get_env', 'service_ports')
