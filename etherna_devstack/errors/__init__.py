from etherna_devstack.errors.launch import AddressDiscoveryError
from etherna_devstack.errors.launch import CertificateError
from etherna_devstack.errors.launch import DevStackError
from etherna_devstack.errors.launch import ProvisioningError
from etherna_devstack.errors.launch import ServiceLaunchError
from etherna_devstack.errors.launch import SpawnError

__all__ = (
    'DevStackError', 'ServiceLaunchError', 'SpawnError', 'ProvisioningError',
    'AddressDiscoveryError', 'CertificateError',
)
