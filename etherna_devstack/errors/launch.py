class DevStackError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ServiceLaunchError(DevStackError):
    def __init__(self, service: str, reason: str):
        super().__init__(f'{service}: {reason}')
        self.service = service
        self.reason = reason


class SpawnError(ServiceLaunchError):
    ...


class ProvisioningError(ServiceLaunchError):
    ...


class AddressDiscoveryError(DevStackError):
    ...


class CertificateError(DevStackError):
    ...
