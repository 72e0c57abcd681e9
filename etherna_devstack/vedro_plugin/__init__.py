from etherna_devstack.vedro_plugin.plugin import VedroDevStack
from etherna_devstack.vedro_plugin.plugin import VedroDevStackPlugin

__all__ = ('VedroDevStack', 'VedroDevStackPlugin')
